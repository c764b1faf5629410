"""Resolution of the commits that still need to be scanned on a branch."""

from vcs_agent.core.logger.logger import get_logger
from vcs_agent.models.scan import Commit, ResolutionReason, ResolutionResult
from vcs_agent.vcs.history import RevisionHistory

logger = get_logger(__name__)


class CommitResolver:
    """Computes the branch frontier from the last built revision.

    The result holds every commit newer than the last built revision, oldest
    first. When that revision is unknown (nothing published yet, or history was
    rewritten by a force push) only the newest commit is returned.
    """

    def __init__(self, full_history_on_first_run: bool = False) -> None:
        """Initialize the resolver.

        Args:
            full_history_on_first_run: Scan the whole branch when no revision
                was ever recorded, instead of only the newest commit. Every
                commit of the branch is then built, oldest first.
        """
        self.full_history_on_first_run = full_history_on_first_run

    def resolve(self, last_revision: str | None, history: RevisionHistory) -> ResolutionResult:
        """Resolve the commits to scan.

        Args:
            last_revision: Commit hash of the last published build, if any.
            history: History of the checked-out branch.

        Returns:
            ResolutionResult ordered oldest-first.

        Raises:
            GitError: If the history walk fails.
        """
        last_revision = (last_revision or "").strip().lower()

        if not last_revision:
            if self.full_history_on_first_run:
                commits = list(history.walk_commits())
                commits.reverse()
                logger.info(f"No previous revision recorded. Scanning all {len(commits)} commit(s)")
                return ResolutionResult(commits=tuple(commits), reason=ResolutionReason.FULL_HISTORY)

            logger.info("No previous revision recorded. Scanning only the latest commit on this branch.")
            return self._newest_only(history, ResolutionReason.NO_PRIOR_REVISION, None)

        if history.resolve_commit(last_revision) is None:
            return self._revision_not_found(history, last_revision)

        pending: list[Commit] = []
        found = False
        for commit in history.walk_commits():
            if commit.hash.lower() == last_revision:
                found = True
                break
            pending.append(commit)

        if not found:
            # Known to the repository but not reachable from this branch
            return self._revision_not_found(history, last_revision, walked=pending)

        if not pending:
            logger.info("No new commits since the last run.")
            return ResolutionResult(reason=ResolutionReason.UP_TO_DATE, last_revision=last_revision)

        pending.reverse()
        logger.info(f"Found {len(pending)} new commit(s) that haven't been scanned")
        return ResolutionResult(
            commits=tuple(pending),
            reason=ResolutionReason.INCREMENTAL,
            last_revision=last_revision,
        )

    def _revision_not_found(
        self,
        history: RevisionHistory,
        last_revision: str,
        walked: list[Commit] | None = None,
    ) -> ResolutionResult:
        logger.info(
            f"Commit sha: '{last_revision}' wasn't found in the commits log. "
            "This may be the result of force push command. "
            "As a result, scanning only the latest commit on this branch."
        )
        if walked:
            return ResolutionResult(
                commits=(walked[0],),
                reason=ResolutionReason.REVISION_NOT_FOUND,
                last_revision=last_revision,
            )
        return self._newest_only(history, ResolutionReason.REVISION_NOT_FOUND, last_revision)

    @staticmethod
    def _newest_only(
        history: RevisionHistory,
        reason: ResolutionReason,
        last_revision: str | None,
    ) -> ResolutionResult:
        newest = next(iter(history.walk_commits()), None)
        commits = (newest,) if newest is not None else ()
        return ResolutionResult(commits=commits, reason=reason, last_revision=last_revision)
