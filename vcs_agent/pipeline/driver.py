"""Per-branch control loop: resolve the frontier, then build, publish and scan each commit."""

from vcs_agent.artifactory.build_record import BuildRecordStore
from vcs_agent.core.exceptions.errors import StepFailedError, VcsAgentError
from vcs_agent.core.logger.logger import get_logger
from vcs_agent.models.scan import (
    BranchScanResult,
    BranchState,
    BuildIdentity,
    BuildRecord,
    Commit,
    CommitOutcome,
    CommitStatus,
    ResolutionResult,
)
from vcs_agent.pipeline.executor import BuildExecutor, PipelineStep
from vcs_agent.pipeline.sequencer import BuildSequencer
from vcs_agent.vcs.history import RevisionHistory
from vcs_agent.vcs.resolver import CommitResolver

logger = get_logger(__name__)


class ScanDriver:
    """Drives the commits of one branch at a time through the pipeline.

    A failing build skips only that commit. A failure in checkout, identity
    stamping, VCS collection, publishing or scanning aborts the branch: the
    error is re-raised with the branch, commit and step added to its details.
    Commits already published stay published.
    """

    def __init__(
        self,
        history: RevisionHistory,
        record_store: BuildRecordStore,
        executor: BuildExecutor,
        resolver: CommitResolver | None = None,
        sequencer: BuildSequencer | None = None,
    ) -> None:
        self.history = history
        self.record_store = record_store
        self.executor = executor
        self.resolver = resolver or CommitResolver()
        self.sequencer = sequencer or BuildSequencer()
        self.state = BranchState.IDLE
        self.active_identity: BuildIdentity | None = None

    def _transition(self, state: BranchState) -> None:
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state

    def _resolve(self, branch: str, build_name: str) -> tuple[BuildRecord | None, ResolutionResult]:
        self.history.checkout_branch(branch)
        self._transition(BranchState.CHECKED_OUT_BRANCH)

        record = self.record_store.fetch_latest(build_name)
        self._transition(BranchState.RESOLVING_HISTORY)

        logger.info("Searching the latest commit revision in the build-info...")
        last_revision = record.revision if record else None
        return record, self.resolver.resolve(last_revision, self.history)

    def plan_branch(self, branch: str, build_name: str) -> ResolutionResult:
        """Resolve the commits a scan of the branch would process, without building.

        Raises:
            VcsAgentError: On checkout, lookup or history failures.
        """
        self.state = BranchState.IDLE
        try:
            _, resolution = self._resolve(branch, build_name)
        except VcsAgentError as e:
            self._transition(BranchState.FAILED)
            e.add_context(branch=branch, build_name=build_name)
            raise
        return resolution

    def scan_branch(self, branch: str, build_name: str) -> BranchScanResult:
        """Scan every unscanned commit of a branch.

        Args:
            branch: Branch name.
            build_name: Build name the branch publishes under.

        Returns:
            BranchScanResult with one outcome per resolved commit.

        Raises:
            VcsAgentError: On any fatal error; the branch is aborted.
        """
        self.state = BranchState.IDLE
        self.active_identity = None
        result = BranchScanResult(branch=branch, build_name=build_name, state=self.state)

        try:
            record, resolution = self._resolve(branch, build_name)
            result.resolution = resolution

            if resolution.is_empty:
                logger.info(f"'{branch}' branch has no new commits since the last run. Skipping...")
                self._transition(BranchState.NO_WORK)
                result.state = self.state
                return result

            self._transition(BranchState.PER_COMMIT_LOOP)
            base = self.sequencer.begin_branch(record.number if record else None)

            for index, commit in enumerate(resolution.commits):
                result.outcomes.append(self._scan_commit(build_name, base, index, commit))

        except VcsAgentError as e:
            self._transition(BranchState.FAILED)
            e.add_context(branch=branch, build_name=build_name)
            raise

        self._transition(BranchState.BRANCH_DONE)
        result.state = self.state
        logger.info(
            f"'{branch}' branch done: {len(result.scanned)} scanned, {len(result.skipped)} skipped"
        )
        return result

    def _scan_commit(self, build_name: str, base: int, index: int, commit: Commit) -> CommitOutcome:
        step: PipelineStep | None = None
        try:
            self.history.checkout_commit(commit.hash)
            identity = self.sequencer.identity(build_name, base, index, commit)
            self.active_identity = identity
            logger.info(f"Generating build {identity}")

            step = PipelineStep.BUILD
            try:
                self.executor.run_build(identity)
            except StepFailedError as e:
                logger.warning(
                    f"Build failed for commit {commit.short_hash}, skipping it: {e.message}"
                )
                return CommitOutcome(
                    commit=commit,
                    identity=identity,
                    status=CommitStatus.SKIPPED,
                    error_message=e.message,
                )

            step = PipelineStep.COLLECT_VCS
            self.executor.collect_vcs_metadata(identity)
            step = PipelineStep.PUBLISH
            self.executor.publish(identity)
            step = PipelineStep.SCAN
            self.executor.scan(identity)

            return CommitOutcome(commit=commit, identity=identity, status=CommitStatus.SCANNED)

        except VcsAgentError as e:
            e.add_context(commit=commit.hash, step=step.value if step else "checkout")
            raise
        finally:
            self.active_identity = None
