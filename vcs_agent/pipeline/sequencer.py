"""Build-number sequencing for resolved commits."""

from vcs_agent.core.exceptions.errors import BuildNumberParseError
from vcs_agent.core.logger.logger import get_logger
from vcs_agent.models.scan import BuildIdentity, Commit, to_short_hash

logger = get_logger(__name__)

# Base used for a build name that has never been published
FIRST_BUILD_BASE = 1


def _is_number(value: str) -> bool:
    # str.isdigit also accepts non-ASCII digits such as "²", which int() rejects
    return value.isascii() and value.isdigit()


def parse_base(build_number: str) -> int:
    """Parse the integer base of a build number (the part before the first '.').

    Raises:
        BuildNumberParseError: If the '.' is missing or the prefix is not a
            non-negative integer.
    """
    prefix, sep, _ = build_number.partition(".")
    if not sep:
        raise BuildNumberParseError(
            f"Build number '{build_number}' has no '.' separator",
            value=build_number,
        )
    if not _is_number(prefix):
        raise BuildNumberParseError(
            f"Build number '{build_number}' has no numeric prefix",
            value=build_number,
        )
    return int(prefix)


def parse_override(override: str) -> int:
    """Parse an external build-number override.

    Raises:
        BuildNumberParseError: If the override is not a non-negative integer.
    """
    value = override.strip()
    if not _is_number(value):
        raise BuildNumberParseError(
            f"Build number override '{override}' is not a number",
            value=override,
        )
    return int(value)


def next_base(previous_build_number: str | None, external_override: str | None = None) -> int:
    """Compute the base number of the next build.

    Args:
        previous_build_number: Number of the last published build, or None if
            the build was never published.
        external_override: Externally pinned base number.

    Returns:
        The override when set, otherwise the previous base plus one.
    """
    if external_override:
        return parse_override(external_override)
    if previous_build_number is None:
        return FIRST_BUILD_BASE
    return parse_base(previous_build_number) + 1


def next_build_number(
    previous_build_number: str | None,
    external_override: str | None,
    run_sequence_index: int,
    commit_short_hash: str,
) -> str:
    """Compose the build number stamped on one commit.

    The format is ``{base}.{run_sequence_index}-{commit_short_hash}``.

    >>> next_build_number("17.0-aaaa1111", None, 1, "bbbb2222")
    '18.1-bbbb2222'
    """
    if run_sequence_index < 0:
        raise ValueError("run_sequence_index must be non-negative")
    base = next_base(previous_build_number, external_override)
    return format_build_number(base, run_sequence_index, commit_short_hash)


def format_build_number(base: int, run_sequence_index: int, commit_short_hash: str) -> str:
    """Format a build number from its parts."""
    return f"{base}.{run_sequence_index}-{to_short_hash(commit_short_hash)}"


class BuildSequencer:
    """Assigns build identities to the commits of each branch pass.

    The external override is consulted once per process: it becomes the base
    of the first branch pass that builds anything. Every later pass derives its
    base from the branch's previous build number.
    """

    def __init__(self, external_override: str | None = None) -> None:
        """Initialize the sequencer.

        Args:
            external_override: Externally pinned build number (BUILD_NUMBER).
        """
        self.external_override = external_override or None
        self._override_consumed = False

    def begin_branch(self, previous_build_number: str | None) -> int:
        """Compute the base shared by all commits of a branch pass.

        Raises:
            BuildNumberParseError: If the previous number or override is malformed.
        """
        override = self.external_override
        if override is not None and not self._override_consumed:
            base = parse_override(override)
            self._override_consumed = True
            logger.info(f"Using build number override '{override}'")
            previous_prefix = (previous_build_number or "").partition(".")[0]
            if _is_number(previous_prefix) and base <= int(previous_prefix):
                logger.warning(
                    f"Build number override {base} does not exceed the previous build "
                    f"number '{previous_build_number}'"
                )
            return base

        return next_base(previous_build_number)

    def identity(self, build_name: str, base: int, sequence_index: int, commit: Commit) -> BuildIdentity:
        """Create the identity of one commit within a branch pass."""
        return BuildIdentity(
            build_name=build_name,
            build_number=format_build_number(base, sequence_index, commit.hash),
            commit_hash=commit.hash,
            sequence_index=sequence_index,
        )

    def sequence(
        self,
        build_name: str,
        previous_build_number: str | None,
        commits: list[Commit] | tuple[Commit, ...],
    ) -> list[BuildIdentity]:
        """Assign identities to all commits of a branch pass, in order."""
        base = self.begin_branch(previous_build_number)
        return [self.identity(build_name, base, i, commit) for i, commit in enumerate(commits)]
