"""Lookup of the latest published build record for a build name."""

from typing import Any, Protocol
from urllib.parse import urlsplit

import httpx

from vcs_agent.artifactory.client import ArtifactoryClient
from vcs_agent.core.exceptions.errors import BuildRecordError
from vcs_agent.core.logger.logger import get_logger
from vcs_agent.models.scan import BuildRecord

logger = get_logger(__name__)


class BuildRecordStore(Protocol):
    """Source of previously published build records."""

    def fetch_latest(self, build_name: str) -> BuildRecord | None:
        """Return the latest record, or None if the build was never published.

        Raises:
            BuildRecordError: If the lookup itself fails.
        """
        ...


def normalize_vcs_url(url: str) -> str:
    """Normalize a repository URL for comparison.

    Drops credentials, a trailing slash and a ``.git`` suffix, and lowercases
    the scheme and host.
    """
    url = url.strip()
    parts = urlsplit(url)
    if parts.scheme and parts.hostname:
        host = parts.hostname.lower()
        if parts.port:
            host = f"{host}:{parts.port}"
        url = f"{parts.scheme.lower()}://{host}{parts.path}"
    url = url.rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


def revision_for_url(build_info: dict[str, Any], vcs_url: str) -> str | None:
    """Return the revision recorded for a repository in a build-info document."""
    entries = list(build_info.get("vcs") or [])
    if not entries and build_info.get("vcsRevision"):
        entries.append({"url": build_info.get("vcsUrl", ""), "revision": build_info["vcsRevision"]})

    wanted = normalize_vcs_url(vcs_url)
    for entry in entries:
        if normalize_vcs_url(entry.get("url") or "") == wanted:
            return entry.get("revision") or None
    return None


class ArtifactoryBuildRecordStore:
    """BuildRecordStore reading build-info documents from Artifactory."""

    def __init__(self, client: ArtifactoryClient, vcs_url: str) -> None:
        """Initialize the store.

        Args:
            client: Artifactory client.
            vcs_url: URL of the tracked repository, used to pick the revision.
        """
        self.client = client
        self.vcs_url = vcs_url

    def fetch_latest(self, build_name: str) -> BuildRecord | None:
        """Fetch the latest build record of a build.

        Args:
            build_name: Build name.

        Returns:
            BuildRecord, or None when the build was never published.

        Raises:
            BuildRecordError: On transport, HTTP or payload errors.
        """
        logger.info(f"Searching the latest build for '{build_name}' build...")

        try:
            item = self.client.search_latest_build_info(build_name)
            if item is None:
                logger.info(f"Build '{build_name}' is not found in Artifactory")
                return None
            build_info = self.client.download_json(item["repo"], item["path"], item["name"])
        except (httpx.HTTPError, ValueError, KeyError) as e:
            raise BuildRecordError(
                f"Failed to download build '{build_name}' from Artifactory",
                build_name=build_name,
                details={"error": str(e)},
            ) from e

        number = build_info.get("number")
        if not number:
            raise BuildRecordError(
                f"Build-info of '{build_name}' has no build number",
                build_name=build_name,
            )

        revision = revision_for_url(build_info, self.vcs_url)
        if revision is None:
            logger.warning(f"No revision is found for git repository: '{self.vcs_url}'")

        return BuildRecord(
            name=build_info.get("name") or build_name,
            number=str(number),
            revision=revision,
            vcs_url=self.vcs_url,
        )
