"""Artifactory access: build-info lookup."""

from vcs_agent.artifactory.build_record import (
    ArtifactoryBuildRecordStore,
    BuildRecordStore,
    normalize_vcs_url,
    revision_for_url,
)
from vcs_agent.artifactory.client import BUILD_INFO_REPOSITORY, ArtifactoryClient

__all__ = [
    "ArtifactoryBuildRecordStore",
    "ArtifactoryClient",
    "BUILD_INFO_REPOSITORY",
    "BuildRecordStore",
    "normalize_vcs_url",
    "revision_for_url",
]
