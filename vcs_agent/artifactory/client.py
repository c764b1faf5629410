"""HTTP client for the Artifactory REST API."""

import json
from typing import Any

import httpx

from vcs_agent.core.logger.logger import get_logger
from vcs_agent.models.config import JfrogDetails

logger = get_logger(__name__)

# Repository holding published build-info documents
BUILD_INFO_REPOSITORY = "artifactory-build-info"


class ArtifactoryClient:
    """Minimal synchronous Artifactory client used to look up build info."""

    def __init__(
        self,
        details: JfrogDetails,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            details: Artifactory URL and credentials.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = details.art_url.rstrip("/")
        self.timeout = timeout
        self._auth = (details.user, details.password) if details.user else None
        self._transport = transport
        self._client: httpx.Client | None = None

    def __enter__(self) -> "ArtifactoryClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                auth=self._auth,
                timeout=self.timeout,
                headers={"User-Agent": "vcs-scan-agent/0.1.0"},
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None

    def search_latest_build_info(self, build_name: str) -> dict[str, Any] | None:
        """Find the most recently created build-info file of a build.

        Args:
            build_name: Build name.

        Returns:
            The AQL item (repo, path, name, created), or None if no build exists.

        Raises:
            httpx.HTTPError: On transport or HTTP errors.
        """
        query = (
            "items.find("
            + json.dumps({"repo": BUILD_INFO_REPOSITORY, "path": build_name})
            + ').include("repo","path","name","created")'
            + '.sort({"$desc":["created"]}).limit(1)'
        )
        logger.debug(f"AQL: {query}")

        response = self._get_client().post(
            "/api/search/aql",
            content=query,
            headers={"Content-Type": "text/plain"},
        )
        response.raise_for_status()

        results = response.json().get("results", [])
        return results[0] if results else None

    def download_json(self, repo: str, path: str, name: str) -> dict[str, Any]:
        """Download and parse a JSON file from a repository.

        Raises:
            httpx.HTTPError: On transport or HTTP errors.
            ValueError: If the body is not a JSON object.
        """
        response = self._get_client().get(f"/{repo}/{path}/{name}")
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {repo}/{path}/{name}")
        return data
