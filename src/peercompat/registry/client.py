"""npm registry client.

Three queries are needed by the engine:

- the packument (``GET /<name>``) for latest version, version list, homepage
  and repository;
- a version manifest (``GET /<name>/<version>``) for its peerDependencies;
- the latest manifest (``GET /<name>/latest``) for keywords and description.

Every failure is translated into one of the ``RegistryLookupError``
subclasses so callers can tell "not found", "network" and "malformed" apart.
"""

from typing import Any, Protocol

import httpx

from peercompat.config import RegistryConfig
from peercompat.core.models import PackageInfo, PackageMetadata
from peercompat.errors import (
    MalformedResponseError,
    PackageNotFoundError,
    RegistryNetworkError,
    RegistryTimeoutError,
)
from peercompat.utils.http import (
    DeadlineExceeded,
    RegistryHttpClient,
    RetryPolicy,
    create_registry_rate_limiter,
)
from peercompat.utils.logging import get_logger

logger = get_logger(__name__)


class RegistryClient(Protocol):
    """Registry operations the engine depends on."""

    async def get_package_metadata(self, name: str) -> PackageMetadata: ...

    async def get_peer_requirements(self, name: str, version: str) -> dict[str, str]: ...

    async def get_package_info(self, name: str) -> PackageInfo: ...


def encode_package_name(name: str) -> str:
    """Encode a (possibly scoped) package name for a registry URL path."""
    return name.replace("/", "%2F")


def normalize_repository_url(repository: Any) -> str | None:
    """Extract a browsable URL from a package.json ``repository`` field."""
    url: str | None = None
    if isinstance(repository, dict):
        url = repository.get("url")
    elif isinstance(repository, str):
        url = repository
    if not url:
        return None

    url = url.strip()
    if url.startswith("git+"):
        url = url[len("git+"):]
    if url.startswith("git://"):
        url = "https://" + url[len("git://"):]
    if url.startswith("git@github.com:"):
        url = "https://github.com/" + url[len("git@github.com:"):]
    if url.startswith("github:"):
        url = "https://github.com/" + url[len("github:"):]
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


class NpmRegistryClient:
    """Async client for an npm-compatible registry."""

    def __init__(
        self,
        config: RegistryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Registry settings (defaults to the public registry).
            transport: Optional httpx transport (used by tests).
        """
        self.config = config or RegistryConfig()
        self.transport = transport
        self._http: RegistryHttpClient | None = None

    async def __aenter__(self) -> "NpmRegistryClient":
        """Async context manager entry."""
        headers = {"Accept": "application/json"}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"

        self._http = RegistryHttpClient(
            base_url=self.config.url,
            timeout=self.config.timeout,
            retry=RetryPolicy(max_retries=self.config.max_retries),
            deadline=self.config.request_deadline,
            rate_limiter=create_registry_rate_limiter(self.config.requests_per_second),
            headers=headers,
            transport=self.transport,
        )
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._http:
            await self._http.__aexit__(exc_type, exc_val, exc_tb)
            self._http = None

    @property
    def http(self) -> RegistryHttpClient:
        if self._http is None:
            raise RuntimeError("Registry client not initialized. Use async with statement.")
        return self._http

    async def _fetch(self, name: str, path: str, version: str | None = None) -> dict[str, Any]:
        """GET a registry document and map failures to registry errors."""
        try:
            data = await self.http.get_json(path)
        except DeadlineExceeded as e:
            raise RegistryTimeoutError(name, e.deadline) from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise PackageNotFoundError(name, version) from e
            raise RegistryNetworkError(name, e) from e
        except httpx.HTTPError as e:
            raise RegistryNetworkError(name, e) from e
        except ValueError as e:
            raise MalformedResponseError(name, f"invalid JSON ({e})") from e

        if not isinstance(data, dict):
            raise MalformedResponseError(name, f"expected an object, got {type(data).__name__}")
        return data

    async def get_package_metadata(self, name: str) -> PackageMetadata:
        """Fetch package-level metadata.

        Args:
            name: Package name.

        Returns:
            Latest version, all published versions, homepage and repository.

        Raises:
            RegistryLookupError: On any registry failure.
        """
        data = await self._fetch(name, f"/{encode_package_name(name)}")

        dist_tags = data.get("dist-tags") or {}
        latest = dist_tags.get("latest") if isinstance(dist_tags, dict) else None
        if not latest or not isinstance(latest, str):
            raise MalformedResponseError(name, "missing dist-tags.latest")

        versions_field = data.get("versions")
        if isinstance(versions_field, dict) and versions_field:
            versions = list(versions_field.keys())
        else:
            versions = [latest]

        homepage = data.get("homepage")
        return PackageMetadata(
            name=name,
            latest_version=latest,
            versions=versions,
            homepage=homepage if isinstance(homepage, str) and homepage else None,
            repository_url=normalize_repository_url(data.get("repository")),
        )

    async def get_peer_requirements(self, name: str, version: str) -> dict[str, str]:
        """Fetch the peerDependencies declared by one version.

        Returns:
            Mapping of peer name to declared range; empty when none.

        Raises:
            RegistryLookupError: On any registry failure.
        """
        data = await self._fetch(name, f"/{encode_package_name(name)}/{version}", version)
        peers = data.get("peerDependencies") or {}
        if not isinstance(peers, dict):
            raise MalformedResponseError(name, f"peerDependencies of {version} is not an object")
        return {str(k): str(v) for k, v in peers.items()}

    async def get_package_info(self, name: str) -> PackageInfo:
        """Fetch keywords and description of the latest release.

        Raises:
            RegistryLookupError: On any registry failure.
        """
        data = await self._fetch(name, f"/{encode_package_name(name)}/latest", "latest")
        keywords = data.get("keywords")
        if isinstance(keywords, str):
            keywords = [keywords]
        elif not isinstance(keywords, list):
            keywords = []
        description = data.get("description")
        return PackageInfo(
            keywords=[str(k) for k in keywords],
            description=description if isinstance(description, str) else "",
        )
