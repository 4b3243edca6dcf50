"""Pytest configuration and fixtures for peercompat tests."""

import json
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from peercompat.core.models import PackageInfo, PackageMetadata
from peercompat.errors import PackageNotFoundError
from peercompat.registry.client import NpmRegistryClient

PackageTable = dict[str, dict[str, Any]]


def build_registry(packages: PackageTable) -> AsyncMock:
    """Create a mocked registry client serving a fixed package table.

    Each package entry may contain:

    - ``latest``: dist-tags.latest
    - ``versions``: mapping of version -> peerDependencies dict, or an
      exception instance raised when that version is probed
    - ``keywords`` / ``description``: latest manifest fields
    - ``homepage`` / ``repository_url``
    - ``error``: exception raised by the metadata lookup
    - ``info_error``: exception raised by the keywords lookup

    Unknown package names raise ``PackageNotFoundError``.
    """
    registry = AsyncMock(spec=NpmRegistryClient)

    async def get_package_metadata(name: str) -> PackageMetadata:
        package = packages.get(name)
        if package is None:
            raise PackageNotFoundError(name)
        if package.get("error"):
            raise package["error"]
        return PackageMetadata(
            name=name,
            latest_version=package["latest"],
            versions=list(package.get("versions", {})),
            homepage=package.get("homepage"),
            repository_url=package.get("repository_url"),
        )

    async def get_peer_requirements(name: str, version: str) -> dict[str, str]:
        peers = packages[name].get("versions", {}).get(version)
        if isinstance(peers, Exception):
            raise peers
        return dict(peers or {})

    async def get_package_info(name: str) -> PackageInfo:
        package = packages[name]
        if package.get("info_error"):
            raise package["info_error"]
        return PackageInfo(
            keywords=package.get("keywords", []),
            description=package.get("description", ""),
        )

    registry.get_package_metadata.side_effect = get_package_metadata
    registry.get_peer_requirements.side_effect = get_peer_requirements
    registry.get_package_info.side_effect = get_package_info
    registry.__aenter__.return_value = registry
    return registry


@pytest.fixture
def make_registry() -> Callable[[PackageTable], AsyncMock]:
    """Return the mocked registry factory."""
    return build_registry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_registry_packages() -> PackageTable:
    """Registry table matching ``sample_package_json``."""
    return {
        "@ngx-translate/core": {
            "latest": "16.0.3",
            "versions": {
                "16.0.3": {"@angular/core": ">=16"},
                "15.0.0": {"@angular/core": ">=16"},
                "14.0.0": {"@angular/core": ">=13.0.0 <16.0.0"},
            },
        },
        "rxjs": {
            "latest": "7.8.1",
            "versions": {"7.8.1": {}, "7.8.0": {}, "6.6.7": {}},
        },
        "ngx-legacy-widget": {
            "latest": "2.1.0",
            "versions": {
                "2.1.0": {"@angular/core": "^15.0.0"},
                "2.0.0": {"@angular/core": "^14.0.0"},
            },
        },
        "jest": {
            "latest": "29.7.0",
            "versions": {"29.7.0": {}, "29.6.0": {}},
        },
    }


@pytest.fixture
def sample_package_json(temp_dir: Path) -> Path:
    """Create a sample package.json file."""
    content = {
        "name": "sample-app",
        "version": "1.0.0",
        "dependencies": {
            "@angular/core": "^19.0.0",
            "rxjs": "~7.8.0",
            "@ngx-translate/core": "^14.0.0",
            "ngx-legacy-widget": "2.0.0",
            "left-pad-missing": "^1.0.0",
        },
        "devDependencies": {
            "jest": "^29.7.0",
        },
    }
    file_path = temp_dir / "package.json"
    file_path.write_text(json.dumps(content, indent=2))
    return file_path


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample .peercompat.yml configuration file."""
    content = """version: 1

framework:
  name: Angular
  default_major: 18
  default_policy: assume_incompatible

registry:
  url: https://npm.example.com/
  request_deadline: 10

scan:
  jobs: 2
  fast_limit: 5

migration_links:
  ngx-legacy-widget: https://example.com/legacy-widget/upgrade
"""
    file_path = temp_dir / ".peercompat.yml"
    file_path.write_text(content)
    return file_path


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove registry environment overrides for testing."""
    monkeypatch.delenv("PEERCOMPAT_REGISTRY_URL", raising=False)
    monkeypatch.delenv("NPM_TOKEN", raising=False)
