"""Read dependency entries from a project's package.json."""

import json
from pathlib import Path
from typing import Any

from peercompat.core.models import DependencyEntry
from peercompat.errors import ManifestError
from peercompat.utils.logging import get_logger

logger = get_logger(__name__)

MANIFEST_FILENAME = "package.json"


def is_excluded(name: str, excluded_prefixes: list[str]) -> bool:
    """Check a package name against the namespace exclusion list."""
    return any(name.startswith(prefix) for prefix in excluded_prefixes)


def _section_entries(
    data: dict[str, Any],
    section: str,
    is_dev: bool,
    excluded_prefixes: list[str],
) -> list[DependencyEntry]:
    deps = data.get(section) or {}
    if not isinstance(deps, dict):
        raise ManifestError(MANIFEST_FILENAME, message=f"'{section}' in package.json must be an object")

    entries: list[DependencyEntry] = []
    for name, declared in deps.items():
        if is_excluded(name, excluded_prefixes):
            logger.debug("Excluding %s (matches exclusion list)", name)
            continue
        entries.append(DependencyEntry(name=name, declared_range=str(declared), is_dev=is_dev))
    return entries


def parse_manifest(
    data: dict[str, Any],
    excluded_prefixes: list[str] | None = None,
) -> list[DependencyEntry]:
    """Build dependency entries from parsed package.json data.

    Runtime dependencies come first, then devDependencies, each in manifest
    order.

    Args:
        data: Parsed package.json.
        excluded_prefixes: Name prefixes to skip (e.g. the framework's own
            packages).

    Returns:
        Dependency entries.
    """
    excluded_prefixes = excluded_prefixes or []
    return [
        *_section_entries(data, "dependencies", False, excluded_prefixes),
        *_section_entries(data, "devDependencies", True, excluded_prefixes),
    ]


def resolve_manifest_path(path: Path) -> Path:
    """Accept either a package.json file or a directory containing one."""
    if path.is_dir():
        return path / MANIFEST_FILENAME
    return path


def load_manifest(
    path: Path,
    excluded_prefixes: list[str] | None = None,
) -> list[DependencyEntry]:
    """Read and parse a package.json file.

    Raises:
        ManifestError: If the file is missing or is not valid JSON.
    """
    manifest_path = resolve_manifest_path(path)
    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ManifestError(str(manifest_path), message=f"Manifest not found: {manifest_path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ManifestError(str(manifest_path), message=f"Failed to read {manifest_path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(str(manifest_path), message=f"{manifest_path} must contain a JSON object")

    entries = parse_manifest(data, excluded_prefixes)
    logger.debug("Loaded %d dependency entries from %s", len(entries), manifest_path)
    return entries
