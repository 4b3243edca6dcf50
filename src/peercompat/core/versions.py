"""npm semver helpers.

Thin wrappers over ``nodesemver`` so that the rest of the code base deals in
plain version strings and never has to care about the library's loose/strict
flags.
"""

from __future__ import annotations

from functools import cmp_to_key

import nodesemver

from peercompat.core.models import DistanceState, VersionDistance
from peercompat.utils.logging import get_logger

logger = get_logger(__name__)

RANGE_PREFIXES = ("^", "~")


def parse_version(version: str | None) -> nodesemver.SemVer | None:
    """Parse a strict semver string, returning None when it is malformed."""
    if not version:
        return None
    try:
        return nodesemver.parse(version, loose=False)
    except (ValueError, TypeError):
        return None


def is_valid(version: str | None) -> bool:
    return parse_version(version) is not None


def is_prerelease(version: str) -> bool:
    parsed = parse_version(version)
    return bool(parsed and parsed.prerelease)


def compare(a: str, b: str) -> int:
    """Compare two valid versions (-1, 0, 1)."""
    return nodesemver.compare(a, b, loose=False)


def sort_descending(versions: list[str]) -> list[str]:
    """Sort valid versions newest first."""
    return sorted(versions, key=cmp_to_key(lambda a, b: compare(b, a)))


def strip_range(declared: str) -> str:
    """Turn a caret/tilde range into the pinned version it starts from."""
    declared = declared.strip()
    if declared.startswith(RANGE_PREFIXES):
        return declared[1:]
    return declared


def satisfies_target(
    peer_range: str,
    target_major: int,
    include_prerelease: bool = False,
) -> bool:
    """Check whether ``<major>.0.0`` satisfies an npm range.

    Args:
        peer_range: Range declared in peerDependencies.
        target_major: Framework major version to check.
        include_prerelease: Let prerelease versions satisfy the range.

    Returns:
        True if the range admits the target; False otherwise, including for
        ranges that cannot be parsed.
    """
    try:
        return bool(
            nodesemver.satisfies(
                f"{target_major}.0.0",
                peer_range,
                loose=False,
                include_prerelease=include_prerelease,
            )
        )
    except (ValueError, TypeError) as e:
        logger.debug("Unparsable peer range %r: %s", peer_range, e)
        return False


def version_distance(
    current: str,
    baseline: str | None,
    baseline_label: str = "",
) -> VersionDistance:
    """Describe how far ``current`` is from ``baseline``.

    The first non-zero component difference (major, then minor, then patch)
    decides the unit.
    """
    if not baseline:
        if baseline_label:
            return VersionDistance(state=DistanceState.NO_BASELINE, baseline_label=baseline_label)
        return VersionDistance(state=DistanceState.UNKNOWN)

    current_parsed = parse_version(current)
    baseline_parsed = parse_version(baseline)
    if current_parsed is None or baseline_parsed is None:
        return VersionDistance(state=DistanceState.UNPARSABLE, baseline_label=baseline_label)

    order = compare(current, baseline)
    if order == 0:
        return VersionDistance(state=DistanceState.EQUAL, baseline_label=baseline_label)
    if order > 0:
        return VersionDistance(state=DistanceState.AHEAD, baseline_label=baseline_label)

    for unit, diff in (
        ("major", baseline_parsed.major - current_parsed.major),
        ("minor", baseline_parsed.minor - current_parsed.minor),
        ("patch", baseline_parsed.patch - current_parsed.patch),
    ):
        if diff > 0:
            return VersionDistance(
                state=DistanceState.BEHIND,
                count=diff,
                unit=unit,
                baseline_label=baseline_label,
            )
    # e.g. 2.0.0-rc.1 behind 2.0.0
    return VersionDistance(state=DistanceState.BEHIND, baseline_label=baseline_label)
