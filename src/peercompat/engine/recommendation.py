"""Turn compatibility results into a prioritized recommendation."""

from peercompat.core.models import (
    NOT_APPLICABLE,
    CompatibilityResult,
    HeuristicVerdict,
    Priority,
    Recommendation,
    VersionDistance,
)
from peercompat.core.versions import compare, parse_version, version_distance

LATEST_COMPATIBLE_LABEL = "latest compatible"


def _recommend_formal(
    result: CompatibilityResult,
    current: str,
    latest: str,
    framework: str,
    target_major: int,
) -> Recommendation:
    target = f"{framework} {target_major}"
    if not result.latest_compatible:
        return Recommendation(
            priority=Priority.MUST_UPGRADE,
            note=f"No compatible version found for {target}",
        )

    if current in result.compatible_versions:
        note = "Current version is compatible"
        if current == result.latest_compatible:
            return Recommendation(priority=Priority.KEEP, note=note)
        return Recommendation(
            priority=Priority.OPTIONAL_UPGRADE,
            target_version=result.latest_compatible,
            note=note,
        )

    if result.latest_compatible == current:
        note = "Up to date"
    elif latest and result.latest_compatible != latest:
        note = f"Newer latest likely needs different {framework} peer or is prerelease"
    else:
        note = f"Upgradable within {target}"

    return Recommendation(
        priority=Priority.MUST_UPGRADE,
        target_version=result.earliest_compatible or NOT_APPLICABLE,
        note=note,
    )


def _recommend_heuristic(
    heuristic: HeuristicVerdict,
    current: str,
    latest: str,
    target: str,
) -> Recommendation:
    if not heuristic.is_compatible:
        note = f"May not be compatible with {target} - {heuristic.reason}"
        if latest and current != latest:
            return Recommendation(priority=Priority.MUST_UPGRADE, target_version=latest, note=note)
        return Recommendation(priority=Priority.UNKNOWN, note=note)

    note = f"Likely compatible with {target} - {heuristic.reason}"
    if current == latest:
        return Recommendation(priority=Priority.KEEP, note=note)

    if parse_version(current) and parse_version(latest) and compare(current, latest) > 0:
        return Recommendation(priority=Priority.KEEP, note=f"{note} (current is ahead of latest)")

    return Recommendation(priority=Priority.OPTIONAL_UPGRADE, target_version=latest, note=note)


def recommend(
    result: CompatibilityResult,
    current: str,
    latest: str,
    heuristic: HeuristicVerdict | None = None,
    framework: str = "Angular",
    target_major: int = 19,
) -> Recommendation:
    """Compute the recommendation for one package.

    Args:
        result: Scanner output.
        current: Currently pinned version (range prefix stripped).
        latest: Latest published version.
        heuristic: Heuristic verdict, used when no formal peer range exists.
            Absent means "compatible" (no evidence otherwise).
        framework: Framework label used in notes.
        target_major: Target framework major version.

    Returns:
        Priority, target version and note.
    """
    if result.has_formal_peer_requirement:
        return _recommend_formal(result, current, latest, framework, target_major)

    if heuristic is None:
        heuristic = HeuristicVerdict(is_compatible=True, reason="no peer requirement declared")
    return _recommend_heuristic(heuristic, current, latest, f"{framework} {target_major}")


def distance_for(result: CompatibilityResult, current: str, latest: str) -> VersionDistance:
    """Distance from the baseline: latest compatible when formal, else latest."""
    if result.has_formal_peer_requirement:
        return version_distance(current, result.latest_compatible, LATEST_COMPATIBLE_LABEL)
    return version_distance(current, latest)
