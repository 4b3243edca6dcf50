"""Core data models and version helpers."""

from peercompat.core.models import (
    CompatibilityResult,
    DependencyEntry,
    DistanceState,
    HeuristicVerdict,
    PackageMetadata,
    Priority,
    Recommendation,
    ResultRecord,
    RunSummary,
    ScanOptions,
    Verdict,
    VersionDistance,
    VersionProbe,
)

__all__ = [
    "CompatibilityResult",
    "DependencyEntry",
    "DistanceState",
    "HeuristicVerdict",
    "PackageMetadata",
    "Priority",
    "Recommendation",
    "ResultRecord",
    "RunSummary",
    "ScanOptions",
    "Verdict",
    "VersionDistance",
    "VersionProbe",
]
