"""Core data models for peercompat."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

NOT_APPLICABLE = "n/a"
UNKNOWN = "Unknown"


class Verdict(str, Enum):
    """Compatibility of one (package, version) pair with the target major."""

    COMPATIBLE = "compatible"
    INCOMPATIBLE = "incompatible"
    UNKNOWN = "unknown"


class Priority(str, Enum):
    """Recommendation priority, ordered by urgency."""

    MUST_UPGRADE = "must_upgrade"
    OPTIONAL_UPGRADE = "optional_upgrade"
    KEEP = "keep"
    UNKNOWN = "unknown"

    @property
    def rank(self) -> int | None:
        """Return the displayed rank (#1 is most urgent)."""
        return {
            Priority.MUST_UPGRADE: 1,
            Priority.OPTIONAL_UPGRADE: 2,
            Priority.KEEP: 3,
        }.get(self)


class DistanceState(str, Enum):
    """Relation of the current version to its comparison baseline."""

    EQUAL = "equal"
    AHEAD = "ahead"
    BEHIND = "behind"
    UNPARSABLE = "unparsable"
    NO_BASELINE = "no_baseline"
    UNKNOWN = "unknown"


class DependencyEntry(BaseModel):
    """A direct dependency declared in the project manifest."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Package name")
    declared_range: str = Field(..., description="Range as written in the manifest")
    is_dev: bool = Field(default=False, description="Declared under devDependencies")


class PackageMetadata(BaseModel):
    """Package-level document returned by the registry client."""

    name: str
    latest_version: str
    versions: list[str] = Field(default_factory=list)
    homepage: str | None = None
    repository_url: str | None = None


class PackageInfo(BaseModel):
    """Descriptive fields of the latest manifest, used by the heuristic."""

    keywords: list[str] = Field(default_factory=list)
    description: str = ""


class VersionProbe(BaseModel):
    """Outcome of probing one version's peer requirement."""

    version: str
    peer_range: str | None = None
    verdict: Verdict
    extended: bool = False


class CompatibilityResult(BaseModel):
    """Per-package aggregate built while the scanner visits versions."""

    has_formal_peer_requirement: bool = False
    earliest_compatible: str | None = None
    latest_compatible: str | None = None
    declared_peer_range: str | None = None
    current_version_found: bool = False
    compatible_versions: list[str] = Field(default_factory=list)
    probes: list[VersionProbe] = Field(default_factory=list)
    extended: bool = False

    @property
    def versions_probed(self) -> int:
        """Number of registry lookups spent on this package."""
        return len(self.probes)

    def has_gap(self) -> bool:
        """Return True if the compatible versions are not one contiguous run.

        The earliest/latest bracket assumes contiguity; this lets stricter
        consumers spot an incompatible release inside the bracket.
        """
        seen_compatible = False
        left_window = False
        for probe in self.probes:
            compatible = probe.verdict != Verdict.INCOMPATIBLE
            if compatible and left_window:
                return True
            if compatible:
                seen_compatible = True
            elif seen_compatible:
                left_window = True
        return False


class HeuristicVerdict(BaseModel):
    """Result of signal-based classification for packages without a peer range."""

    is_compatible: bool
    reason: str


class Recommendation(BaseModel):
    """Prioritized action for one package."""

    priority: Priority
    target_version: str = NOT_APPLICABLE
    note: str = ""

    @property
    def display(self) -> str:
        """Render the recommendation column."""
        rank = self.priority.rank
        if self.priority == Priority.MUST_UPGRADE and self.target_version != NOT_APPLICABLE:
            return f"#{rank} Must upgrade to {self.target_version}"
        if self.priority == Priority.OPTIONAL_UPGRADE:
            return f"#{rank} Optionally upgrade to {self.target_version}"
        if self.priority == Priority.KEEP:
            return f"#{rank} Keep current version"
        return NOT_APPLICABLE


class VersionDistance(BaseModel):
    """How far the current version is from its baseline."""

    state: DistanceState
    count: int = 0
    unit: str | None = None
    baseline_label: str = ""

    def describe(self) -> str:
        """Return the human-readable descriptor."""
        suffix = f" {self.baseline_label}" if self.baseline_label else ""
        if self.state == DistanceState.EQUAL:
            if self.baseline_label:
                return f"Up to date with{suffix}"
            return "Up to date"
        if self.state == DistanceState.AHEAD:
            return f"Ahead of{suffix or ' latest'}"
        if self.state == DistanceState.BEHIND:
            if self.unit is None:
                return f"Behind{suffix} (version format difference)"
            plural = "s" if self.count > 1 else ""
            return f"{self.count} {self.unit} version{plural} behind{suffix}"
        if self.state == DistanceState.UNPARSABLE:
            return "Invalid version format"
        if self.state == DistanceState.NO_BASELINE:
            return "No compatible version found"
        return UNKNOWN


class ResultRecord(BaseModel):
    """Final output row; one per dependency entry."""

    name: str
    is_dev: bool
    current: str
    latest: str = UNKNOWN
    earliest_compat: str = NOT_APPLICABLE
    latest_compat: str = NOT_APPLICABLE
    peer_display: str = UNKNOWN
    distance: str = UNKNOWN
    recommendation: Recommendation = Field(
        default_factory=lambda: Recommendation(priority=Priority.UNKNOWN)
    )
    migration_link: str = ""
    failed: bool = False
    versions_probed: int = 0
    compatibility: CompatibilityResult | None = None

    @property
    def note(self) -> str:
        return self.recommendation.note

    def as_row(self) -> list[str]:
        """Return the row in output-schema column order."""
        return [
            self.name,
            "true" if self.is_dev else "false",
            self.current,
            self.latest,
            self.earliest_compat,
            self.latest_compat,
            self.peer_display,
            self.distance,
            self.recommendation.display,
            self.note,
            self.migration_link,
        ]


OUTPUT_COLUMNS = [
    "name",
    "isDevDependency",
    "current",
    "latest",
    "earliestCompat",
    "latestCompat",
    "peerRequirement",
    "distance",
    "recommendation",
    "note",
    "migrationLink",
]


class ScanOptions(BaseModel):
    """Engine settings resolved from config file and CLI flags."""

    target_major: int = Field(default=19, ge=1)
    fast_limit: int = Field(default=0, ge=0, description="0 disables fast mode")
    exhaustive: bool = False
    include_prerelease: bool = False
    jobs: int = Field(default=4, ge=1)
    show_progress: bool = True
    verbose: bool = False

    @property
    def mode(self) -> str:
        """Describe the scan mode for the run summary."""
        mode = "fast" if self.fast_limit else "full"
        if self.exhaustive:
            mode += "+exhaustive"
        return mode


class RunSummary(BaseModel):
    """Statistics reported once the pool has drained."""

    packages: int
    version_lookups: int
    concurrency: int
    target_major: int
    mode: str
    elapsed_seconds: float
    failures: int = 0

    def describe(self, framework_label: str) -> str:
        return (
            f"Done. Packages: {self.packages} | Version lookups: {self.version_lookups}"
            f" | Concurrency: {self.concurrency} | {framework_label}: {self.target_major}"
            f" | Mode: {self.mode} | Time: {self.elapsed_seconds:.2f}s"
        )
