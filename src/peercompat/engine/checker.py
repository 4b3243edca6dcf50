"""Per-package pipeline: registry -> scanner -> classifier -> recommendation."""

from typing import Callable

from peercompat.config import FrameworkConfig
from peercompat.core.models import (
    NOT_APPLICABLE,
    UNKNOWN,
    DependencyEntry,
    Priority,
    Recommendation,
    ResultRecord,
    ScanOptions,
)
from peercompat.core.versions import strip_range
from peercompat.engine.classifier import HeuristicClassifier
from peercompat.engine.recommendation import distance_for, recommend
from peercompat.engine.scanner import VersionScanner, prepare_versions
from peercompat.errors import RegistryLookupError
from peercompat.migration_links import MigrationLinkResolver
from peercompat.registry.client import RegistryClient
from peercompat.utils.logging import get_logger

logger = get_logger(__name__)

StatusCallback = Callable[[str], None]


class PackageChecker:
    """Check one dependency entry against the target framework major."""

    def __init__(
        self,
        registry: RegistryClient,
        options: ScanOptions,
        framework: FrameworkConfig | None = None,
        links: MigrationLinkResolver | None = None,
        heuristic: HeuristicClassifier | None = None,
    ) -> None:
        self.registry = registry
        self.options = options
        self.framework = framework or FrameworkConfig()
        self.links = links or MigrationLinkResolver(
            excluded_prefixes=self.framework.excluded_prefixes
        )
        self.scanner = VersionScanner(registry, options, self.framework.peer_names)
        self.heuristic = heuristic or HeuristicClassifier(registry, self.framework)

    @property
    def target_label(self) -> str:
        return f"{self.framework.name} {self.options.target_major}"

    def failure_record(self, entry: DependencyEntry, reason: str) -> ResultRecord:
        """Build the sentinel record for a package that could not be checked."""
        return ResultRecord(
            name=entry.name,
            is_dev=entry.is_dev,
            current=entry.declared_range,
            latest=UNKNOWN,
            earliest_compat=NOT_APPLICABLE,
            latest_compat=NOT_APPLICABLE,
            peer_display=UNKNOWN,
            distance=UNKNOWN,
            recommendation=Recommendation(
                priority=Priority.UNKNOWN,
                note=f"Failed to fetch metadata: {reason}",
            ),
            migration_link=self.links.static_link(entry.name),
            failed=True,
        )

    async def check(
        self,
        entry: DependencyEntry,
        on_status: StatusCallback | None = None,
    ) -> ResultRecord:
        """Run the full pipeline for one entry.

        Registry lookup failures produce a failure record instead of raising.
        """
        name = entry.name
        if on_status:
            on_status(f"meta {name}")

        try:
            metadata = await self.registry.get_package_metadata(name)
        except RegistryLookupError as e:
            logger.warning("Could not fetch metadata for %s: %s", name, e.message)
            return self.failure_record(entry, e.message)

        latest = metadata.latest_version
        versions = prepare_versions(metadata.versions, self.options.include_prerelease)
        current = strip_range(entry.declared_range)

        result = await self.scanner.scan(name, versions, current, on_status)

        heuristic = None
        if not result.has_formal_peer_requirement:
            if on_status:
                on_status(f"checking {self.framework.name} compat {name}")
            heuristic = await self.heuristic.classify(name, latest, versions)

        recommendation = recommend(
            result,
            current,
            latest,
            heuristic,
            framework=self.framework.name,
            target_major=self.options.target_major,
        )
        distance = distance_for(result, current, latest)

        if result.has_formal_peer_requirement:
            earliest = result.earliest_compatible or NOT_APPLICABLE
            latest_compat = result.latest_compatible or NOT_APPLICABLE
            peer_display = result.declared_peer_range or ""
        else:
            earliest = NOT_APPLICABLE
            latest_compat = NOT_APPLICABLE
            peer_display = f"Does not depend on {self.framework.name}"

        logger.debug(
            "%s: current=%s latest_compat=%s probes=%d%s",
            name,
            current,
            result.latest_compatible or "none",
            result.versions_probed,
            " (extended)" if result.extended else "",
        )

        return ResultRecord(
            name=name,
            is_dev=entry.is_dev,
            current=entry.declared_range,
            latest=latest,
            earliest_compat=earliest,
            latest_compat=latest_compat,
            peer_display=peer_display,
            distance=distance.describe(),
            recommendation=recommendation,
            migration_link=self.links.resolve(name, metadata),
            versions_probed=result.versions_probed,
            compatibility=result,
        )
