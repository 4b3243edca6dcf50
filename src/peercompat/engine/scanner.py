"""Adaptive version history scanner.

Versions are probed newest first. In fast mode only the newest ``fast_limit``
versions are candidates, with two adjustments:

- early exit: outside exhaustive mode, a package that has not declared a
  framework peer range by the time a compatible version is found is assumed
  compatible across its recent history, so probing stops;
- extension: when a peer-constrained package's current version fell outside
  the fast window, probing resumes past the window until that version is
  reached, since the verdict on the pinned version matters most.
"""

from typing import Callable

from peercompat.core.models import CompatibilityResult, ScanOptions, Verdict, VersionProbe
from peercompat.core.versions import is_prerelease, is_valid, sort_descending
from peercompat.engine.classifier import classify_formal, find_peer_range
from peercompat.errors import RegistryLookupError
from peercompat.registry.client import RegistryClient
from peercompat.utils.logging import get_logger

logger = get_logger(__name__)

StatusCallback = Callable[[str], None]


def prepare_versions(raw_versions: list[str], include_prerelease: bool = False) -> list[str]:
    """Validate, filter and sort a package's published versions.

    Malformed version strings are dropped and never classified.

    Returns:
        Valid versions, newest first.
    """
    versions: list[str] = []
    for version in raw_versions:
        if not is_valid(version):
            logger.debug("Skipping malformed version %r", version)
            continue
        if not include_prerelease and is_prerelease(version):
            continue
        versions.append(version)
    return sort_descending(versions)


class VersionScanner:
    """Probe a package's versions for their framework peer range."""

    def __init__(
        self,
        registry: RegistryClient,
        options: ScanOptions,
        peer_names: list[str],
    ) -> None:
        """Initialize the scanner.

        Args:
            registry: Registry client used for per-version lookups.
            options: Scan mode flags and target major.
            peer_names: peerDependencies keys naming the framework.
        """
        self.registry = registry
        self.options = options
        self.peer_names = peer_names

    async def _probe(self, name: str, version: str, extended: bool) -> VersionProbe:
        """Look up one version's peer range and classify it.

        A failed lookup is treated as "no formal requirement" for that
        version; the probe is kept with an unknown verdict.
        """
        try:
            peers = await self.registry.get_peer_requirements(name, version)
        except RegistryLookupError as e:
            logger.debug("Peer lookup failed for %s@%s: %s", name, version, e.message)
            return VersionProbe(version=version, verdict=Verdict.UNKNOWN, extended=extended)

        peer_range = find_peer_range(peers, self.peer_names)
        verdict = classify_formal(
            peer_range,
            self.options.target_major,
            self.options.include_prerelease,
        )
        return VersionProbe(
            version=version,
            peer_range=peer_range,
            verdict=verdict,
            extended=extended,
        )

    def _record(self, result: CompatibilityResult, probe: VersionProbe) -> None:
        result.probes.append(probe)
        if probe.peer_range is not None:
            result.has_formal_peer_requirement = True
            if result.declared_peer_range is None:
                result.declared_peer_range = probe.peer_range
        if probe.verdict != Verdict.INCOMPATIBLE:
            result.compatible_versions.append(probe.version)

    async def scan(
        self,
        name: str,
        versions: list[str],
        current: str,
        on_status: StatusCallback | None = None,
    ) -> CompatibilityResult:
        """Scan a package's version history.

        Args:
            name: Package name.
            versions: Valid versions, newest first (see ``prepare_versions``).
            current: Currently pinned version (range prefix stripped).
            on_status: Optional callback receiving a status line per probe.

        Returns:
            The finalized compatibility result.
        """
        result = CompatibilityResult()
        fast_limit = self.options.fast_limit

        candidates = versions[:fast_limit] if fast_limit > 0 else versions
        if fast_limit > 0:
            result.current_version_found = current in candidates

        probed = 0
        for version in candidates:
            if on_status:
                on_status(f"scan {name}@{version}")
            self._record(result, await self._probe(name, version, extended=False))
            if version == current:
                result.current_version_found = True
            probed += 1

            if (
                not self.options.exhaustive
                and not result.has_formal_peer_requirement
                and result.compatible_versions
            ):
                break

        if (
            fast_limit > 0
            and result.has_formal_peer_requirement
            and not result.current_version_found
            and probed < len(versions)
        ):
            if on_status:
                on_status(f"extending search for {name} to find current version")
            result.extended = True
            for version in versions[probed:]:
                if on_status:
                    on_status(f"scan {name}@{version} (extended)")
                self._record(result, await self._probe(name, version, extended=True))
                if version == current:
                    result.current_version_found = True
                    break

        if result.compatible_versions:
            result.latest_compatible = result.compatible_versions[0]
            if result.has_formal_peer_requirement:
                result.earliest_compatible = result.compatible_versions[-1]

        return result
