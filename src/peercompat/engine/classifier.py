"""Compatibility classification.

Formal mode checks a declared peer range with npm semver rules. Heuristic
mode is used when a package never declares a peer range on the framework;
it weighs metadata signals in a fixed order, first match wins:

1. name on the known-compatible list
2. framework tokens in keywords/description (compatible if recently published)
3. utility keywords or the types-only namespace
4. the configured default policy

A registry failure while gathering signals fails closed.
"""

from peercompat.config import DefaultPolicy, FrameworkConfig
from peercompat.core.models import HeuristicVerdict, Verdict
from peercompat.core.versions import parse_version, satisfies_target
from peercompat.errors import RegistryLookupError
from peercompat.registry.client import RegistryClient
from peercompat.utils.logging import get_logger

logger = get_logger(__name__)

RECENT_VERSION_WINDOW = 5


def find_peer_range(peer_requirements: dict[str, str], peer_names: list[str]) -> str | None:
    """Pick the framework range out of a version's peerDependencies.

    Keys are tried in ``peer_names`` order; empty ranges count as absent.
    """
    for peer_name in peer_names:
        peer_range = peer_requirements.get(peer_name)
        if peer_range:
            return peer_range
    return None


def classify_formal(
    peer_range: str | None,
    target_major: int,
    include_prerelease: bool = False,
) -> Verdict:
    """Classify a probed version by its peer range.

    A version without a range places no constraint on the framework and is
    therefore compatible.
    """
    if peer_range is None:
        return Verdict.COMPATIBLE
    if satisfies_target(peer_range, target_major, include_prerelease):
        return Verdict.COMPATIBLE
    return Verdict.INCOMPATIBLE


class HeuristicClassifier:
    """Signal-based classifier for packages without a formal peer range."""

    def __init__(
        self,
        registry: RegistryClient,
        framework: FrameworkConfig | None = None,
        default_policy: DefaultPolicy | None = None,
    ) -> None:
        """Initialize the classifier.

        Args:
            registry: Registry client used to fetch keywords/description.
            framework: Framework signal lists.
            default_policy: Overrides ``framework.default_policy``.
        """
        self.registry = registry
        self.framework = framework or FrameworkConfig()
        self.default_policy = default_policy or self.framework.default_policy

    @property
    def label(self) -> str:
        return self.framework.name

    def _is_known_compatible(self, name: str) -> bool:
        return any(name.startswith(known) for known in self.framework.known_compatible)

    def _has_token(self, values: list[str], tokens: list[str]) -> bool:
        lowered = [value.lower() for value in values]
        return any(token in value for value in lowered for token in tokens)

    def default_verdict(self) -> HeuristicVerdict:
        """Apply the default policy when no signal matched."""
        reason = "No explicit framework dependencies detected"
        if self.default_policy == DefaultPolicy.ASSUME_COMPATIBLE:
            return HeuristicVerdict(is_compatible=True, reason=reason)
        return HeuristicVerdict(is_compatible=False, reason=reason)

    async def classify(self, name: str, latest: str, versions: list[str]) -> HeuristicVerdict:
        """Classify a package from its metadata signals.

        Args:
            name: Package name.
            latest: Latest published version.
            versions: Valid versions, newest first.

        Returns:
            Verdict with the reason of the rule that matched.
        """
        if self._is_known_compatible(name):
            return HeuristicVerdict(
                is_compatible=True,
                reason=f"Known {self.label}-compatible package",
            )

        try:
            info = await self.registry.get_package_info(name)
        except RegistryLookupError as e:
            logger.debug("Heuristic lookup failed for %s: %s", name, e.message)
            return HeuristicVerdict(is_compatible=False, reason="Failed to check compatibility")

        tokens = [token.lower() for token in self.framework.ecosystem_tokens]
        if self._has_token(info.keywords, tokens) or self._has_token([info.description], tokens):
            recent_versions = versions[:RECENT_VERSION_WINDOW]
            if parse_version(latest) is not None and recent_versions:
                return HeuristicVerdict(
                    is_compatible=True,
                    reason=f"{self.label}-related package with recent updates",
                )
            return HeuristicVerdict(
                is_compatible=False,
                reason=f"{self.label}-related but may be outdated",
            )

        utility = [keyword.lower() for keyword in self.framework.utility_keywords]
        if self._has_token(info.keywords, utility) or name.startswith(self.framework.types_namespace):
            return HeuristicVerdict(is_compatible=True, reason="Framework-agnostic utility package")

        return self.default_verdict()
