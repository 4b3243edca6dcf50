"""Tests for the recommendation engine."""

from peercompat.core.models import (
    CompatibilityResult,
    HeuristicVerdict,
    Priority,
    Recommendation,
)
from peercompat.engine.recommendation import distance_for, recommend


def formal_result(compatible: list[str]) -> CompatibilityResult:
    """Helper to create a finalized result for a peer-constrained package."""
    return CompatibilityResult(
        has_formal_peer_requirement=True,
        declared_peer_range="^19.0.0",
        compatible_versions=compatible,
        latest_compatible=compatible[0] if compatible else None,
        earliest_compatible=compatible[-1] if compatible else None,
    )


class TestFormalRecommendation:
    """Tests for packages with a formal peer requirement."""

    def test_current_is_latest_compatible(self) -> None:
        """Test Keep when current is the latest compatible version."""
        result = formal_result(["5.0.0", "4.2.0"])

        rec = recommend(result, "5.0.0", "5.0.0")

        assert rec.priority == Priority.KEEP
        assert rec.display == "#3 Keep current version"
        assert rec.note == "Current version is compatible"
        assert distance_for(result, "5.0.0", "5.0.0").describe() == "Up to date with latest compatible"

    def test_current_compatible_but_older(self) -> None:
        """Test OptionalUpgrade naming the latest compatible version."""
        result = formal_result(["5.1.0", "5.0.0"])

        rec = recommend(result, "5.0.0", "6.0.0")

        assert rec.priority == Priority.OPTIONAL_UPGRADE
        assert rec.target_version == "5.1.0"
        assert rec.display == "#2 Optionally upgrade to 5.1.0"

    def test_must_upgrade_to_earliest_compatible(self) -> None:
        """Test MustUpgrade naming the cheapest fix."""
        result = formal_result(["6.2.0", "6.1.0", "6.0.0"])

        rec = recommend(result, "4.0.0", "6.2.0")

        assert rec.priority == Priority.MUST_UPGRADE
        assert rec.target_version == "6.0.0"
        assert rec.display == "#1 Must upgrade to 6.0.0"
        assert rec.note == "Upgradable within Angular 19"

    def test_newer_latest_outside_window(self) -> None:
        """Test the note when latest needs a different framework major."""
        result = formal_result(["6.2.0", "6.0.0"])

        rec = recommend(result, "4.0.0", "7.0.0")

        assert rec.priority == Priority.MUST_UPGRADE
        assert rec.note == "Newer latest likely needs different Angular peer or is prerelease"

    def test_no_compatible_version(self) -> None:
        """Test MustUpgrade without a target."""
        result = formal_result([])

        rec = recommend(result, "1.0.0", "2.0.0", target_major=20)

        assert rec.priority == Priority.MUST_UPGRADE
        assert rec.target_version == "n/a"
        assert rec.display == "n/a"
        assert rec.note == "No compatible version found for Angular 20"
        assert distance_for(result, "1.0.0", "2.0.0").describe() == "No compatible version found"

    def test_distance_against_latest_compatible(self) -> None:
        """Test that the formal baseline is the latest compatible version."""
        result = formal_result(["6.2.0", "6.0.0"])

        assert distance_for(result, "4.0.0", "7.0.0").describe() == "2 major versions behind latest compatible"


class TestHeuristicRecommendation:
    """Tests for packages without a formal peer requirement."""

    def test_keep_when_current_is_latest(self) -> None:
        """Test Keep for an up-to-date package."""
        result = CompatibilityResult(latest_compatible="1.2.0", compatible_versions=["1.2.0"])
        heuristic = HeuristicVerdict(is_compatible=True, reason="Known Angular-compatible package")

        rec = recommend(result, "1.2.0", "1.2.0", heuristic)

        assert rec.priority == Priority.KEEP
        assert rec.note == "Likely compatible with Angular 19 - Known Angular-compatible package"
        assert distance_for(result, "1.2.0", "1.2.0").describe() == "Up to date"

    def test_optional_upgrade_when_behind(self) -> None:
        """Test OptionalUpgrade naming latest."""
        result = CompatibilityResult()
        heuristic = HeuristicVerdict(is_compatible=True, reason="Framework-agnostic utility package")

        rec = recommend(result, "1.0.0", "1.4.0", heuristic)

        assert rec == Recommendation(
            priority=Priority.OPTIONAL_UPGRADE,
            target_version="1.4.0",
            note="Likely compatible with Angular 19 - Framework-agnostic utility package",
        )
        assert distance_for(result, "1.0.0", "1.4.0").describe() == "4 minor versions behind"

    def test_ahead_of_latest_is_note_only(self) -> None:
        """Test that a version ahead of latest gets no upgrade."""
        heuristic = HeuristicVerdict(is_compatible=True, reason="x")

        rec = recommend(CompatibilityResult(), "2.0.0", "1.9.0", heuristic)

        assert rec.priority == Priority.KEEP
        assert rec.target_version == "n/a"
        assert rec.note.endswith("(current is ahead of latest)")

    def test_missing_heuristic_counts_as_compatible(self) -> None:
        """Test the default when no heuristic verdict is supplied."""
        rec = recommend(CompatibilityResult(), "1.2.0", "1.2.0")

        assert rec.priority == Priority.KEEP

    def test_incompatible_behind_latest(self) -> None:
        """Test MustUpgrade to latest for a heuristically incompatible package."""
        heuristic = HeuristicVerdict(is_compatible=False, reason="Failed to check compatibility")

        rec = recommend(CompatibilityResult(), "1.0.0", "2.0.0", heuristic)

        assert rec.priority == Priority.MUST_UPGRADE
        assert rec.target_version == "2.0.0"
        assert rec.note == "May not be compatible with Angular 19 - Failed to check compatibility"

    def test_incompatible_at_latest(self) -> None:
        """Test that nothing can be recommended when already at latest."""
        heuristic = HeuristicVerdict(is_compatible=False, reason="Angular-related but may be outdated")

        rec = recommend(CompatibilityResult(), "2.0.0", "2.0.0", heuristic)

        assert rec.priority == Priority.UNKNOWN
        assert rec.display == "n/a"
