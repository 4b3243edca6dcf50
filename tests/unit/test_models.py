"""Tests for core data models."""

import pytest
from pydantic import ValidationError

from peercompat.core.models import (
    CompatibilityResult,
    DependencyEntry,
    Priority,
    Recommendation,
    ResultRecord,
    ScanOptions,
    Verdict,
    VersionProbe,
)


def probes(*verdicts: Verdict) -> list[VersionProbe]:
    """Helper to build a probe list from verdicts, newest first."""
    return [VersionProbe(version=f"{10 - i}.0.0", verdict=v) for i, v in enumerate(verdicts)]


class TestDependencyEntry:
    """Tests for DependencyEntry."""

    def test_frozen(self) -> None:
        """Test that entries are immutable."""
        entry = DependencyEntry(name="rxjs", declared_range="~7.8.0")

        with pytest.raises(ValidationError):
            entry.name = "other"

    def test_defaults(self) -> None:
        """Test the dev flag default."""
        assert DependencyEntry(name="rxjs", declared_range="7.8.0").is_dev is False


class TestCompatibilityResult:
    """Tests for window contiguity detection."""

    def test_contiguous(self) -> None:
        """Test a single compatible run."""
        result = CompatibilityResult(
            probes=probes(Verdict.INCOMPATIBLE, Verdict.COMPATIBLE, Verdict.COMPATIBLE, Verdict.INCOMPATIBLE)
        )

        assert result.has_gap() is False
        assert result.versions_probed == 4

    def test_gap(self) -> None:
        """Test an incompatible release inside the compatible bracket."""
        result = CompatibilityResult(
            probes=probes(Verdict.COMPATIBLE, Verdict.INCOMPATIBLE, Verdict.COMPATIBLE)
        )

        assert result.has_gap() is True

    def test_unknown_counts_as_compatible(self) -> None:
        """Test that failed probes do not split the window."""
        result = CompatibilityResult(
            probes=probes(Verdict.COMPATIBLE, Verdict.UNKNOWN, Verdict.COMPATIBLE)
        )

        assert result.has_gap() is False


class TestRecommendation:
    """Tests for recommendation display."""

    def test_display(self) -> None:
        """Test each priority rendering."""
        assert Recommendation(priority=Priority.MUST_UPGRADE, target_version="6.0.0").display == (
            "#1 Must upgrade to 6.0.0"
        )
        assert Recommendation(priority=Priority.MUST_UPGRADE).display == "n/a"
        assert Recommendation(priority=Priority.OPTIONAL_UPGRADE, target_version="1.4.0").display == (
            "#2 Optionally upgrade to 1.4.0"
        )
        assert Recommendation(priority=Priority.KEEP).display == "#3 Keep current version"
        assert Recommendation(priority=Priority.UNKNOWN).display == "n/a"

    def test_rank(self) -> None:
        """Test priority ranks."""
        assert Priority.MUST_UPGRADE.rank == 1
        assert Priority.KEEP.rank == 3
        assert Priority.UNKNOWN.rank is None

    def test_display_uses_rank(self) -> None:
        """Test that every ranked priority renders its rank."""
        for priority in (Priority.MUST_UPGRADE, Priority.OPTIONAL_UPGRADE, Priority.KEEP):
            display = Recommendation(priority=priority, target_version="2.0.0").display
            assert display.startswith(f"#{priority.rank} ")


class TestResultRecord:
    """Tests for ResultRecord."""

    def test_defaults_are_sentinels(self) -> None:
        """Test the default field values."""
        record = ResultRecord(name="x", is_dev=True, current="^1.0.0")

        assert record.as_row() == [
            "x",
            "true",
            "^1.0.0",
            "Unknown",
            "n/a",
            "n/a",
            "Unknown",
            "Unknown",
            "n/a",
            "",
            "",
        ]


class TestScanOptions:
    """Tests for ScanOptions."""

    def test_mode(self) -> None:
        """Test the summary mode label."""
        assert ScanOptions().mode == "full"
        assert ScanOptions(fast_limit=15).mode == "fast"
        assert ScanOptions(fast_limit=15, exhaustive=True).mode == "fast+exhaustive"

    def test_jobs_validation(self) -> None:
        """Test that the worker count must be positive."""
        with pytest.raises(ValidationError):
            ScanOptions(jobs=0)
