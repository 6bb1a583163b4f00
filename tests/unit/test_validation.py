"""Tests for threshold validation."""

import pytest

from perfguard.analysis import (
    COMPREHENSIVE_CHECK,
    QUICK_CHECK,
    comprehensive_check,
    quick_check,
    validate_core_web_vitals,
    validate_scores,
)
from perfguard.exceptions import PerfGuardError, ThresholdViolationError
from perfguard.models import MetricsSnapshot


@pytest.fixture
def good_snapshot() -> MetricsSnapshot:
    """Create a snapshot that passes every check."""
    return MetricsSnapshot(
        performance_score=0.95,
        accessibility_score=0.96,
        best_practices_score=0.92,
        seo_score=0.98,
        first_contentful_paint=900,
        largest_contentful_paint=1800,
        speed_index=1500,
        total_blocking_time=50,
        cumulative_layout_shift=0.02,
    )


class TestValidateScores:
    """Tests for validate_scores."""

    def test_passes_at_thresholds(self, good_snapshot: MetricsSnapshot) -> None:
        """Scores meeting every minimum pass silently."""
        validate_scores(good_snapshot, 90, 90, 90, 90)

    def test_lists_every_failing_category(self, good_snapshot: MetricsSnapshot) -> None:
        """All violations are reported together."""
        snapshot = good_snapshot.model_copy(
            update={"performance_score": 0.4, "seo_score": 0.5}
        )

        with pytest.raises(ThresholdViolationError) as exc_info:
            validate_scores(snapshot, 50, 80, 70, 80)

        assert exc_info.value.violations == [
            "Performance: 40.0% < 50.0%",
            "SEO: 50.0% < 80.0%",
        ]
        assert str(exc_info.value).startswith("Lighthouse scores below thresholds:")

    def test_error_is_assertion_and_perfguard_error(self, good_snapshot: MetricsSnapshot) -> None:
        """Violations integrate with test runners and the error hierarchy."""
        snapshot = good_snapshot.model_copy(update={"accessibility_score": 0.1})

        with pytest.raises(AssertionError):
            validate_scores(snapshot, 0, 80, 0, 0)
        with pytest.raises(PerfGuardError):
            validate_scores(snapshot, 0, 80, 0, 0)


class TestValidateCoreWebVitals:
    """Tests for validate_core_web_vitals."""

    def test_passes_good_vitals(self, good_snapshot: MetricsSnapshot) -> None:
        """Vitals inside their limits pass."""
        validate_core_web_vitals(good_snapshot)

    def test_limits_are_inclusive(self, good_snapshot: MetricsSnapshot) -> None:
        """Values exactly at the limits pass."""
        snapshot = good_snapshot.model_copy(
            update={
                "first_contentful_paint": 1800,
                "largest_contentful_paint": 2500,
                "cumulative_layout_shift": 0.1,
                "total_blocking_time": 200,
            }
        )
        validate_core_web_vitals(snapshot)

    def test_reports_each_violation(self, good_snapshot: MetricsSnapshot) -> None:
        """Every vital outside its limit is listed."""
        snapshot = good_snapshot.model_copy(
            update={
                "first_contentful_paint": 2000,
                "largest_contentful_paint": 4000,
                "cumulative_layout_shift": 0.25,
                "total_blocking_time": 600,
            }
        )

        with pytest.raises(ThresholdViolationError) as exc_info:
            validate_core_web_vitals(snapshot)

        assert exc_info.value.violations == [
            "FCP: 2000ms > 1800ms",
            "LCP: 4000ms > 2500ms",
            "CLS: 0.250 > 0.1",
            "TBT: 600ms > 200ms",
        ]


class TestPresets:
    """Tests for quick and comprehensive checks."""

    def test_preset_values(self) -> None:
        """Presets carry the documented minimums."""
        assert QUICK_CHECK.performance == 50
        assert QUICK_CHECK.accessibility == 80
        assert COMPREHENSIVE_CHECK.performance == 70
        assert COMPREHENSIVE_CHECK.seo == 90

    def test_quick_check_ignores_vitals(self, good_snapshot: MetricsSnapshot) -> None:
        """Quick check only looks at scores."""
        snapshot = good_snapshot.model_copy(
            update={"performance_score": 0.55, "largest_contentful_paint": 9000}
        )
        quick_check(snapshot)

    def test_comprehensive_check_enforces_vitals(self, good_snapshot: MetricsSnapshot) -> None:
        """Comprehensive check also validates Core Web Vitals."""
        snapshot = good_snapshot.model_copy(update={"largest_contentful_paint": 9000})

        with pytest.raises(ThresholdViolationError) as exc_info:
            comprehensive_check(snapshot)
        assert exc_info.value.violations == ["LCP: 9000ms > 2500ms"]

    def test_comprehensive_check_stricter_scores(self, good_snapshot: MetricsSnapshot) -> None:
        """A score that passes quick can fail comprehensive."""
        snapshot = good_snapshot.model_copy(update={"performance_score": 0.6})

        quick_check(snapshot)
        with pytest.raises(ThresholdViolationError):
            comprehensive_check(snapshot)
