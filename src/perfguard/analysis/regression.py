"""Regression analysis for audit results.

Compares a new snapshot against the stored baseline for its test name,
checks recent history for a downward trend, and classifies severity.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from perfguard.analysis.models import AnalysisThresholds, RegressionAnalysis, Severity
from perfguard.models.metrics import PerformanceDataPoint

if TYPE_CHECKING:
    from perfguard.models.metrics import MetricsSnapshot, Provenance
    from perfguard.persistence import BaselineStore, HistoryStore

logger = logging.getLogger(__name__)

# Metric names used as keys of RegressionAnalysis.performance_changes
PERFORMANCE_SCORE = "Performance Score"
LARGEST_CONTENTFUL_PAINT = "Largest Contentful Paint"
FIRST_CONTENTFUL_PAINT = "First Contentful Paint"
CUMULATIVE_LAYOUT_SHIFT = "Cumulative Layout Shift"

DOWNWARD_TREND_DETAIL = (
    "Consistent downward trend detected in performance scores over recent runs"
)


def percent_change(current: float, baseline: float) -> float | None:
    """Signed percent change from ``baseline`` to ``current``.

    Returns:
        The change, or None when the baseline is zero.
    """
    if baseline == 0:
        return None
    return (current - baseline) / baseline * 100


def is_consistent_downward_trend(values: list[float], min_ratio: float = 0.7) -> bool:
    """Check whether most adjacent moves in ``values`` are drops.

    Args:
        values: Values in chronological order.
        min_ratio: Fraction of transitions that must be downward.

    Returns:
        True if the fraction of downward moves reaches ``min_ratio``.
    """
    if len(values) < 2:
        return False
    downward_moves = sum(1 for prev, cur in zip(values, values[1:]) if cur < prev)
    return downward_moves / (len(values) - 1) >= min_ratio


class RegressionAnalyzer:
    """Detects performance regressions against stored baselines."""

    def __init__(
        self,
        history: HistoryStore,
        baselines: BaselineStore,
        provenance: Provenance | None = None,
        thresholds: AnalysisThresholds | None = None,
    ) -> None:
        """Initialize the regression analyzer.

        Args:
            history: Store that receives every analyzed snapshot.
            baselines: Store holding the reference point per test name.
            provenance: Build metadata for recorded points (defaults to the environment).
            thresholds: Regression thresholds (defaults to AnalysisThresholds()).
        """
        self._history = history
        self._baselines = baselines
        self._provenance = provenance
        self._thresholds = thresholds or AnalysisThresholds()

    @property
    def thresholds(self) -> AnalysisThresholds:
        """Thresholds in effect."""
        return self._thresholds

    def analyze(
        self,
        current: MetricsSnapshot,
        test_name: str,
        url: str,
    ) -> RegressionAnalysis:
        """Analyze a snapshot for regressions and record it in history.

        The first snapshot seen for a test name becomes its baseline and is
        reported as having no regression.

        Args:
            current: Metrics from the latest audit.
            test_name: Name the metrics are tracked under.
            url: Audited URL.

        Returns:
            The regression analysis.

        Raises:
            StorageError: If the history or baseline cannot be persisted.
        """
        analysis = RegressionAnalysis()
        point = self._make_point(current, test_name, url)

        baseline = self._baselines.get(test_name)
        if baseline is None:
            logger.info(
                "No baseline found for %s, establishing current run as baseline",
                test_name,
            )
            self._history.append(test_name, point)
            self._baselines.set_if_absent(test_name, point)
            return analysis

        # History before the current run is recorded
        recent_history = self._history.recent(test_name, self._thresholds.trend_window)

        self._compare_to_baseline(analysis, current, baseline)
        self._check_trend(analysis, recent_history)
        analysis.severity = self._determine_severity(analysis)

        self._history.append(test_name, point)

        if analysis.has_regression:
            logger.warning(
                "Performance regression detected in %s (severity %s): %s",
                test_name,
                analysis.severity.value,
                "; ".join(analysis.regression_details),
            )
        else:
            logger.info("No performance regression detected for %s", test_name)

        return analysis

    def set_baseline(
        self,
        current: MetricsSnapshot,
        test_name: str,
        url: str,
    ) -> PerformanceDataPoint:
        """Replace the baseline for a test name with ``current``.

        Returns:
            The stored baseline point.

        Raises:
            StorageError: If the baseline cannot be persisted.
        """
        return self._baselines.force_set(test_name, self._make_point(current, test_name, url))

    def _make_point(
        self,
        snapshot: MetricsSnapshot,
        test_name: str,
        url: str,
    ) -> PerformanceDataPoint:
        return PerformanceDataPoint.from_snapshot(
            snapshot, test_name, url, provenance=self._provenance
        )

    def _compare_to_baseline(
        self,
        analysis: RegressionAnalysis,
        current: MetricsSnapshot,
        baseline: PerformanceDataPoint,
    ) -> None:
        """Record percent changes and flag metrics beyond their thresholds."""
        thresholds = self._thresholds
        changes = analysis.performance_changes

        perf_change = percent_change(current.performance_score, baseline.performance_score)
        changes[PERFORMANCE_SCORE] = perf_change
        if perf_change is not None and perf_change < -thresholds.score_drop_percent:
            self._flag(
                analysis,
                f"Performance score regressed by {abs(perf_change):.1f}% "
                f"(from {baseline.performance_score * 100:.1f}% "
                f"to {current.performance_score * 100:.1f}%)",
            )

        lcp_change = percent_change(
            current.largest_contentful_paint, baseline.largest_contentful_paint
        )
        changes[LARGEST_CONTENTFUL_PAINT] = lcp_change
        if lcp_change is not None and lcp_change > thresholds.timing_increase_percent:
            self._flag(
                analysis,
                f"LCP regressed by {lcp_change:.1f}% "
                f"(from {baseline.largest_contentful_paint:.0f}ms "
                f"to {current.largest_contentful_paint:.0f}ms)",
            )

        fcp_change = percent_change(
            current.first_contentful_paint, baseline.first_contentful_paint
        )
        changes[FIRST_CONTENTFUL_PAINT] = fcp_change
        if fcp_change is not None and fcp_change > thresholds.timing_increase_percent:
            self._flag(
                analysis,
                f"FCP regressed by {fcp_change:.1f}% "
                f"(from {baseline.first_contentful_paint:.0f}ms "
                f"to {current.first_contentful_paint:.0f}ms)",
            )

        # CLS is only comparable against a non-zero baseline
        if baseline.cumulative_layout_shift > 0:
            cls_change = percent_change(
                current.cumulative_layout_shift, baseline.cumulative_layout_shift
            )
            changes[CUMULATIVE_LAYOUT_SHIFT] = cls_change
            if cls_change is not None and cls_change > thresholds.cls_increase_percent:
                self._flag(
                    analysis,
                    f"CLS regressed by {cls_change:.1f}% "
                    f"(from {baseline.cumulative_layout_shift:.3f} "
                    f"to {current.cumulative_layout_shift:.3f})",
                )

    @staticmethod
    def _flag(analysis: RegressionAnalysis, detail: str) -> None:
        analysis.has_regression = True
        analysis.regression_details.append(detail)

    def _check_trend(
        self,
        analysis: RegressionAnalysis,
        recent_history: list[PerformanceDataPoint],
    ) -> None:
        """Append an advisory detail if scores have been falling.

        Does not set has_regression.
        """
        if len(recent_history) < self._thresholds.trend_min_points:
            return

        scores = [p.performance_score for p in recent_history]
        if is_consistent_downward_trend(scores, self._thresholds.trend_downward_ratio):
            analysis.regression_details.append(DOWNWARD_TREND_DETAIL)

    def _determine_severity(self, analysis: RegressionAnalysis) -> Severity:
        """Classify severity from change magnitudes and detail count."""
        if not analysis.has_regression:
            return Severity.NONE

        severe_changes = sum(
            1
            for change in analysis.performance_changes.values()
            if change is not None and abs(change) > self._thresholds.severe_change_percent
        )

        if severe_changes > 0:
            return Severity.HIGH
        if len(analysis.regression_details) > 2:
            return Severity.MEDIUM
        return Severity.LOW
