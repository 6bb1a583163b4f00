"""Performance tracking workflow.

Ties the regression analyzer, the history store and the report renderers
together and delivers every rendered artifact to a report sink.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from perfguard.reporting.csv_generator import TrendCsvGenerator
from perfguard.reporting.markdown_generator import (
    generate_comparison_report,
    generate_regression_report,
    generate_scorecard,
    generate_summary,
    generate_trend_report,
    generate_web_vitals_chart,
)

if TYPE_CHECKING:
    from perfguard.analysis.models import RegressionAnalysis
    from perfguard.analysis.regression import RegressionAnalyzer
    from perfguard.models.metrics import MetricsSnapshot, PerformanceDataPoint
    from perfguard.persistence import HistoryStore
    from perfguard.reporting.sink import ReportSink

logger = logging.getLogger(__name__)


class PerformanceTracker:
    """Runs regression tracking for audits and publishes the reports."""

    def __init__(
        self,
        analyzer: RegressionAnalyzer,
        history: HistoryStore,
        sink: ReportSink,
    ) -> None:
        """Initialize the tracker.

        Args:
            analyzer: Analyzer used for baseline comparison.
            history: History store shared with the analyzer.
            sink: Destination for rendered reports.
        """
        self._analyzer = analyzer
        self._history = history
        self._sink = sink

    def create_dashboard(self, snapshot: MetricsSnapshot, test_name: str, url: str) -> None:
        """Attach the summary, web vitals chart and scorecard for one audit."""
        self._sink.attach("Performance Summary", generate_summary(snapshot, test_name, url))
        self._sink.attach("Core Web Vitals Chart", generate_web_vitals_chart(snapshot))
        self._sink.attach("Performance Scorecard", generate_scorecard(snapshot))

        self._sink.parameter("Test Name", test_name)
        self._sink.parameter("URL", url)
        self._sink.parameter("Performance Score", f"{snapshot.performance_score * 100:.1f}%")
        self._sink.parameter(
            "Accessibility Score", f"{snapshot.accessibility_score * 100:.1f}%"
        )
        self._sink.parameter(
            "Best Practices Score", f"{snapshot.best_practices_score * 100:.1f}%"
        )
        self._sink.parameter("SEO Score", f"{snapshot.seo_score * 100:.1f}%")
        self._sink.parameter(
            "First Contentful Paint", f"{snapshot.first_contentful_paint:.0f} ms"
        )
        self._sink.parameter(
            "Largest Contentful Paint", f"{snapshot.largest_contentful_paint:.0f} ms"
        )
        self._sink.parameter(
            "Cumulative Layout Shift", f"{snapshot.cumulative_layout_shift:.3f}"
        )

    def track(self, snapshot: MetricsSnapshot, test_name: str, url: str) -> RegressionAnalysis:
        """Publish the dashboard, analyze for regressions and publish trends.

        Args:
            snapshot: Metrics from the latest audit.
            test_name: Name the metrics are tracked under.
            url: Audited URL.

        Returns:
            The regression analysis.

        Raises:
            StorageError: If history or baseline cannot be persisted.
        """
        self.create_dashboard(snapshot, test_name, url)

        analysis = self._analyzer.analyze(snapshot, test_name, url)
        self.attach_analysis(analysis, test_name)

        self.create_trend_report(test_name)
        return analysis

    def attach_analysis(self, analysis: RegressionAnalysis, test_name: str) -> None:
        """Publish a regression analysis; the markdown report only when a regression exists."""
        if analysis.has_regression:
            self._sink.attach("Regression Analysis", generate_regression_report(analysis, test_name))
            self._sink.parameter("Regression Detected", "YES")
            self._sink.parameter("Regression Severity", analysis.severity.value)
        else:
            self._sink.parameter("Regression Detected", "NO")

    def create_trend_report(self, test_name: str) -> list[PerformanceDataPoint]:
        """Attach the trend markdown and CSV built from stored history.

        Returns:
            The history the report was built from (empty if none).
        """
        history = self._history.all(test_name)
        if not history:
            logger.info("No historical data available for performance report: %s", test_name)
            return history

        self._sink.attach("Performance Trend Analysis", generate_trend_report(history, test_name))
        self._sink.attach(
            "Trend Data",
            TrendCsvGenerator().render(history),
            content_type="text/csv",
            extension=".csv",
        )
        logger.info("Performance report created for: %s", test_name)
        return history

    def compare(
        self,
        baseline: MetricsSnapshot,
        current: MetricsSnapshot,
        comparison_name: str,
    ) -> str:
        """Attach a comparison of two snapshots and return the rendered report."""
        report = generate_comparison_report(baseline, current, comparison_name)
        self._sink.attach("Performance Comparison", report)

        perf_delta = (current.performance_score - baseline.performance_score) * 100
        a11y_delta = (current.accessibility_score - baseline.accessibility_score) * 100
        self._sink.parameter("Comparison Name", comparison_name)
        self._sink.parameter("Performance Change", f"{perf_delta:+.1f}%")
        self._sink.parameter("Accessibility Change", f"{a11y_delta:+.1f}%")
        return report

    def set_baseline(
        self,
        snapshot: MetricsSnapshot,
        test_name: str,
        url: str,
    ) -> PerformanceDataPoint:
        """Replace the stored baseline for a test name."""
        return self._analyzer.set_baseline(snapshot, test_name, url)
