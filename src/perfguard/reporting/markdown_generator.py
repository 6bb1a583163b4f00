"""Markdown and plain-text report rendering.

All functions are pure: they take snapshots (or data points, which expose
the same metric attributes) and return rendered text.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from perfguard.analysis.models import RegressionAnalysis
    from perfguard.models.metrics import MetricsSnapshot, PerformanceDataPoint

    Metrics = MetricsSnapshot | PerformanceDataPoint

# Status labels
PASS = "✅ PASS"
FAIL = "❌ FAIL"
GOOD = "✅ GOOD"
NEEDS_IMPROVEMENT = "⚠️ NEEDS IMPROVEMENT"
POOR = "❌ POOR"
IMPROVED = "✅ Improved"
REGRESSED = "❌ Regressed"
NO_CHANGE = "➖ No Change"

NEEDS_IMPROVEMENT_FACTOR = 1.5
TREND_NO_CHANGE_EPSILON = 0.1
COMPARISON_NO_CHANGE_EPSILON = 1.0
PROGRESS_BAR_WIDTH = 50

EXCELLENT_RECOMMENDATION = (
    "✅ **Excellent Performance**: All metrics are within recommended thresholds!"
)


class ScoreCategory(NamedTuple):
    label: str
    attribute: str
    threshold: float  # 0-100


class WebVital(NamedTuple):
    label: str
    attribute: str
    threshold: float
    unit: str


SCORE_CATEGORIES = (
    ScoreCategory("Performance", "performance_score", 60),
    ScoreCategory("Accessibility", "accessibility_score", 80),
    ScoreCategory("Best Practices", "best_practices_score", 70),
    ScoreCategory("SEO", "seo_score", 80),
)

WEB_VITALS = (
    WebVital("First Contentful Paint", "first_contentful_paint", 1800, "ms"),
    WebVital("Largest Contentful Paint", "largest_contentful_paint", 2500, "ms"),
    WebVital("Speed Index", "speed_index", 3400, "ms"),
    WebVital("Total Blocking Time", "total_blocking_time", 200, "ms"),
    WebVital("Cumulative Layout Shift", "cumulative_layout_shift", 0.1, ""),
)

# (label, attribute, scale, lower_is_better) for trend and comparison tables
TABLE_METRICS = (
    ("Performance", "performance_score", 100.0, False),
    ("Accessibility", "accessibility_score", 100.0, False),
    ("Best Practices", "best_practices_score", 100.0, False),
    ("SEO", "seo_score", 100.0, False),
    ("FCP (ms)", "first_contentful_paint", 1.0, True),
    ("LCP (ms)", "largest_contentful_paint", 1.0, True),
)

_CATEGORY_ICONS = {
    "Performance": "🚀",
    "Accessibility": "♿",
    "Best Practices": "🛡️",
    "SEO": "🔍",
}


def average_score(metrics: Metrics) -> float:
    """Average of the four category scores on a 0-100 scale."""
    return (
        metrics.performance_score
        + metrics.accessibility_score
        + metrics.best_practices_score
        + metrics.seo_score
    ) / 4 * 100


def grade(score: float) -> str:
    """Map a 0-100 score to a letter grade."""
    if score >= 90:
        return "A+"
    if score >= 80:
        return "A"
    if score >= 70:
        return "B"
    if score >= 60:
        return "C"
    if score >= 50:
        return "D"
    return "F"


def score_status(score: float, threshold: float) -> str:
    """PASS/FAIL for a 0-100 category score."""
    return PASS if score >= threshold else FAIL


def web_vital_status(value: float, threshold: float) -> str:
    """Three-tier status for a timing metric."""
    if value <= threshold:
        return GOOD
    if value <= threshold * NEEDS_IMPROVEMENT_FACTOR:
        return NEEDS_IMPROVEMENT
    return POOR


def _score_indicator(score: float) -> str:
    if score >= 90:
        return "🟢"
    if score >= 70:
        return "🟡"
    return "🔴"


def _format_vital(value: float, unit: str) -> str:
    if unit:
        return f"{value:.0f} {unit}"
    return f"{value:.3f}"


def generate_summary(
    metrics: Metrics,
    test_name: str,
    url: str,
    generated_at: datetime | None = None,
) -> str:
    """Render category scores and Core Web Vitals against their thresholds."""
    generated_at = generated_at or datetime.now()
    lines = [
        "# Performance Analysis Report",
        "",
        "## Test Information",
        f"- **Test Name**: {test_name}",
        f"- **URL**: {url}",
        f"- **Timestamp**: {generated_at.isoformat()}",
        "",
        "## Lighthouse Scores",
        "| Category | Score | Status |",
        "|----------|-------|--------|",
    ]

    for category in SCORE_CATEGORIES:
        score = getattr(metrics, category.attribute) * 100
        lines.append(
            f"| {category.label} | {score:.1f}% | {score_status(score, category.threshold)} |"
        )

    lines.extend([
        "",
        "## Core Web Vitals",
        "| Metric | Value | Threshold | Status |",
        "|--------|-------|-----------|--------|",
    ])

    for vital in WEB_VITALS:
        value = getattr(metrics, vital.attribute)
        if vital.unit:
            status = web_vital_status(value, vital.threshold)
        else:
            # Unitless CLS is pass/fail
            status = PASS if value <= vital.threshold else FAIL
        threshold = f"{vital.threshold:g} {vital.unit}".rstrip()
        lines.append(
            f"| {vital.label} | {_format_vital(value, vital.unit)} | {threshold} | {status} |"
        )

    return "\n".join(lines) + "\n"


def recommendations(metrics: Metrics) -> list[str]:
    """Fixed recommendation lines for every metric outside its threshold."""
    items: list[str] = []

    if metrics.performance_score * 100 < 60:
        items.append(
            "🚀 **Improve Performance**: Consider optimizing images, "
            "minifying CSS/JS, and enabling compression"
        )
    if metrics.accessibility_score * 100 < 80:
        items.append(
            "♿ **Enhance Accessibility**: Add alt text to images, "
            "improve color contrast, and ensure keyboard navigation"
        )
    if metrics.best_practices_score * 100 < 70:
        items.append(
            "🛡️ **Follow Best Practices**: Use HTTPS, avoid deprecated APIs, "
            "and ensure console is error-free"
        )
    if metrics.seo_score * 100 < 80:
        items.append(
            "🔍 **Optimize SEO**: Add meta descriptions, improve heading structure, "
            "and ensure mobile-friendliness"
        )
    if metrics.largest_contentful_paint > 2500:
        items.append(
            "⚡ **Reduce LCP**: Optimize images and critical rendering path "
            "for faster loading"
        )
    if metrics.cumulative_layout_shift > 0.1:
        items.append(
            "📐 **Fix Layout Shifts**: Set size attributes on images and avoid "
            "inserting content above existing content"
        )

    return items or [EXCELLENT_RECOMMENDATION]


def generate_scorecard(metrics: Metrics) -> str:
    """Render the overall grade, per-category breakdown and recommendations."""
    avg = average_score(metrics)
    lines = [
        "# Performance Scorecard",
        "",
        "## Overall Performance Grade",
        f"### Grade: {grade(avg)} ({avg:.1f}%)",
        "",
        "## Detailed Breakdown",
    ]

    for category in SCORE_CATEGORIES:
        score = getattr(metrics, category.attribute) * 100
        lines.append(
            f"- {_CATEGORY_ICONS[category.label]} **{category.label}**: "
            f"{_score_indicator(score)} {score:.1f}%"
        )

    lines.extend(["", "## Recommendations"])
    for item in recommendations(metrics):
        prefix = "" if item == EXCELLENT_RECOMMENDATION else "- "
        lines.append(f"{prefix}{item}")

    return "\n".join(lines) + "\n"


def trend_cell(previous: float, current: float) -> str:
    """Indicator and absolute change between two consecutive values."""
    change = current - previous
    if abs(change) < TREND_NO_CHANGE_EPSILON:
        return "➖ No change"
    if change > 0:
        return f"📈 +{change:.1f}"
    return f"📉 {change:.1f}"


def generate_trend_report(history: Sequence[Metrics], test_name: str) -> str:
    """Render the change between the two most recent runs.

    Args:
        history: Snapshots in chronological order.
        test_name: Test the history belongs to.
    """
    lines = [
        "# Performance Trend Analysis",
        "",
        f"## Test: {test_name}",
        f"## Data Points: {len(history)} test runs",
        "",
    ]

    if len(history) >= 2:
        previous, latest = history[-2], history[-1]
        lines.extend([
            "## Recent Changes",
            "| Metric | Previous | Current | Change |",
            "|--------|----------|---------|--------|",
        ])
        for label, attribute, scale, _ in TABLE_METRICS:
            prev_value = getattr(previous, attribute) * scale
            cur_value = getattr(latest, attribute) * scale
            lines.append(
                f"| {label} | {prev_value:.1f} | {cur_value:.1f} | "
                f"{trend_cell(prev_value, cur_value)} |"
            )

    return "\n".join(lines) + "\n"


def comparison_status(difference: float, lower_is_better: bool) -> str:
    """Classify a baseline-to-current difference."""
    if abs(difference) < COMPARISON_NO_CHANGE_EPSILON:
        return NO_CHANGE
    improved = difference < 0 if lower_is_better else difference > 0
    return IMPROVED if improved else REGRESSED


def generate_comparison_report(
    baseline: Metrics,
    current: Metrics,
    comparison_name: str,
) -> str:
    """Render a metric-by-metric comparison of two arbitrary snapshots."""
    lines = [
        "# Performance Comparison Report",
        "",
        f"## Comparison: {comparison_name}",
        "",
        "| Metric | Baseline | Current | Difference | Status |",
        "|--------|----------|---------|------------|--------|",
    ]

    for label, attribute, scale, lower_is_better in TABLE_METRICS:
        base_value = getattr(baseline, attribute) * scale
        cur_value = getattr(current, attribute) * scale
        difference = cur_value - base_value
        lines.append(
            f"| {label} | {base_value:.1f} | {cur_value:.1f} | {difference:+.1f} | "
            f"{comparison_status(difference, lower_is_better)} |"
        )

    return "\n".join(lines) + "\n"


def generate_regression_report(analysis: RegressionAnalysis, test_name: str) -> str:
    """Render a regression analysis as markdown."""
    lines = [
        "# Performance Regression Analysis",
        "",
        f"## Test: {test_name}",
        f"## Severity: {analysis.severity.value}",
        "",
        "## Regression Details:",
    ]
    lines.extend(f"- {detail}" for detail in analysis.regression_details)

    lines.extend(["", "## Performance Changes:"])
    for metric, change in analysis.performance_changes.items():
        formatted = "n/a" if change is None else f"{change:+.1f}%"
        lines.append(f"- {metric}: {formatted}")

    return "\n".join(lines) + "\n"


def progress_bar(value: float, maximum: float, width: int = PROGRESS_BAR_WIDTH) -> str:
    """ASCII bar showing ``value`` as a fraction of ``maximum``."""
    ratio = value / maximum if maximum > 0 else 0.0
    filled = max(0, int(min(width, ratio * width)))
    bar = "█" * filled + "░" * (width - filled)
    return f"[{bar}] {min(100.0, ratio * 100):.1f}%"


def generate_web_vitals_chart(metrics: Metrics) -> str:
    """Render FCP, LCP and CLS as progress bars."""
    lines = [
        "# Core Web Vitals Visualization",
        "",
        "```",
        "Core Web Vitals Performance Chart",
        "=====================================",
        "",
        f"First Contentful Paint (FCP): {metrics.first_contentful_paint:.0f} ms",
        progress_bar(metrics.first_contentful_paint, 3000),
        "",
        f"Largest Contentful Paint (LCP): {metrics.largest_contentful_paint:.0f} ms",
        progress_bar(metrics.largest_contentful_paint, 4000),
        "",
        f"Cumulative Layout Shift (CLS): {metrics.cumulative_layout_shift:.3f}",
        progress_bar(metrics.cumulative_layout_shift * 1000, 250),
        "",
        "```",
    ]
    return "\n".join(lines) + "\n"


def generate_metrics_summary(
    metrics: Metrics,
    url: str,
    generated_at: datetime | None = None,
) -> str:
    """Plain-text listing of every score and timing."""
    generated_at = generated_at or datetime.now()
    lines = [
        "Lighthouse Performance Report",
        "=============================",
        f"URL: {url}",
        f"Timestamp: {generated_at.isoformat()}",
        "",
        "Category Scores:",
        f"- Performance: {metrics.performance_score * 100:.1f}%",
        f"- Accessibility: {metrics.accessibility_score * 100:.1f}%",
        f"- Best Practices: {metrics.best_practices_score * 100:.1f}%",
        f"- SEO: {metrics.seo_score * 100:.1f}%",
        "",
        "Core Web Vitals:",
        f"- First Contentful Paint (FCP): {metrics.first_contentful_paint:.0f} ms",
        f"- Largest Contentful Paint (LCP): {metrics.largest_contentful_paint:.0f} ms",
        f"- Speed Index: {metrics.speed_index:.0f} ms",
        f"- Total Blocking Time (TBT): {metrics.total_blocking_time:.0f} ms",
        f"- Cumulative Layout Shift (CLS): {metrics.cumulative_layout_shift:.3f}",
    ]
    return "\n".join(lines) + "\n"
