"""Reporting module for rendering performance reports and delivering them to sinks."""

from perfguard.reporting.csv_generator import TrendCsvGenerator, generate_trend_csv
from perfguard.reporting.markdown_generator import (
    generate_comparison_report,
    generate_metrics_summary,
    generate_regression_report,
    generate_scorecard,
    generate_summary,
    generate_trend_report,
    generate_web_vitals_chart,
    grade,
    recommendations,
)
from perfguard.reporting.sink import (
    Attachment,
    DirectoryReportSink,
    MemoryReportSink,
    ReportSink,
)

__all__ = [
    "Attachment",
    "DirectoryReportSink",
    "MemoryReportSink",
    "ReportSink",
    "TrendCsvGenerator",
    "generate_comparison_report",
    "generate_metrics_summary",
    "generate_regression_report",
    "generate_scorecard",
    "generate_summary",
    "generate_trend_csv",
    "generate_trend_report",
    "generate_web_vitals_chart",
    "grade",
    "recommendations",
]
