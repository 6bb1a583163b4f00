"""Lighthouse JSON report parser.

Converts the JSON output of a Lighthouse audit into a MetricsSnapshot.
Category scores are taken verbatim (0-1); audit numeric values are already
in milliseconds. Missing or null values become 0.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from perfguard.exceptions import AuditParseError
from perfguard.models.metrics import MetricsSnapshot

CATEGORY_FIELDS = {
    "performance": "performance_score",
    "accessibility": "accessibility_score",
    "best-practices": "best_practices_score",
    "seo": "seo_score",
}

AUDIT_FIELDS = {
    "first-contentful-paint": "first_contentful_paint",
    "largest-contentful-paint": "largest_contentful_paint",
    "speed-index": "speed_index",
    "total-blocking-time": "total_blocking_time",
    "cumulative-layout-shift": "cumulative_layout_shift",
}

JSON_REPORT_SUFFIX = ".report.json"
HTML_REPORT_SUFFIX = ".report.html"


def _number(node: Any, key: str) -> float:
    """Read a numeric field from a JSON object, defaulting to 0."""
    if not isinstance(node, dict):
        return 0.0
    value = node.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0.0
    return float(value)


class LighthouseReportParser:
    """Parser for Lighthouse JSON reports."""

    @classmethod
    def parse_file(cls, path: Path | str) -> MetricsSnapshot:
        """Parse a snapshot from a Lighthouse JSON report file.

        When an HTML report sits next to the JSON report
        (``name.report.json`` / ``name.report.html``) its path is recorded.

        Args:
            path: Path to the JSON report.

        Returns:
            The parsed snapshot.

        Raises:
            AuditParseError: If the file cannot be read or is not a valid report.
        """
        path = Path(path)

        if not path.is_file():
            msg = f"Audit report not found: {path}"
            raise AuditParseError(msg)

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            msg = f"Failed to read audit report {path}: {e}"
            raise AuditParseError(msg) from e

        report_path: str | None = None
        if path.name.endswith(JSON_REPORT_SUFFIX):
            html_path = path.with_name(path.name[: -len(JSON_REPORT_SUFFIX)] + HTML_REPORT_SUFFIX)
            if html_path.exists():
                report_path = str(html_path)

        return cls.parse_string(content, source=str(path), report_path=report_path)

    @classmethod
    def parse_string(
        cls,
        content: str,
        source: str = "<string>",
        report_path: str | None = None,
    ) -> MetricsSnapshot:
        """Parse a snapshot from Lighthouse JSON text.

        Raises:
            AuditParseError: If the content is not a JSON object.
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON in {source}: {e}"
            raise AuditParseError(msg) from e

        if not isinstance(data, dict):
            msg = f"Audit report must be a JSON object, got {type(data).__name__}: {source}"
            raise AuditParseError(msg)

        return cls.parse_dict(data, source=source, report_path=report_path)

    @classmethod
    def parse_dict(
        cls,
        data: dict[str, Any],
        source: str = "<dict>",
        report_path: str | None = None,
    ) -> MetricsSnapshot:
        """Parse a snapshot from a decoded Lighthouse report.

        Raises:
            AuditParseError: If the extracted values are out of range.
        """
        categories = data.get("categories") or {}
        audits = data.get("audits") or {}

        values: dict[str, Any] = {}
        for category, field in CATEGORY_FIELDS.items():
            values[field] = _number(categories.get(category), "score")
        for audit, field in AUDIT_FIELDS.items():
            values[field] = _number(audits.get(audit), "numericValue")

        try:
            return MetricsSnapshot(report_path=report_path, **values)
        except ValidationError as e:
            msg = f"Invalid metrics in {source}: {e}"
            raise AuditParseError(msg) from e


def parse_lighthouse_report(path: Path | str) -> MetricsSnapshot:
    """Convenience function to parse a Lighthouse JSON report file."""
    return LighthouseReportParser.parse_file(path)


def snapshot_from_lighthouse(data: dict[str, Any]) -> MetricsSnapshot:
    """Convenience function to parse a decoded Lighthouse report."""
    return LighthouseReportParser.parse_dict(data)
