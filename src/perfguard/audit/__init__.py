"""Conversion of third-party audit output into metrics snapshots."""

from perfguard.audit.parser import (
    LighthouseReportParser,
    parse_lighthouse_report,
    snapshot_from_lighthouse,
)

__all__ = [
    "LighthouseReportParser",
    "parse_lighthouse_report",
    "snapshot_from_lighthouse",
]
