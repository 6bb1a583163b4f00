"""Data models for perfguard."""

from perfguard.models.metrics import MetricsSnapshot, PerformanceDataPoint, Provenance

__all__ = [
    "MetricsSnapshot",
    "PerformanceDataPoint",
    "Provenance",
]
