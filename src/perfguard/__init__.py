"""perfguard: performance regression tracking for web page audits."""

from perfguard.analysis import RegressionAnalysis, RegressionAnalyzer, Severity
from perfguard.models import MetricsSnapshot, PerformanceDataPoint, Provenance
from perfguard.tracker import PerformanceTracker

__version__ = "0.1.0"

__all__ = [
    "MetricsSnapshot",
    "PerformanceDataPoint",
    "PerformanceTracker",
    "Provenance",
    "RegressionAnalysis",
    "RegressionAnalyzer",
    "Severity",
    "__version__",
]
