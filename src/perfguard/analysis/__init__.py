"""Analysis module for regression detection and threshold validation."""

from perfguard.analysis.models import AnalysisThresholds, RegressionAnalysis, Severity
from perfguard.analysis.regression import RegressionAnalyzer, percent_change
from perfguard.analysis.validation import (
    COMPREHENSIVE_CHECK,
    QUICK_CHECK,
    ScoreThresholds,
    comprehensive_check,
    quick_check,
    validate_core_web_vitals,
    validate_scores,
)

__all__ = [
    "COMPREHENSIVE_CHECK",
    "QUICK_CHECK",
    "AnalysisThresholds",
    "RegressionAnalysis",
    "RegressionAnalyzer",
    "ScoreThresholds",
    "Severity",
    "comprehensive_check",
    "percent_change",
    "quick_check",
    "validate_core_web_vitals",
    "validate_scores",
]
