"""Threshold validation for audit results.

Scores are compared on a 0-100 scale; Core Web Vitals use the commonly
recommended "good" limits.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from perfguard.exceptions import ThresholdViolationError

if TYPE_CHECKING:
    from perfguard.models.metrics import MetricsSnapshot

logger = logging.getLogger(__name__)

# Core Web Vitals "good" limits
FCP_LIMIT_MS = 1800
LCP_LIMIT_MS = 2500
CLS_LIMIT = 0.1
TBT_LIMIT_MS = 200


class ScoreThresholds(BaseModel):
    """Minimum category scores, 0-100."""

    performance: float = Field(default=0.0, ge=0.0, le=100.0)
    accessibility: float = Field(default=0.0, ge=0.0, le=100.0)
    best_practices: float = Field(default=0.0, ge=0.0, le=100.0)
    seo: float = Field(default=0.0, ge=0.0, le=100.0)


QUICK_CHECK = ScoreThresholds(performance=50, accessibility=80, best_practices=70, seo=80)
COMPREHENSIVE_CHECK = ScoreThresholds(
    performance=70, accessibility=90, best_practices=80, seo=90
)


def validate_scores(
    snapshot: MetricsSnapshot,
    min_performance: float,
    min_accessibility: float,
    min_best_practices: float,
    min_seo: float,
) -> None:
    """Check category scores against minimums.

    Raises:
        ThresholdViolationError: Listing every category below its minimum.
    """
    checks = [
        ("Performance", snapshot.performance_score * 100, min_performance),
        ("Accessibility", snapshot.accessibility_score * 100, min_accessibility),
        ("Best Practices", snapshot.best_practices_score * 100, min_best_practices),
        ("SEO", snapshot.seo_score * 100, min_seo),
    ]
    violations = [
        f"{name}: {score:.1f}% < {minimum:.1f}%"
        for name, score, minimum in checks
        if score < minimum
    ]

    if violations:
        msg = "Lighthouse scores below thresholds: " + "; ".join(violations)
        raise ThresholdViolationError(msg, violations)

    logger.info("All Lighthouse scores meet the required thresholds")


def validate_core_web_vitals(snapshot: MetricsSnapshot) -> None:
    """Check FCP, LCP, CLS and TBT against their recommended limits.

    Raises:
        ThresholdViolationError: Listing every vital outside its limit.
    """
    violations: list[str] = []

    if snapshot.first_contentful_paint > FCP_LIMIT_MS:
        violations.append(f"FCP: {snapshot.first_contentful_paint:.0f}ms > {FCP_LIMIT_MS}ms")
    if snapshot.largest_contentful_paint > LCP_LIMIT_MS:
        violations.append(f"LCP: {snapshot.largest_contentful_paint:.0f}ms > {LCP_LIMIT_MS}ms")
    if snapshot.cumulative_layout_shift > CLS_LIMIT:
        violations.append(f"CLS: {snapshot.cumulative_layout_shift:.3f} > {CLS_LIMIT}")
    if snapshot.total_blocking_time > TBT_LIMIT_MS:
        violations.append(f"TBT: {snapshot.total_blocking_time:.0f}ms > {TBT_LIMIT_MS}ms")

    if violations:
        msg = "Core Web Vitals outside recommended thresholds: " + "; ".join(violations)
        raise ThresholdViolationError(msg, violations)

    logger.info("All Core Web Vitals meet the recommended thresholds")


def _validate_preset(snapshot: MetricsSnapshot, preset: ScoreThresholds) -> None:
    validate_scores(
        snapshot,
        preset.performance,
        preset.accessibility,
        preset.best_practices,
        preset.seo,
    )


def quick_check(snapshot: MetricsSnapshot) -> None:
    """Basic validation: scores only, lenient performance minimum."""
    _validate_preset(snapshot, QUICK_CHECK)


def comprehensive_check(snapshot: MetricsSnapshot) -> None:
    """Strict validation: higher score minimums plus Core Web Vitals."""
    _validate_preset(snapshot, COMPREHENSIVE_CHECK)
    validate_core_web_vitals(snapshot)
