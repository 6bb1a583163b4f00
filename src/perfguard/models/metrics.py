"""Metrics data models.

Defines the immutable snapshot of one audit run and the persisted record
that adds provenance metadata to it.
"""

from __future__ import annotations

import os
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Environment variables consulted for run provenance
GIT_COMMIT_ENV = "PERFGUARD_GIT_COMMIT"
BUILD_NUMBER_ENV = "PERFGUARD_BUILD_NUMBER"
ENVIRONMENT_ENV = "PERFGUARD_ENVIRONMENT"


class MetricsSnapshot(BaseModel):
    """Category scores and timing measurements from a single audit."""

    model_config = ConfigDict(frozen=True)

    # Category scores as fractions in [0, 1]
    performance_score: float = Field(default=0.0, ge=0.0, le=1.0)
    accessibility_score: float = Field(default=0.0, ge=0.0, le=1.0)
    best_practices_score: float = Field(default=0.0, ge=0.0, le=1.0)
    seo_score: float = Field(default=0.0, ge=0.0, le=1.0)

    # Timings in milliseconds
    first_contentful_paint: float = Field(default=0.0, ge=0.0)
    largest_contentful_paint: float = Field(default=0.0, ge=0.0)
    speed_index: float = Field(default=0.0, ge=0.0)
    total_blocking_time: float = Field(default=0.0, ge=0.0)

    cumulative_layout_shift: float = Field(default=0.0, ge=0.0)

    report_path: str | None = None


class Provenance(BaseModel):
    """Build metadata recorded alongside each data point."""

    git_commit: str = "unknown"
    build_number: str = "local"
    environment: str = "test"

    @classmethod
    def from_env(cls) -> Provenance:
        """Build provenance from PERFGUARD_* environment variables."""
        return cls(
            git_commit=os.environ.get(GIT_COMMIT_ENV, "unknown"),
            build_number=os.environ.get(BUILD_NUMBER_ENV, "local"),
            environment=os.environ.get(ENVIRONMENT_ENV, "test"),
        )


class PerformanceDataPoint(BaseModel):
    """A metrics snapshot plus the metadata needed to persist it.

    Serialized with camelCase keys; either key style is accepted on load.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    test_name: str
    url: str
    timestamp: str  # ISO-8601 local date-time
    git_commit: str = "unknown"
    build_number: str = "local"
    environment: str = "test"

    performance_score: float = 0.0
    accessibility_score: float = 0.0
    best_practices_score: float = 0.0
    seo_score: float = 0.0
    first_contentful_paint: float = 0.0
    largest_contentful_paint: float = 0.0
    speed_index: float = 0.0
    total_blocking_time: float = 0.0
    cumulative_layout_shift: float = 0.0

    @classmethod
    def from_snapshot(
        cls,
        snapshot: MetricsSnapshot,
        test_name: str,
        url: str,
        provenance: Provenance | None = None,
        timestamp: datetime | None = None,
    ) -> PerformanceDataPoint:
        """Create a data point from a snapshot.

        Args:
            snapshot: The audit metrics.
            test_name: Key the point is stored under.
            url: Audited URL.
            provenance: Build metadata (defaults to the environment).
            timestamp: Recording time (defaults to now).

        Returns:
            The new data point.
        """
        provenance = provenance or Provenance.from_env()
        recorded_at = timestamp or datetime.now()
        return cls(
            test_name=test_name,
            url=url,
            timestamp=recorded_at.isoformat(),
            git_commit=provenance.git_commit,
            build_number=provenance.build_number,
            environment=provenance.environment,
            **snapshot.model_dump(exclude={"report_path"}),
        )

    def to_snapshot(self) -> MetricsSnapshot:
        """Strip provenance and return the underlying metrics."""
        return MetricsSnapshot(
            performance_score=self.performance_score,
            accessibility_score=self.accessibility_score,
            best_practices_score=self.best_practices_score,
            seo_score=self.seo_score,
            first_contentful_paint=self.first_contentful_paint,
            largest_contentful_paint=self.largest_contentful_paint,
            speed_index=self.speed_index,
            total_blocking_time=self.total_blocking_time,
            cumulative_layout_shift=self.cumulative_layout_shift,
        )
