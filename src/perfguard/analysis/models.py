"""Analysis data models."""

from enum import Enum

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """Coarse ranking of how serious a set of regressions is."""

    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AnalysisThresholds(BaseModel):
    """Thresholds used by the regression analyzer (percent values)."""

    score_drop_percent: float = Field(default=10.0, gt=0)
    timing_increase_percent: float = Field(default=20.0, gt=0)
    cls_increase_percent: float = Field(default=50.0, gt=0)
    severe_change_percent: float = Field(default=30.0, gt=0)

    # Advisory downward-trend check over recent history
    trend_window: int = Field(default=5, ge=2)
    trend_min_points: int = Field(default=3, ge=2)
    trend_downward_ratio: float = Field(default=0.7, gt=0.0, le=1.0)


class RegressionAnalysis(BaseModel):
    """Result of comparing one snapshot against its baseline."""

    has_regression: bool = False
    regression_details: list[str] = Field(default_factory=list)
    # Signed percent change per metric; None when the baseline was zero
    performance_changes: dict[str, float | None] = Field(default_factory=dict)
    severity: Severity = Severity.NONE
