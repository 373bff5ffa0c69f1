"""
Estimation result schemas.

Confidence is carried twice on purpose: a 0-100 score for fine-grained
sorting and a three-tier label for messaging.  The label is always a
function of the score (see :func:`confidence_from_score`).
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.fatigue import FatiguePrediction
from app.schemas.zones import IntensityZone


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class StrategyKind(str, Enum):
    STRUCTURE = "structure"
    ROUTE = "route"
    TEMPLATE = "template"


_CONFIDENCE_THRESHOLDS: list[tuple[Confidence, float]] = [(Confidence.HIGH, 85.0), (Confidence.MEDIUM, 60.0), ]


def confidence_from_score(score: float) -> Confidence:
    """Map a 0-100 confidence score to its tier."""
    for label, minimum in _CONFIDENCE_THRESHOLDS:
        if score >= minimum:
            return label
    return Confidence.LOW


class StepEstimate(BaseModel):
    """Resolved duration and intensity of a single executed step."""

    model_config = ConfigDict(frozen=True)

    name: str
    duration_seconds: float = Field(..., gt=0)
    intensity_factor: float = Field(..., gt=0)


class EstimationResult(BaseModel):
    """Primary output of an estimation strategy."""

    model_config = ConfigDict(frozen=True)

    strategy: StrategyKind
    tss: float = Field(..., ge=0.0, allow_inf_nan=False)
    duration_seconds: float = Field(..., gt=0.0, allow_inf_nan=False)
    intensity_factor: float = Field(..., gt=0.0, allow_inf_nan=False)
    confidence: Confidence
    confidence_score: float = Field(..., ge=0.0, le=100.0)
    warnings: list[str] = Field(default_factory=list)
    factors: list[str] = Field(default_factory=list, description="Tags describing the inputs that were used")
    step_breakdown: list[StepEstimate] = Field(default_factory=list)
    estimated_distance_meters: Optional[float] = Field(None, ge=0.0)


class MetricEstimations(BaseModel):
    """Secondary metrics derived from a primary estimate."""

    model_config = ConfigDict(frozen=True)

    calories: float = Field(..., ge=0.0)
    calorie_method: str = Field(..., description="One of: power, heart_rate, tss")
    distance_meters: Optional[float] = Field(None, ge=0.0,
                                             description="None for non-endurance activities")
    avg_power_watts: Optional[float] = Field(None, ge=0.0)
    avg_heart_rate_bpm: Optional[float] = Field(None, ge=0.0)
    avg_speed_mps: Optional[float] = Field(None, ge=0.0)
    moving_time_seconds: float = Field(..., ge=0.0)
    elevation_gain_meters: Optional[float] = Field(None, ge=0.0)
    zone_seconds: dict[IntensityZone, float] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


class CompleteEstimation(BaseModel):
    """Estimate plus derived metrics and, when scheduled against a history, fatigue impact."""

    estimation: EstimationResult
    metrics: MetricEstimations
    fatigue: Optional[FatiguePrediction] = None
    tss_low: float = Field(..., ge=0.0)
    tss_high: float = Field(..., ge=0.0)
