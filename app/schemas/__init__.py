"""Pydantic schemas for request/response validation."""

from app.schemas.profile import (
    Activity,
    ActivityCategory,
    ActivityLocation,
    ActivityStructure,
    EstimationContext,
    IntensityTarget,
    Interval,
    PlanStep,
    Route,
    TargetKind,
    UserProfile,
)
from app.schemas.estimation import (
    CompleteEstimation,
    Confidence,
    EstimationResult,
    MetricEstimations,
    StepEstimate,
    StrategyKind,
)
from app.schemas.training_load import (
    CompletedActivity,
    DailyTSS,
    FormLabel,
    PeriodizationTemplate,
    PlannedActivity,
    TrainingLoadPoint,
    TrainingLoadSeries,
    WeekCompliance,
    WeeklyLoadSummary,
)
from app.schemas.fatigue import FatiguePrediction, LoadSnapshot, RecoveryPlan, WeeklyProjection
from app.schemas.zones import IntensityDistribution, IntensityZone

__all__ = [
    "Activity",
    "ActivityCategory",
    "ActivityLocation",
    "ActivityStructure",
    "EstimationContext",
    "IntensityTarget",
    "Interval",
    "PlanStep",
    "Route",
    "TargetKind",
    "UserProfile",
    "CompleteEstimation",
    "Confidence",
    "EstimationResult",
    "MetricEstimations",
    "StepEstimate",
    "StrategyKind",
    "CompletedActivity",
    "DailyTSS",
    "FormLabel",
    "PeriodizationTemplate",
    "PlannedActivity",
    "TrainingLoadPoint",
    "TrainingLoadSeries",
    "WeekCompliance",
    "WeeklyLoadSummary",
    "FatiguePrediction",
    "LoadSnapshot",
    "RecoveryPlan",
    "WeeklyProjection",
    "IntensityDistribution",
    "IntensityZone",
]
