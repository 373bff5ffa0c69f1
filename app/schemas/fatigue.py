"""
Fatigue prediction schemas.

A :class:`FatiguePrediction` projects the effect of one prospective
activity on the athlete's load state and on the ISO week that contains
it.  Recommendations and warnings are produced by a fixed rule set, so
the same inputs always yield the same lists.
"""

import datetime

from pydantic import BaseModel, Field

from app.schemas.training_load import FormLabel


class LoadSnapshot(BaseModel):
    """CTL / ATL / TSB at the end of a given day."""

    date: datetime.date
    ctl: float = Field(..., ge=0.0)
    atl: float = Field(..., ge=0.0)
    tsb: float
    form: FormLabel


class WeeklyProjection(BaseModel):
    week_start: datetime.date
    week_end: datetime.date
    total_tss: float = Field(..., ge=0.0, description="Historical + planned + prospective TSS of the ISO week")
    start_ctl: float = Field(..., ge=0.0, description="CTL entering the week")
    projected_ctl: float = Field(..., ge=0.0, description="CTL projected at the end of the week")
    ramp_rate: float = Field(..., description="Week-over-week CTL change (%)")
    is_safe: bool = Field(..., description="ramp_rate <= safety ceiling")


class RecoveryPlan(BaseModel):
    days_to_recover: int = Field(..., ge=0)
    suggested_rest_days: int = Field(..., ge=0)
    next_hard_workout_date: datetime.date


class FatiguePrediction(BaseModel):
    before_activity: LoadSnapshot
    after_activity: LoadSnapshot
    weekly_projection: WeeklyProjection
    recovery_plan: RecoveryPlan
    recommendations: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class DailyLoad(BaseModel):
    date: datetime.date
    tss: float = Field(..., ge=0.0)
    activities: int = Field(..., ge=0)


class WeeklyLoadEstimation(BaseModel):
    """Projected load of a whole planned week."""

    week_start: datetime.date
    week_end: datetime.date
    total_tss: float = Field(..., ge=0.0)
    daily_breakdown: list[DailyLoad]
    projected_ctl: float = Field(..., ge=0.0)
    projected_atl: float = Field(..., ge=0.0)
    projected_tsb: float
    ramp_rate: float
    is_safe: bool
    recommendations: list[str] = Field(default_factory=list)
