"""
HTTP request schemas.

Every request carries its own profile and history snapshot; the API keeps
no state between calls.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.estimation import EstimationResult
from app.schemas.profile import Activity, EstimationContext, UserProfile
from app.schemas.training_load import CompletedActivity, PlannedActivity


# ---------------------------------------------------------------------------
# Estimation
# ---------------------------------------------------------------------------

class EstimateRequest(BaseModel):
    profile: UserProfile = Field(default_factory=UserProfile)
    activity: Activity
    reference_date: Optional[datetime.date] = Field(None, description="Defaults to today; used for age")
    scheduled_date: Optional[datetime.date] = None

    def to_context(self) -> EstimationContext:
        return EstimationContext(profile=self.profile, activity=self.activity,
                                 reference_date=self.reference_date or datetime.date.today(),
                                 scheduled_date=self.scheduled_date, )


class HistoryMixin(BaseModel):
    """Completed history replayed into a CTL / ATL series."""

    history: list[CompletedActivity] = Field(default_factory=list)
    initial_ctl: float = Field(0.0, ge=0.0, description="CTL before the earliest history entry")
    initial_atl: float = Field(0.0, ge=0.0, description="ATL before the earliest history entry")


class CompleteEstimateRequest(EstimateRequest, HistoryMixin):
    planned: list[PlannedActivity] = Field(default_factory=list,
                                           description="Other activities planned in the same week")


class BatchEstimateRequest(BaseModel):
    profile: UserProfile = Field(default_factory=UserProfile)
    plans: dict[str, Activity] = Field(..., description="Activity plans keyed by plan id")
    reference_date: Optional[datetime.date] = None


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

class TrainingLoadRequest(BaseModel):
    activities: list[CompletedActivity] = Field(default_factory=list)
    start: datetime.date
    end: datetime.date
    initial_ctl: float = Field(0.0, ge=0.0)
    initial_atl: float = Field(0.0, ge=0.0)


class ComplianceRequest(BaseModel):
    planned: list[PlannedActivity] = Field(default_factory=list)
    completed: list[CompletedActivity] = Field(default_factory=list)


class FatigueRequest(HistoryMixin):
    estimation: EstimationResult
    scheduled_date: datetime.date
    planned: list[PlannedActivity] = Field(default_factory=list)


class WeeklyLoadRequest(HistoryMixin):
    week_start: datetime.date
    planned: list[PlannedActivity] = Field(default_factory=list)


class IntensityDistributionRequest(BaseModel):
    activities: list[CompletedActivity] = Field(default_factory=list)
