"""
Training-load time series schemas.

A :class:`TrainingLoadPoint` is one day's fitness / fatigue / form
snapshot.  Points are never stored on their own: they are always
recomputed from the chronological daily TSS that produced them.

Form labels (ordered by TSB, boundaries belong to the lower bucket):

- ``fresh``         — TSB > 10
- ``optimal``       — 5 < TSB <= 10
- ``neutral``       — -10 < TSB <= 5
- ``tired``         — -20 < TSB <= -10
- ``overreaching``  — TSB <= -20
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FormLabel(str, Enum):
    FRESH = "fresh"
    OPTIMAL = "optimal"
    NEUTRAL = "neutral"
    TIRED = "tired"
    OVERREACHING = "overreaching"


class DailyTSS(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime.date
    tss: float = Field(..., ge=0.0, allow_inf_nan=False)


class CompletedActivity(BaseModel):
    """A measured activity as persisted upstream."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    date: datetime.date
    tss: float = Field(..., ge=0.0, allow_inf_nan=False)
    intensity_factor: Optional[float] = Field(None, ge=0.0, description="Decimal IF (1.0 = threshold)")


class PlannedActivity(BaseModel):
    """A scheduled activity with its (personalised) estimated TSS."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    date: datetime.date
    estimated_tss: float = Field(..., ge=0.0, allow_inf_nan=False)


class TrainingLoadPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime.date
    tss: float = Field(..., ge=0.0, description="Total TSS of the day")
    ctl: float = Field(..., ge=0.0, description="Chronic training load (fitness)")
    atl: float = Field(..., ge=0.0, description="Acute training load (fatigue)")
    tsb: float = Field(..., description="Training stress balance = CTL - ATL (form)")
    form: FormLabel


class TrainingLoadSeries(BaseModel):
    """Chronological daily points plus the state that preceded them."""

    model_config = ConfigDict(frozen=True)

    initial_ctl: float = Field(0.0, ge=0.0)
    initial_atl: float = Field(0.0, ge=0.0)
    points: list[TrainingLoadPoint] = Field(default_factory=list)

    @property
    def first_date(self) -> Optional[datetime.date]:
        return self.points[0].date if self.points else None

    @property
    def last_date(self) -> Optional[datetime.date]:
        return self.points[-1].date if self.points else None

    def last_on_or_before(self, day: datetime.date) -> Optional[TrainingLoadPoint]:
        """Return the latest point dated on or before *day*, if any."""
        found = None
        for point in self.points:
            if point.date > day:
                break
            found = point
        return found

    def tss_on(self, day: datetime.date) -> float:
        for point in self.points:
            if point.date == day:
                return point.tss
        return 0.0


class PeriodizationTemplate(BaseModel):
    """Planned CTL trajectory from a starting value to a target by a date."""

    starting_ctl: float = Field(..., ge=0.0)
    target_ctl: float = Field(..., ge=0.0)
    start_date: datetime.date
    target_date: datetime.date
    weekly_ramp_pct: float = Field(5.0, gt=0.0, le=20.0, description="Maximum weekly CTL change (%)")


class WeeklyLoadSummary(BaseModel):
    """Training load aggregated over one ISO week."""

    iso_year: int
    iso_week: int
    week_start: datetime.date
    week_end: datetime.date
    days: int = Field(..., ge=1, le=7, description="Days of the week covered by the series")
    total_tss: float = Field(..., ge=0.0)
    start_ctl: float = Field(..., ge=0.0, description="CTL entering the week")
    end_ctl: float = Field(..., ge=0.0)
    end_atl: float = Field(..., ge=0.0)
    end_tsb: float
    ramp_rate: float = Field(..., description="CTL change across the week (%)")


class ComplianceStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    POOR = "poor"

    @property
    def severity(self) -> int:
        return _COMPLIANCE_SEVERITY[self]


_COMPLIANCE_SEVERITY = {ComplianceStatus.GOOD: 0, ComplianceStatus.WARNING: 1, ComplianceStatus.POOR: 2}


class WeekCompliance(BaseModel):
    """Planned vs completed comparison for one week."""

    week_start: Optional[datetime.date] = None
    week_end: Optional[datetime.date] = None
    planned_tss: float = Field(..., ge=0.0)
    completed_tss: float = Field(..., ge=0.0)
    tss_percentage: float = Field(..., ge=0.0)
    planned_activities: int = Field(..., ge=0)
    completed_activities: int = Field(..., ge=0)
    activity_percentage: float = Field(..., ge=0.0)
    tss_status: ComplianceStatus
    activity_status: ComplianceStatus
    status: ComplianceStatus = Field(..., description="Worse of the two per-metric statuses")
