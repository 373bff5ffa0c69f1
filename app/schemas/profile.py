"""
Profile and activity schemas: the read-only inputs of every estimation.

An :class:`EstimationContext` is an immutable snapshot combining:

- the athlete's physiological profile (all fields optional),
- the activity to estimate: category + location and, depending on how
  rich the plan is, a step structure, a route, or nothing (template only),
- the reference date used for age-dependent formulas.

Absent profile fields never fail validation; they only degrade the
confidence of the estimate downstream.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Self, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ActivityCategory(str, Enum):
    BIKE = "bike"
    RUN = "run"
    SWIM = "swim"
    STRENGTH = "strength"

    @property
    def is_endurance(self) -> bool:
        return self is not ActivityCategory.STRENGTH


class ActivityLocation(str, Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"


# Plausible pace range (seconds per km), from a 1:00 /km sprint to a 100:00 /km swim drill.
MIN_PACE_S_PER_KM = 60.0
MAX_PACE_S_PER_KM = 6000.0


class UserProfile(BaseModel):
    """Physiological profile snapshot supplied by the caller."""

    model_config = ConfigDict(frozen=True)

    ftp_watts: Optional[float] = Field(None, gt=0, le=2000, description="Functional threshold power (W)")
    threshold_hr_bpm: Optional[int] = Field(None, ge=60, le=230, description="Lactate threshold heart rate")
    max_hr_bpm: Optional[int] = Field(None, ge=80, le=240, description="Maximum heart rate")
    resting_hr_bpm: Optional[int] = Field(None, ge=25, le=120, description="Resting heart rate")
    weight_kg: Optional[float] = Field(None, gt=20, le=300, description="Body weight (kg)")
    birth_date: Optional[datetime.date] = None
    current_ctl: Optional[float] = Field(None, ge=0, le=500, allow_inf_nan=False,
                                         description="Current chronic training load")
    threshold_pace_s_per_km: Optional[float] = Field(None, ge=MIN_PACE_S_PER_KM, le=MAX_PACE_S_PER_KM,
                                                     allow_inf_nan=False, description="Threshold pace (seconds per km)")


# ======================================================================
# Intensity targets: closed set of 8 kinds
# ======================================================================


class TargetKind(str, Enum):
    PERCENT_FTP = "%FTP"
    PERCENT_MAX_HR = "%MaxHR"
    PERCENT_THRESHOLD_HR = "%ThresholdHR"
    WATTS = "watts"
    BPM = "bpm"
    PACE = "pace"
    CADENCE = "cadence"
    RPE = "RPE"


class IntensityTarget(BaseModel):
    """A single intensity target on a step.

    ``value`` units depend on ``kind``: percent for the ``%`` kinds,
    watts, beats per minute, seconds per km for ``pace``, rpm (bike) or
    steps per minute (run) for ``cadence``, and 1-10 for ``RPE``.
    """

    model_config = ConfigDict(frozen=True)

    kind: TargetKind
    value: float = Field(..., gt=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def validate_value_range(self) -> Self:
        """Reject values outside the plausible range of their kind."""
        low, high = TARGET_VALUE_RANGES[self.kind]
        if not low <= self.value <= high:
            raise ValueError(f"{self.kind.value} target must be between {low:g} and {high:g}, got {self.value:g}")
        return self


# Inclusive (min, max) of ``IntensityTarget.value`` per kind.
TARGET_VALUE_RANGES: dict[TargetKind, tuple[float, float]] = {
    TargetKind.PERCENT_FTP: (1.0, 400.0),
    TargetKind.PERCENT_MAX_HR: (1.0, 400.0),
    TargetKind.PERCENT_THRESHOLD_HR: (1.0, 400.0),
    TargetKind.WATTS: (1.0, 3000.0),
    TargetKind.BPM: (30.0, 250.0),
    TargetKind.PACE: (MIN_PACE_S_PER_KM, MAX_PACE_S_PER_KM),
    TargetKind.CADENCE: (1.0, 250.0),
    TargetKind.RPE: (1.0, 10.0),
}


# ======================================================================
# Step durations, tagged by ``type``
# ======================================================================


class TimeDuration(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["time"] = "time"
    seconds: float = Field(..., gt=0, le=86_400, allow_inf_nan=False)


class DistanceDuration(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["distance"] = "distance"
    meters: float = Field(..., gt=0, le=1_000_000, allow_inf_nan=False)


class RepetitionsDuration(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["repetitions"] = "repetitions"
    count: int = Field(..., ge=1)


class UntilFinishedDuration(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["untilFinished"] = "untilFinished"


StepDuration = Annotated[
    Union[TimeDuration, DistanceDuration, RepetitionsDuration, UntilFinishedDuration],
    Field(discriminator="type"),
]


class PlanStep(BaseModel):
    """One step of a structured workout."""

    model_config = ConfigDict(frozen=True)

    name: str = "Step"
    duration: StepDuration
    targets: list[IntensityTarget] = Field(default_factory=list, max_length=2)


class Interval(BaseModel):
    """A block of steps repeated ``repetitions`` times."""

    model_config = ConfigDict(frozen=True)

    name: str = "Interval"
    repetitions: int = Field(1, ge=1, le=50)
    steps: list[PlanStep] = Field(..., min_length=1)


class ActivityStructure(BaseModel):
    model_config = ConfigDict(frozen=True)

    intervals: list[Interval] = Field(default_factory=list)

    def flattened_steps(self) -> list[PlanStep]:
        """Expand repetitions into the ordered list of executed steps."""
        steps: list[PlanStep] = []
        for interval in self.intervals:
            for _ in range(interval.repetitions):
                steps.extend(interval.steps)
        return steps

    @property
    def is_empty(self) -> bool:
        return not any(interval.steps for interval in self.intervals)


# ======================================================================
# Route
# ======================================================================


class Surface(str, Enum):
    ROAD = "road"
    GRAVEL = "gravel"
    TRAIL = "trail"
    TRACK = "track"
    WATER = "water"


class Terrain(str, Enum):
    FLAT = "flat"
    ROLLING = "rolling"
    HILLY = "hilly"
    MOUNTAINOUS = "mountainous"


class Route(BaseModel):
    model_config = ConfigDict(frozen=True)

    distance_meters: float = Field(..., ge=1, le=1_000_000, allow_inf_nan=False)
    elevation_gain_meters: float = Field(0.0, ge=0, le=100_000, allow_inf_nan=False)
    elevation_loss_meters: Optional[float] = Field(None, ge=0, le=100_000, allow_inf_nan=False)
    surface: Optional[Surface] = None
    terrain: Optional[Terrain] = Field(None, description="Optional hint; can only make the route harder")


# ======================================================================
# Activity + context
# ======================================================================


class Activity(BaseModel):
    """Activity definition: category/location tag plus optional detail."""

    model_config = ConfigDict(frozen=True)

    category: ActivityCategory
    location: ActivityLocation = ActivityLocation.OUTDOOR
    structure: Optional[ActivityStructure] = None
    route: Optional[Route] = None

    @property
    def has_structure(self) -> bool:
        return self.structure is not None and not self.structure.is_empty

    @property
    def has_usable_route(self) -> bool:
        return self.route is not None and self.category.is_endurance


class EstimationContext(BaseModel):
    """Immutable snapshot for one estimation call."""

    model_config = ConfigDict(frozen=True)

    profile: UserProfile = Field(default_factory=UserProfile)
    activity: Activity
    reference_date: datetime.date = Field(default_factory=datetime.date.today,
                                          description="Day used for age-dependent formulas")
    scheduled_date: Optional[datetime.date] = None
