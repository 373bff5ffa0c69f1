"""
Physiological defaults used when the profile lacks measured values.

These are conservative starting points; they keep estimates usable
until the athlete records a test, and every use is reported back to the
caller as a warning.
"""

from __future__ import annotations

import datetime
from typing import Optional

from pydantic import BaseModel

from app.schemas.estimation import Confidence
from app.schemas.profile import ActivityCategory

FTP_WATTS_PER_KG = 2.5
FALLBACK_FTP_WATTS = 200.0
FALLBACK_MAX_HR = 185
LTHR_FRACTION_OF_MAX = 0.85
DEFAULT_RESTING_HR = 60
DEFAULT_WEIGHT_KG = 70.0
DEFAULT_AGE_YEARS = 35

# Threshold pace (seconds per km) for an intermediate athlete.
_THRESHOLD_PACE_BY_CATEGORY: dict[ActivityCategory, float] = {
    ActivityCategory.RUN: 300.0,  # 5:00 /km
    ActivityCategory.BIKE: 120.0,  # 30 km/h
    ActivityCategory.SWIM: 1000.0,  # 1:40 /100m
    ActivityCategory.STRENGTH: 300.0,
}


class DefaultEstimate(BaseModel):
    value: float
    confidence: Confidence
    note: str


def age_on(birth_date: datetime.date, day: datetime.date) -> int:
    """Age in whole years on *day*."""
    years = day.year - birth_date.year
    if (day.month, day.day) < (birth_date.month, birth_date.day):
        years -= 1
    return max(0, years)


def estimate_ftp_from_weight(weight_kg: Optional[float]) -> DefaultEstimate:
    if weight_kg:
        value = round(weight_kg * FTP_WATTS_PER_KG)
        return DefaultEstimate(value=value, confidence=Confidence.LOW,
                               note=f"FTP not set, estimated {value} W from weight ({FTP_WATTS_PER_KG} W/kg)")
    return DefaultEstimate(value=FALLBACK_FTP_WATTS, confidence=Confidence.LOW,
                           note=f"FTP not set, using default {FALLBACK_FTP_WATTS:.0f} W")


def estimate_max_hr(age: Optional[int]) -> DefaultEstimate:
    """220 - age; a rough population estimate."""
    if age is not None:
        return DefaultEstimate(value=220 - age, confidence=Confidence.LOW,
                               note=f"Max HR estimated from age ({age}) as 220 - age")
    return DefaultEstimate(value=FALLBACK_MAX_HR, confidence=Confidence.LOW,
                           note=f"Max HR unknown, using default {FALLBACK_MAX_HR} bpm")


def estimate_lthr(max_hr: float) -> DefaultEstimate:
    value = round(max_hr * LTHR_FRACTION_OF_MAX)
    return DefaultEstimate(value=value, confidence=Confidence.LOW,
                           note=f"Threshold HR not set, estimated {value} bpm "
                                f"({LTHR_FRACTION_OF_MAX:.0%} of max HR)")


def estimate_threshold_pace(category: ActivityCategory) -> DefaultEstimate:
    value = _THRESHOLD_PACE_BY_CATEGORY[category]
    minutes, seconds = divmod(int(value), 60)
    return DefaultEstimate(value=value, confidence=Confidence.LOW,
                           note=f"Threshold pace not set, using default {minutes}:{seconds:02d} /km")


# ======================================================================
# Typical speeds
# ======================================================================

# m/s by effort level (easy / moderate / hard).
_TYPICAL_SPEEDS: dict[ActivityCategory, tuple[float, float, float]] = {
    ActivityCategory.RUN: (3.0, 3.5, 4.2),  # 5:33, 4:45, 4:00 /km
    ActivityCategory.BIKE: (7.0, 8.5, 10.0),  # 25, 30, 36 km/h
    ActivityCategory.SWIM: (1.0, 1.2, 1.4),  # 1:40, 1:25, 1:12 /100m
    ActivityCategory.STRENGTH: (0.0, 0.0, 0.0),
}


def effort_level(intensity_factor: float) -> str:
    """Bucket an IF into ``easy`` / ``moderate`` / ``hard``."""
    if intensity_factor < 0.70:
        return "easy"
    if intensity_factor < 0.85:
        return "moderate"
    return "hard"


def typical_speed_mps(category: ActivityCategory, intensity_factor: float) -> float:
    """Typical speed for a category at the effort implied by *intensity_factor*."""
    easy, moderate, hard = _TYPICAL_SPEEDS[category]
    return {"easy": easy, "moderate": moderate, "hard": hard}[effort_level(intensity_factor)]
