"""
Secondary metrics derived from a primary estimate.

Calories are estimated from the best available tier:

1. **power** (bike / run with FTP)::

       kcal = avg_power * duration / 1000 / (0.24 * 4.184)

   i.e. mechanical work divided by ~24% gross efficiency.
2. **heart rate** (threshold HR set), Keytel et al.::

       kcal = (0.6309 HR + 0.1988 kg + 0.2017 age - 55.0969) * minutes / 4.184

3. **tss**: ``tss * 4``.

Each tier that could not be used is reported as a warning.
"""

from __future__ import annotations

from typing import Optional

from app.engine.defaults import (
    DEFAULT_AGE_YEARS,
    DEFAULT_RESTING_HR,
    DEFAULT_WEIGHT_KG,
    age_on,
    estimate_max_hr,
    typical_speed_mps,
)
from app.engine.zones import classify
from app.schemas.estimation import EstimationResult, MetricEstimations
from app.schemas.profile import ActivityCategory, EstimationContext, UserProfile
from app.schemas.zones import ZONE_ORDER, IntensityZone

GROSS_EFFICIENCY = 0.24
KJ_PER_KCAL = 4.184
KCAL_PER_TSS = 4.0
MOVING_TIME_FRACTION = 0.96
# IF at which the HR estimate reaches max HR.
MAX_HR_INTENSITY = 1.2

_POWER_CATEGORIES = (ActivityCategory.BIKE, ActivityCategory.RUN)


def _age(context: EstimationContext) -> Optional[int]:
    if context.profile.birth_date is None:
        return None
    return age_on(context.profile.birth_date, context.reference_date)


def average_power(intensity_factor: float, category: ActivityCategory, profile: UserProfile) -> Optional[float]:
    """``FTP x IF`` for power-measured categories."""
    if category not in _POWER_CATEGORIES or not profile.ftp_watts:
        return None
    return profile.ftp_watts * intensity_factor


def average_heart_rate(intensity_factor: float, profile: UserProfile, age: Optional[int]) -> Optional[float]:
    """Linear from resting HR (IF 0) to threshold HR (IF 1), then towards max HR."""
    threshold = profile.threshold_hr_bpm
    if not threshold:
        return None
    resting = profile.resting_hr_bpm or DEFAULT_RESTING_HR
    max_hr = profile.max_hr_bpm or estimate_max_hr(age).value
    max_hr = max(max_hr, threshold)

    if intensity_factor <= 1.0:
        return resting + intensity_factor * (threshold - resting)
    fraction = min((intensity_factor - 1.0) / (MAX_HR_INTENSITY - 1.0), 1.0)
    return threshold + fraction * (max_hr - threshold)


def keytel_calories(avg_hr: float, weight_kg: float, age: float, duration_seconds: float) -> float:
    per_minute = (0.6309 * avg_hr + 0.1988 * weight_kg + 0.2017 * age - 55.0969) / KJ_PER_KCAL
    return max(per_minute * duration_seconds / 60.0, 0.0)


def _calories(result: EstimationResult, context: EstimationContext, avg_power: Optional[float],
              avg_hr: Optional[float], warnings: list[str], ) -> tuple[float, str]:
    if avg_power is not None:
        work_kj = avg_power * result.duration_seconds / 1000.0
        return work_kj / (GROSS_EFFICIENCY * KJ_PER_KCAL), "power"

    if context.activity.category in _POWER_CATEGORIES:
        warnings.append("FTP not set, calories not estimated from power")

    if avg_hr is not None:
        profile = context.profile
        age = _age(context)
        if age is None:
            warnings.append(f"Birth date not set, using age {DEFAULT_AGE_YEARS} for calorie estimate")
            age = DEFAULT_AGE_YEARS
        weight = profile.weight_kg
        if weight is None:
            warnings.append(f"Weight not set, using {DEFAULT_WEIGHT_KG:.0f} kg for calorie estimate")
            weight = DEFAULT_WEIGHT_KG
        return keytel_calories(avg_hr, weight, age, result.duration_seconds), "heart_rate"

    warnings.append("Threshold heart rate not set, calories estimated from TSS")
    return result.tss * KCAL_PER_TSS, "tss"


def _distance(result: EstimationResult, context: EstimationContext) -> Optional[float]:
    activity = context.activity
    if not activity.category.is_endurance:
        return None
    if activity.route is not None:
        return activity.route.distance_meters
    if result.estimated_distance_meters is not None:
        return result.estimated_distance_meters
    return typical_speed_mps(activity.category, result.intensity_factor) * result.duration_seconds


def zone_seconds(result: EstimationResult) -> dict[IntensityZone, float]:
    """Seconds per zone, from the step breakdown when there is one."""
    seconds = {zone: 0.0 for zone in ZONE_ORDER}
    if result.step_breakdown:
        for step in result.step_breakdown:
            seconds[classify(step.intensity_factor)] += step.duration_seconds
    else:
        seconds[classify(result.intensity_factor)] = result.duration_seconds
    return seconds


def estimate_metrics(result: EstimationResult, context: EstimationContext) -> MetricEstimations:
    """Derive calories, distance, averages and zone time from *result*."""
    profile = context.profile
    activity = context.activity
    warnings: list[str] = []

    avg_power = average_power(result.intensity_factor, activity.category, profile)
    avg_hr = average_heart_rate(result.intensity_factor, profile, _age(context))
    calories, method = _calories(result, context, avg_power, avg_hr, warnings)

    distance = _distance(result, context)
    avg_speed = distance / result.duration_seconds if distance is not None else None
    elevation = None
    if activity.route is not None and activity.category.is_endurance:
        elevation = activity.route.elevation_gain_meters

    return MetricEstimations(calories=round(calories), calorie_method=method,
                             distance_meters=round(distance) if distance is not None else None,
                             avg_power_watts=round(avg_power) if avg_power is not None else None,
                             avg_heart_rate_bpm=round(avg_hr) if avg_hr is not None else None,
                             avg_speed_mps=round(avg_speed, 2) if avg_speed is not None else None,
                             moving_time_seconds=round(result.duration_seconds * MOVING_TIME_FRACTION),
                             elevation_gain_meters=elevation, zone_seconds=zone_seconds(result),
                             warnings=warnings, )
