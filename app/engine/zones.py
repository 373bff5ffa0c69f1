"""
Intensity zone classification.

Zones are derived after the fact from measured or estimated IF and are
used for retrospective analysis only.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from app.schemas.training_load import CompletedActivity
from app.schemas.zones import ZONE_BOUNDARIES, ZONE_ORDER, IntensityDistribution, IntensityZone

# Polarised-training guidance thresholds (percent of TSS).
MIN_ACTIVITIES_FOR_RECOMMENDATIONS = 5
LOW_INTENSITY_TARGET_PCT = 75.0
TEMPO_CEILING_PCT = 20.0
HIGH_INTENSITY_CEILING_PCT = 25.0

_LOW_ZONES = (IntensityZone.RECOVERY, IntensityZone.ENDURANCE)
_HIGH_ZONES = (IntensityZone.VO2MAX, IntensityZone.ANAEROBIC, IntensityZone.NEUROMUSCULAR)


def classify(intensity_factor: float) -> IntensityZone:
    """Map an IF to its zone.  Lower bounds are inclusive.

    Raises :class:`ValueError` for negative or NaN input.
    """
    if math.isnan(intensity_factor) or intensity_factor < 0:
        raise ValueError(f"Intensity factor must be a non-negative number, got {intensity_factor}")
    for zone in ZONE_ORDER:
        low, high = ZONE_BOUNDARIES[zone]
        if low <= intensity_factor < high:
            return zone
    return IntensityZone.NEUROMUSCULAR


def _recommendations(percentages: dict[IntensityZone, float]) -> list[str]:
    low = sum(percentages[z] for z in _LOW_ZONES)
    tempo = percentages[IntensityZone.TEMPO] + percentages[IntensityZone.THRESHOLD]
    high = sum(percentages[z] for z in _HIGH_ZONES)

    recommendations: list[str] = []
    if low < LOW_INTENSITY_TARGET_PCT:
        recommendations.append(f"Only {low:.0f}% of your load is easy (recovery/endurance). Aim for about "
                               f"{LOW_INTENSITY_TARGET_PCT:.0f}% to build aerobic base.")
    if tempo > TEMPO_CEILING_PCT:
        recommendations.append(f"{tempo:.0f}% of your load is in tempo/threshold. Polarise more: keep easy days "
                               f"easy and hard days hard.")
    if high > HIGH_INTENSITY_CEILING_PCT:
        recommendations.append(f"{high:.0f}% of your load is high intensity. Watch recovery between hard "
                               f"sessions.")
    if not recommendations:
        recommendations.append("Intensity distribution is well balanced.")
    return recommendations


def intensity_distribution(activities: Iterable[CompletedActivity]) -> IntensityDistribution:
    """TSS-weighted share per zone of completed activities.

    Activities without an IF or with zero TSS are counted but not
    distributed.  Recommendations are only given once enough activities
    with intensity are available.
    """
    zone_tss = {zone: 0.0 for zone in ZONE_ORDER}
    total_activities = 0
    with_intensity = 0
    for activity in activities:
        total_activities += 1
        if activity.intensity_factor is None or activity.tss <= 0:
            continue
        with_intensity += 1
        zone_tss[classify(activity.intensity_factor)] += activity.tss

    total_tss = sum(zone_tss.values())
    if total_tss > 0:
        percentages = {zone: round(tss / total_tss * 100.0, 1) for zone, tss in zone_tss.items()}
    else:
        percentages = {zone: 0.0 for zone in ZONE_ORDER}

    recommendations: list[str] = []
    if with_intensity >= MIN_ACTIVITIES_FOR_RECOMMENDATIONS:
        recommendations = _recommendations(percentages)

    return IntensityDistribution(percentages=percentages, total_tss=total_tss, total_activities=total_activities,
                                 activities_with_intensity=with_intensity, recommendations=recommendations, )
