"""
Intensity target conversion.

A step target can be expressed in eight different ways.  Each kind has
exactly one conversion function turning it into an IF-equivalent
(decimal, 1.0 = threshold effort):

    %FTP          value / 100
    %ThresholdHR  value / 100
    %MaxHR        (value / 100) * max HR / threshold HR
    watts         value / FTP
    bpm           value / threshold HR
    pace          threshold pace / pace          (seconds per km)
    cadence       category lookup                (rpm / spm)
    RPE           interpolated lookup            (1-10)

When a conversion needs a profile value the athlete has not set, a
default from :mod:`app.engine.defaults` is substituted and the result is
flagged ``assumed`` with a human-readable note.
"""

from __future__ import annotations

import datetime
from typing import Callable, Optional

from pydantic import BaseModel

from app.engine.defaults import (
    LTHR_FRACTION_OF_MAX,
    age_on,
    estimate_ftp_from_weight,
    estimate_lthr,
    estimate_max_hr,
    estimate_threshold_pace,
)
from app.schemas.profile import ActivityCategory, IntensityTarget, PlanStep, TargetKind, UserProfile

UNTARGETED_STEP_IF = 0.60

# RPE -> IF anchors; fractional RPE values are interpolated.
_RPE_TABLE: list[tuple[float, float]] = [(1, 0.45), (2, 0.55), (3, 0.60), (4, 0.68), (5, 0.75), (6, 0.82),
                                         (7, 0.88), (8, 0.95), (9, 1.05), (10, 1.20), ]

# Cadence -> IF anchors per category (rpm for bike, spm for run, strokes/min for swim).
_CADENCE_TABLES: dict[ActivityCategory, list[tuple[float, float]]] = {
    ActivityCategory.BIKE: [(60, 0.55), (75, 0.65), (85, 0.75), (95, 0.85), (105, 0.95), (120, 1.10)],
    ActivityCategory.RUN: [(140, 0.60), (160, 0.70), (170, 0.80), (180, 0.90), (190, 1.00), (200, 1.10)],
    ActivityCategory.SWIM: [(20, 0.60), (30, 0.75), (40, 0.90), (50, 1.00)],
    ActivityCategory.STRENGTH: [(10, 0.60), (30, 0.70), (60, 0.80)],
}


class ResolvedIntensity(BaseModel):
    """IF-equivalent of a target and whether a default was needed."""

    intensity_factor: float
    assumed: bool = False
    note: Optional[str] = None


class TargetContext(BaseModel):
    """Profile data the converters may read."""

    profile: UserProfile
    category: ActivityCategory
    reference_date: datetime.date

    @property
    def age(self) -> Optional[int]:
        if self.profile.birth_date is None:
            return None
        return age_on(self.profile.birth_date, self.reference_date)


def _interpolate(table: list[tuple[float, float]], x: float) -> float:
    """Piecewise-linear lookup, clamped to the table ends."""
    if x <= table[0][0]:
        return table[0][1]
    for (x0, y0), (x1, y1) in zip(table, table[1:]):
        if x <= x1:
            return y0 + (y1 - y0) * (x - x0) / (x1 - x0)
    return table[-1][1]


# ======================================================================
# Per-kind converters
# ======================================================================


def _from_percent_ftp(value: float, ctx: TargetContext) -> ResolvedIntensity:
    return ResolvedIntensity(intensity_factor=value / 100.0)


def _from_percent_threshold_hr(value: float, ctx: TargetContext) -> ResolvedIntensity:
    return ResolvedIntensity(intensity_factor=value / 100.0)


def _from_percent_max_hr(value: float, ctx: TargetContext) -> ResolvedIntensity:
    profile = ctx.profile
    if profile.max_hr_bpm and profile.threshold_hr_bpm:
        return ResolvedIntensity(intensity_factor=value / 100.0 * profile.max_hr_bpm / profile.threshold_hr_bpm)

    if profile.threshold_hr_bpm:
        missing = "Max HR not set"
    elif profile.max_hr_bpm:
        missing = "Threshold HR not set"
    else:
        missing = "Max and threshold HR not set"
    return ResolvedIntensity(intensity_factor=value / 100.0 / LTHR_FRACTION_OF_MAX, assumed=True,
                             note=f"{missing}, assuming threshold HR is {LTHR_FRACTION_OF_MAX:.0%} of max HR")


def _from_watts(value: float, ctx: TargetContext) -> ResolvedIntensity:
    if ctx.profile.ftp_watts:
        return ResolvedIntensity(intensity_factor=value / ctx.profile.ftp_watts)
    ftp = estimate_ftp_from_weight(ctx.profile.weight_kg)
    return ResolvedIntensity(intensity_factor=value / ftp.value, assumed=True, note=ftp.note)


def _from_bpm(value: float, ctx: TargetContext) -> ResolvedIntensity:
    if ctx.profile.threshold_hr_bpm:
        return ResolvedIntensity(intensity_factor=value / ctx.profile.threshold_hr_bpm)
    max_hr = ctx.profile.max_hr_bpm or estimate_max_hr(ctx.age).value
    lthr = estimate_lthr(max_hr)
    return ResolvedIntensity(intensity_factor=value / lthr.value, assumed=True, note=lthr.note)


def _from_pace(value: float, ctx: TargetContext) -> ResolvedIntensity:
    if ctx.profile.threshold_pace_s_per_km:
        return ResolvedIntensity(intensity_factor=ctx.profile.threshold_pace_s_per_km / value)
    pace = estimate_threshold_pace(ctx.category)
    return ResolvedIntensity(intensity_factor=pace.value / value, assumed=True, note=pace.note)


def _from_cadence(value: float, ctx: TargetContext) -> ResolvedIntensity:
    return ResolvedIntensity(intensity_factor=_interpolate(_CADENCE_TABLES[ctx.category], value))


def _from_rpe(value: float, ctx: TargetContext) -> ResolvedIntensity:
    return ResolvedIntensity(intensity_factor=_interpolate(_RPE_TABLE, value))


_CONVERTERS: dict[TargetKind, Callable[[float, TargetContext], ResolvedIntensity]] = {
    TargetKind.PERCENT_FTP: _from_percent_ftp,
    TargetKind.PERCENT_THRESHOLD_HR: _from_percent_threshold_hr,
    TargetKind.PERCENT_MAX_HR: _from_percent_max_hr,
    TargetKind.WATTS: _from_watts,
    TargetKind.BPM: _from_bpm,
    TargetKind.PACE: _from_pace,
    TargetKind.CADENCE: _from_cadence,
    TargetKind.RPE: _from_rpe,
}


def target_to_intensity_factor(target: IntensityTarget, ctx: TargetContext) -> ResolvedIntensity:
    """Convert a single target into its IF-equivalent."""
    return _CONVERTERS[target.kind](target.value, ctx)


def resolve_step_intensity(step: PlanStep, ctx: TargetContext) -> ResolvedIntensity:
    """Pick the IF of a step from its targets.

    The first target that can be resolved from the athlete's own values
    wins; if every target needs a default, the primary (first) one is
    used.  Steps without targets get a light aerobic effort.
    """
    if not step.targets:
        return ResolvedIntensity(intensity_factor=UNTARGETED_STEP_IF)

    resolved = [target_to_intensity_factor(t, ctx) for t in step.targets]
    for candidate in resolved:
        if not candidate.assumed:
            return candidate
    return resolved[0]


def pace_speed_mps(step: PlanStep) -> Optional[float]:
    """Speed implied by a pace target on the step, if any."""
    for target in step.targets:
        if target.kind is TargetKind.PACE:
            return 1000.0 / target.value
    return None
