"""
Structure-based estimation — highest fidelity.

Each executed step gets a duration and an IF-equivalent; the workout IF
is the fourth-power duration-weighted mean of the step IFs (the same
weighting normalized power uses, so hard intervals count for more than
their share of time)::

    IF  = (sum(d_i * IF_i^4) / sum(d_i)) ^ 1/4
    TSS = sum(d_i) / 3600 * IF^2 * 100

Step duration resolution:

- ``time``          — explicit seconds
- ``distance``      — metres / speed (pace target, athlete thresholds, typical speed)
- ``repetitions``   — count x :data:`SECONDS_PER_REP`
- ``untilFinished`` — :data:`UNTIL_FINISHED_SECONDS`, with a warning
"""

from __future__ import annotations

from app.engine.defaults import DEFAULT_WEIGHT_KG, typical_speed_mps
from app.engine.physics import flat_speed_from_power
from app.engine.strategies.base import EstimationStrategy, build_result
from app.engine.targets import TargetContext, pace_speed_mps, resolve_step_intensity
from app.schemas.estimation import EstimationResult, StepEstimate, StrategyKind
from app.schemas.profile import ActivityCategory, EstimationContext, PlanStep

SECONDS_PER_REP = 5.0
UNTIL_FINISHED_SECONDS = 300.0
# Distance steps in a strength session have no meaningful speed; walk it.
_STRENGTH_DISTANCE_SPEED_MPS = 1.4

SCORE_WITH_FTP = 95.0
SCORE_WITH_THRESHOLD_HR = 90.0
SCORE_WITHOUT_THRESHOLDS = 75.0


def _step_speed(step: PlanStep, intensity_factor: float, ctx: TargetContext) -> float:
    """Speed for a distance-defined step.

    A pace target wins.  Otherwise the athlete's own thresholds set the
    speed (power model for bikes, threshold pace for run and swim), so a
    distance step at a given %FTP is ridden faster by a stronger rider.
    """
    pace_speed = pace_speed_mps(step)
    if pace_speed:
        return pace_speed
    profile = ctx.profile
    if ctx.category is ActivityCategory.BIKE and profile.ftp_watts:
        return flat_speed_from_power(profile.ftp_watts * intensity_factor, profile.weight_kg or DEFAULT_WEIGHT_KG)
    if ctx.category in (ActivityCategory.RUN, ActivityCategory.SWIM) and profile.threshold_pace_s_per_km:
        return intensity_factor * 1000.0 / profile.threshold_pace_s_per_km
    speed = typical_speed_mps(ctx.category, intensity_factor)
    return speed if speed > 0 else _STRENGTH_DISTANCE_SPEED_MPS


def _step_duration(step: PlanStep, intensity_factor: float, ctx: TargetContext, warnings: list[str], ) -> float:
    duration = step.duration
    if duration.type == "time":
        return duration.seconds
    if duration.type == "distance":
        return duration.meters / _step_speed(step, intensity_factor, ctx)
    if duration.type == "repetitions":
        return duration.count * SECONDS_PER_REP
    warnings.append(f"Step '{step.name}' has no fixed length, assuming {UNTIL_FINISHED_SECONDS / 60:.0f} minutes")
    return UNTIL_FINISHED_SECONDS


class StructureStrategy(EstimationStrategy):
    """Estimate from the step list of a structured workout."""

    @property
    def kind(self) -> StrategyKind:
        return StrategyKind.STRUCTURE

    @property
    def priority(self) -> int:
        return 0

    def applies_to(self, context: EstimationContext) -> bool:
        return context.activity.has_structure

    def estimate(self, context: EstimationContext) -> EstimationResult:
        profile = context.profile
        category = context.activity.category
        target_ctx = TargetContext(profile=profile, category=category, reference_date=context.reference_date)

        warnings: list[str] = []
        factors = ["structure-based"]
        breakdown: list[StepEstimate] = []

        total_duration = 0.0
        weighted_fourth = 0.0
        for step in context.activity.structure.flattened_steps():
            resolved = resolve_step_intensity(step, target_ctx)
            if resolved.assumed and resolved.note:
                warnings.append(resolved.note)
            step_duration = _step_duration(step, resolved.intensity_factor, target_ctx, warnings)

            total_duration += step_duration
            weighted_fourth += step_duration * resolved.intensity_factor ** 4
            breakdown.append(StepEstimate(name=step.name, duration_seconds=step_duration,
                                          intensity_factor=resolved.intensity_factor, ))

        avg_if = (weighted_fourth / total_duration) ** 0.25
        tss = total_duration / 3600.0 * avg_if ** 2 * 100.0

        if profile.ftp_watts:
            factors.append("user-ftp")
            score = SCORE_WITH_FTP
        elif profile.threshold_hr_bpm:
            factors.append("user-threshold-hr")
            score = SCORE_WITH_THRESHOLD_HR
        else:
            score = SCORE_WITHOUT_THRESHOLDS
            warnings.append("FTP and threshold heart rate not set, intensity targets use estimated thresholds. "
                            "Add them to your profile for better accuracy.")

        return build_result(StrategyKind.STRUCTURE, tss=tss, duration_seconds=total_duration, intensity_factor=avg_if,
                            confidence_score=score, warnings=warnings, factors=factors, step_breakdown=breakdown, )
