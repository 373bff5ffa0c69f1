"""
Template-based estimation — the fallback.

Used when the activity carries neither structure nor a usable route.
Looks up a default duration, IF and TSS for the (category, location)
pair and shifts them by the athlete's current CTL:

    IF  *= clamp(1 + (CTL - 50) / 500, 0.9, 1.1)
    TSS *= clamp(1 + (CTL - 50) / 100, 0.5, 1.5)

The TSS stays the table value rather than being recomputed from duration
and IF; the template encodes an assumed average session.
"""

from pydantic import BaseModel, Field

from app.engine.strategies.base import EstimationStrategy, build_result
from app.schemas.estimation import EstimationResult, StrategyKind
from app.schemas.profile import ActivityCategory, ActivityLocation, EstimationContext

BASELINE_CTL = 50.0

BASE_SCORE = 50.0
CTL_SCORE_BONUS = 10.0
THRESHOLD_SCORE_BONUS = 5.0


class ActivityTemplate(BaseModel):
    """Typical session for one category/location pair."""

    duration_seconds: float = Field(..., gt=0)
    intensity_factor: float = Field(..., gt=0)
    tss: float = Field(..., ge=0)


TEMPLATES: dict[tuple[ActivityCategory, ActivityLocation], ActivityTemplate] = {
    (ActivityCategory.BIKE, ActivityLocation.OUTDOOR): ActivityTemplate(duration_seconds=3600, intensity_factor=0.72,
                                                                        tss=60),
    (ActivityCategory.BIKE, ActivityLocation.INDOOR): ActivityTemplate(duration_seconds=3600, intensity_factor=0.75,
                                                                       tss=60),
    (ActivityCategory.RUN, ActivityLocation.OUTDOOR): ActivityTemplate(duration_seconds=2700, intensity_factor=0.78,
                                                                       tss=55),
    (ActivityCategory.RUN, ActivityLocation.INDOOR): ActivityTemplate(duration_seconds=2400, intensity_factor=0.80,
                                                                      tss=50),
    (ActivityCategory.SWIM, ActivityLocation.INDOOR): ActivityTemplate(duration_seconds=2400, intensity_factor=0.70,
                                                                       tss=45),
    (ActivityCategory.SWIM, ActivityLocation.OUTDOOR): ActivityTemplate(duration_seconds=2700, intensity_factor=0.68,
                                                                        tss=50),
    (ActivityCategory.STRENGTH, ActivityLocation.INDOOR): ActivityTemplate(duration_seconds=2700,
                                                                           intensity_factor=0.62, tss=40),
    (ActivityCategory.STRENGTH, ActivityLocation.OUTDOOR): ActivityTemplate(duration_seconds=2700,
                                                                            intensity_factor=0.60, tss=40),
}


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def fitness_multipliers(current_ctl: float) -> tuple[float, float]:
    """(IF multiplier, TSS multiplier) for a given CTL."""
    if_multiplier = _clamp(1.0 + (current_ctl - BASELINE_CTL) / 500.0, 0.9, 1.1)
    tss_multiplier = _clamp(1.0 + (current_ctl - BASELINE_CTL) / 100.0, 0.5, 1.5)
    return if_multiplier, tss_multiplier


class TemplateStrategy(EstimationStrategy):
    """Estimate from per-category defaults.  Always applicable."""

    @property
    def kind(self) -> StrategyKind:
        return StrategyKind.TEMPLATE

    @property
    def priority(self) -> int:
        return 100

    def applies_to(self, context: EstimationContext) -> bool:
        return True

    def estimate(self, context: EstimationContext) -> EstimationResult:
        profile = context.profile
        activity = context.activity
        template = TEMPLATES[(activity.category, activity.location)]

        warnings = [f"No structure or route provided, using default estimates for "
                    f"{activity.location.value} {activity.category.value}.",
                    "Add workout structure or select a route for better accuracy.", ]
        factors = ["template-based", "activity-type-default"]
        score = BASE_SCORE

        if activity.route is not None and not activity.category.is_endurance:
            warnings.append(f"Routes are ignored for {activity.category.value} activities.")

        intensity_factor = template.intensity_factor
        tss = template.tss
        if profile.current_ctl is not None:
            if_multiplier, tss_multiplier = fitness_multipliers(profile.current_ctl)
            intensity_factor *= if_multiplier
            tss *= tss_multiplier
            factors.append("fitness-adjusted")
            score += CTL_SCORE_BONUS
        else:
            warnings.append("Current fitness (CTL) not available in profile, defaults not adjusted for fitness.")

        if profile.ftp_watts or profile.threshold_hr_bpm:
            score += THRESHOLD_SCORE_BONUS
        else:
            warnings.append("FTP and threshold heart rate not set in profile. "
                            "Add them for personalised estimates.")

        return build_result(StrategyKind.TEMPLATE, tss=tss, duration_seconds=template.duration_seconds,
                            intensity_factor=intensity_factor, confidence_score=score, warnings=warnings,
                            factors=factors, )
