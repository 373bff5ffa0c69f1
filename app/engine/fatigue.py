"""
Fatigue prediction.

Projects the effect of one prospective activity on the athlete's load
state and on the ISO week that contains it:

- **before**: the last known point on or before the scheduled date,
- **after**: the EMA replayed with the prospective TSS added to the
  scheduled day (days between the last known point and the scheduled
  date decay with zero TSS),
- **weekly projection**: historical + planned + prospective TSS of the
  ISO week, replayed from the state entering Monday to Sunday; the
  week's CTL ramp is compared with a safety ceiling.

Recommendations and warnings come from a fixed, ordered rule set so that
identical inputs always produce identical lists.
"""

from __future__ import annotations

import datetime
import math
from collections import defaultdict
from collections.abc import Iterable, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from app.engine.training_load import (
    DEFAULT_CONFIG as DEFAULT_LOAD_CONFIG,
    TrainingLoadConfig,
    ema_step,
    form_label,
    ramp_rate_pct,
    state_at,
    week_bounds,
)
from app.schemas.estimation import EstimationResult
from app.schemas.fatigue import (
    DailyLoad,
    FatiguePrediction,
    LoadSnapshot,
    RecoveryPlan,
    WeeklyLoadEstimation,
    WeeklyProjection,
)
from app.schemas.training_load import FormLabel, PlannedActivity, TrainingLoadSeries

_ONE_DAY = datetime.timedelta(days=1)

# ======================================================================
# Configuration
# ======================================================================


class FatigueConfig(BaseModel):
    """Thresholds of the fatigue rule set."""

    ramp_rate_ceiling_pct: float = Field(8.0, gt=0.0, description="Max safe weekly CTL change (%)")
    critical_ramp_multiplier: float = Field(2.0, gt=1.0, description="Ceiling multiple treated as dangerous")
    single_session_ctl_fraction: float = Field(0.8, gt=0.0,
                                               description="Session TSS above this fraction of CTL is flagged")
    weekly_overload_multiplier: float = Field(1.5, gt=1.0,
                                              description="Week TSS above this multiple of 7 x CTL is flagged")
    recovery_tss_per_day: float = Field(100.0, gt=0.0)
    tired_recovery_multiplier: float = Field(1.2, ge=1.0)
    overreaching_recovery_multiplier: float = Field(1.5, ge=1.0)
    load: TrainingLoadConfig = Field(default_factory=TrainingLoadConfig)

    @property
    def critical_ramp_pct(self) -> float:
        return self.ramp_rate_ceiling_pct * self.critical_ramp_multiplier


DEFAULT_CONFIG = FatigueConfig()

# Worse form = higher severity.
_FORM_SEVERITY: dict[FormLabel, int] = {
    FormLabel.FRESH: 0,
    FormLabel.OPTIMAL: 1,
    FormLabel.NEUTRAL: 2,
    FormLabel.TIRED: 3,
    FormLabel.OVERREACHING: 4,
}

# ======================================================================
# Helpers
# ======================================================================


def _snapshot(day: datetime.date, ctl: float, atl: float) -> LoadSnapshot:
    ctl, atl = max(ctl, 0.0), max(atl, 0.0)
    return LoadSnapshot(date=day, ctl=ctl, atl=atl, tsb=ctl - atl, form=form_label(ctl - atl))


def _replay(ctl: float, atl: float, daily_tss: Iterable[float],
            config: TrainingLoadConfig = DEFAULT_LOAD_CONFIG, ) -> tuple[float, float]:
    for tss in daily_tss:
        ctl = ema_step(ctl, tss, config.ctl_time_constant)
        atl = ema_step(atl, tss, config.atl_time_constant)
    return ctl, atl


def _planned_by_day(planned: Iterable[PlannedActivity], start: datetime.date,
                    end: datetime.date, ) -> dict[datetime.date, list[PlannedActivity]]:
    by_day: dict[datetime.date, list[PlannedActivity]] = defaultdict(list)
    for activity in planned:
        if start <= activity.date <= end:
            by_day[activity.date].append(activity)
    return by_day


def _history_tss(series: TrainingLoadSeries, day: datetime.date) -> float:
    if series.last_date is None or day > series.last_date:
        return 0.0
    return series.tss_on(day)


def _crossed_into(before: FormLabel, after: FormLabel, label: FormLabel) -> bool:
    return after is label and _FORM_SEVERITY[before] < _FORM_SEVERITY[label]


def recovery_plan(tss: float, after: LoadSnapshot, scheduled_date: datetime.date,
                  config: FatigueConfig = DEFAULT_CONFIG, ) -> RecoveryPlan:
    """One recovery day per ``recovery_tss_per_day`` TSS, stretched when fatigued."""
    multiplier = 1.0
    if after.form is FormLabel.OVERREACHING:
        multiplier = config.overreaching_recovery_multiplier
    elif after.form is FormLabel.TIRED:
        multiplier = config.tired_recovery_multiplier

    days = math.ceil(round(tss / config.recovery_tss_per_day * multiplier, 6))
    rest_days = max(1, math.ceil(days / 2)) if days > 0 else 0
    return RecoveryPlan(days_to_recover=days, suggested_rest_days=rest_days,
                        next_hard_workout_date=scheduled_date + datetime.timedelta(days=days), )


# ======================================================================
# Rule set
# ======================================================================


def _evaluate_rules(session_tss: float, baseline: LoadSnapshot, after: LoadSnapshot, projection: WeeklyProjection,
                    config: FatigueConfig, ) -> tuple[list[str], list[str]]:
    """Return ``(recommendations, warnings)``."""
    recommendations: list[str] = []
    warnings: list[str] = []
    ramp = projection.ramp_rate
    ceiling = config.ramp_rate_ceiling_pct

    if ramp > config.critical_ramp_pct:
        warnings.append(f"Weekly ramp rate of {ramp:.1f}% is more than {config.critical_ramp_multiplier:g}x "
                        f"the safe limit of {ceiling:g}%")
        recommendations.append("Ramp rate is dangerously high. Replace this session with rest or very easy "
                               "activity.")
    elif ramp > ceiling:
        warnings.append(f"Weekly ramp rate of {ramp:.1f}% exceeds the safe limit of {ceiling:g}%")
        recommendations.append("Add a rest day or reduce this week's load to bring the ramp rate down.")

    if _crossed_into(baseline.form, after.form, FormLabel.OVERREACHING):
        warnings.append(f"This activity pushes you into overreaching (TSB {after.tsb:.1f})")
        recommendations.append("Plan a recovery week with substantially reduced load after this session.")
    elif _crossed_into(baseline.form, after.form, FormLabel.TIRED):
        recommendations.append("Fatigue is accumulating. Lower the intensity of this session or add an easy "
                               "day.")

    if baseline.ctl > 0 and session_tss > baseline.ctl * config.single_session_ctl_fraction:
        warnings.append(f"This single workout ({session_tss:.0f} TSS) is very high compared to your fitness "
                        f"(CTL {baseline.ctl:.0f})")

    weekly_limit = projection.start_ctl * 7 * config.weekly_overload_multiplier
    if projection.start_ctl > 0 and projection.total_tss > weekly_limit:
        warnings.append(f"Weekly TSS ({projection.total_tss:.0f}) significantly exceeds your current fitness "
                        f"level (CTL {projection.start_ctl:.0f})")

    if ramp < 0:
        recommendations.append("This week's load is below maintenance. Fitness will decline slightly.")

    if not recommendations:
        recommendations.append("Training load is appropriate. Continue building fitness gradually.")
    return recommendations, warnings


# ======================================================================
# Public API
# ======================================================================


def predict_fatigue(prospective: EstimationResult, scheduled_date: datetime.date, series: TrainingLoadSeries,
                    planned: Sequence[PlannedActivity] = (),
                    config: FatigueConfig = DEFAULT_CONFIG, ) -> FatiguePrediction:
    """Project the effect of *prospective* scheduled on *scheduled_date*.

    *series* is the athlete's actual load history.  *planned* holds other
    activities scheduled for the same ISO week; they only feed the weekly
    projection.

    ``before_activity`` is the last recorded point, however old.  The
    form-crossing and single-session rules instead use the state entering
    the scheduled day, so days without data since that point count as rest.
    """
    load = config.load
    tss = prospective.tss

    point = series.last_on_or_before(scheduled_date)
    if point is None:
        before = _snapshot(scheduled_date - _ONE_DAY, series.initial_ctl, series.initial_atl)
    else:
        before = _snapshot(point.date, point.ctl, point.atl)

    entering_ctl, entering_atl = state_at(series, scheduled_date - _ONE_DAY, load)
    # Rules compare against the state entering the day, decayed past a stale last point.
    if point is not None and point.date == scheduled_date:
        baseline = before
    else:
        baseline = _snapshot(scheduled_date - _ONE_DAY, entering_ctl, entering_atl)
    after_ctl, after_atl = _replay(entering_ctl, entering_atl, [_history_tss(series, scheduled_date) + tss], load)
    after = _snapshot(scheduled_date, after_ctl, after_atl)

    monday, sunday = week_bounds(scheduled_date)
    planned_days = _planned_by_day(planned, monday, sunday)
    week_tss: list[float] = []
    day = monday
    while day <= sunday:
        day_tss = _history_tss(series, day) + sum(a.estimated_tss for a in planned_days.get(day, []))
        if day == scheduled_date:
            day_tss += tss
        week_tss.append(day_tss)
        day += _ONE_DAY

    start_ctl, start_atl = state_at(series, monday - _ONE_DAY, load)
    projected_ctl, _ = _replay(start_ctl, start_atl, week_tss, load)
    ramp = ramp_rate_pct(start_ctl, projected_ctl, load.ramp_floor)
    projection = WeeklyProjection(week_start=monday, week_end=sunday, total_tss=sum(week_tss),
                                  start_ctl=max(start_ctl, 0.0), projected_ctl=max(projected_ctl, 0.0),
                                  ramp_rate=round(ramp, 2), is_safe=ramp <= config.ramp_rate_ceiling_pct, )

    recommendations, warnings = _evaluate_rules(tss, baseline, after, projection, config)
    logger.debug("Fatigue prediction for {}: ramp {:.1f}% safe={}", scheduled_date, ramp, projection.is_safe)
    return FatiguePrediction(before_activity=before, after_activity=after, weekly_projection=projection,
                             recovery_plan=recovery_plan(tss, after, scheduled_date, config),
                             recommendations=recommendations, warnings=warnings, )


def estimate_weekly_load(week_start: datetime.date, planned: Sequence[PlannedActivity], series: TrainingLoadSeries,
                         config: FatigueConfig = DEFAULT_CONFIG, ) -> WeeklyLoadEstimation:
    """Project the load of the ISO week containing *week_start*.

    Days already covered by *series* contribute their recorded TSS; every
    day also receives the planned activities scheduled on it.
    """
    load = config.load
    monday, sunday = week_bounds(week_start)
    planned_days = _planned_by_day(planned, monday, sunday)

    breakdown: list[DailyLoad] = []
    day = monday
    while day <= sunday:
        activities = planned_days.get(day, [])
        day_tss = _history_tss(series, day) + sum(a.estimated_tss for a in activities)
        breakdown.append(DailyLoad(date=day, tss=day_tss, activities=len(activities)))
        day += _ONE_DAY

    start_ctl, start_atl = state_at(series, monday - _ONE_DAY, load)
    ctl, atl = _replay(start_ctl, start_atl, [d.tss for d in breakdown], load)
    ctl, atl = max(ctl, 0.0), max(atl, 0.0)
    ramp = ramp_rate_pct(start_ctl, ctl, load.ramp_floor)
    is_safe = ramp <= config.ramp_rate_ceiling_pct

    recommendations: list[str] = []
    if ramp > config.critical_ramp_pct:
        recommendations.append("Planned week ramps fitness dangerously fast. Remove or shorten sessions.")
    elif not is_safe:
        recommendations.append("Planned week exceeds the safe ramp rate. Add a recovery day.")
    form = form_label(ctl - atl)
    if form in (FormLabel.TIRED, FormLabel.OVERREACHING):
        recommendations.append(f"Week ends {form.value}. Schedule an easy day early next week.")
    if ramp < 0:
        recommendations.append("Planned week is below maintenance. Fitness will decline slightly.")
    if not recommendations:
        recommendations.append("Planned week builds fitness at a sustainable rate.")

    return WeeklyLoadEstimation(week_start=monday, week_end=sunday, total_tss=sum(d.tss for d in breakdown),
                                daily_breakdown=breakdown, projected_ctl=ctl, projected_atl=atl,
                                projected_tsb=ctl - atl, ramp_rate=round(ramp, 2), is_safe=is_safe,
                                recommendations=recommendations, )
