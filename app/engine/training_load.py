"""
Training-load time series — CTL / ATL / TSB.

Both loads are exponentially weighted averages of daily TSS::

    CTL_today = CTL_yesterday + (TSS_today - CTL_yesterday) / 42
    ATL_today = ATL_yesterday + (TSS_today - ATL_yesterday) / 7
    TSB       = CTL - ATL

Every calendar day between the first and last input produces a point;
days without training contribute TSS 0 and the loads decay.

The same recurrence drives two kinds of curve:

- **actual**: replayed from completed activities' stored TSS,
- **ideal**: synthesised from a periodization template, choosing for
  each week the constant daily TSS that lands CTL on that week's target.

Weekly views group points by ISO week (Monday to Sunday).
"""

from __future__ import annotations

import datetime
import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field

from app.engine.errors import TrainingSeriesError
from app.schemas.training_load import (
    CompletedActivity,
    ComplianceStatus,
    DailyTSS,
    FormLabel,
    PeriodizationTemplate,
    PlannedActivity,
    TrainingLoadPoint,
    TrainingLoadSeries,
    WeekCompliance,
    WeeklyLoadSummary,
)

_ONE_DAY = datetime.timedelta(days=1)

# ======================================================================
# Configuration
# ======================================================================


class TrainingLoadConfig(BaseModel):
    """Time constants and floors for the load computation."""

    ctl_time_constant: int = Field(42, ge=1, description="Days; fitness window")
    atl_time_constant: int = Field(7, ge=1, description="Days; fatigue window")
    ramp_floor: float = Field(1.0, gt=0.0, description="Minimum CTL used as a ramp-rate denominator")


DEFAULT_CONFIG = TrainingLoadConfig()

# ======================================================================
# Primitives
# ======================================================================

# (label, exclusive lower TSB bound), checked top-down.
_FORM_THRESHOLDS: list[tuple[FormLabel, float]] = [
    (FormLabel.FRESH, 10.0),
    (FormLabel.OPTIMAL, 5.0),
    (FormLabel.NEUTRAL, -10.0),
    (FormLabel.TIRED, -20.0),
]


def form_label(tsb: float) -> FormLabel:
    """Map a TSB value to its form label.  Boundaries fall to the lower bucket."""
    for label, lower in _FORM_THRESHOLDS:
        if tsb > lower:
            return label
    return FormLabel.OVERREACHING


def ema_step(previous: float, tss: float, time_constant: int) -> float:
    return previous + (tss - previous) / time_constant


def ramp_rate_pct(start_ctl: float, end_ctl: float, floor: float = 1.0) -> float:
    """CTL change in percent of the starting CTL (floored to avoid /0)."""
    return (end_ctl - start_ctl) / max(start_ctl, floor) * 100.0


def week_bounds(day: datetime.date) -> tuple[datetime.date, datetime.date]:
    """Monday and Sunday of the ISO week containing *day*."""
    monday = day - datetime.timedelta(days=day.weekday())
    return monday, monday + datetime.timedelta(days=6)


def make_point(day: datetime.date, tss: float, ctl: float, atl: float) -> TrainingLoadPoint:
    # Clamp float noise; both loads are averages of non-negative inputs.
    ctl = max(ctl, 0.0)
    atl = max(atl, 0.0)
    return TrainingLoadPoint(date=day, tss=tss, ctl=ctl, atl=atl, tsb=ctl - atl, form=form_label(ctl - atl))


def _check_tss(value: float, day: datetime.date) -> None:
    if not math.isfinite(value) or value < 0:
        logger.warning("Rejecting TSS {} on {}", value, day)
        raise TrainingSeriesError(f"TSS on {day} must be a finite non-negative number, got {value}")


# ======================================================================
# Series computation
# ======================================================================


def compute_series(daily: Iterable[DailyTSS], initial_ctl: float = 0.0, initial_atl: float = 0.0,
                   config: TrainingLoadConfig = DEFAULT_CONFIG, ) -> TrainingLoadSeries:
    """Compute one point per calendar day from chronological daily TSS.

    *daily* must be strictly increasing by date.  Missing days between
    entries are filled with TSS 0.

    Raises :class:`TrainingSeriesError` on out-of-order or duplicate dates
    and on negative or non-finite values.
    """
    for label, value in (("initial_ctl", initial_ctl), ("initial_atl", initial_atl)):
        if not math.isfinite(value) or value < 0:
            raise TrainingSeriesError(f"{label} must be a finite non-negative number, got {value}")

    ctl, atl = initial_ctl, initial_atl
    points: list[TrainingLoadPoint] = []
    previous_day: Optional[datetime.date] = None

    for entry in daily:
        _check_tss(entry.tss, entry.date)
        if previous_day is not None:
            if entry.date <= previous_day:
                logger.warning("Daily TSS out of order: {} after {}", entry.date, previous_day)
                raise TrainingSeriesError(f"Daily TSS must be strictly chronological: {entry.date} follows "
                                          f"{previous_day}")
            gap_day = previous_day + _ONE_DAY
            while gap_day < entry.date:
                ctl = ema_step(ctl, 0.0, config.ctl_time_constant)
                atl = ema_step(atl, 0.0, config.atl_time_constant)
                points.append(make_point(gap_day, 0.0, ctl, atl))
                gap_day += _ONE_DAY

        ctl = ema_step(ctl, entry.tss, config.ctl_time_constant)
        atl = ema_step(atl, entry.tss, config.atl_time_constant)
        points.append(make_point(entry.date, entry.tss, ctl, atl))
        previous_day = entry.date

    logger.debug("Computed training load series: {} points", len(points))
    return TrainingLoadSeries(initial_ctl=initial_ctl, initial_atl=initial_atl, points=points)


def state_at(series: TrainingLoadSeries, day: datetime.date,
             config: TrainingLoadConfig = DEFAULT_CONFIG, ) -> tuple[float, float]:
    """(CTL, ATL) at the end of *day*.

    Before the first point this is the series' initial state; past the
    last point the loads decay with zero TSS.
    """
    point = series.last_on_or_before(day)
    if point is None:
        return series.initial_ctl, series.initial_atl
    ctl, atl = point.ctl, point.atl
    for _ in range((day - point.date).days):
        ctl = ema_step(ctl, 0.0, config.ctl_time_constant)
        atl = ema_step(atl, 0.0, config.atl_time_constant)
    return ctl, atl


def aggregate_daily_tss(activities: Iterable[CompletedActivity]) -> list[DailyTSS]:
    """Sum completed activities' TSS per date, in chronological order."""
    totals: dict[datetime.date, float] = defaultdict(float)
    for activity in activities:
        _check_tss(activity.tss, activity.date)
        totals[activity.date] += activity.tss
    return [DailyTSS(date=day, tss=tss) for day, tss in sorted(totals.items())]


def build_actual_curve(activities: Sequence[CompletedActivity], start: datetime.date, end: datetime.date,
                       initial_ctl: float = 0.0, initial_atl: float = 0.0,
                       config: TrainingLoadConfig = DEFAULT_CONFIG, ) -> TrainingLoadSeries:
    """CTL / ATL / TSB for every day of ``[start, end]``.

    All history before *start* is replayed to warm up the loads;
    *initial_ctl* / *initial_atl* are the state before the earliest
    activity.  Activities after *end* are ignored.
    """
    if end < start:
        raise TrainingSeriesError(f"Curve end {end} precedes start {start}")

    daily = [d for d in aggregate_daily_tss(activities) if d.date <= end]
    first_day = min(daily[0].date, start) if daily else start
    by_day = {d.date: d.tss for d in daily}

    # Dense input so the window boundaries always exist.
    dense: list[DailyTSS] = []
    day = first_day
    while day <= end:
        dense.append(DailyTSS(date=day, tss=by_day.get(day, 0.0)))
        day += _ONE_DAY

    full = compute_series(dense, initial_ctl, initial_atl, config)
    entering_ctl, entering_atl = state_at(full, start - _ONE_DAY, config)
    window = [p for p in full.points if start <= p.date <= end]
    return TrainingLoadSeries(initial_ctl=entering_ctl, initial_atl=entering_atl, points=window)


def build_ideal_curve(template: PeriodizationTemplate,
                      config: TrainingLoadConfig = DEFAULT_CONFIG, ) -> TrainingLoadSeries:
    """Synthesise the planned CTL trajectory of a periodization template.

    Each week the CTL target moves by at most ``weekly_ramp_pct`` towards
    ``target_ctl`` and never past it.  The daily TSS held for the week is
    the constant load that lands CTL exactly on that week's target::

        k = (1 - 1/tc) ** n
        T = (target_week - CTL_start * k) / (1 - k)

    clamped at 0 when the target calls for a faster decline than rest
    allows.  Once ``target_ctl`` is reached, daily TSS equals it and CTL
    holds.
    """
    if template.target_date < template.start_date:
        raise TrainingSeriesError(f"Target date {template.target_date} precedes start date {template.start_date}")

    ramp = template.weekly_ramp_pct / 100.0
    target = template.target_ctl
    rising = target >= template.starting_ctl
    ctl = atl = template.starting_ctl
    points: list[TrainingLoadPoint] = []

    day = template.start_date
    while day <= template.target_date:
        block_days = min(7, (template.target_date - day).days + 1)
        step = max(ctl, config.ramp_floor) * ramp
        week_target = min(ctl + step, target) if rising else max(ctl - step, target)

        k = (1.0 - 1.0 / config.ctl_time_constant) ** block_days
        daily_tss = max((week_target - ctl * k) / (1.0 - k), 0.0)

        for _ in range(block_days):
            ctl = ema_step(ctl, daily_tss, config.ctl_time_constant)
            atl = ema_step(atl, daily_tss, config.atl_time_constant)
            if rising:
                ctl = min(ctl, target)
            points.append(make_point(day, daily_tss, ctl, atl))
            day += _ONE_DAY

    logger.debug("Built ideal curve {} -> {} ({} days)", template.starting_ctl, target, len(points))
    return TrainingLoadSeries(initial_ctl=template.starting_ctl, initial_atl=template.starting_ctl, points=points)


# ======================================================================
# Weekly aggregation
# ======================================================================


def summarize_weeks(series: TrainingLoadSeries,
                    config: TrainingLoadConfig = DEFAULT_CONFIG, ) -> list[WeeklyLoadSummary]:
    """Group a series by ISO week."""
    summaries: list[WeeklyLoadSummary] = []
    entering_ctl = series.initial_ctl
    week_points: list[TrainingLoadPoint] = []

    def flush() -> None:
        first, last = week_points[0], week_points[-1]
        iso_year, iso_week, _ = first.date.isocalendar()
        monday, sunday = week_bounds(first.date)
        summaries.append(WeeklyLoadSummary(iso_year=iso_year, iso_week=iso_week, week_start=monday, week_end=sunday,
                                           days=len(week_points), total_tss=sum(p.tss for p in week_points),
                                           start_ctl=entering_ctl, end_ctl=last.ctl, end_atl=last.atl,
                                           end_tsb=last.tsb,
                                           ramp_rate=ramp_rate_pct(entering_ctl, last.ctl, config.ramp_floor), ))

    for point in series.points:
        if week_points and week_bounds(point.date)[0] != week_bounds(week_points[0].date)[0]:
            flush()
            entering_ctl = week_points[-1].ctl
            week_points = []
        week_points.append(point)
    if week_points:
        flush()
    return summaries


# ======================================================================
# Planned vs completed
# ======================================================================

_COMPLIANCE_THRESHOLDS: list[tuple[ComplianceStatus, float]] = [
    (ComplianceStatus.GOOD, 90.0),
    (ComplianceStatus.WARNING, 70.0),
]


def _compliance_status(percentage: float) -> ComplianceStatus:
    for status, minimum in _COMPLIANCE_THRESHOLDS:
        if percentage >= minimum:
            return status
    return ComplianceStatus.POOR


def _percentage(done: float, planned: float) -> float:
    if planned <= 0:
        return 100.0
    return done / planned * 100.0


def compare_week(planned_tss: float, completed_tss: float, planned_count: int, completed_count: int,
                 week_start: Optional[datetime.date] = None, ) -> WeekCompliance:
    """Completed-over-planned percentages with a status per metric.

    The combined status is the worse of the two.  With nothing planned a
    metric counts as fully complied (100%).
    """
    tss_pct = _percentage(completed_tss, planned_tss)
    count_pct = _percentage(completed_count, planned_count)
    tss_status = _compliance_status(tss_pct)
    activity_status = _compliance_status(count_pct)
    combined = max(tss_status, activity_status, key=lambda s: s.severity)

    week_end = week_start + datetime.timedelta(days=6) if week_start else None
    return WeekCompliance(week_start=week_start, week_end=week_end, planned_tss=planned_tss,
                          completed_tss=completed_tss, tss_percentage=round(tss_pct, 1),
                          planned_activities=planned_count, completed_activities=completed_count,
                          activity_percentage=round(count_pct, 1), tss_status=tss_status,
                          activity_status=activity_status, status=combined, )


def weekly_compliance(planned: Iterable[PlannedActivity],
                      completed: Iterable[CompletedActivity], ) -> list[WeekCompliance]:
    """Apply :func:`compare_week` to every ISO week touched by either list."""
    weeks: dict[datetime.date, list[float]] = defaultdict(lambda: [0.0, 0.0, 0, 0])
    for activity in planned:
        bucket = weeks[week_bounds(activity.date)[0]]
        bucket[0] += activity.estimated_tss
        bucket[2] += 1
    for activity in completed:
        bucket = weeks[week_bounds(activity.date)[0]]
        bucket[1] += activity.tss
        bucket[3] += 1

    return [compare_week(planned_tss, completed_tss, int(planned_count), int(completed_count), week_start=monday)
            for monday, (planned_tss, completed_tss, planned_count, completed_count) in sorted(weeks.items())]
