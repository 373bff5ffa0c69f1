"""Tests for the estimation entry points."""

import datetime

import pytest

from app.engine.errors import EstimationContextError
from app.engine.estimator import (
    estimate_activity,
    estimate_activity_complete,
    estimate_batch,
    select_strategy,
    tss_range,
)
from app.engine.training_load import compute_series
from app.schemas.estimation import Confidence, StrategyKind
from app.schemas.profile import (
    Activity,
    ActivityCategory,
    ActivityStructure,
    EstimationContext,
    IntensityTarget,
    Interval,
    PlanStep,
    Route,
    TargetKind,
    TimeDuration,
    UserProfile,
)
from app.schemas.training_load import DailyTSS

REF_DAY = datetime.date(2024, 3, 1)


# ======================================================================
# Helpers
# ======================================================================


def _make_structured_bike() -> Activity:
    step = PlanStep(duration=TimeDuration(seconds=3600), targets=[IntensityTarget(kind=TargetKind.PERCENT_FTP,
                                                                                  value=75)])
    return Activity(category=ActivityCategory.BIKE, structure=ActivityStructure(intervals=[Interval(steps=[step])]))


def _make_context(activity: Activity, scheduled: datetime.date = None, **profile) -> EstimationContext:
    return EstimationContext(profile=UserProfile(**profile), activity=activity, reference_date=REF_DAY,
                             scheduled_date=scheduled, )


# ======================================================================
# estimate_activity
# ======================================================================


class TestEstimateActivity:
    def test_one_hour_at_75_percent(self):
        result = estimate_activity(_make_context(_make_structured_bike(), ftp_watts=250))
        assert result.strategy is StrategyKind.STRUCTURE
        assert result.tss == pytest.approx(56.2, abs=0.1)

    def test_confidence_follows_data_richness(self):
        structured = estimate_activity(_make_context(_make_structured_bike(), ftp_watts=250))
        routed = estimate_activity(_make_context(Activity(category=ActivityCategory.BIKE,
                                                          route=Route(distance_meters=40000))))
        bare = estimate_activity(_make_context(Activity(category=ActivityCategory.BIKE)))
        assert structured.confidence is Confidence.HIGH
        assert routed.confidence is Confidence.MEDIUM
        assert bare.confidence is Confidence.LOW
        assert structured.confidence_score > routed.confidence_score > bare.confidence_score

    def test_outputs_are_finite_and_non_negative(self):
        for category in ActivityCategory:
            result = estimate_activity(_make_context(Activity(category=category)))
            assert result.tss >= 0
            assert result.duration_seconds > 0
            assert result.intensity_factor > 0

    def test_missing_category_is_contract_error(self):
        broken = EstimationContext.model_construct(profile=UserProfile(), activity=None, reference_date=REF_DAY)
        with pytest.raises(EstimationContextError):
            estimate_activity(broken)

    def test_select_strategy_validates(self):
        broken = EstimationContext.model_construct(profile=UserProfile(),
                                                   activity=Activity.model_construct(category=None))
        with pytest.raises(EstimationContextError):
            select_strategy(broken)


# ======================================================================
# tss_range
# ======================================================================


class TestTssRange:
    def test_range_widens_with_low_confidence(self):
        high = estimate_activity(_make_context(_make_structured_bike(), ftp_watts=250))
        low = estimate_activity(_make_context(Activity(category=ActivityCategory.BIKE)))
        high_lo, high_hi = tss_range(high)
        low_lo, low_hi = tss_range(low)
        assert (high_hi - high_lo) / high.tss < (low_hi - low_lo) / low.tss

    def test_range_brackets_estimate(self):
        result = estimate_activity(_make_context(Activity(category=ActivityCategory.RUN)))
        lo, hi = tss_range(result)
        assert 0 <= lo <= result.tss <= hi


# ======================================================================
# Complete estimate and batch
# ======================================================================


class TestCompleteEstimate:
    def test_without_schedule_has_no_fatigue(self):
        complete = estimate_activity_complete(_make_context(_make_structured_bike(), ftp_watts=250))
        assert complete.fatigue is None
        assert complete.metrics.avg_power_watts == pytest.approx(188)

    def test_with_schedule_and_history(self):
        history = compute_series([DailyTSS(date=REF_DAY - datetime.timedelta(days=i), tss=40)
                                  for i in range(14, 0, -1)], initial_ctl=40, initial_atl=40)
        ctx = _make_context(_make_structured_bike(), scheduled=REF_DAY, ftp_watts=250)
        complete = estimate_activity_complete(ctx, history)
        assert complete.fatigue is not None
        assert complete.fatigue.after_activity.date == REF_DAY
        assert complete.tss_low <= complete.estimation.tss <= complete.tss_high


class TestEstimateBatch:
    def test_each_plan_estimated_independently(self):
        plans = {"easy-ride": Activity(category=ActivityCategory.BIKE), "intervals": _make_structured_bike(),
                 "long-run": Activity(category=ActivityCategory.RUN, route=Route(distance_meters=21000)), }
        results = estimate_batch(plans, UserProfile(ftp_watts=250), REF_DAY)
        assert set(results) == set(plans)
        assert results["intervals"].strategy is StrategyKind.STRUCTURE
        assert results["long-run"].strategy is StrategyKind.ROUTE
        assert results["easy-ride"] == estimate_activity(_make_context(plans["easy-ride"], ftp_watts=250))
