"""
Estimation entry points.

:func:`estimate_activity` picks exactly one strategy for a context
(structure, then route, then template) and runs it.  The other helpers
build on it: metrics and fatigue for a single activity, batch estimation
for a list of plans, and a confidence-based TSS range.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping, Sequence
from typing import Optional

from loguru import logger

from app.engine.errors import EstimationContextError
from app.engine.fatigue import DEFAULT_CONFIG as DEFAULT_FATIGUE_CONFIG
from app.engine.fatigue import FatigueConfig, predict_fatigue
from app.engine.metrics import estimate_metrics
from app.engine.strategies import StrategyRegistry
from app.engine.strategies.base import EstimationStrategy
from app.schemas.estimation import CompleteEstimation, EstimationResult
from app.schemas.profile import Activity, ActivityCategory, EstimationContext, UserProfile
from app.schemas.training_load import PlannedActivity, TrainingLoadSeries

# Width of the TSS range at confidence score 0, as a fraction of TSS.
MAX_RANGE_FRACTION = 0.20


def _validate(context: EstimationContext) -> None:
    activity = getattr(context, "activity", None)
    category = getattr(activity, "category", None)
    if not isinstance(category, ActivityCategory):
        logger.warning("Rejecting estimation context without an activity category")
        raise EstimationContextError("Estimation context has no activity category")


def select_strategy(context: EstimationContext) -> EstimationStrategy:
    """The single strategy that handles *context*."""
    _validate(context)
    return StrategyRegistry.select(context)


def estimate_activity(context: EstimationContext) -> EstimationResult:
    """Estimate TSS, duration and IF for one activity.

    Raises :class:`EstimationContextError` when the context carries no
    activity category.  Missing optional data never raises; it lowers
    confidence and adds warnings instead.
    """
    strategy = select_strategy(context)
    logger.debug("Estimating {} activity with {} strategy", context.activity.category.value, strategy.kind.value)
    return strategy.estimate(context)


def tss_range(result: EstimationResult) -> tuple[float, float]:
    """``(low, high)`` TSS band, wider for less confident estimates."""
    spread = result.tss * (1.0 - result.confidence_score / 100.0) * MAX_RANGE_FRACTION
    return round(max(result.tss - spread, 0.0), 1), round(result.tss + spread, 1)


def estimate_activity_complete(context: EstimationContext, history: Optional[TrainingLoadSeries] = None,
                               planned: Sequence[PlannedActivity] = (),
                               fatigue_config: FatigueConfig = DEFAULT_FATIGUE_CONFIG, ) -> CompleteEstimation:
    """Estimate plus metrics; fatigue too when scheduled and a history is given."""
    result = estimate_activity(context)
    metrics = estimate_metrics(result, context)

    fatigue = None
    if context.scheduled_date is not None and history is not None:
        fatigue = predict_fatigue(result, context.scheduled_date, history, planned, fatigue_config)

    low, high = tss_range(result)
    return CompleteEstimation(estimation=result, metrics=metrics, fatigue=fatigue, tss_low=low, tss_high=high)


def estimate_batch(plans: Mapping[str, Activity], profile: UserProfile,
                   reference_date: Optional[datetime.date] = None, ) -> dict[str, EstimationResult]:
    """Estimate every plan independently for the same athlete."""
    day = reference_date or datetime.date.today()
    results = {plan_id: estimate_activity(EstimationContext(profile=profile, activity=activity, reference_date=day))
               for plan_id, activity in plans.items()}
    logger.debug("Batch estimated {} plans", len(results))
    return results
