"""
Estimation service.

Thin layer between the HTTP endpoints and the engine: builds engine
configuration from settings, replays request history and maps engine
contract errors to HTTP 422.
"""

import datetime

from fastapi import HTTPException, status
from loguru import logger

from app.core.config import Settings, settings
from app.engine.estimator import estimate_activity, estimate_activity_complete, estimate_batch
from app.engine.fatigue import FatigueConfig
from app.engine.training_load import TrainingLoadConfig, aggregate_daily_tss, compute_series
from app.schemas.api import BatchEstimateRequest, CompleteEstimateRequest, EstimateRequest, HistoryMixin
from app.schemas.estimation import CompleteEstimation, EstimationResult
from app.schemas.training_load import TrainingLoadSeries


def load_config_from(config: Settings) -> TrainingLoadConfig:
    return TrainingLoadConfig(ctl_time_constant=config.CTL_TIME_CONSTANT,
                              atl_time_constant=config.ATL_TIME_CONSTANT, )


def fatigue_config_from(config: Settings) -> FatigueConfig:
    return FatigueConfig(ramp_rate_ceiling_pct=config.RAMP_RATE_CEILING_PCT, load=load_config_from(config))


def history_series(request: HistoryMixin, load_config: TrainingLoadConfig) -> TrainingLoadSeries:
    """Replay the request's completed history into a daily series."""
    return compute_series(aggregate_daily_tss(request.history), request.initial_ctl, request.initial_atl,
                          load_config)


def unprocessable(exc: ValueError) -> HTTPException:
    logger.warning("Rejected request: {}", exc)
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


class EstimationService:
    """Service for activity estimation."""

    def __init__(self, config: Settings = settings):
        self.fatigue_config = fatigue_config_from(config)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def estimate(self, request: EstimateRequest) -> EstimationResult:
        try:
            result = estimate_activity(request.to_context())
        except ValueError as exc:
            raise unprocessable(exc) from exc
        logger.info("Estimated {} activity: {} TSS ({} strategy, {} confidence)",
                    request.activity.category.value, result.tss, result.strategy.value, result.confidence.value)
        return result

    def estimate_complete(self, request: CompleteEstimateRequest) -> CompleteEstimation:
        try:
            history = None
            if request.scheduled_date is not None:
                history = history_series(request, self.fatigue_config.load)
            complete = estimate_activity_complete(request.to_context(), history, request.planned,
                                                  self.fatigue_config)
        except ValueError as exc:
            raise unprocessable(exc) from exc
        logger.info("Complete estimate for {} activity: {} TSS, fatigue={}", request.activity.category.value,
                    complete.estimation.tss, complete.fatigue is not None)
        return complete

    def estimate_batch(self, request: BatchEstimateRequest) -> dict[str, EstimationResult]:
        try:
            results = estimate_batch(request.plans, request.profile,
                                     request.reference_date or datetime.date.today())
        except ValueError as exc:
            raise unprocessable(exc) from exc
        logger.info("Batch estimated {} plans", len(results))
        return results
