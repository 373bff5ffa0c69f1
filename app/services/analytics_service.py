"""
Analytics service.

Training-load curves, weekly views, fatigue prediction and intensity
distribution over request-supplied history.
"""

from loguru import logger

from app.core.config import Settings, settings
from app.engine.fatigue import estimate_weekly_load, predict_fatigue
from app.engine.training_load import build_actual_curve, build_ideal_curve, summarize_weeks, weekly_compliance
from app.engine.zones import intensity_distribution
from app.schemas.api import (
    ComplianceRequest,
    FatigueRequest,
    IntensityDistributionRequest,
    TrainingLoadRequest,
    WeeklyLoadRequest,
)
from app.schemas.fatigue import FatiguePrediction, WeeklyLoadEstimation
from app.schemas.training_load import PeriodizationTemplate, TrainingLoadSeries, WeekCompliance, WeeklyLoadSummary
from app.schemas.zones import IntensityDistribution
from app.services.estimation_service import fatigue_config_from, history_series, unprocessable


class AnalyticsService:
    """Service for training-load analytics."""

    def __init__(self, config: Settings = settings):
        self.fatigue_config = fatigue_config_from(config)
        self.load_config = self.fatigue_config.load

    def training_load(self, request: TrainingLoadRequest) -> TrainingLoadSeries:
        try:
            series = build_actual_curve(request.activities, request.start, request.end, request.initial_ctl,
                                        request.initial_atl, self.load_config)
        except ValueError as exc:
            raise unprocessable(exc) from exc
        logger.info("Actual curve {} -> {}: {} points", request.start, request.end, len(series.points))
        return series

    def ideal_curve(self, template: PeriodizationTemplate) -> TrainingLoadSeries:
        try:
            series = build_ideal_curve(template, self.load_config)
        except ValueError as exc:
            raise unprocessable(exc) from exc
        logger.info("Ideal curve CTL {} -> {} over {} days", template.starting_ctl, template.target_ctl,
                    len(series.points))
        return series

    def weekly_summary(self, request: TrainingLoadRequest) -> list[WeeklyLoadSummary]:
        series = self.training_load(request)
        return summarize_weeks(series, self.load_config)

    def weekly_compliance(self, request: ComplianceRequest) -> list[WeekCompliance]:
        weeks = weekly_compliance(request.planned, request.completed)
        logger.info("Compliance computed for {} weeks", len(weeks))
        return weeks

    def fatigue(self, request: FatigueRequest) -> FatiguePrediction:
        try:
            series = history_series(request, self.load_config)
            prediction = predict_fatigue(request.estimation, request.scheduled_date, series, request.planned,
                                         self.fatigue_config)
        except ValueError as exc:
            raise unprocessable(exc) from exc
        logger.info("Fatigue prediction for {}: safe={}", request.scheduled_date,
                    prediction.weekly_projection.is_safe)
        return prediction

    def weekly_load(self, request: WeeklyLoadRequest) -> WeeklyLoadEstimation:
        try:
            series = history_series(request, self.load_config)
            estimation = estimate_weekly_load(request.week_start, request.planned, series, self.fatigue_config)
        except ValueError as exc:
            raise unprocessable(exc) from exc
        logger.info("Weekly load for week of {}: {} TSS", estimation.week_start, estimation.total_tss)
        return estimation

    def intensity_distribution(self, request: IntensityDistributionRequest) -> IntensityDistribution:
        try:
            distribution = intensity_distribution(request.activities)
        except ValueError as exc:
            raise unprocessable(exc) from exc
        logger.info("Intensity distribution over {} activities", distribution.total_activities)
        return distribution
