"""
Analytics endpoints — training-load curves, weekly views, fatigue and intensity distribution.
"""

from fastapi import APIRouter

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
from app.services.analytics_service import AnalyticsService

router = APIRouter()


@router.post("/training-load", summary="Actual CTL / ATL / TSB curve from completed activities.",
             response_model=TrainingLoadSeries, )
def training_load(request: TrainingLoadRequest):
    return AnalyticsService().training_load(request)


@router.post("/ideal-curve", summary="Planned CTL trajectory of a periodization template.",
             response_model=TrainingLoadSeries, )
def ideal_curve(template: PeriodizationTemplate):
    return AnalyticsService().ideal_curve(template)


@router.post("/weekly-summary", summary="Actual training load grouped by ISO week.",
             response_model=list[WeeklyLoadSummary], )
def weekly_summary(request: TrainingLoadRequest):
    return AnalyticsService().weekly_summary(request)


@router.post("/weekly-compliance", summary="Planned vs completed TSS and sessions per ISO week.",
             response_model=list[WeekCompliance], )
def weekly_compliance(request: ComplianceRequest):
    return AnalyticsService().weekly_compliance(request)


@router.post("/fatigue", summary="Predict the fatigue impact of a scheduled activity.",
             response_model=FatiguePrediction, )
def fatigue(request: FatigueRequest):
    return AnalyticsService().fatigue(request)


@router.post("/weekly-load", summary="Project the load of a planned week.", response_model=WeeklyLoadEstimation, )
def weekly_load(request: WeeklyLoadRequest):
    return AnalyticsService().weekly_load(request)


@router.post("/intensity-distribution", summary="TSS share per intensity zone of completed activities.",
             response_model=IntensityDistribution, )
def intensity_distribution(request: IntensityDistributionRequest):
    return AnalyticsService().intensity_distribution(request)
