"""
Estimation endpoints — TSS / duration / IF for planned activities.
"""

from fastapi import APIRouter

from app.schemas.api import BatchEstimateRequest, CompleteEstimateRequest, EstimateRequest
from app.schemas.estimation import CompleteEstimation, EstimationResult
from app.services.estimation_service import EstimationService

router = APIRouter()


@router.post("/estimate", summary="Estimate TSS, duration and IF of an activity.", response_model=EstimationResult, )
def estimate(request: EstimateRequest):
    service = EstimationService()
    return service.estimate(request)


@router.post("/complete", summary="Estimate with metrics, TSS range and fatigue impact.",
             response_model=CompleteEstimation, )
def estimate_complete(request: CompleteEstimateRequest):
    """Fatigue is included when ``scheduled_date`` is set."""
    service = EstimationService()
    return service.estimate_complete(request)


@router.post("/batch", summary="Estimate a list of activity plans for one athlete.",
             response_model=dict[str, EstimationResult], )
def estimate_batch(request: BatchEstimateRequest):
    service = EstimationService()
    return service.estimate_batch(request)
