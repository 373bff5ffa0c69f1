"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import analytics, estimation

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(estimation.router, prefix="/estimation", tags=["Estimation"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
