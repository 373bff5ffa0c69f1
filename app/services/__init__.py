"""Business logic services."""

from app.services.analytics_service import AnalyticsService
from app.services.estimation_service import EstimationService

__all__ = [
    "AnalyticsService",
    "EstimationService",
]
