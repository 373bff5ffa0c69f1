"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

from fastapi import FastAPI

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.logger import setup_logger

setup_logger(level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL, log_file=settings.LOG_FILE)

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION,
              description="Training-load estimation (TSS / IF) and CTL / ATL / TSB analytics.", docs_url="/docs",
              redoc_url="/redoc", openapi_url="/openapi.json")

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"message": "PACE API", "version": settings.VERSION, "status": "healthy"}


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "service": "pace-api", "version": settings.VERSION}


@app.get("/info")
async def info():
    return {"project name": settings.PROJECT_NAME, "version": settings.VERSION, "authors": settings.AUTHORS,
            "ramp rate ceiling pct": settings.RAMP_RATE_CEILING_PCT}
