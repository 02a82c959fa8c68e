"""
FastAPI application entry point for the RCM Analytics API.

Configures logging and CORS, registers the collections, forecasting and KPI
routers, and starts the ASGI server when run directly.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rcm_analytics import __version__
from rcm_analytics.api import api_router
from rcm_analytics.core.config import get_settings
from rcm_analytics.services.seasonality import get_seasonality_store

settings = get_settings()

# Configure logging for the application
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown.

    On startup the process-wide seasonality store is created so the first
    forecast does not pay for it; the defaults (version 0) are in effect
    until history is posted to /forecasting/seasonality.
    """
    model = get_seasonality_store().current()
    logger.info(f"{settings.app_name} starting (seasonality model v{model.version})")
    yield
    logger.info(f"{settings.app_name} shutting down")


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description=(
        "Predictive scoring and forecasting engine for healthcare revenue-cycle "
        "management. Provides endpoints for collection likelihood, portfolio "
        "segmentation, revenue and cash-flow forecasting, and operational KPIs."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware for the dashboard frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rcm_analytics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
