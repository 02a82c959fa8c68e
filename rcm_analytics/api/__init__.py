"""
API package initialization.

This package contains FastAPI router modules for the RCM analytics engine:
- collections: Likelihood prediction, strategy, segmentation and work queue
- forecasting: Revenue forecast, seasonality, cash flow and scenarios
- kpis: KPI dashboard and industry benchmarks
"""

from fastapi import APIRouter

# Import router modules
from rcm_analytics.api.collections import router as collections_router
from rcm_analytics.api.forecasting import router as forecasting_router
from rcm_analytics.api.kpis import router as kpis_router

# Create main API router
api_router = APIRouter()

# Each router carries its own prefix and tags
api_router.include_router(collections_router)
api_router.include_router(forecasting_router)
api_router.include_router(kpis_router)

__all__ = [
    "api_router",
    "collections_router",
    "forecasting_router",
    "kpis_router",
]
