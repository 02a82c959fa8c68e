"""
FastAPI dependency injection module for the RCM analytics engine.

Endpoints receive configuration and the seasonality store through these
dependencies instead of calling the cached getters directly, so tests can
swap either one:

    app.dependency_overrides[get_seasonality_store_dependency] = lambda: SeasonalityStore()

Dependencies Provided:
- get_settings_dependency / SettingsDep: cached Settings instance
- get_seasonality_store_dependency / SeasonalityStoreDep: process-wide
  seasonality model store

Usage:
    @router.post("/revenue")
    async def forecast(request: RevenueForecastRequest, store: SeasonalityStoreDep):
        return forecast_revenue(request.dateRange, request.baseMonthlyRevenue, store=store)
"""

from typing import Annotated

from fastapi import Depends

from rcm_analytics.core.config import Settings, get_settings
from rcm_analytics.services.seasonality import SeasonalityStore, get_seasonality_store


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so FastAPI's dependency override
    mechanism can replace it in tests.
    """
    return get_settings()


# =============================================================================
# Seasonality Store Dependency
# =============================================================================

def get_seasonality_store_dependency() -> SeasonalityStore:
    """Return the process-wide SeasonalityStore."""
    return get_seasonality_store()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(store: SeasonalityStoreDep)
SeasonalityStoreDep = Annotated[SeasonalityStore, Depends(get_seasonality_store_dependency)]
