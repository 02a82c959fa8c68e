"""
Settings and environment management module for the RCM analytics engine.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Only deployment-level knobs live here. Scoring weights, score bands, strategy
tables and benchmark bands are decision policy and are kept as named
constants next to the code that applies them (see services/scoring_policy.py
and services/kpi_calculator.py).

Environment Variables:
- APP_NAME: Title reported by the FastAPI application
- LOG_LEVEL: Root logging level (default: INFO)
- CORS_ALLOWED_ORIGINS: JSON list of dashboard origins allowed by CORS

Engine Defaults:
- cash_flow_min_likelihood: 10.0 (Accounts below this likelihood are left out of cash flow)
- average_charge_per_claim: 500.0 (Used to derive expected claim counts)
- expected_collection_rate: 0.85 (Collection rate assumed by revenue forecasts)
- kpi_default_period_days: 30 (Period length used by Days in A/R when none is given)

Usage:
    from rcm_analytics.core.config import get_settings

    settings = get_settings()
    floor = settings.cash_flow_min_likelihood
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Title of the FastAPI application.
        log_level: Logging level name passed to logging.basicConfig.
        cors_allowed_origins: Origins allowed to call the API from a browser.
        cash_flow_min_likelihood: Likelihood floor for cash-flow projection.
        average_charge_per_claim: Average charge assumed per forecast claim.
        expected_collection_rate: Collection rate assumed per forecast period.
        kpi_default_period_days: Default measurement period for Days in A/R.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',  # Ignore extra environment variables not defined in this class
        case_sensitive=False,
    )

    # =========================================================================
    # Service
    # =========================================================================

    app_name: str = 'RCM Analytics Engine'

    log_level: str = 'INFO'

    # Dashboard dev server and its loopback alias
    cors_allowed_origins: List[str] = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]

    # =========================================================================
    # Engine Defaults
    # =========================================================================

    # Accounts with a collection likelihood below this are not projected
    # into weekly cash flow
    cash_flow_min_likelihood: float = Field(default=10.0, ge=0, le=100)

    # expectedClaimCount = forecast / (average_charge_per_claim * expected_collection_rate)
    average_charge_per_claim: float = Field(default=500.0, gt=0)
    expected_collection_rate: float = Field(default=0.85, gt=0, le=1)

    # Days in A/R divides total charges by this many days when the caller
    # does not pass a period length
    kpi_default_period_days: int = Field(default=30, gt=0)


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The cached settings instance.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
