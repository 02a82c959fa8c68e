"""
Core infrastructure package for the RCM analytics engine.

Provides:
- Configuration management via pydantic-settings
- FastAPI dependency injection utilities

Re-exports the key components so other modules can write:

    from rcm_analytics.core import get_settings, SettingsDep

Instead of:

    from rcm_analytics.core.config import get_settings
    from rcm_analytics.core.dependencies import SettingsDep
"""

# =============================================================================
# Re-exports from rcm_analytics.core.config
# =============================================================================
from rcm_analytics.core.config import Settings, get_settings

# =============================================================================
# Re-exports from rcm_analytics.core.dependencies
# =============================================================================
from rcm_analytics.core.dependencies import (
    get_settings_dependency,
    get_seasonality_store_dependency,
    SettingsDep,
    SeasonalityStoreDep,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_seasonality_store_dependency',
    'SettingsDep',
    'SeasonalityStoreDep',
]
