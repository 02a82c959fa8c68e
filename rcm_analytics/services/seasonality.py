"""
Seasonality Model State

The revenue forecaster multiplies each month's base revenue by a seasonality
factor. Those factors are learned from history by calculate_seasonality and
read by every later forecast, which makes them the only shared state in the
engine.

The state is held as an immutable, versioned SeasonalityModel snapshot inside
a SeasonalityStore:

- Readers call store.current() once per forecast and use that snapshot for
  the whole call, so a forecast never sees a half-updated factor table.
- Writers call store.publish(...). The new snapshot is fully built and
  validated before it is swapped in under a lock; a failed recalculation
  leaves the published model untouched.
- Versions increase by one per publish, so the last calculation wins.

A process-wide default store is created once at import and returned by
get_seasonality_store(), so every caller publishes into the same store. Tests and embedded callers can create
their own SeasonalityStore and pass it explicitly.
"""

import logging
import math
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# Defaults
# =============================================================================

# Healthcare-standard monthly pattern used until history has been analyzed
DEFAULT_MONTHLY_SEASONALITY: Mapping[int, float] = MappingProxyType({
    1: 1.15,   # January - deductibles reset
    2: 1.05,
    3: 1.02,
    4: 0.98,
    5: 0.95,
    6: 0.90,
    7: 0.85,   # July - summer low
    8: 0.88,
    9: 0.95,
    10: 1.00,
    11: 1.05,
    12: 1.10,  # December - patients hurry before deductibles reset
})

DEFAULT_COLLECTION_RATES: Mapping[str, float] = MappingProxyType({
    "medicare": 0.92,
    "medicaid": 0.85,
    "commercial": 0.88,
    "self-pay": 0.35,
    "default": 0.80,
})

MONTHS = range(1, 13)


class SeasonalityModelError(ValueError):
    """Raised when a candidate seasonality model fails validation."""


# =============================================================================
# Model Snapshot
# =============================================================================


@dataclass(frozen=True)
class SeasonalityModel:
    """
    Immutable seasonality snapshot.

    Attributes:
        version: 0 for the built-in defaults, +1 per published recalculation.
        monthly_factors: Calendar month (1-12) -> multiplicative factor.
        collection_rates: Payer class -> expected collection rate.
        historical_average_monthly: Mean historical paid amount per
            observation, 0 when unknown.
        last_calculated_at: When the factors were learned, None for defaults.
    """
    version: int = 0
    monthly_factors: Mapping[int, float] = field(default_factory=lambda: DEFAULT_MONTHLY_SEASONALITY)
    collection_rates: Mapping[str, float] = field(default_factory=lambda: DEFAULT_COLLECTION_RATES)
    historical_average_monthly: float = 0.0
    last_calculated_at: Optional[datetime] = None

    def factor_for(self, month: int) -> float:
        return self.monthly_factors.get(month, 1.0)

    def successor(
        self,
        monthly_factors: Mapping[int, float],
        historical_average_monthly: float,
        calculated_at: Optional[datetime] = None,
    ) -> "SeasonalityModel":
        """
        Build and validate the next version of this model.

        Raises:
            SeasonalityModelError: If a month is missing or a factor or the
                historical average is negative or not finite.
        """
        missing = [month for month in MONTHS if month not in monthly_factors]
        if missing:
            raise SeasonalityModelError(f"Seasonality factors missing for months {missing}")

        factors = {}
        for month in MONTHS:
            factor = float(monthly_factors[month])
            if not math.isfinite(factor) or factor < 0:
                raise SeasonalityModelError(f"Invalid seasonality factor {factor!r} for month {month}")
            factors[month] = factor

        if not math.isfinite(historical_average_monthly) or historical_average_monthly < 0:
            raise SeasonalityModelError(
                f"Invalid historical monthly average {historical_average_monthly!r}"
            )

        return replace(
            self,
            version=self.version + 1,
            monthly_factors=MappingProxyType(factors),
            historical_average_monthly=float(historical_average_monthly),
            last_calculated_at=calculated_at or datetime.now(timezone.utc),
        )


def default_seasonality_model() -> SeasonalityModel:
    return SeasonalityModel()


# =============================================================================
# Store
# =============================================================================


class SeasonalityStore:
    """
    Holder of the current SeasonalityModel with atomic snapshot swaps.

    Reads are a single reference load and need no lock. Publishes are
    serialized so concurrent recalculations cannot interleave versions.
    """

    def __init__(self, initial: Optional[SeasonalityModel] = None):
        self._lock = threading.Lock()
        self._model = initial or default_seasonality_model()

    def current(self) -> SeasonalityModel:
        return self._model

    def publish(
        self,
        monthly_factors: Mapping[int, float],
        historical_average_monthly: float,
        calculated_at: Optional[datetime] = None,
    ) -> SeasonalityModel:
        """
        Validate and swap in a new model built from the given factors.

        Returns:
            The newly published model.

        Raises:
            SeasonalityModelError: If validation fails; the current model is
                left as it was.
        """
        with self._lock:
            model = self._model.successor(monthly_factors, historical_average_monthly, calculated_at)
            self._model = model
        logger.info(
            f"Published seasonality model v{model.version} "
            f"(historical monthly average {model.historical_average_monthly:.2f})"
        )
        return model

    def reset(self) -> SeasonalityModel:
        """Restore the built-in defaults (version 0)."""
        with self._lock:
            self._model = default_seasonality_model()
        return self._model


_default_store = SeasonalityStore()


def get_seasonality_store() -> SeasonalityStore:
    """
    Get the process-wide seasonality store.

    Note:
        Tests can start from the built-in defaults with:
        >>> get_seasonality_store().reset()
    """
    return _default_store


__all__ = [
    "DEFAULT_MONTHLY_SEASONALITY",
    "DEFAULT_COLLECTION_RATES",
    "SeasonalityModelError",
    "SeasonalityModel",
    "default_seasonality_model",
    "SeasonalityStore",
    "get_seasonality_store",
]
