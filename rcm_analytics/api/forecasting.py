"""
FastAPI router module for revenue forecasting endpoints.

- POST /forecasting/revenue - monthly revenue forecast over a date range
- POST /forecasting/seasonality - learn and publish seasonality factors
- GET  /forecasting/model - current seasonality model snapshot
- POST /forecasting/cash-flow - weekly cash-flow projection for accounts
- POST /forecasting/scenario - what-if analysis over a base forecast
- POST /forecasting/common-scenarios - standard assumption sets

Forecast endpoints read the seasonality store through SeasonalityStoreDep, so
a POST to /seasonality changes the factors used by every later forecast in
the process.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from rcm_analytics.api.errors import internal_server_error
from rcm_analytics.core.dependencies import SeasonalityStoreDep, SettingsDep
from rcm_analytics.models.schemas import (
    CashFlowProjection,
    CashFlowRequest,
    CommonScenariosRequest,
    ForecastModelStats,
    RevenueForecast,
    RevenueForecastRequest,
    ScenarioAnalysis,
    ScenarioAssumption,
    ScenarioRequest,
    SeasonalityAnalysis,
    SeasonalityRequest,
)
from rcm_analytics.services.revenue_forecaster import (
    calculate_seasonality,
    create_common_scenarios,
    forecast_revenue,
    get_forecast_model_stats,
    project_cash_flow_for_accounts,
    scenario_analysis,
)

logger = logging.getLogger(__name__)


router = APIRouter(
    prefix="/forecasting",
    tags=["forecasting"],
    responses={
        422: {"description": "Validation error in request"},
        500: {"description": "Internal server error during forecasting"},
    },
)


# =============================================================================
# Revenue & Seasonality
# =============================================================================


@router.post("/revenue", response_model=RevenueForecast)
async def revenue_forecast_endpoint(
    request: RevenueForecastRequest,
    store: SeasonalityStoreDep,
) -> RevenueForecast:
    """
    Forecast revenue month by month over the requested range.

    Each period applies the current seasonality factor for its month and is
    pro-rated when the range covers only part of the month. The response
    carries the seasonality model version used.

    Raises:
        HTTPException 422: If the forecast parameters are invalid
        HTTPException 500: If forecasting fails
    """
    try:
        return forecast_revenue(request.dateRange, request.baseMonthlyRevenue, store=store)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            "Error forecasting revenue",
            "Error forecasting revenue",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid forecast parameters: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            "Error forecasting revenue",
            "Error forecasting revenue",
            e,
        )


@router.post("/seasonality", response_model=SeasonalityAnalysis)
async def seasonality_endpoint(
    request: SeasonalityRequest,
    store: SeasonalityStoreDep,
) -> SeasonalityAnalysis:
    """
    Learn monthly seasonality from historical data and publish it.

    The returned modelVersion is the version now used by forecasts. History
    without any paid revenue is analyzed but not published.
    """
    try:
        return calculate_seasonality(request.history, store=store)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            f"Error calculating seasonality from {len(request.history)} points",
            "Error calculating seasonality",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid history: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            f"Error calculating seasonality from {len(request.history)} points",
            "Error calculating seasonality",
            e,
        )


@router.get("/model", response_model=ForecastModelStats)
async def model_stats_endpoint(store: SeasonalityStoreDep) -> ForecastModelStats:
    """Current seasonality factors, collection rates and model version."""
    return get_forecast_model_stats(store=store)


# =============================================================================
# Cash Flow
# =============================================================================


@router.post("/cash-flow", response_model=CashFlowProjection)
async def cash_flow_endpoint(
    request: CashFlowRequest,
    settings: SettingsDep,
) -> CashFlowProjection:
    """
    Project weekly cash inflow for a set of accounts.

    Accounts are scored first; each one whose likelihood reaches the
    configured floor contributes its expected collection to the week its
    payment is expected in.
    """
    try:
        return project_cash_flow_for_accounts(
            request.accounts,
            request.dateRange,
            as_of=request.asOf,
            min_likelihood=settings.cash_flow_min_likelihood,
        )
    except ValidationError as e:
        raise internal_server_error(
            logger,
            f"Error projecting cash flow for {len(request.accounts)} accounts",
            "Error projecting cash flow",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid cash-flow request: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            f"Error projecting cash flow for {len(request.accounts)} accounts",
            "Error projecting cash flow",
            e,
        )


# =============================================================================
# Scenarios
# =============================================================================


@router.post("/scenario", response_model=ScenarioAnalysis)
async def scenario_endpoint(request: ScenarioRequest) -> ScenarioAnalysis:
    """
    Apply what-if assumptions to a base forecast.

    Raises:
        HTTPException 422: If an assumption has a zero base value
        HTTPException 500: If the analysis fails
    """
    try:
        return scenario_analysis(request.baseForecast, request.assumptions)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            "Error running scenario analysis",
            "Error running scenario analysis",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid scenario: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            "Error running scenario analysis",
            "Error running scenario analysis",
            e,
        )


@router.post("/common-scenarios", response_model=Dict[str, List[ScenarioAssumption]])
async def common_scenarios_endpoint(request: CommonScenariosRequest) -> Dict[str, List[ScenarioAssumption]]:
    """Optimistic, pessimistic and volume growth/decline assumption sets."""
    return create_common_scenarios(request.collectionRate, request.claimVolume, request.denialRate)
