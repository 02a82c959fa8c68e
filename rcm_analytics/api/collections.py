"""
FastAPI router module for collection scoring endpoints.

Exposes the collection scorer, portfolio segmentation and work-queue
scoring services:

- POST /collections/predict - likelihood prediction for one account
- POST /collections/predict/batch - predictions for many accounts
- POST /collections/time-to-collection - first-payment / full-collection timing
- POST /collections/strategy - optimal strategy with rationale
- GET  /collections/strategy-rules - ordered strategy decision table
- POST /collections/segments - recovery-tier segmentation
- POST /collections/work-queue - prioritized collector work queue
- POST /collections/portfolio-metrics - work-queue portfolio metrics

All endpoints are stateless; request bodies are validated by pydantic before
the handlers run.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from rcm_analytics.api.errors import internal_server_error
from rcm_analytics.models.schemas import (
    AccountBatchRequest,
    AccountForPrediction,
    CollectionPrediction,
    PortfolioMetrics,
    PrioritizedAccount,
    SegmentationResult,
    StrategyRecommendation,
    TimeToCollection,
)
from rcm_analytics.services.collection_scorer import (
    batch_predict_collection,
    get_optimal_strategy,
    get_strategy_rules,
    predict_collection_likelihood,
    predict_time_to_collection,
)
from rcm_analytics.services.segmentation import segment_accounts
from rcm_analytics.services.work_queue_scoring import (
    calculate_portfolio_metrics,
    prioritize_accounts,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/collections",
    tags=["collections"],
    responses={
        422: {"description": "Validation error in request"},
        500: {"description": "Internal server error during scoring"},
    },
)


# =============================================================================
# Single-Account Endpoints
# =============================================================================


@router.post("/predict", response_model=CollectionPrediction)
async def predict_endpoint(account: AccountForPrediction) -> CollectionPrediction:
    """
    Predict collection likelihood for one account.

    Returns the 0-100 likelihood score and class, full/partial collection
    probabilities, expected collection with its confidence interval,
    estimated days to payment, recommended and alternative strategies, and
    the risk and positive indicators behind the score.

    Raises:
        HTTPException 422: If the account cannot be scored
        HTTPException 500: If scoring fails unexpectedly
    """
    try:
        return predict_collection_likelihood(account)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            f"Error predicting collection for {account.accountId}",
            "Error predicting collection",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid account: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            f"Error predicting collection for {account.accountId}",
            "Error predicting collection",
            e,
        )


@router.post("/time-to-collection", response_model=TimeToCollection)
async def time_to_collection_endpoint(account: AccountForPrediction) -> TimeToCollection:
    """Estimated days to first payment and to full collection."""
    try:
        return predict_time_to_collection(account)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            f"Error estimating time to collection for {account.accountId}",
            "Error estimating time to collection",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid account: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            f"Error estimating time to collection for {account.accountId}",
            "Error estimating time to collection",
            e,
        )


@router.post("/strategy", response_model=StrategyRecommendation)
async def strategy_endpoint(account: AccountForPrediction) -> StrategyRecommendation:
    """Optimal collection strategy with rationale, alternatives and expected outcome."""
    try:
        return get_optimal_strategy(account)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            f"Error selecting strategy for {account.accountId}",
            "Error selecting strategy",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid account: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            f"Error selecting strategy for {account.accountId}",
            "Error selecting strategy",
            e,
        )


@router.get("/strategy-rules", response_model=List[Dict[str, str]])
async def strategy_rules_endpoint() -> List[Dict[str, str]]:
    """The prediction strategy decision table, highest priority first."""
    return get_strategy_rules()


# =============================================================================
# Portfolio Endpoints
# =============================================================================


@router.post("/predict/batch", response_model=List[CollectionPrediction])
async def batch_predict_endpoint(request: AccountBatchRequest) -> List[CollectionPrediction]:
    """
    Predict collection likelihood for many accounts.

    Predictions are returned in the same order as the submitted accounts.
    An empty list returns an empty list.
    """
    try:
        return batch_predict_collection(request.accounts)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            f"Error predicting batch of {len(request.accounts)} accounts",
            "Error predicting collections",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid accounts: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            f"Error predicting batch of {len(request.accounts)} accounts",
            "Error predicting collections",
            e,
        )


@router.post("/segments", response_model=SegmentationResult)
async def segments_endpoint(request: AccountBatchRequest) -> SegmentationResult:
    """
    Segment a portfolio into platinum/gold/silver/bronze/iron recovery tiers.

    Every tier is always present; the summary reports plain and
    balance-weighted average likelihood.
    """
    try:
        return segment_accounts(request.accounts)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            f"Error segmenting {len(request.accounts)} accounts",
            "Error segmenting accounts",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid accounts: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            f"Error segmenting {len(request.accounts)} accounts",
            "Error segmenting accounts",
            e,
        )


@router.post("/work-queue", response_model=List[PrioritizedAccount])
async def work_queue_endpoint(request: AccountBatchRequest) -> List[PrioritizedAccount]:
    """Accounts ranked by expected recovery, then work-queue score."""
    try:
        return prioritize_accounts(request.accounts)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            f"Error prioritizing {len(request.accounts)} accounts",
            "Error prioritizing accounts",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid accounts: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            f"Error prioritizing {len(request.accounts)} accounts",
            "Error prioritizing accounts",
            e,
        )


@router.post("/portfolio-metrics", response_model=PortfolioMetrics)
async def portfolio_metrics_endpoint(request: AccountBatchRequest) -> PortfolioMetrics:
    """Work-queue totals, priority counts and strategy distribution."""
    try:
        return calculate_portfolio_metrics(request.accounts)
    except ValidationError as e:
        raise internal_server_error(
            logger,
            "Error calculating portfolio metrics",
            "Error calculating portfolio metrics",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid accounts: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            "Error calculating portfolio metrics",
            "Error calculating portfolio metrics",
            e,
        )
