"""
FastAPI router module for KPI endpoints.

- POST /kpis/dashboard - all nine dashboard KPIs for one period
- GET  /kpis/benchmarks - industry reference bands per KPI
"""

import logging
from typing import Dict

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from rcm_analytics.api.errors import internal_server_error
from rcm_analytics.models.schemas import IndustryBenchmark, KPIDashboard, KPIDashboardRequest
from rcm_analytics.services.kpi_calculator import generate_kpi_dashboard, get_industry_benchmarks

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/kpis", tags=["kpis"])


@router.post("/dashboard", response_model=KPIDashboard)
async def kpi_dashboard_endpoint(request: KPIDashboardRequest) -> KPIDashboard:
    """
    Generate the KPI dashboard for one measurement period.

    Prior-period values, keyed by dashboard field name (daysInAR,
    denialRate, ...), add a trend to the matching KPIs. KPIs with no data
    come back as zero with an explanatory note.

    Raises:
        HTTPException 422: If the request data is inconsistent
        HTTPException 500: If KPI calculation fails
    """
    try:
        return generate_kpi_dashboard(
            request.claims,
            request.accounts,
            request.costs,
            request.dateRange,
            prior_period_kpis=request.priorPeriodKpis,
        )
    except ValidationError as e:
        raise internal_server_error(
            logger,
            f"Error generating KPI dashboard for {len(request.claims)} claims",
            "Error generating KPI dashboard",
            e,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid KPI request: {str(e)}")
    except Exception as e:
        raise internal_server_error(
            logger,
            f"Error generating KPI dashboard for {len(request.claims)} claims",
            "Error generating KPI dashboard",
            e,
        )


@router.get("/benchmarks", response_model=Dict[str, IndustryBenchmark])
async def benchmarks_endpoint() -> Dict[str, IndustryBenchmark]:
    """Industry benchmark bands (HFMA/MGMA) keyed by dashboard field name."""
    return get_industry_benchmarks()
