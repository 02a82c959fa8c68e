"""
Pytest Configuration and Shared Fixtures for RCM Analytics Tests.

This module provides fixtures and configuration for all engine tests:
- Reference account factors with hand-checked scores
- A five-account portfolio with one account per recovery tier
- Claim and account records for KPI tests
- Synthetic seasonal payment history
- An isolated SeasonalityStore per test, and a reset of the process-wide
  store so tests never see each other's published seasonality

Portfolio reference scores (prediction policy):

    accountId   balance  score  tier      strategy
    ACC-PLAT    1,000    80     platinum  standard-dunning
    ACC-GOLD    3,000    72     gold      accelerated-dunning
    ACC-SILV      800    54     silver    accelerated-dunning
    ACC-BRNZ    6,000    29     bronze    charity-screening
    ACC-IRON    6,000     9     iron      hold
"""

from datetime import date, timedelta
from typing import Any, Callable, Dict, Generator, List

import pytest

from rcm_analytics.models import (
    AccountForKPI,
    AccountForPrediction,
    AccountScoringFactors,
    ClaimForKPI,
    ClaimStatus,
    CostData,
    DateRange,
    HistoricalDataPoint,
)
from rcm_analytics.services.seasonality import SeasonalityStore, get_seasonality_store


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - reference: Hand-checked reference scenarios with exact expected values
    - api: Tests that exercise the HTTP layer through TestClient
    - concurrency: Tests that exercise the seasonality store from threads

    Usage:
        pytest -m reference
        pytest -m "not api"
    """
    config.addinivalue_line(
        'markers',
        'reference: hand-checked reference scenarios with exact expected values'
    )
    config.addinivalue_line(
        'markers',
        'api: tests exercising the FastAPI layer via TestClient'
    )
    config.addinivalue_line(
        'markers',
        'concurrency: tests publishing or reading seasonality from several threads'
    )


# ============================================================
# SEASONALITY STATE ISOLATION
# ============================================================

@pytest.fixture(autouse=True)
def reset_seasonality_store() -> Generator[None, None, None]:
    """
    Start every test from the default seasonality model.

    The process-wide store lives for the whole session; resetting it before
    and after each test means published models never leak between tests.
    """
    get_seasonality_store().reset()
    yield
    get_seasonality_store().reset()


@pytest.fixture
def seasonality_store() -> SeasonalityStore:
    """An isolated store holding the built-in default model (version 0)."""
    return SeasonalityStore()


# ============================================================
# ACCOUNT SCORING FIXTURES
# ============================================================

@pytest.fixture
def reference_factors() -> Dict[str, Any]:
    """
    Reference account: score 80, very-high, standard-dunning, expected 700,
    24 days to first payment.

    Breakdown: balance 18 (50% paid down), age 20, history 14, insurance 15,
    contactability 5, demographic 8.
    """
    return {
        'balance': 1000,
        'originalAmount': 2000,
        'daysPastDue': 0,
        'paymentHistory': 'good',
        'insurance': 'insured',
        'hasValidPhone': True,
        'hasValidEmail': False,
        'hasRespondedToContact': False,
        'patientAge': 40,
    }


@pytest.fixture
def make_account() -> Callable[..., AccountForPrediction]:
    """
    Factory building an AccountForPrediction from factor keyword arguments.

    Unspecified required factors default to a neutral account: balance 1,000
    not paid down, current, fair history, insured.

    Example:
        account = make_account('ACC-1', balance=50, hasActiveDispute=True)
    """
    def _make(account_id: str = 'ACC-1', **factors: Any) -> AccountForPrediction:
        values: Dict[str, Any] = {
            'balance': 1000,
            'originalAmount': 1000,
            'daysPastDue': 0,
            'paymentHistory': 'fair',
            'insurance': 'insured',
        }
        values.update(factors)
        return AccountForPrediction(
            accountId=account_id,
            factors=AccountScoringFactors(**values),
        )

    return _make


@pytest.fixture
def reference_account(reference_factors: Dict[str, Any]) -> AccountForPrediction:
    return AccountForPrediction(
        accountId='ACC-REF',
        patientId='PAT-REF',
        accountType='self-pay',
        factors=AccountScoringFactors(**reference_factors),
    )


@pytest.fixture
def tiered_portfolio(
    reference_factors: Dict[str, Any],
    make_account: Callable[..., AccountForPrediction],
) -> List[AccountForPrediction]:
    """Five accounts, one per recovery tier (see module docstring)."""
    bronze = {
        'balance': 6000,
        'originalAmount': 6000,
        'daysPastDue': 400,
        'paymentHistory': 'poor',
        'insurance': 'uninsured',
    }
    return [
        make_account('ACC-PLAT', **reference_factors),
        make_account(
            'ACC-GOLD',
            balance=3000,
            originalAmount=3000,
            daysPastDue=45,
            hasValidPhone=True,
            hasValidEmail=True,
        ),
        make_account(
            'ACC-SILV',
            balance=800,
            originalAmount=800,
            daysPastDue=200,
            insurance='underinsured',
            hasValidPhone=True,
            patientAge=30,
        ),
        make_account('ACC-BRNZ', **bronze),
        make_account('ACC-IRON', hasActiveDispute=True, **bronze),
    ]


# ============================================================
# FORECASTING FIXTURES
# ============================================================

@pytest.fixture
def first_quarter_2024() -> DateRange:
    return DateRange(startDate=date(2024, 1, 1), endDate=date(2024, 3, 31))


@pytest.fixture
def seasonal_history() -> List[HistoricalDataPoint]:
    """
    One year of monthly payments averaging exactly 1,000.

    December pays 2,000 (2x the average), June 500 (0.5x), every other
    month 950.
    """
    paid = {month: 950.0 for month in range(1, 13)}
    paid[12] = 2000.0
    paid[6] = 500.0
    return [
        HistoricalDataPoint(date=date(2023, month, 1), paidAmount=amount, claimCount=10)
        for month, amount in paid.items()
    ]


# ============================================================
# KPI FIXTURES
# ============================================================

@pytest.fixture
def kpi_period() -> DateRange:
    return DateRange(startDate=date(2024, 1, 1), endDate=date(2024, 1, 31))


@pytest.fixture
def sample_claims() -> List[ClaimForKPI]:
    """
    Ten claims in January 2024.

    - 6 paid (5 on first pass, 1 after a denial was overturned on appeal)
    - 2 denied (one appealed and upheld)
    - 1 pending, 1 draft
    """
    service = date(2024, 1, 2)
    submitted = date(2024, 1, 3)
    claims = [
        ClaimForKPI(
            claimId=f'CLM-{index}',
            status=ClaimStatus.PAID,
            billedAmount=1000,
            allowedAmount=800,
            paidAmount=800,
            serviceDate=service,
            submissionDate=submitted,
            paymentDate=service + timedelta(days=20 + index),
            paidFirstPass=True,
            wasDenied=False,
        )
        for index in range(1, 6)
    ]
    claims.extend([
        ClaimForKPI(
            claimId='CLM-6',
            status=ClaimStatus.PAID,
            billedAmount=1000,
            allowedAmount=800,
            paidAmount=800,
            serviceDate=service,
            submissionDate=submitted,
            paymentDate=service + timedelta(days=60),
            paidFirstPass=False,
            wasDenied=True,
            denialOverturned=True,
        ),
        ClaimForKPI(
            claimId='CLM-7',
            status=ClaimStatus.DENIED,
            billedAmount=500,
            serviceDate=service,
            submissionDate=submitted,
            denialDate=date(2024, 1, 20),
            wasDenied=True,
            denialOverturned=False,
        ),
        ClaimForKPI(
            claimId='CLM-8',
            status=ClaimStatus.DENIED,
            billedAmount=500,
            serviceDate=service,
            submissionDate=submitted,
            denialDate=date(2024, 1, 21),
            wasDenied=True,
        ),
        ClaimForKPI(
            claimId='CLM-9',
            status=ClaimStatus.PENDING,
            billedAmount=2000,
            serviceDate=service,
            submissionDate=submitted,
        ),
        ClaimForKPI(
            claimId='CLM-10',
            status=ClaimStatus.DRAFT,
            billedAmount=1000,
            serviceDate=service,
        ),
    ])
    return claims


@pytest.fixture
def sample_kpi_accounts() -> List[AccountForKPI]:
    """Four accounts: 10,000 billed, 9,300 collected, 500 adjusted, one written off."""
    return [
        AccountForKPI(accountId='A-1', originalBalance=4000, currentBalance=0, totalPaid=4000, isPaidInFull=True),
        AccountForKPI(accountId='A-2', originalBalance=3000, currentBalance=0, totalPaid=2500, totalAdjustments=500),
        AccountForKPI(accountId='A-3', originalBalance=2000, currentBalance=200, totalPaid=1800),
        AccountForKPI(accountId='A-4', originalBalance=1000, currentBalance=0, totalPaid=1000, isWrittenOff=False),
    ]


@pytest.fixture
def sample_costs() -> CostData:
    return CostData(
        totalRevenue=9300,
        totalCosts=372,
        staffCosts=250,
        technologyCosts=72,
        outsourcingCosts=50,
    )
