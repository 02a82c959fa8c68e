"""
KPI Calculator

Operational revenue-cycle KPIs over claim and account records. One function
per KPI, each taking its record set plus an optional prior-period value:

    KPI                        Source     Rounding   Better
    Days in A/R                claims     integer    lower
    Clean Claim Rate           claims     integer    higher
    Denial Rate                claims     1 decimal  lower
    Collection Rate            accounts   1 decimal  higher
    First Pass Yield           claims     integer    higher
    Cost to Collect            costs      2 decimal  lower
    Net Collection Rate        claims     1 decimal  higher
    Adjusted Collection Rate   accounts   1 decimal  higher (no benchmark)
    Average Days to Payment    claims     integer    lower
    Denial Overturn Rate       claims     integer    higher (no benchmark)

An empty record set or zero denominator never raises: the KPI comes back
with value 0, sample size 0 and a note explaining why, without trend or
benchmark. A trend is attached only when a prior value is given.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from rcm_analytics.core.config import get_settings
from rcm_analytics.models.enums import BenchmarkPerformance, ClaimStatus, KPITrendDirection
from rcm_analytics.models.schemas import (
    AccountForKPI,
    BenchmarkData,
    ClaimForKPI,
    CostData,
    DateRange,
    IndustryBenchmark,
    KPIDashboard,
    KPIResult,
    KPITrend,
)
from rcm_analytics.services.numeric import format_amount, format_number, round_half_up

logger = logging.getLogger(__name__)


# =============================================================================
# Industry Benchmarks
# =============================================================================


@dataclass(frozen=True)
class KPIBenchmark:
    excellent: float
    good: float
    average: float
    poor: float
    unit: str
    higher_is_better: bool
    source: str


INDUSTRY_BENCHMARKS: Dict[str, KPIBenchmark] = {
    "daysInAR": KPIBenchmark(30, 40, 50, 60, "days", False, "HFMA"),
    "cleanClaimRate": KPIBenchmark(98, 95, 90, 85, "%", True, "HFMA"),
    "denialRate": KPIBenchmark(3, 5, 8, 12, "%", False, "HFMA/MGMA"),
    "collectionRate": KPIBenchmark(98, 95, 92, 88, "%", True, "MGMA"),
    "firstPassYield": KPIBenchmark(95, 90, 85, 80, "%", True, "HFMA"),
    "costToCollect": KPIBenchmark(3, 4, 5, 7, "%", False, "MGMA"),
    "netCollectionRate": KPIBenchmark(96, 94, 92, 88, "%", True, "MGMA"),
    "averageDaysToPayment": KPIBenchmark(25, 35, 45, 60, "days", False, "HFMA"),
}

# Percentile reported for each band, best first
BAND_PERCENTILES = (
    (BenchmarkPerformance.ABOVE, 90),
    (BenchmarkPerformance.ABOVE, 75),
    (BenchmarkPerformance.AT, 50),
    (BenchmarkPerformance.BELOW, 25),
)
BELOW_POOR = (BenchmarkPerformance.BELOW, 10)

# |change percent| under this is reported as stable
TREND_DEAD_BAND_PERCENT = 2


# =============================================================================
# Helpers
# =============================================================================


def calculate_trend(current_value: float, prior_value: float, higher_is_better: bool) -> KPITrend:
    """Compare a KPI with its prior-period value."""
    change = current_value - prior_value
    change_percent = round_half_up(change / prior_value * 100, 1) if prior_value != 0 else 0

    if abs(change_percent) < TREND_DEAD_BAND_PERCENT:
        direction = KPITrendDirection.STABLE
    elif change > 0:
        direction = KPITrendDirection.UP
    else:
        direction = KPITrendDirection.DOWN

    good_direction = KPITrendDirection.UP if higher_is_better else KPITrendDirection.DOWN
    return KPITrend(
        priorValue=prior_value,
        change=round_half_up(change, 1),
        changePercent=change_percent,
        direction=direction,
        favorable=direction in (good_direction, KPITrendDirection.STABLE),
    )


def calculate_benchmark(value: float, benchmark: KPIBenchmark) -> BenchmarkData:
    """
    Place a KPI value in its industry band.

    Bands are checked best first; a value exactly on a band edge belongs to
    the better band. The reported benchmark value is the industry average.
    """
    thresholds = (benchmark.excellent, benchmark.good, benchmark.average, benchmark.poor)
    performance, percentile = BELOW_POOR
    for threshold, band in zip(thresholds, BAND_PERCENTILES):
        reached = value >= threshold if benchmark.higher_is_better else value <= threshold
        if reached:
            performance, percentile = band
            break

    return BenchmarkData(
        value=benchmark.average,
        source=benchmark.source,
        performance=performance,
        percentile=percentile,
    )


def _display(value: float, unit: str) -> str:
    if unit == "days":
        return f"{format_number(value)} days"
    return f"{format_number(value)}{unit}"


def _empty_result(name: str, unit: str, notes: str) -> KPIResult:
    return KPIResult(
        name=name,
        value=0,
        displayValue=_display(0, unit),
        unit=unit,
        notes=notes,
        sampleSize=0,
    )


def _kpi_result(
    name: str,
    value: float,
    sample_size: int,
    prior_value: Optional[float],
    benchmark_key: Optional[str] = None,
    unit: str = "%",
    higher_is_better: bool = True,
    notes: Optional[str] = None,
) -> KPIResult:
    benchmark = INDUSTRY_BENCHMARKS.get(benchmark_key) if benchmark_key else None
    if benchmark is not None:
        higher_is_better = benchmark.higher_is_better

    return KPIResult(
        name=name,
        value=value,
        displayValue=_display(value, unit),
        unit=unit,
        trend=calculate_trend(value, prior_value, higher_is_better) if prior_value is not None else None,
        benchmark=calculate_benchmark(value, benchmark) if benchmark is not None else None,
        notes=notes,
        sampleSize=sample_size,
    )


# =============================================================================
# KPI Functions
# =============================================================================


def calculate_days_in_ar(
    claims: List[ClaimForKPI],
    period_days: Optional[int] = None,
    prior_value: Optional[float] = None,
) -> KPIResult:
    """
    Days in A/R = outstanding balance / average daily charges.

    Outstanding balance is billed minus paid over claims that are neither
    paid nor denied. Average daily charges spread all billed amounts over
    period_days (settings.kpi_default_period_days when not given).

    Raises:
        ValueError: If period_days is given and not positive.
    """
    if period_days is not None and period_days <= 0:
        raise ValueError(f"period_days must be positive, got {period_days}")

    name = "Days in A/R"
    if not claims:
        return _empty_result(name, "days", "No claims in period")

    if period_days is None:
        period_days = get_settings().kpi_default_period_days

    outstanding = sum(
        claim.billedAmount - (claim.paidAmount or 0)
        for claim in claims
        if claim.status not in (ClaimStatus.PAID, ClaimStatus.DENIED)
    )
    total_charges = sum(claim.billedAmount for claim in claims)
    if total_charges <= 0:
        return _empty_result(name, "days", "No charges in period")

    days_in_ar = round_half_up(outstanding / (total_charges / period_days))
    return _kpi_result(name, days_in_ar, len(claims), prior_value, "daysInAR", unit="days")


def calculate_clean_claim_rate(claims: List[ClaimForKPI], prior_value: Optional[float] = None) -> KPIResult:
    """Share of submitted claims paid on first submission without a denial."""
    name = "Clean Claim Rate"
    submitted = [
        claim for claim in claims
        if claim.status != ClaimStatus.DRAFT and claim.submissionDate is not None
    ]
    if not submitted:
        return _empty_result(name, "%", "No submitted claims in period")

    clean = [
        claim for claim in submitted
        if claim.paidFirstPass is True or (claim.status == ClaimStatus.PAID and not claim.wasDenied)
    ]
    rate = round_half_up(len(clean) / len(submitted) * 100)
    return _kpi_result(name, rate, len(submitted), prior_value, "cleanClaimRate")


def calculate_denial_rate(claims: List[ClaimForKPI], prior_value: Optional[float] = None) -> KPIResult:
    """Denied claims over processed (paid, denied or ever-denied) claims."""
    name = "Denial Rate"
    processed = [
        claim for claim in claims
        if claim.status in (ClaimStatus.PAID, ClaimStatus.DENIED) or claim.wasDenied
    ]
    if not processed:
        return _empty_result(name, "%", "No processed claims in period")

    denied = [claim for claim in processed if claim.status == ClaimStatus.DENIED or claim.wasDenied is True]
    rate = round_half_up(len(denied) / len(processed) * 100, 1)
    return _kpi_result(name, rate, len(processed), prior_value, "denialRate")


def calculate_collection_rate(accounts: List[AccountForKPI], prior_value: Optional[float] = None) -> KPIResult:
    """Gross collection rate: total paid over total original balances."""
    name = "Collection Rate"
    if not accounts:
        return _empty_result(name, "%", "No accounts in period")

    total_billed = sum(account.originalBalance for account in accounts)
    total_collected = sum(account.totalPaid for account in accounts)
    if total_billed <= 0:
        return _empty_result(name, "%", "No billed balances in period")

    rate = round_half_up(total_collected / total_billed * 100, 1)
    return _kpi_result(
        name, rate, len(accounts), prior_value, "collectionRate",
        notes=f"Total Billed: ${format_amount(total_billed)}, Collected: ${format_amount(total_collected)}",
    )


def calculate_first_pass_yield(claims: List[ClaimForKPI], prior_value: Optional[float] = None) -> KPIResult:
    """Share of paid revenue collected without a denial along the way."""
    name = "First Pass Yield"
    paid_claims = [claim for claim in claims if claim.status == ClaimStatus.PAID]
    if not paid_claims:
        return _empty_result(name, "%", "No paid claims in period")

    total_paid = sum(claim.paidAmount or 0 for claim in paid_claims)
    if total_paid <= 0:
        return _empty_result(name, "%", "No payments on paid claims in period")

    first_pass_paid = sum(
        claim.paidAmount or 0
        for claim in paid_claims
        if claim.paidFirstPass is True or not claim.wasDenied
    )
    rate = round_half_up(first_pass_paid / total_paid * 100)
    return _kpi_result(name, rate, len(paid_claims), prior_value, "firstPassYield")


def calculate_cost_to_collect(
    revenue: float,
    costs: CostData,
    prior_value: Optional[float] = None,
) -> KPIResult:
    """Collection costs as a percentage of revenue collected."""
    name = "Cost to Collect"
    if revenue <= 0:
        return _empty_result(name, "%", "No revenue in period")

    cost_to_collect = round_half_up(costs.totalCosts / revenue * 100, 2)

    breakdown = ""
    if costs.staffCosts:
        breakdown += f"Staff: ${format_amount(costs.staffCosts)}; "
    if costs.technologyCosts:
        breakdown += f"Tech: ${format_amount(costs.technologyCosts)}; "
    if costs.outsourcingCosts:
        breakdown += f"Outsource: ${format_amount(costs.outsourcingCosts)}; "

    return _kpi_result(
        name, cost_to_collect, 1, prior_value, "costToCollect",
        notes=breakdown or None,
    )


def calculate_net_collection_rate(claims: List[ClaimForKPI], prior_value: Optional[float] = None) -> KPIResult:
    """Payments over allowed amounts (billed when no allowed amount is known)."""
    name = "Net Collection Rate"
    paid_claims = [claim for claim in claims if claim.status == ClaimStatus.PAID and claim.paidAmount]
    if not paid_claims:
        return _empty_result(name, "%", "No paid claims in period")

    total_payments = sum(claim.paidAmount for claim in paid_claims)
    total_allowed = sum(claim.allowedAmount or claim.billedAmount for claim in paid_claims)
    if total_allowed <= 0:
        return _empty_result(name, "%", "No allowed amounts on paid claims in period")

    rate = round_half_up(total_payments / total_allowed * 100, 1)
    return _kpi_result(name, rate, len(paid_claims), prior_value, "netCollectionRate")


def calculate_adjusted_collection_rate(
    accounts: List[AccountForKPI],
    prior_value: Optional[float] = None,
) -> KPIResult:
    """
    Payments over original balances net of adjustments and bad debt.

    Bad debt is the current balance of written-off accounts. There is no
    industry benchmark for this rate.
    """
    name = "Adjusted Collection Rate"
    if not accounts:
        return _empty_result(name, "%", "No accounts in period")

    total_original = sum(account.originalBalance for account in accounts)
    total_adjustments = sum(account.totalAdjustments for account in accounts)
    total_write_offs = sum(account.currentBalance for account in accounts if account.isWrittenOff)
    total_collected = sum(account.totalPaid for account in accounts)

    adjusted_base = total_original - total_adjustments - total_write_offs
    if adjusted_base <= 0:
        return _empty_result(name, "%", "No collectible balance after adjustments and write-offs")

    rate = round_half_up(total_collected / adjusted_base * 100, 1)
    return _kpi_result(name, rate, len(accounts), prior_value)


def calculate_average_days_to_payment(
    claims: List[ClaimForKPI],
    prior_value: Optional[float] = None,
) -> KPIResult:
    """Mean days from service to payment over paid claims; negative spans count as 0."""
    name = "Average Days to Payment"
    paid_claims = [claim for claim in claims if claim.status == ClaimStatus.PAID and claim.paymentDate]
    if not paid_claims:
        return _empty_result(name, "days", "No paid claims with dates in period")

    total_days = sum(max(0, (claim.paymentDate - claim.serviceDate).days) for claim in paid_claims)
    average_days = round_half_up(total_days / len(paid_claims))
    return _kpi_result(name, average_days, len(paid_claims), prior_value, "averageDaysToPayment", unit="days")


def calculate_denial_overturn_rate(
    claims: List[ClaimForKPI],
    prior_value: Optional[float] = None,
) -> KPIResult:
    """
    Overturned denials over appealed claims.

    A claim counts as appealed when its status is appealed or an appeal
    outcome (denialOverturned) is recorded.
    """
    name = "Denial Overturn Rate"
    denied = [claim for claim in claims if claim.wasDenied is True]
    appealed = [
        claim for claim in claims
        if claim.status == ClaimStatus.APPEALED or claim.denialOverturned is not None
    ]
    overturned = [claim for claim in claims if claim.denialOverturned is True]
    if not appealed:
        return _empty_result(name, "%", "No appealed claims in period")

    rate = round_half_up(len(overturned) / len(appealed) * 100)
    return _kpi_result(
        name, rate, len(appealed), prior_value,
        notes=f"{len(denied)} total denials, {len(appealed)} appealed, {len(overturned)} overturned",
    )


# =============================================================================
# Dashboard
# =============================================================================


def generate_kpi_dashboard(
    claims: List[ClaimForKPI],
    accounts: List[AccountForKPI],
    costs: CostData,
    date_range: DateRange,
    prior_period_kpis: Optional[Dict[str, float]] = None,
) -> KPIDashboard:
    """
    Calculate the nine dashboard KPIs for one period.

    Args:
        claims: Claims in the period.
        accounts: Patient accounts in the period.
        costs: Collection costs; revenue for cost-to-collect is the total paid
            across accounts.
        date_range: Measurement period. Its length in days drives Days in
            A/R; a single-day range uses the configured default period.
        prior_period_kpis: Optional prior values keyed by dashboard field
            name (daysInAR, cleanClaimRate, ...).

    Returns:
        KPIDashboard with every KPI, the period and a generation timestamp.
    """
    prior = prior_period_kpis or {}
    period_days = (date_range.endDate - date_range.startDate).days or None
    total_revenue = sum(account.totalPaid for account in accounts)

    dashboard = KPIDashboard(
        daysInAR=calculate_days_in_ar(claims, period_days, prior.get("daysInAR")),
        cleanClaimRate=calculate_clean_claim_rate(claims, prior.get("cleanClaimRate")),
        denialRate=calculate_denial_rate(claims, prior.get("denialRate")),
        collectionRate=calculate_collection_rate(accounts, prior.get("collectionRate")),
        firstPassYield=calculate_first_pass_yield(claims, prior.get("firstPassYield")),
        costToCollect=calculate_cost_to_collect(total_revenue, costs, prior.get("costToCollect")),
        netCollectionRate=calculate_net_collection_rate(claims, prior.get("netCollectionRate")),
        adjustedCollectionRate=calculate_adjusted_collection_rate(accounts, prior.get("adjustedCollectionRate")),
        averageDaysToPayment=calculate_average_days_to_payment(claims, prior.get("averageDaysToPayment")),
        generatedAt=datetime.now(timezone.utc),
        period=date_range,
    )

    logger.debug(
        f"KPI dashboard {date_range.startDate} to {date_range.endDate}: "
        f"{len(claims)} claims, {len(accounts)} accounts"
    )
    return dashboard


def get_industry_benchmarks() -> Dict[str, IndustryBenchmark]:
    """Industry reference bands keyed by dashboard field name."""
    return {
        key: IndustryBenchmark(
            excellent=benchmark.excellent,
            good=benchmark.good,
            average=benchmark.average,
            poor=benchmark.poor,
            unit=benchmark.unit,
            higherIsBetter=benchmark.higher_is_better,
            source=benchmark.source,
        )
        for key, benchmark in INDUSTRY_BENCHMARKS.items()
    }


__all__ = [
    "KPIBenchmark",
    "INDUSTRY_BENCHMARKS",
    "calculate_trend",
    "calculate_benchmark",
    "calculate_days_in_ar",
    "calculate_clean_claim_rate",
    "calculate_denial_rate",
    "calculate_collection_rate",
    "calculate_first_pass_yield",
    "calculate_cost_to_collect",
    "calculate_net_collection_rate",
    "calculate_adjusted_collection_rate",
    "calculate_average_days_to_payment",
    "calculate_denial_overturn_rate",
    "generate_kpi_dashboard",
    "get_industry_benchmarks",
]
