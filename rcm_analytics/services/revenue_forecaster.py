"""
Revenue Forecasting Service

Projects revenue and cash flow from the current seasonality model:

1. forecast_revenue - monthly periods between two dates, each the base
   monthly revenue x month factor x covered fraction of the month, with
   bounds that widen the further out a period is.
2. calculate_seasonality - learns monthly factors from historical payments
   and publishes them as a new seasonality model version.
3. project_cash_flow - buckets expected account payments into weeks.
4. scenario_analysis / create_common_scenarios - what-if analysis over a
   base forecast using fixed per-type impact coefficients.

Every forecast reads one seasonality snapshot up front, so a concurrent
recalculation never changes factors halfway through a forecast.
"""

import calendar
import logging
import math
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from rcm_analytics.core.config import get_settings
from rcm_analytics.models.enums import (
    AssumptionImpact,
    AssumptionUnit,
    ScenarioAssumptionType,
    ScenarioImpact,
    TrendDirection,
)
from rcm_analytics.models.schemas import (
    AccountForPrediction,
    CashFlowAccount,
    CashFlowProjection,
    CashFlowSummary,
    DateRange,
    ForecastAssumption,
    ForecastModelStats,
    ForecastPeriod,
    ForecastSummary,
    HistoricalDataPoint,
    RevenueForecast,
    ScenarioAnalysis,
    ScenarioAssumption,
    SeasonalityAnalysis,
    SeasonalityPattern,
    SensitivityEntry,
    WeeklyCashFlow,
)
from rcm_analytics.services.collection_scorer import batch_predict_collection
from rcm_analytics.services.numeric import format_amount, format_number, round_half_up, safe_ratio
from rcm_analytics.services.seasonality import (
    MONTHS,
    SeasonalityModel,
    SeasonalityStore,
    get_seasonality_store,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Monthly forecast bounds: +/-10% widened by 2% per month out
FORECAST_BAND = 0.10
FORECAST_UNCERTAINTY_PER_MONTH = 0.02
FORECAST_BASE_CONFIDENCE = 95
FORECAST_CONFIDENCE_DECAY = 3
FORECAST_MIN_CONFIDENCE = 60

# Trend needs at least this many periods; |change| at or under 5% is stable
TREND_MIN_PERIODS = 3
TREND_STABLE_PERCENT = 5

LOW_SEASON_FACTOR = 0.9
HIGH_SEASON_FACTOR = 1.05
LONG_RANGE_PERIODS = 6

# Seasonality analysis
PEAK_MONTH_TOLERANCE = 0.95
LOW_MONTH_TOLERANCE = 1.05
PATTERN_BASE_CONFIDENCE = 50
PATTERN_CONFIDENCE_PER_SAMPLE = 5
MAX_PATTERN_CONFIDENCE = 95

# Weekly cash-flow bounds: -25% / +20%, widened by 3% per week out
CASH_FLOW_LOWER_SHARE = 0.75
CASH_FLOW_UPPER_SHARE = 1.2
CASH_FLOW_UNCERTAINTY_PER_WEEK = 0.03

# Scenario impact coefficients per unit of relative change
SCENARIO_IMPACT_COEFFICIENTS: Dict[ScenarioAssumptionType, float] = {
    ScenarioAssumptionType.COLLECTION_RATE: 1.0,
    ScenarioAssumptionType.CLAIM_VOLUME: 0.9,
    ScenarioAssumptionType.PAYER_MIX: 0.5,
    ScenarioAssumptionType.DENIAL_RATE: -0.8,
    ScenarioAssumptionType.CUSTOM: 0.7,
}

SIGNIFICANT_SCENARIO_PERCENT = 10
SCENARIO_PERCENT = 3


def _resolve_model(
    model: Optional[SeasonalityModel] = None,
    store: Optional[SeasonalityStore] = None,
) -> SeasonalityModel:
    if model is not None:
        return model
    return (store or get_seasonality_store()).current()


# =============================================================================
# Revenue Forecast
# =============================================================================


def _month_end(day: date) -> date:
    return date(day.year, day.month, calendar.monthrange(day.year, day.month)[1])


def _forecast_trend(forecasts: List[float]) -> tuple:
    """Compare the mean of the second half of the periods with the first half."""
    if len(forecasts) < TREND_MIN_PERIODS:
        return TrendDirection.STABLE, 0.0

    midpoint = len(forecasts) // 2
    first_half = float(np.mean(forecasts[:midpoint]))
    second_half = float(np.mean(forecasts[midpoint:]))
    trend_percent = safe_ratio(second_half - first_half, first_half) * 100

    if trend_percent > TREND_STABLE_PERCENT:
        direction = TrendDirection.INCREASING
    elif trend_percent < -TREND_STABLE_PERCENT:
        direction = TrendDirection.DECREASING
    else:
        direction = TrendDirection.STABLE
    return direction, round_half_up(trend_percent, 1)


def forecast_revenue(
    date_range: DateRange,
    base_monthly_revenue: float,
    model: Optional[SeasonalityModel] = None,
    store: Optional[SeasonalityStore] = None,
) -> RevenueForecast:
    """
    Forecast revenue month by month over a date range.

    Partial months at either end of the range are pro-rated by the share of
    their days that fall inside the range.

    Args:
        date_range: Inclusive forecast window.
        base_monthly_revenue: Expected revenue for an average month.
        model: Seasonality snapshot to use. Defaults to the store's current
            model.
        store: Store to read the snapshot from when no model is given.
            Defaults to the process-wide store.

    Returns:
        RevenueForecast with one period per calendar month touched by the
        range.

    Raises:
        ValueError: If base_monthly_revenue is negative or not finite.
    """
    if not math.isfinite(base_monthly_revenue) or base_monthly_revenue < 0:
        raise ValueError(f"base_monthly_revenue must be a non-negative finite number, got {base_monthly_revenue}")

    snapshot = _resolve_model(model, store)
    settings = get_settings()
    collection_rate = settings.expected_collection_rate
    revenue_per_claim = settings.average_charge_per_claim * collection_rate

    periods: List[ForecastPeriod] = []
    factors: List[float] = []
    month_start = date_range.startDate.replace(day=1)

    while month_start <= date_range.endDate:
        month_end = _month_end(month_start)
        effective_start = max(month_start, date_range.startDate)
        effective_end = min(month_end, date_range.endDate)
        fraction = ((effective_end - effective_start).days + 1) / month_end.day

        factor = snapshot.factor_for(month_start.month)
        forecast = base_monthly_revenue * factor * fraction

        months_out = len(periods)
        uncertainty = 1 + FORECAST_UNCERTAINTY_PER_MONTH * months_out

        periods.append(ForecastPeriod(
            startDate=effective_start,
            endDate=effective_end,
            label=f"{calendar.month_name[month_start.month]} {month_start.year}",
            forecast=round_half_up(forecast),
            lowerBound=round_half_up(forecast * (1 - FORECAST_BAND) / uncertainty),
            upperBound=round_half_up(forecast * (1 + FORECAST_BAND) * uncertainty),
            periodConfidence=max(FORECAST_MIN_CONFIDENCE, FORECAST_BASE_CONFIDENCE - FORECAST_CONFIDENCE_DECAY * months_out),
            seasonalityFactor=factor,
            expectedClaimCount=round_half_up(forecast / revenue_per_claim),
            expectedCollectionRate=collection_rate,
        ))
        factors.append(factor)
        month_start = month_end + timedelta(days=1)

    forecasts = [period.forecast for period in periods]
    total_forecast = sum(forecasts)
    average_monthly = total_forecast / len(periods)
    historical_average = snapshot.historical_average_monthly
    vs_historical = (
        (average_monthly - historical_average) / historical_average * 100
        if historical_average > 0 else 0.0
    )
    trend, trend_percent = _forecast_trend(forecasts)

    summary = ForecastSummary(
        totalForecast=total_forecast,
        totalLowerBound=sum(period.lowerBound for period in periods),
        totalUpperBound=sum(period.upperBound for period in periods),
        averageMonthly=round_half_up(average_monthly),
        vsHistoricalAverage=round_half_up(vs_historical, 1),
        trend=trend,
        trendPercent=trend_percent,
    )

    assumptions = [
        ForecastAssumption(
            name="Base Monthly Revenue",
            value=base_monthly_revenue,
            impact=AssumptionImpact.HIGH,
        ),
        ForecastAssumption(
            name="Seasonality Applied",
            value="Yes - Healthcare Standard" if snapshot.version == 0 else f"Yes - Learned (v{snapshot.version})",
            impact=AssumptionImpact.MEDIUM,
        ),
        ForecastAssumption(
            name="Collection Rate",
            value=f"{format_number(round_half_up(collection_rate * 100, 1))}%",
            impact=AssumptionImpact.HIGH,
        ),
        ForecastAssumption(name="Growth Rate", value="0%", impact=AssumptionImpact.MEDIUM),
    ]

    risk_factors = []
    if any(factor < LOW_SEASON_FACTOR for factor in factors):
        risk_factors.append("Forecast includes historically low-revenue months")
    if len(periods) > LONG_RANGE_PERIODS:
        risk_factors.append("Long-range forecasts have higher uncertainty")
    risk_factors.append("Payer contract changes could impact rates")
    risk_factors.append("Denial rate increases could reduce collections")

    opportunities = []
    if any(factor > HIGH_SEASON_FACTOR for factor in factors):
        opportunities.append("Forecast includes historically high-revenue months")
    opportunities.append("Improved clean claim rate could increase revenue")
    opportunities.append("Reduced denial rate could increase collections")

    confidence = round_half_up(float(np.mean([period.periodConfidence for period in periods])))

    logger.debug(
        f"Forecast {date_range.startDate} to {date_range.endDate}: "
        f"{len(periods)} periods, total {total_forecast} (seasonality v{snapshot.version})"
    )

    return RevenueForecast(
        dateRange=date_range,
        periods=periods,
        summary=summary,
        confidence=confidence,
        assumptions=assumptions,
        riskFactors=risk_factors,
        opportunities=opportunities,
        seasonalityVersion=snapshot.version,
        generatedAt=datetime.now(timezone.utc),
    )


# =============================================================================
# Seasonality
# =============================================================================


def calculate_seasonality(
    history: List[HistoricalDataPoint],
    store: Optional[SeasonalityStore] = None,
) -> SeasonalityAnalysis:
    """
    Learn monthly seasonality factors from historical payments.

    Each month's factor is its mean paid amount divided by the mean over all
    observations. Months without observations fall back to the overall
    mean (factor 1.0).

    The new factors and overall mean are published to the store as the next
    model version. Nothing is published when the history is empty or has no
    paid revenue, since there is no seasonal signal to learn.

    Args:
        history: Historical observations, any order.
        store: Store to publish to. Defaults to the process-wide store.

    Returns:
        SeasonalityAnalysis describing the learned pattern and the model
        version in effect after the call.
    """
    store = store or get_seasonality_store()

    frame = pd.DataFrame({
        'month': [point.date.month for point in history],
        'paid': [point.paidAmount for point in history],
    })
    overall_average = float(frame['paid'].mean()) if not frame.empty else 0.0
    by_month = frame.groupby('month')['paid'].agg(['mean', 'count'])

    factors: Dict[int, float] = {}
    patterns: List[SeasonalityPattern] = []
    for month in MONTHS:
        if month in by_month.index:
            month_average = float(by_month.at[month, 'mean'])
            sample_count = int(by_month.at[month, 'count'])
        else:
            month_average, sample_count = overall_average, 0

        factor = month_average / overall_average if overall_average > 0 else 1.0
        factors[month] = factor
        patterns.append(SeasonalityPattern(
            month=month,
            factor=round_half_up(factor, 2),
            historicalAverage=round_half_up(month_average),
            sampleCount=sample_count,
            confidence=min(MAX_PATTERN_CONFIDENCE, PATTERN_BASE_CONFIDENCE + PATTERN_CONFIDENCE_PER_SAMPLE * sample_count),
        ))

    max_factor = max(factors.values())
    min_factor = min(factors.values())
    peak_months = [month for month, factor in factors.items() if factor >= max_factor * PEAK_MONTH_TOLERANCE]
    low_months = [month for month, factor in factors.items() if factor <= min_factor * LOW_MONTH_TOLERANCE]

    if overall_average > 0:
        model = store.publish(factors, overall_average)
    else:
        logger.warning(
            f"Seasonality history has no paid revenue ({len(history)} points); "
            f"keeping seasonality model v{store.current().version}"
        )
        model = store.current()

    confidence = min(MAX_PATTERN_CONFIDENCE, PATTERN_BASE_CONFIDENCE + math.log10(len(history) + 1) * 20)

    return SeasonalityAnalysis(
        monthlyPatterns=patterns,
        peakMonths=peak_months,
        lowMonths=low_months,
        cycleStrength=round_half_up((max_factor - min_factor) * 100),
        confidence=round_half_up(confidence),
        modelVersion=model.version,
    )


def get_forecast_model_stats(store: Optional[SeasonalityStore] = None) -> ForecastModelStats:
    """Snapshot of the seasonality model currently used by forecasts."""
    model = (store or get_seasonality_store()).current()
    return ForecastModelStats(
        version=model.version,
        monthlySeasonalityFactors=dict(model.monthly_factors),
        collectionRates=dict(model.collection_rates),
        historicalAverageMonthly=model.historical_average_monthly,
        lastCalculatedAt=model.last_calculated_at,
    )


# =============================================================================
# Cash Flow
# =============================================================================


def project_cash_flow(
    accounts: List[CashFlowAccount],
    date_range: DateRange,
    as_of: Optional[date] = None,
    min_likelihood: Optional[float] = None,
) -> CashFlowProjection:
    """
    Project weekly cash inflow from expected account payments.

    An account contributes its expected collection to the week containing
    as_of + expectedDaysToPayment, provided that date falls in the range and
    the account's likelihood reaches the floor. Weeks are 7-day buckets from
    the range start; the last one is cut at the range end.

    Args:
        accounts: Accounts with likelihood, expected days and amount.
        date_range: Inclusive projection window.
        as_of: Date the expected days count from. Defaults to today.
        min_likelihood: Likelihood floor. Defaults to
            settings.cash_flow_min_likelihood.

    Returns:
        CashFlowProjection with one entry per week, even empty ones.
    """
    as_of = as_of or date.today()
    if min_likelihood is None:
        min_likelihood = get_settings().cash_flow_min_likelihood

    start, end = date_range.startDate, date_range.endDate
    week_count = (end - start).days // 7 + 1

    buckets: Dict[int, List[CashFlowAccount]] = defaultdict(list)
    for account in accounts:
        if account.expectedDaysToPayment is None or account.collectionLikelihood < min_likelihood:
            continue
        payment_date = as_of + timedelta(days=account.expectedDaysToPayment)
        if start <= payment_date <= end:
            buckets[(payment_date - start).days // 7 + 1].append(account)

    weeks: List[WeeklyCashFlow] = []
    cumulative_flow: List[float] = []
    cumulative = 0.0
    peak_week, peak_amount = 1, 0.0

    for week in range(1, week_count + 1):
        week_start = start + timedelta(days=7 * (week - 1))
        week_end = min(week_start + timedelta(days=6), end)
        expected = sum(account.expectedCollection for account in buckets[week])
        uncertainty = 1 + CASH_FLOW_UNCERTAINTY_PER_WEEK * week
        cumulative += expected

        if expected > peak_amount:
            peak_week, peak_amount = week, expected

        weeks.append(WeeklyCashFlow(
            weekStart=week_start,
            weekEnd=week_end,
            weekNumber=week,
            expectedCollections=round_half_up(expected),
            lowerBound=round_half_up(expected * CASH_FLOW_LOWER_SHARE / uncertainty),
            upperBound=round_half_up(expected * CASH_FLOW_UPPER_SHARE * uncertainty),
            expectedPayingAccounts=len(buckets[week]),
            cumulativeTotal=round_half_up(cumulative),
        ))
        cumulative_flow.append(round_half_up(cumulative))

    total_expected = sum(week.expectedCollections for week in weeks)
    summary = CashFlowSummary(
        totalExpected=total_expected,
        totalLowerBound=sum(week.lowerBound for week in weeks),
        totalUpperBound=sum(week.upperBound for week in weeks),
        averageWeekly=round_half_up(total_expected / len(weeks)),
        peakWeek=peak_week,
        peakWeekAmount=round_half_up(peak_amount),
        totalAccounts=len(accounts),
        totalBalance=sum(account.balance for account in accounts),
    )

    logger.debug(
        f"Cash flow {start} to {end}: {week_count} weeks, "
        f"${format_amount(total_expected)} expected from {sum(len(b) for b in buckets.values())} accounts"
    )

    return CashFlowProjection(
        dateRange=date_range,
        weeklyProjections=weeks,
        summary=summary,
        cumulativeCashFlow=cumulative_flow,
    )


def project_cash_flow_for_accounts(
    accounts: List[AccountForPrediction],
    date_range: DateRange,
    as_of: Optional[date] = None,
    min_likelihood: Optional[float] = None,
) -> CashFlowProjection:
    """Score raw accounts with the collection scorer, then project their cash flow."""
    predictions = batch_predict_collection(accounts)
    cash_flow_accounts = [
        CashFlowAccount(
            accountId=account.accountId,
            balance=account.factors.balance,
            daysPastDue=account.factors.daysPastDue,
            collectionLikelihood=prediction.likelihoodScore,
            expectedDaysToPayment=prediction.estimatedDaysToPayment,
            expectedCollection=prediction.expectedCollection,
        )
        for account, prediction in zip(accounts, predictions)
    ]
    return project_cash_flow(cash_flow_accounts, date_range, as_of=as_of, min_likelihood=min_likelihood)


# =============================================================================
# Scenarios
# =============================================================================


def classify_scenario_impact(percentage_change: float) -> ScenarioImpact:
    """Impact band for a percent change; the 3% and 10% cut-offs fall in the milder band."""
    if percentage_change > SIGNIFICANT_SCENARIO_PERCENT:
        return ScenarioImpact.SIGNIFICANT_POSITIVE
    if percentage_change > SCENARIO_PERCENT:
        return ScenarioImpact.POSITIVE
    if percentage_change < -SIGNIFICANT_SCENARIO_PERCENT:
        return ScenarioImpact.SIGNIFICANT_NEGATIVE
    if percentage_change < -SCENARIO_PERCENT:
        return ScenarioImpact.NEGATIVE
    return ScenarioImpact.MINIMAL


def scenario_analysis(base_forecast: float, assumptions: List[ScenarioAssumption]) -> ScenarioAnalysis:
    """
    Apply what-if assumptions to a base forecast.

    Each assumption's relative change (scenario - base) / base is scaled by
    its type coefficient and applied to the base forecast; the impacts add
    up. The sensitivity table is sorted by absolute impact per unit, where a
    unit is one percentage point (0.01) for percent assumptions and 1
    otherwise.

    Raises:
        ValueError: If base_forecast is negative or not finite, or any
            assumption has a zero base value.
    """
    if not math.isfinite(base_forecast) or base_forecast < 0:
        raise ValueError(f"base_forecast must be a non-negative finite number, got {base_forecast}")
    for assumption in assumptions:
        if assumption.baseValue == 0:
            raise ValueError(
                f"Assumption '{assumption.name}' has a zero base value; relative change is undefined"
            )

    scenario_forecast = base_forecast
    sensitivity: List[SensitivityEntry] = []

    for assumption in assumptions:
        coefficient = SCENARIO_IMPACT_COEFFICIENTS[assumption.type]
        delta = assumption.scenarioValue - assumption.baseValue
        relative_change = delta / assumption.baseValue
        multiplier = coefficient * relative_change
        impact = base_forecast * multiplier
        scenario_forecast += impact

        unit_change = 0.01 if assumption.unit == AssumptionUnit.PERCENT else 1
        units = delta / unit_change
        sensitivity.append(SensitivityEntry(
            assumption=assumption.name,
            impactPerUnit=round_half_up(impact / units) if units else 0,
            elasticity=round_half_up(abs(multiplier / relative_change) if relative_change else abs(coefficient), 2),
        ))

    sensitivity.sort(key=lambda entry: abs(entry.impactPerUnit), reverse=True)

    difference = scenario_forecast - base_forecast
    percentage_change = difference / base_forecast * 100 if base_forecast > 0 else 0.0

    return ScenarioAnalysis(
        scenarioName=assumptions[0].name if len(assumptions) == 1 else "Combined Scenario",
        assumptions=assumptions,
        baseCaseForecast=round_half_up(base_forecast),
        scenarioForecast=round_half_up(scenario_forecast),
        difference=round_half_up(difference),
        percentageChange=round_half_up(percentage_change, 1),
        impact=classify_scenario_impact(percentage_change),
        sensitivityAnalysis=sensitivity,
    )


def create_common_scenarios(
    collection_rate: float,
    claim_volume: float,
    denial_rate: float,
) -> Dict[str, List[ScenarioAssumption]]:
    """Optimistic, pessimistic and volume growth/decline assumption sets."""

    def collection(multiplier: float) -> ScenarioAssumption:
        return ScenarioAssumption(
            name="Collection Rate",
            type=ScenarioAssumptionType.COLLECTION_RATE,
            baseValue=collection_rate,
            scenarioValue=collection_rate * multiplier,
            unit=AssumptionUnit.PERCENT,
        )

    def denials(multiplier: float) -> ScenarioAssumption:
        return ScenarioAssumption(
            name="Denial Rate",
            type=ScenarioAssumptionType.DENIAL_RATE,
            baseValue=denial_rate,
            scenarioValue=denial_rate * multiplier,
            unit=AssumptionUnit.PERCENT,
        )

    def volume(multiplier: float) -> ScenarioAssumption:
        return ScenarioAssumption(
            name="Claim Volume",
            type=ScenarioAssumptionType.CLAIM_VOLUME,
            baseValue=claim_volume,
            scenarioValue=claim_volume * multiplier,
            unit=AssumptionUnit.COUNT,
        )

    return {
        "optimistic": [collection(1.05), denials(0.85)],
        "pessimistic": [collection(0.92), denials(1.2)],
        "volumeGrowth": [volume(1.1)],
        "volumeDecline": [volume(0.9)],
    }


__all__ = [
    "SCENARIO_IMPACT_COEFFICIENTS",
    "forecast_revenue",
    "calculate_seasonality",
    "get_forecast_model_stats",
    "project_cash_flow",
    "project_cash_flow_for_accounts",
    "scenario_analysis",
    "classify_scenario_impact",
    "create_common_scenarios",
]
