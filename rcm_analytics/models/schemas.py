"""
Pydantic request/response models for the RCM analytics engine.

This module provides type-safe validation and serialization for every record
the engine consumes or produces: account scoring factors and predictions,
portfolio segments, work-queue scores, revenue and cash-flow forecasts,
scenario analyses, and KPI dashboards.

Field names are camelCase because they are the wire format shared with the
dashboard. Input models reject unknown enum values, negative amounts and
infinite or NaN numbers at construction time. Output models are frozen so a
result is an immutable snapshot of the moment it was computed.

All models use Pydantic v2 syntax.
"""

from datetime import datetime, date as DateType
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rcm_analytics.models.enums import (
    AccountType,
    AssumptionImpact,
    AssumptionUnit,
    BenchmarkPerformance,
    ClaimStatus,
    CollectionState,
    CollectionStrategy,
    CreditScoreRange,
    InsuranceCategory,
    KPITrendDirection,
    LikelihoodClass,
    PaymentHistoryRating,
    PeriodType,
    ScenarioAssumptionType,
    ScenarioImpact,
    SegmentTier,
    TrendDirection,
    WorkQueueClass,
    WorkQueueStrategy,
)


# Shared config for result records: immutable once built.
RESULT_CONFIG = ConfigDict(frozen=True)


# =============================================================================
# Account Scoring Inputs
# =============================================================================


class AccountScoringFactors(BaseModel):
    """
    Everything the scorers know about one receivable account.

    daysPastDue may be zero or negative for accounts that are not yet due.
    creditScoreRange is only read by the work-queue policy.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "balance": 1000,
                "originalAmount": 2000,
                "ageDays": 45,
                "daysPastDue": 0,
                "paymentHistory": "good",
                "previousPaymentCount": 0,
                "previousPaymentTotal": 0,
                "insurance": "insured",
                "patientAge": 40,
                "hasValidPhone": True,
                "hasValidEmail": False,
                "hasRespondedToContact": False,
                "contactAttemptCount": 0,
                "brokenPromiseCount": 0,
                "returnedPaymentCount": 0,
                "hasActiveDispute": False,
                "isOnHardship": False,
                "collectionState": "current",
            }
        },
    )

    balance: float = Field(..., ge=0, description="Current outstanding balance")
    originalAmount: float = Field(..., ge=0, description="Original billed patient responsibility")
    ageDays: int = Field(default=0, ge=0, description="Days since the account was created")
    daysPastDue: int = Field(..., description="Days past the due date (<= 0 means not yet due)")
    paymentHistory: PaymentHistoryRating = Field(..., description="Payment history rating")
    previousPaymentCount: int = Field(default=0, ge=0)
    previousPaymentTotal: float = Field(default=0.0, ge=0)
    insurance: InsuranceCategory = Field(..., description="Coverage category")
    patientAge: Optional[int] = Field(default=None, ge=0, le=130)
    zipCode: Optional[str] = Field(default=None)
    creditScoreRange: Optional[CreditScoreRange] = Field(default=None)
    hasValidPhone: bool = False
    hasValidEmail: bool = False
    hasRespondedToContact: bool = False
    contactAttemptCount: int = Field(default=0, ge=0)
    brokenPromiseCount: int = Field(default=0, ge=0)
    returnedPaymentCount: int = Field(default=0, ge=0)
    hasActiveDispute: bool = False
    isOnHardship: bool = False
    collectionState: CollectionState = CollectionState.CURRENT


class AccountForPrediction(BaseModel):
    """A receivable account handed to the scorers."""
    model_config = ConfigDict(str_strip_whitespace=True)

    accountId: str = Field(..., min_length=1)
    patientId: Optional[str] = None
    accountType: Optional[AccountType] = None
    factors: AccountScoringFactors


# =============================================================================
# Collection Scorer Outputs
# =============================================================================


class ScoreBreakdown(BaseModel):
    """The six bounded sub-scores that sum to the raw likelihood score."""
    model_config = RESULT_CONFIG

    balanceScore: float = Field(..., ge=0, le=20)
    ageScore: float = Field(..., ge=0, le=20)
    paymentHistoryScore: float = Field(..., ge=0, le=20)
    insuranceScore: float = Field(..., ge=0, le=15)
    contactabilityScore: float = Field(..., ge=0, le=15)
    demographicScore: float = Field(..., ge=0, le=10)


class ConfidenceInterval(BaseModel):
    model_config = RESULT_CONFIG

    low: float = Field(..., ge=0)
    high: float = Field(..., ge=0)
    confidence: float = Field(..., ge=0, le=100)


class CollectionPrediction(BaseModel):
    """
    Per-account collectability prediction.

    Full and partial collection probabilities are bounded independently and
    are not expected to sum to 100. A null days estimate means no payment
    date should be projected for the account.
    """
    model_config = RESULT_CONFIG

    accountId: str
    likelihoodScore: float = Field(..., ge=0, le=100)
    likelihoodClass: LikelihoodClass
    fullCollectionProbability: float = Field(..., ge=5, le=85)
    partialCollectionProbability: float = Field(..., ge=20, le=95)
    expectedCollection: float = Field(..., ge=0)
    expectedCollectionPercent: float
    estimatedDaysToPayment: Optional[int] = None
    estimatedDaysToFullCollection: Optional[int] = None
    confidenceInterval: ConfidenceInterval
    recommendedStrategy: CollectionStrategy
    alternativeStrategies: List[CollectionStrategy] = Field(default_factory=list, max_length=3)
    riskFactors: List[str] = Field(default_factory=list)
    positiveIndicators: List[str] = Field(default_factory=list)
    scoreBreakdown: ScoreBreakdown


class TimeToCollection(BaseModel):
    model_config = RESULT_CONFIG

    daysToFirstPayment: Optional[int] = None
    daysToFullCollection: Optional[int] = None
    confidence: float = Field(..., ge=0, le=80)


class StrategyRecommendation(BaseModel):
    model_config = RESULT_CONFIG

    strategy: CollectionStrategy
    rationale: str
    alternatives: List[CollectionStrategy] = Field(default_factory=list)
    expectedOutcome: str


# =============================================================================
# Portfolio Segmentation
# =============================================================================


class AccountSegment(BaseModel):
    """One recovery tier with its aggregate economics and member accounts."""
    model_config = RESULT_CONFIG

    tier: SegmentTier
    minScore: int
    maxScore: int
    accountCount: int = Field(..., ge=0)
    totalBalance: float = Field(..., ge=0)
    expectedRecovery: float = Field(..., ge=0)
    recommendedStrategy: CollectionStrategy
    accountIds: List[str] = Field(default_factory=list)


class SegmentationSummary(BaseModel):
    model_config = RESULT_CONFIG

    totalAccounts: int = 0
    totalBalance: float = 0
    totalExpectedRecovery: float = 0
    averageLikelihood: float = 0
    weightedAverageLikelihood: float = 0


class SegmentationResult(BaseModel):
    model_config = RESULT_CONFIG

    segments: List[AccountSegment]
    summary: SegmentationSummary


# =============================================================================
# Work-Queue Scoring
# =============================================================================


class CollectionScoreResult(BaseModel):
    """Work-queue score for one account, with the collector's action list."""
    model_config = RESULT_CONFIG

    accountId: str
    score: float = Field(..., ge=0, le=100)
    classification: WorkQueueClass
    collectionProbability: float = Field(..., ge=0, le=100)
    expectedRecovery: float = Field(..., ge=0)
    recommendedStrategy: WorkQueueStrategy
    breakdown: ScoreBreakdown
    riskFactors: List[str] = Field(default_factory=list)
    positiveFactors: List[str] = Field(default_factory=list)
    recommendedActions: List[str] = Field(default_factory=list)


class PrioritizedAccount(BaseModel):
    model_config = RESULT_CONFIG

    accountId: str
    score: float
    rank: int = Field(..., ge=1)
    expectedRecovery: float
    recommendedStrategy: WorkQueueStrategy
    balance: float
    daysPastDue: int


class PortfolioMetrics(BaseModel):
    model_config = RESULT_CONFIG

    totalBalance: float = 0
    totalExpectedRecovery: float = 0
    averageScore: float = 0
    highPriorityCount: int = 0
    mediumPriorityCount: int = 0
    lowPriorityCount: int = 0
    strategyDistribution: Dict[WorkQueueStrategy, int] = Field(default_factory=dict)


# =============================================================================
# Revenue Forecasting
# =============================================================================


class DateRange(BaseModel):
    """Inclusive calendar date range."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"example": {"startDate": "2024-01-01", "endDate": "2024-06-30"}},
    )

    startDate: DateType
    endDate: DateType

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.endDate < self.startDate:
            raise ValueError(
                f"endDate {self.endDate.isoformat()} is before startDate {self.startDate.isoformat()}"
            )
        return self


class ForecastPeriod(BaseModel):
    model_config = RESULT_CONFIG

    startDate: DateType
    endDate: DateType
    label: str
    forecast: float
    lowerBound: float
    upperBound: float
    periodConfidence: float = Field(..., ge=0, le=100)
    seasonalityFactor: float
    expectedClaimCount: int = Field(..., ge=0)
    expectedCollectionRate: float


class ForecastSummary(BaseModel):
    model_config = RESULT_CONFIG

    totalForecast: float
    totalLowerBound: float
    totalUpperBound: float
    averageMonthly: float
    vsHistoricalAverage: float
    trend: TrendDirection
    trendPercent: float


class ForecastAssumption(BaseModel):
    model_config = RESULT_CONFIG

    name: str
    value: Union[float, str]
    impact: AssumptionImpact
    configurable: bool = True


class RevenueForecast(BaseModel):
    """Monthly revenue forecast plus summary, assumptions and qualitative notes."""
    model_config = RESULT_CONFIG

    dateRange: DateRange
    periods: List[ForecastPeriod]
    summary: ForecastSummary
    confidence: float
    assumptions: List[ForecastAssumption]
    riskFactors: List[str]
    opportunities: List[str]
    seasonalityVersion: int = Field(..., ge=0, description="Version of the seasonality model used")
    generatedAt: datetime


class HistoricalDataPoint(BaseModel):
    """One historical revenue observation, usually a month of paid claims."""
    model_config = ConfigDict(
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "date": "2023-12-01",
                "periodType": "month",
                "claimCount": 240,
                "chargedAmount": 180000,
                "paidAmount": 152000,
                "collectionRate": 0.84,
                "averageDaysToPay": 32,
            }
        }
    )

    date: DateType
    periodType: PeriodType = PeriodType.MONTH
    claimCount: int = Field(default=0, ge=0)
    chargedAmount: float = Field(default=0.0, ge=0)
    paidAmount: float = Field(..., ge=0)
    collectionRate: float = Field(default=0.0, ge=0)
    averageDaysToPay: float = Field(default=0.0, ge=0)


class SeasonalityPattern(BaseModel):
    model_config = RESULT_CONFIG

    month: int = Field(..., ge=1, le=12)
    factor: float
    historicalAverage: float
    sampleCount: int = Field(..., ge=0)
    confidence: float


class SeasonalityAnalysis(BaseModel):
    """
    Result of a seasonality recalculation.

    modelVersion is the version of the seasonality model in force after the
    call: the newly published version, or the previous one when there was
    no history to learn from.
    """
    model_config = RESULT_CONFIG

    monthlyPatterns: List[SeasonalityPattern]
    peakMonths: List[int]
    lowMonths: List[int]
    cycleStrength: float
    confidence: float
    modelVersion: int = Field(..., ge=0)


class ForecastModelStats(BaseModel):
    model_config = RESULT_CONFIG

    version: int
    monthlySeasonalityFactors: Dict[int, float]
    collectionRates: Dict[str, float]
    historicalAverageMonthly: float
    lastCalculatedAt: Optional[datetime] = None


class CashFlowAccount(BaseModel):
    """An account reduced to what the cash-flow projection needs."""
    model_config = ConfigDict(allow_inf_nan=False)

    accountId: str = Field(..., min_length=1)
    balance: float = Field(..., ge=0)
    daysPastDue: int = 0
    collectionLikelihood: float = Field(..., ge=0, le=100)
    expectedDaysToPayment: Optional[int] = Field(default=None, ge=0)
    expectedCollection: float = Field(..., ge=0)


class WeeklyCashFlow(BaseModel):
    model_config = RESULT_CONFIG

    weekStart: DateType
    weekEnd: DateType
    weekNumber: int = Field(..., ge=1)
    expectedCollections: float
    lowerBound: float
    upperBound: float
    expectedPayingAccounts: int = Field(..., ge=0)
    cumulativeTotal: float


class CashFlowSummary(BaseModel):
    model_config = RESULT_CONFIG

    totalExpected: float
    totalLowerBound: float
    totalUpperBound: float
    averageWeekly: float
    peakWeek: int
    peakWeekAmount: float
    totalAccounts: int
    totalBalance: float


class CashFlowProjection(BaseModel):
    model_config = RESULT_CONFIG

    dateRange: DateRange
    weeklyProjections: List[WeeklyCashFlow]
    summary: CashFlowSummary
    cumulativeCashFlow: List[float]


class ScenarioAssumption(BaseModel):
    """A single what-if assumption: move one driver from base to scenario value."""
    model_config = ConfigDict(
        frozen=True,
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "name": "Collection Rate",
                "type": "collection-rate",
                "baseValue": 0.85,
                "scenarioValue": 0.8925,
                "unit": "percent",
            }
        },
    )

    name: str = Field(..., min_length=1)
    type: ScenarioAssumptionType
    baseValue: float
    scenarioValue: float
    unit: AssumptionUnit


class SensitivityEntry(BaseModel):
    model_config = RESULT_CONFIG

    assumption: str
    impactPerUnit: float
    elasticity: float


class ScenarioAnalysis(BaseModel):
    model_config = RESULT_CONFIG

    scenarioName: str
    assumptions: List[ScenarioAssumption]
    baseCaseForecast: float
    scenarioForecast: float
    difference: float
    percentageChange: float
    impact: ScenarioImpact
    sensitivityAnalysis: List[SensitivityEntry]


# =============================================================================
# KPI Inputs and Outputs
# =============================================================================


class ClaimForKPI(BaseModel):
    """A claim as seen by the KPI calculator."""
    model_config = ConfigDict(str_strip_whitespace=True, allow_inf_nan=False)

    claimId: str = Field(..., min_length=1)
    status: ClaimStatus
    billedAmount: float = Field(..., ge=0)
    allowedAmount: Optional[float] = Field(default=None, ge=0)
    paidAmount: Optional[float] = Field(default=None, ge=0)
    patientResponsibility: Optional[float] = Field(default=None, ge=0)
    serviceDate: DateType
    submissionDate: Optional[DateType] = None
    paymentDate: Optional[DateType] = None
    denialDate: Optional[DateType] = None
    paidFirstPass: Optional[bool] = None
    wasDenied: Optional[bool] = None
    denialOverturned: Optional[bool] = None
    payerType: Optional[str] = None


class AccountForKPI(BaseModel):
    """A patient account balance snapshot for collection-rate KPIs."""
    model_config = ConfigDict(allow_inf_nan=False)

    accountId: str = Field(..., min_length=1)
    originalBalance: float = Field(..., ge=0)
    currentBalance: float = Field(..., ge=0)
    totalPaid: float = Field(default=0.0, ge=0)
    totalAdjustments: float = Field(default=0.0, ge=0)
    ageDays: int = Field(default=0, ge=0)
    lastPaymentDate: Optional[DateType] = None
    isPaidInFull: bool = False
    isWrittenOff: bool = False


class CostData(BaseModel):
    """Revenue-cycle operating costs for the cost-to-collect KPI."""
    model_config = ConfigDict(allow_inf_nan=False)

    totalRevenue: float = Field(default=0.0, ge=0)
    totalCosts: float = Field(..., ge=0)
    staffCosts: Optional[float] = Field(default=None, ge=0)
    technologyCosts: Optional[float] = Field(default=None, ge=0)
    outsourcingCosts: Optional[float] = Field(default=None, ge=0)
    otherCosts: Optional[float] = Field(default=None, ge=0)


class KPITrend(BaseModel):
    model_config = RESULT_CONFIG

    priorValue: float
    change: float
    changePercent: float
    direction: KPITrendDirection
    favorable: bool


class BenchmarkData(BaseModel):
    model_config = RESULT_CONFIG

    value: float
    source: str
    performance: BenchmarkPerformance
    percentile: Optional[int] = None


class KPIResult(BaseModel):
    """
    One computed KPI.

    trend is present only when a prior-period value was supplied; both trend
    and benchmark are omitted when the KPI had no data to measure.
    """
    model_config = RESULT_CONFIG

    name: str
    value: float
    displayValue: str
    unit: str
    trend: Optional[KPITrend] = None
    benchmark: Optional[BenchmarkData] = None
    notes: Optional[str] = None
    sampleSize: int = Field(..., ge=0)


class KPIDashboard(BaseModel):
    model_config = RESULT_CONFIG

    daysInAR: KPIResult
    cleanClaimRate: KPIResult
    denialRate: KPIResult
    collectionRate: KPIResult
    firstPassYield: KPIResult
    costToCollect: KPIResult
    netCollectionRate: KPIResult
    adjustedCollectionRate: KPIResult
    averageDaysToPayment: KPIResult
    generatedAt: datetime
    period: DateRange


class IndustryBenchmark(BaseModel):
    model_config = RESULT_CONFIG

    excellent: float
    good: float
    average: float
    poor: float
    unit: str
    higherIsBetter: bool
    source: str


# =============================================================================
# API Request Bodies
# =============================================================================


class AccountBatchRequest(BaseModel):
    accounts: List[AccountForPrediction] = Field(default_factory=list)


class RevenueForecastRequest(BaseModel):
    model_config = ConfigDict(
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "dateRange": {"startDate": "2024-01-01", "endDate": "2024-06-30"},
                "baseMonthlyRevenue": 250000,
            }
        }
    )

    dateRange: DateRange
    baseMonthlyRevenue: float = Field(..., ge=0)


class SeasonalityRequest(BaseModel):
    history: List[HistoricalDataPoint] = Field(default_factory=list)


class CashFlowRequest(BaseModel):
    """Accounts are scored server-side before bucketing into weeks."""
    accounts: List[AccountForPrediction] = Field(default_factory=list)
    dateRange: DateRange
    asOf: Optional[DateType] = Field(default=None, description="Projection anchor date, defaults to today")


class ScenarioRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    baseForecast: float = Field(..., ge=0)
    assumptions: List[ScenarioAssumption] = Field(default_factory=list)


class CommonScenariosRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    collectionRate: float
    claimVolume: float
    denialRate: float


class KPIDashboardRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    claims: List[ClaimForKPI] = Field(default_factory=list)
    accounts: List[AccountForKPI] = Field(default_factory=list)
    costs: CostData
    dateRange: DateRange
    priorPeriodKpis: Optional[Dict[str, float]] = None


__all__ = [
    "AccountScoringFactors",
    "AccountForPrediction",
    "ScoreBreakdown",
    "ConfidenceInterval",
    "CollectionPrediction",
    "TimeToCollection",
    "StrategyRecommendation",
    "AccountSegment",
    "SegmentationSummary",
    "SegmentationResult",
    "CollectionScoreResult",
    "PrioritizedAccount",
    "PortfolioMetrics",
    "DateRange",
    "ForecastPeriod",
    "ForecastSummary",
    "ForecastAssumption",
    "RevenueForecast",
    "HistoricalDataPoint",
    "SeasonalityPattern",
    "SeasonalityAnalysis",
    "ForecastModelStats",
    "CashFlowAccount",
    "WeeklyCashFlow",
    "CashFlowSummary",
    "CashFlowProjection",
    "ScenarioAssumption",
    "SensitivityEntry",
    "ScenarioAnalysis",
    "ClaimForKPI",
    "AccountForKPI",
    "CostData",
    "KPITrend",
    "BenchmarkData",
    "KPIResult",
    "KPIDashboard",
    "IndustryBenchmark",
    "AccountBatchRequest",
    "RevenueForecastRequest",
    "SeasonalityRequest",
    "CashFlowRequest",
    "ScenarioRequest",
    "CommonScenariosRequest",
    "KPIDashboardRequest",
]
