"""
Package initialization file for engine models.

Re-exports every Pydantic schema and enumeration from schemas.py and enums.py
so other modules can import data models from rcm_analytics.models directly.

Usage:
    from rcm_analytics.models import (
        AccountForPrediction,
        CollectionPrediction,
        DateRange,
        KPIResult,
        # ... etc
    )
"""

# =============================================================================
# Enums
# =============================================================================

from rcm_analytics.models.enums import (
    # Account inputs
    PaymentHistoryRating,
    InsuranceCategory,
    CollectionState,
    CreditScoreRange,
    AccountType,
    # Scoring outputs
    LikelihoodClass,
    CollectionStrategy,
    WorkQueueClass,
    WorkQueueStrategy,
    SegmentTier,
    # Forecasting
    TrendDirection,
    AssumptionImpact,
    PeriodType,
    ScenarioAssumptionType,
    AssumptionUnit,
    ScenarioImpact,
    # KPIs
    ClaimStatus,
    KPITrendDirection,
    BenchmarkPerformance,
)

# =============================================================================
# Schemas
# =============================================================================

from rcm_analytics.models.schemas import (
    # Scoring
    AccountScoringFactors,
    AccountForPrediction,
    ScoreBreakdown,
    ConfidenceInterval,
    CollectionPrediction,
    TimeToCollection,
    StrategyRecommendation,
    # Segmentation
    AccountSegment,
    SegmentationSummary,
    SegmentationResult,
    # Work queue
    CollectionScoreResult,
    PrioritizedAccount,
    PortfolioMetrics,
    # Forecasting
    DateRange,
    ForecastPeriod,
    ForecastSummary,
    ForecastAssumption,
    RevenueForecast,
    HistoricalDataPoint,
    SeasonalityPattern,
    SeasonalityAnalysis,
    ForecastModelStats,
    CashFlowAccount,
    WeeklyCashFlow,
    CashFlowSummary,
    CashFlowProjection,
    ScenarioAssumption,
    SensitivityEntry,
    ScenarioAnalysis,
    # KPIs
    ClaimForKPI,
    AccountForKPI,
    CostData,
    KPITrend,
    BenchmarkData,
    KPIResult,
    KPIDashboard,
    IndustryBenchmark,
    # API request bodies
    AccountBatchRequest,
    RevenueForecastRequest,
    SeasonalityRequest,
    CashFlowRequest,
    ScenarioRequest,
    CommonScenariosRequest,
    KPIDashboardRequest,
)


__all__ = [
    # Enums
    "PaymentHistoryRating",
    "InsuranceCategory",
    "CollectionState",
    "CreditScoreRange",
    "AccountType",
    "LikelihoodClass",
    "CollectionStrategy",
    "WorkQueueClass",
    "WorkQueueStrategy",
    "SegmentTier",
    "TrendDirection",
    "AssumptionImpact",
    "PeriodType",
    "ScenarioAssumptionType",
    "AssumptionUnit",
    "ScenarioImpact",
    "ClaimStatus",
    "KPITrendDirection",
    "BenchmarkPerformance",
    # Schemas
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
