"""
Enumeration definitions for the RCM analytics engine.

All enums inherit from both `str` and `Enum` so that Pydantic models serialize
them as their plain string values in API responses and reject unknown values
at validation time.

Groups:
- Account inputs: PaymentHistoryRating, InsuranceCategory, CollectionState,
  CreditScoreRange, AccountType
- Scoring outputs: LikelihoodClass, CollectionStrategy, WorkQueueClass,
  WorkQueueStrategy, SegmentTier
- Forecasting: TrendDirection, AssumptionImpact, PeriodType,
  ScenarioAssumptionType, AssumptionUnit, ScenarioImpact
- KPIs: ClaimStatus, KPITrendDirection, BenchmarkPerformance
"""

from enum import Enum


# =============================================================================
# Account Inputs
# =============================================================================


class PaymentHistoryRating(str, Enum):
    """
    Patient payment history rating.

    NO_HISTORY is scored as neutral rather than poor: a first-time patient
    is not a known bad payer.
    """
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    NO_HISTORY = "no-history"


class InsuranceCategory(str, Enum):
    """Coverage category of the guarantor."""
    INSURED = "insured"
    UNDERINSURED = "underinsured"
    UNINSURED = "uninsured"
    MEDICAID = "medicaid"
    MEDICARE = "medicare"
    DUAL_ELIGIBLE = "dual-eligible"


class CollectionState(str, Enum):
    """
    Current position of an account in the collection lifecycle.

    Carried on every account for reporting; the scoring arithmetic keys off
    days past due instead.
    """
    CURRENT = "current"
    PAST_DUE_30 = "past-due-30"
    PAST_DUE_60 = "past-due-60"
    PAST_DUE_90 = "past-due-90"
    PAST_DUE_120 = "past-due-120"
    PRE_COLLECTION = "pre-collection"
    COLLECTION_AGENCY = "collection-agency"
    BAD_DEBT = "bad-debt"
    PAID = "paid"
    WRITTEN_OFF = "written-off"


class CreditScoreRange(str, Enum):
    """Soft-pull credit band. Only the work-queue policy reads it."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    UNKNOWN = "unknown"


class AccountType(str, Enum):
    """Billing classification of a patient account."""
    SELF_PAY = "self-pay"
    INSURANCE = "insurance"
    WORKERS_COMP = "workers-comp"
    CHARITY = "charity"
    PAYMENT_PLAN = "payment-plan"
    HARDSHIP = "hardship"


# =============================================================================
# Scoring Outputs
# =============================================================================


class LikelihoodClass(str, Enum):
    """
    Collection likelihood classification derived from the score.

    Bands: >=80 very-high, >=60 high, >=40 medium, >=20 low, else very-low.
    """
    VERY_HIGH = "very-high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very-low"


class CollectionStrategy(str, Enum):
    """Recommended recovery strategy produced by the prediction policy."""
    STANDARD_DUNNING = "standard-dunning"
    ACCELERATED_DUNNING = "accelerated-dunning"
    PHONE_OUTREACH = "phone-outreach"
    PAYMENT_PLAN = "payment-plan"
    SETTLEMENT_OFFER = "settlement-offer"
    CHARITY_SCREENING = "charity-screening"
    AGENCY_PLACEMENT = "agency-placement"
    LEGAL_REVIEW = "legal-review"
    WRITE_OFF = "write-off"
    HOLD = "hold"


class WorkQueueClass(str, Enum):
    """
    Work-queue score band.

    Bands: >=70 high, >=50 medium, >=30 low, else very-low.
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very-low"


class WorkQueueStrategy(str, Enum):
    """Strategy vocabulary used by collector work queues."""
    STANDARD_DUNNING = "standard-dunning"
    ACCELERATED_DUNNING = "accelerated-dunning"
    CALL_CAMPAIGN = "call-campaign"
    PAYMENT_PLAN_OFFER = "payment-plan-offer"
    CHARITY_SCREENING = "charity-screening"
    LEGAL_ACTION = "legal-action"
    AGENCY_PLACEMENT = "agency-placement"
    WRITE_OFF = "write-off"
    HOLD_FOR_REVIEW = "hold-for-review"


class SegmentTier(str, Enum):
    """Portfolio recovery tiers, highest score band first."""
    PLATINUM = "platinum"
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"
    IRON = "iron"


# =============================================================================
# Forecasting
# =============================================================================


class TrendDirection(str, Enum):
    """Forecast trend comparing the first half of the horizon to the second."""
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class AssumptionImpact(str, Enum):
    """How strongly a forecast assumption drives the result."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PeriodType(str, Enum):
    """Granularity of a forecast period."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class ScenarioAssumptionType(str, Enum):
    """
    Kind of what-if assumption.

    Each type carries a fixed impact multiplier; DENIAL_RATE is negative so
    that a higher denial rate lowers the forecast.
    """
    COLLECTION_RATE = "collection-rate"
    CLAIM_VOLUME = "claim-volume"
    PAYER_MIX = "payer-mix"
    DENIAL_RATE = "denial-rate"
    CUSTOM = "custom"


class AssumptionUnit(str, Enum):
    """Unit of a scenario assumption's base and scenario values."""
    PERCENT = "percent"
    COUNT = "count"
    CURRENCY = "currency"


class ScenarioImpact(str, Enum):
    """Five-band classification of a scenario's percentage change."""
    SIGNIFICANT_POSITIVE = "significant-positive"
    POSITIVE = "positive"
    MINIMAL = "minimal"
    NEGATIVE = "negative"
    SIGNIFICANT_NEGATIVE = "significant-negative"


# =============================================================================
# KPIs
# =============================================================================


class ClaimStatus(str, Enum):
    """Adjudication status of a claim as seen by the KPI calculator."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    PENDING = "pending"
    PAID = "paid"
    DENIED = "denied"
    APPEALED = "appealed"


class KPITrendDirection(str, Enum):
    """Direction of a KPI versus the prior period (dead band of +/-2%)."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class BenchmarkPerformance(str, Enum):
    """Position of a KPI value relative to the industry average band."""
    ABOVE = "above"
    AT = "at"
    BELOW = "below"


__all__ = [
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
]
