"""
Collection Scoring Policy Tables

Every weight, threshold, band boundary and decision rule used by the two
account scorers lives here as data, so the policy can be audited and tuned
without touching the arithmetic in collection_scorer.py and
work_queue_scoring.py.

Two named policies exist and are intentionally kept apart:

- PREDICTION_POLICY: collectability prediction, segmentation and cash flow.
  Dispute -20, hardship -15, extra penalties for repeated broken promises
  and returned payments. Five likelihood classes (80/60/40/20).
- WORK_QUEUE_POLICY: daily collector work-queue ranking. Dispute -15,
  hardship -20, credit band feeds the demographic factor. Four bands
  (70/50/30).

Step tables:
    A step table is an ordered tuple of Step(op, bound, points). The first
    step whose `op(value, bound)` holds wins; if none does, the table's
    fallback applies. Order matters: e.g. the paid-share steps of the
    balance factor are checked before the balance-size steps.

Strategy rules:
    An ordered tuple of StrategyRule(rule_id, predicate, strategy). The first
    rule whose predicate matches the RuleContext decides the strategy, so
    priority is visible as position in the table.
"""

import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional, Sequence, Tuple

from rcm_analytics.models.enums import (
    CollectionStrategy,
    CreditScoreRange,
    InsuranceCategory,
    LikelihoodClass,
    PaymentHistoryRating,
    SegmentTier,
    WorkQueueClass,
    WorkQueueStrategy,
)
from rcm_analytics.models.schemas import AccountScoringFactors


# =============================================================================
# Step Tables
# =============================================================================


class Step(NamedTuple):
    op: Callable[[float, float], bool]
    bound: float
    points: float


def below(bound: float, points: float) -> Step:
    return Step(operator.lt, bound, points)


def at_most(bound: float, points: float) -> Step:
    return Step(operator.le, bound, points)


def at_least(bound: float, points: float) -> Step:
    return Step(operator.ge, bound, points)


def step_score(value: float, steps: Sequence[Step], fallback: Optional[float] = None) -> Optional[float]:
    """
    Evaluate a step table.

    Args:
        value: The measured quantity (balance, days past due, share in %).
        steps: Ordered steps; the first matching one wins.
        fallback: Returned when no step matches.

    Returns:
        Points of the first matching step, else fallback.
    """
    for step in steps:
        if step.op(value, step.bound):
            return step.points
    return fallback


# =============================================================================
# Scoring Policy
# =============================================================================


@dataclass(frozen=True)
class ScoringPolicy:
    """
    Complete weight table for one account scorer.

    The six sub-scores are bounded by their *_max fields. Balance scoring is
    three ordered stages: tiny balances, then share of the original amount
    (paid share or remaining share depending on share_basis), then balance
    size.
    """
    name: str

    # Balance factor (0-20)
    balance_max: float
    small_balance_steps: Tuple[Step, ...]
    share_basis: str  # "paid" or "remaining"
    share_steps: Tuple[Step, ...]
    balance_size_steps: Tuple[Step, ...]
    balance_size_fallback: float

    # Age factor (0-20), keyed on days past due
    age_max: float
    age_steps: Tuple[Step, ...]
    age_fallback: float

    # Payment history factor (0-20)
    history_max: float
    history_base: Mapping[PaymentHistoryRating, float]
    payment_count_bonus_rate: float
    payment_count_bonus_cap: float
    paid_share_bonus_steps: Tuple[Step, ...]
    broken_promise_history_penalty: float
    returned_payment_history_penalty: float

    # Insurance factor (0-15)
    insurance_max: float
    insurance_points: Mapping[InsuranceCategory, float]

    # Contactability factor (0-15)
    contact_max: float
    phone_points: float
    email_points: float
    responded_points: float
    unanswered_attempt_limit: int
    unanswered_penalty: float
    working_attempts_range: Tuple[int, int]
    working_attempts_bonus: float

    # Demographic factor (0-10)
    demographic_max: float
    demographic_base: float
    working_age_range: Tuple[int, int]
    working_age_bonus: float
    senior_age_bonus: float
    young_age_bonus: float
    credit_points: Mapping[CreditScoreRange, float] = field(default_factory=dict)

    # Penalties applied to the summed score
    dispute_penalty: float = 0.0
    hardship_penalty: float = 0.0
    broken_promise_limit: int = 0
    broken_promise_penalty: float = 0.0
    returned_payment_penalty: float = 0.0

    # Classification bands, highest first: (minimum score, class)
    class_bands: Tuple[Tuple[float, Any], ...] = ()

    def classify(self, score: float) -> Any:
        for minimum, label in self.class_bands:
            if score >= minimum:
                return label
        return self.class_bands[-1][1]


HISTORY_PAID_SHARE_BONUS = (
    at_least(50, 2),
    at_least(25, 1),
)

INSURANCE_POINTS: Dict[InsuranceCategory, float] = {
    InsuranceCategory.INSURED: 15,
    InsuranceCategory.MEDICARE: 14,
    InsuranceCategory.DUAL_ELIGIBLE: 13,
    InsuranceCategory.MEDICAID: 12,
    InsuranceCategory.UNDERINSURED: 8,
    InsuranceCategory.UNINSURED: 4,
}


PREDICTION_POLICY = ScoringPolicy(
    name="prediction",
    balance_max=20,
    small_balance_steps=(below(25, 5), below(50, 8), below(100, 12)),
    share_basis="paid",
    share_steps=(at_least(50, 18), at_least(25, 16)),
    # Sweet spot is 100-2,500
    balance_size_steps=(at_most(2500, 20), at_most(5000, 18), at_most(10000, 15)),
    balance_size_fallback=12,
    age_max=20,
    age_steps=(
        at_most(0, 20),
        at_most(30, 18),
        at_most(60, 15),
        at_most(90, 12),
        at_most(120, 9),
        at_most(180, 6),
        at_most(365, 3),
    ),
    age_fallback=1,
    history_max=20,
    history_base={
        PaymentHistoryRating.EXCELLENT: 18,
        PaymentHistoryRating.GOOD: 14,
        PaymentHistoryRating.FAIR: 10,
        PaymentHistoryRating.POOR: 4,
        PaymentHistoryRating.NO_HISTORY: 10,
    },
    payment_count_bonus_rate=0.5,
    payment_count_bonus_cap=2,
    paid_share_bonus_steps=HISTORY_PAID_SHARE_BONUS,
    broken_promise_history_penalty=3,
    returned_payment_history_penalty=4,
    insurance_max=15,
    insurance_points=INSURANCE_POINTS,
    contact_max=15,
    phone_points=5,
    email_points=4,
    responded_points=6,
    unanswered_attempt_limit=5,
    unanswered_penalty=2,
    working_attempts_range=(1, 3),
    working_attempts_bonus=0,
    demographic_max=10,
    demographic_base=5,
    working_age_range=(25, 65),
    working_age_bonus=3,
    senior_age_bonus=1,
    young_age_bonus=1,
    dispute_penalty=20,
    hardship_penalty=15,
    broken_promise_limit=2,
    broken_promise_penalty=10,
    returned_payment_penalty=5,
    class_bands=(
        (80, LikelihoodClass.VERY_HIGH),
        (60, LikelihoodClass.HIGH),
        (40, LikelihoodClass.MEDIUM),
        (20, LikelihoodClass.LOW),
        (0, LikelihoodClass.VERY_LOW),
    ),
)


WORK_QUEUE_POLICY = ScoringPolicy(
    name="work-queue",
    balance_max=20,
    small_balance_steps=(below(25, 2), below(50, 5), below(100, 8)),
    share_basis="remaining",
    share_steps=(at_least(90, 18), at_least(75, 16), at_least(50, 14), at_least(25, 12)),
    balance_size_steps=(below(500, 15), at_most(5000, 20), at_most(10000, 17)),
    balance_size_fallback=14,
    age_max=20,
    age_steps=(
        at_most(0, 20),
        at_most(30, 18),
        at_most(60, 16),
        at_most(90, 14),
        at_most(120, 12),
        at_most(180, 8),
        at_most(365, 5),
    ),
    age_fallback=2,
    history_max=20,
    history_base={
        PaymentHistoryRating.EXCELLENT: 16,
        PaymentHistoryRating.GOOD: 12,
        PaymentHistoryRating.FAIR: 8,
        PaymentHistoryRating.POOR: 4,
        PaymentHistoryRating.NO_HISTORY: 10,
    },
    payment_count_bonus_rate=0.5,
    payment_count_bonus_cap=2,
    paid_share_bonus_steps=HISTORY_PAID_SHARE_BONUS,
    broken_promise_history_penalty=2,
    returned_payment_history_penalty=3,
    insurance_max=15,
    insurance_points=INSURANCE_POINTS,
    contact_max=15,
    phone_points=4,
    email_points=3,
    responded_points=5,
    unanswered_attempt_limit=5,
    unanswered_penalty=2,
    working_attempts_range=(1, 3),
    working_attempts_bonus=2,
    demographic_max=10,
    demographic_base=5,
    working_age_range=(25, 65),
    working_age_bonus=2,
    senior_age_bonus=1,
    young_age_bonus=0,
    credit_points={
        CreditScoreRange.EXCELLENT: 3,
        CreditScoreRange.GOOD: 2,
        CreditScoreRange.FAIR: 1,
        CreditScoreRange.POOR: -2,
    },
    dispute_penalty=15,
    hardship_penalty=20,
    class_bands=(
        (70, WorkQueueClass.HIGH),
        (50, WorkQueueClass.MEDIUM),
        (30, WorkQueueClass.LOW),
        (0, WorkQueueClass.VERY_LOW),
    ),
)


# =============================================================================
# Strategy Decision Tables
# =============================================================================


@dataclass(frozen=True)
class RuleContext:
    """What a strategy rule may look at."""
    score: float
    factors: AccountScoringFactors
    band: Any = None


@dataclass(frozen=True)
class StrategyRule:
    rule_id: str
    predicate: Callable[[RuleContext], bool]
    strategy: Any


def select_strategy(rules: Sequence[StrategyRule], context: RuleContext) -> StrategyRule:
    """
    Return the first rule whose predicate matches.

    Raises:
        LookupError: If no rule matches. Both shipped tables end in a
            catch-all rule, so this only fires for a malformed table.
    """
    for rule in rules:
        if rule.predicate(context):
            return rule
    raise LookupError("No strategy rule matched; table must end with a catch-all rule")


def _always(_: RuleContext) -> bool:
    return True


PREDICTION_STRATEGY_RULES: Tuple[StrategyRule, ...] = (
    StrategyRule("active-dispute", lambda c: c.factors.hasActiveDispute, CollectionStrategy.HOLD),
    StrategyRule("hardship", lambda c: c.factors.isOnHardship, CollectionStrategy.CHARITY_SCREENING),
    StrategyRule("tiny-balance", lambda c: c.factors.balance < 25, CollectionStrategy.WRITE_OFF),
    StrategyRule(
        "uninsured-large-balance-low-score",
        lambda c: (
            c.factors.insurance == InsuranceCategory.UNINSURED
            and c.factors.balance > 1000
            and c.score < 30
        ),
        CollectionStrategy.CHARITY_SCREENING,
    ),
    StrategyRule(
        "strong-recent",
        lambda c: c.score >= 70 and c.factors.daysPastDue <= 30,
        CollectionStrategy.STANDARD_DUNNING,
    ),
    StrategyRule("strong-aged", lambda c: c.score >= 70, CollectionStrategy.ACCELERATED_DUNNING),
    StrategyRule(
        "good-responsive",
        lambda c: c.score >= 50 and c.factors.hasRespondedToContact,
        CollectionStrategy.PHONE_OUTREACH,
    ),
    StrategyRule(
        "good-large-balance",
        lambda c: c.score >= 50 and c.factors.balance > 500,
        CollectionStrategy.ACCELERATED_DUNNING,
    ),
    StrategyRule("good", lambda c: c.score >= 50, CollectionStrategy.PAYMENT_PLAN),
    StrategyRule(
        "fair-large-balance",
        lambda c: c.score >= 30 and c.factors.balance > 500,
        CollectionStrategy.SETTLEMENT_OFFER,
    ),
    StrategyRule("fair", lambda c: c.score >= 30, CollectionStrategy.PAYMENT_PLAN),
    StrategyRule(
        "weak-large-balance",
        lambda c: c.score >= 15 and c.factors.balance > 1000,
        CollectionStrategy.AGENCY_PLACEMENT,
    ),
    StrategyRule("weak", lambda c: c.score >= 15, CollectionStrategy.SETTLEMENT_OFFER),
    StrategyRule("poor-small-balance", lambda c: c.factors.balance < 200, CollectionStrategy.WRITE_OFF),
    StrategyRule("poor-very-large-balance", lambda c: c.factors.balance > 5000, CollectionStrategy.LEGAL_REVIEW),
    StrategyRule("poor", _always, CollectionStrategy.AGENCY_PLACEMENT),
)


WORK_QUEUE_STRATEGY_RULES: Tuple[StrategyRule, ...] = (
    StrategyRule("active-dispute", lambda c: c.factors.hasActiveDispute, WorkQueueStrategy.HOLD_FOR_REVIEW),
    StrategyRule("hardship", lambda c: c.factors.isOnHardship, WorkQueueStrategy.CHARITY_SCREENING),
    StrategyRule("tiny-balance", lambda c: c.factors.balance < 25, WorkQueueStrategy.WRITE_OFF),
    StrategyRule(
        "uninsured-large-balance",
        lambda c: c.factors.insurance == InsuranceCategory.UNINSURED and c.factors.balance > 1000,
        WorkQueueStrategy.CHARITY_SCREENING,
    ),
    # HIGH band
    StrategyRule(
        "high-recent",
        lambda c: c.band == WorkQueueClass.HIGH and c.factors.daysPastDue <= 30,
        WorkQueueStrategy.STANDARD_DUNNING,
    ),
    StrategyRule(
        "high-responsive",
        lambda c: c.band == WorkQueueClass.HIGH and c.factors.hasRespondedToContact,
        WorkQueueStrategy.CALL_CAMPAIGN,
    ),
    StrategyRule("high", lambda c: c.band == WorkQueueClass.HIGH, WorkQueueStrategy.ACCELERATED_DUNNING),
    # MEDIUM band
    StrategyRule(
        "medium-paying",
        lambda c: c.band == WorkQueueClass.MEDIUM and c.factors.previousPaymentCount > 0,
        WorkQueueStrategy.PAYMENT_PLAN_OFFER,
    ),
    StrategyRule(
        "medium-aged",
        lambda c: c.band == WorkQueueClass.MEDIUM and c.factors.daysPastDue > 90,
        WorkQueueStrategy.CALL_CAMPAIGN,
    ),
    StrategyRule("medium", lambda c: c.band == WorkQueueClass.MEDIUM, WorkQueueStrategy.STANDARD_DUNNING),
    # LOW band
    StrategyRule(
        "low-aged-large-balance",
        lambda c: c.band == WorkQueueClass.LOW and c.factors.daysPastDue > 120 and c.factors.balance > 500,
        WorkQueueStrategy.AGENCY_PLACEMENT,
    ),
    StrategyRule(
        "low-small-balance",
        lambda c: c.band == WorkQueueClass.LOW and c.factors.balance < 200,
        WorkQueueStrategy.PAYMENT_PLAN_OFFER,
    ),
    StrategyRule("low", lambda c: c.band == WorkQueueClass.LOW, WorkQueueStrategy.ACCELERATED_DUNNING),
    # VERY_LOW band
    StrategyRule("very-low-stale", lambda c: c.factors.daysPastDue > 180, WorkQueueStrategy.WRITE_OFF),
    StrategyRule("very-low-large-balance", lambda c: c.factors.balance > 1000, WorkQueueStrategy.AGENCY_PLACEMENT),
    StrategyRule("very-low", _always, WorkQueueStrategy.PAYMENT_PLAN_OFFER),
)


# =============================================================================
# Strategy Eligibility Windows
# =============================================================================


@dataclass(frozen=True)
class StrategyWindow:
    """Score and balance ranges (inclusive) in which a strategy is a sensible option."""
    strategy: CollectionStrategy
    min_likelihood: float
    max_likelihood: float
    min_balance: float
    max_balance: Optional[float]
    description: str

    def contains(self, score: float, balance: float) -> bool:
        if not self.min_likelihood <= score <= self.max_likelihood:
            return False
        if balance < self.min_balance:
            return False
        return self.max_balance is None or balance <= self.max_balance


STRATEGY_WINDOWS: Tuple[StrategyWindow, ...] = (
    StrategyWindow(CollectionStrategy.STANDARD_DUNNING, 60, 100, 0, None,
                   "Continue standard collection sequence"),
    StrategyWindow(CollectionStrategy.ACCELERATED_DUNNING, 40, 70, 200, None,
                   "Accelerate dunning with shorter intervals"),
    StrategyWindow(CollectionStrategy.PHONE_OUTREACH, 35, 75, 250, None,
                   "Prioritize phone contact for engagement"),
    StrategyWindow(CollectionStrategy.PAYMENT_PLAN, 25, 65, 100, 25000,
                   "Offer structured payment plan"),
    StrategyWindow(CollectionStrategy.SETTLEMENT_OFFER, 15, 45, 500, None,
                   "Consider settlement at reduced amount"),
    StrategyWindow(CollectionStrategy.CHARITY_SCREENING, 0, 35, 0, None,
                   "Screen for charity care eligibility"),
    StrategyWindow(CollectionStrategy.AGENCY_PLACEMENT, 10, 30, 250, None,
                   "Consider external agency placement"),
    StrategyWindow(CollectionStrategy.LEGAL_REVIEW, 5, 25, 5000, None,
                   "Review for potential legal action"),
    StrategyWindow(CollectionStrategy.WRITE_OFF, 0, 15, 0, 200,
                   "Consider small balance write-off"),
    StrategyWindow(CollectionStrategy.HOLD, 0, 100, 0, None,
                   "Hold collection activity"),
)

STRATEGY_WINDOW_BY_STRATEGY: Dict[CollectionStrategy, StrategyWindow] = {
    window.strategy: window for window in STRATEGY_WINDOWS
}

MAX_ALTERNATIVE_STRATEGIES = 3


# =============================================================================
# Segment Tiers
# =============================================================================


@dataclass(frozen=True)
class TierDefinition:
    tier: SegmentTier
    min_score: int
    max_score: int
    strategy: CollectionStrategy


# Highest tier first. A score belongs to the first tier whose min_score it
# reaches, so fractional scores between the published bounds (e.g. 79.5)
# still land in exactly one tier.
SEGMENT_TIERS: Tuple[TierDefinition, ...] = (
    TierDefinition(SegmentTier.PLATINUM, 80, 100, CollectionStrategy.STANDARD_DUNNING),
    TierDefinition(SegmentTier.GOLD, 60, 79, CollectionStrategy.ACCELERATED_DUNNING),
    TierDefinition(SegmentTier.SILVER, 40, 59, CollectionStrategy.PAYMENT_PLAN),
    TierDefinition(SegmentTier.BRONZE, 20, 39, CollectionStrategy.SETTLEMENT_OFFER),
    TierDefinition(SegmentTier.IRON, 0, 19, CollectionStrategy.AGENCY_PLACEMENT),
)


def tier_for_score(score: float) -> TierDefinition:
    for definition in SEGMENT_TIERS:
        if score >= definition.min_score:
            return definition
    return SEGMENT_TIERS[-1]


__all__ = [
    "Step",
    "below",
    "at_most",
    "at_least",
    "step_score",
    "ScoringPolicy",
    "PREDICTION_POLICY",
    "WORK_QUEUE_POLICY",
    "RuleContext",
    "StrategyRule",
    "select_strategy",
    "PREDICTION_STRATEGY_RULES",
    "WORK_QUEUE_STRATEGY_RULES",
    "StrategyWindow",
    "STRATEGY_WINDOWS",
    "STRATEGY_WINDOW_BY_STRATEGY",
    "MAX_ALTERNATIVE_STRATEGIES",
    "TierDefinition",
    "SEGMENT_TIERS",
    "tier_for_score",
]
