"""
Collection Scorer Service

Scores each receivable account's collectability and turns the score into
probabilities, an expected amount with a confidence interval, time-to-payment
estimates and a recommended recovery strategy.

Score (0-100) = sum of six bounded sub-scores, minus penalties, clamped:
- Balance (0-20): tiny balances score low; accounts already >=50% paid down
  score 18 before the $100-$2,500 sweet spot is considered
- Age (0-20): step function of days past due
- Payment history (0-20): rating base, payment bonuses, per-incident penalties
- Insurance (0-15): insured > medicare > dual-eligible > medicaid >
  underinsured > uninsured
- Contactability (0-15): phone, email, response; penalty after 5 unanswered
  attempts
- Demographic (0-10): neutral base plus working-age bonus

The weights and decision tables come from services/scoring_policy.py. The
sub-score arithmetic here is shared with the work-queue scorer, which runs
the same functions against WORK_QUEUE_POLICY.

All functions are pure: identical input always yields an identical result.
"""

import logging
import math
from typing import Dict, List, Optional

from rcm_analytics.models.enums import (
    CollectionStrategy,
    InsuranceCategory,
    PaymentHistoryRating,
)
from rcm_analytics.models.schemas import (
    AccountForPrediction,
    AccountScoringFactors,
    CollectionPrediction,
    ConfidenceInterval,
    ScoreBreakdown,
    StrategyRecommendation,
    TimeToCollection,
)
from rcm_analytics.services.numeric import clamp, format_amount, format_number, round_half_up
from rcm_analytics.services.scoring_policy import (
    MAX_ALTERNATIVE_STRATEGIES,
    PREDICTION_POLICY,
    PREDICTION_STRATEGY_RULES,
    STRATEGY_WINDOW_BY_STRATEGY,
    STRATEGY_WINDOWS,
    RuleContext,
    ScoringPolicy,
    select_strategy,
    step_score,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Prediction Constants
# =============================================================================

# Full-collection probability = 0.7 x score + bonuses - penalties, in [5, 85]
FULL_PROBABILITY_WEIGHT = 0.7
FULL_PROBABILITY_BOUNDS = (5, 85)

# Partial-collection probability = 0.85 x score + 10 + bonuses, in [20, 95]
PARTIAL_PROBABILITY_WEIGHT = 0.85
PARTIAL_PROBABILITY_BASE = 10
PARTIAL_PROBABILITY_BOUNDS = (20, 95)

# Share of the balance assumed collected on a partial outcome
PARTIAL_COLLECTION_SHARE = 0.5

# Confidence interval: margin = expected x (100 - score)/100 x 0.4,
# upside is 60% of the margin
INTERVAL_MARGIN_RATE = 0.4
INTERVAL_UPSIDE_SHARE = 0.6
INTERVAL_CONFIDENCE = 80

# Below these scores no payment date is projected
MIN_SCORE_FOR_FIRST_PAYMENT = 15
MIN_SCORE_FOR_FULL_COLLECTION = 25

FIRST_PAYMENT_DAYS_BOUNDS = (7, 180)
FULL_COLLECTION_MAX_DAYS = 365

TIME_TO_COLLECTION_MAX_CONFIDENCE = 80


# =============================================================================
# Sub-Scores (shared by both policies)
# =============================================================================


def _balance_score(factors: AccountScoringFactors, policy: ScoringPolicy) -> float:
    balance = factors.balance
    points = step_score(balance, policy.small_balance_steps)
    if points is not None:
        return points

    if factors.originalAmount > 0:
        if policy.share_basis == "paid":
            share = (factors.originalAmount - balance) / factors.originalAmount * 100
        else:
            share = balance / factors.originalAmount * 100
        points = step_score(share, policy.share_steps)
        if points is not None:
            return points

    return step_score(balance, policy.balance_size_steps, policy.balance_size_fallback)


def _age_score(factors: AccountScoringFactors, policy: ScoringPolicy) -> float:
    return step_score(factors.daysPastDue, policy.age_steps, policy.age_fallback)


def _payment_history_score(factors: AccountScoringFactors, policy: ScoringPolicy) -> float:
    score = policy.history_base[factors.paymentHistory]

    if factors.previousPaymentCount > 0:
        score += min(
            policy.payment_count_bonus_cap,
            factors.previousPaymentCount * policy.payment_count_bonus_rate,
        )

    if factors.previousPaymentTotal > 0 and factors.originalAmount > 0:
        paid_percent = factors.previousPaymentTotal / factors.originalAmount * 100
        score += step_score(paid_percent, policy.paid_share_bonus_steps, 0)

    score -= factors.brokenPromiseCount * policy.broken_promise_history_penalty
    score -= factors.returnedPaymentCount * policy.returned_payment_history_penalty

    return clamp(score, 0, policy.history_max)


def _insurance_score(factors: AccountScoringFactors, policy: ScoringPolicy) -> float:
    return policy.insurance_points[factors.insurance]


def _contactability_score(factors: AccountScoringFactors, policy: ScoringPolicy) -> float:
    score = 0.0
    if factors.hasValidPhone:
        score += policy.phone_points
    if factors.hasValidEmail:
        score += policy.email_points

    if factors.hasRespondedToContact:
        score += policy.responded_points
    elif factors.contactAttemptCount > policy.unanswered_attempt_limit:
        score -= policy.unanswered_penalty

    low, high = policy.working_attempts_range
    if low <= factors.contactAttemptCount <= high:
        score += policy.working_attempts_bonus

    return clamp(score, 0, policy.contact_max)


def _demographic_score(factors: AccountScoringFactors, policy: ScoringPolicy) -> float:
    score = policy.demographic_base

    age = factors.patientAge
    if age is not None:
        youngest, oldest = policy.working_age_range
        if youngest <= age <= oldest:
            score += policy.working_age_bonus
        elif age > oldest:
            score += policy.senior_age_bonus
        else:
            score += policy.young_age_bonus

    if factors.creditScoreRange is not None:
        score += policy.credit_points.get(factors.creditScoreRange, 0)

    return clamp(score, 0, policy.demographic_max)


def calculate_score_breakdown(
    factors: AccountScoringFactors,
    policy: ScoringPolicy = PREDICTION_POLICY,
) -> ScoreBreakdown:
    """
    Compute the six bounded sub-scores for an account under a policy.

    Args:
        factors: Account scoring factors.
        policy: Weight table to apply (prediction by default).

    Returns:
        ScoreBreakdown with each sub-score inside its own bound.
    """
    return ScoreBreakdown(
        balanceScore=_balance_score(factors, policy),
        ageScore=_age_score(factors, policy),
        paymentHistoryScore=_payment_history_score(factors, policy),
        insuranceScore=_insurance_score(factors, policy),
        contactabilityScore=_contactability_score(factors, policy),
        demographicScore=_demographic_score(factors, policy),
    )


def total_score(breakdown: ScoreBreakdown) -> float:
    """Sum of the six sub-scores before penalties."""
    return (
        breakdown.balanceScore
        + breakdown.ageScore
        + breakdown.paymentHistoryScore
        + breakdown.insuranceScore
        + breakdown.contactabilityScore
        + breakdown.demographicScore
    )


def apply_penalties(
    raw_score: float,
    factors: AccountScoringFactors,
    policy: ScoringPolicy = PREDICTION_POLICY,
) -> float:
    """Subtract the policy's account-level penalties and clamp to [0, 100]."""
    score = raw_score
    if factors.hasActiveDispute:
        score -= policy.dispute_penalty
    if factors.isOnHardship:
        score -= policy.hardship_penalty
    if policy.broken_promise_penalty and factors.brokenPromiseCount > policy.broken_promise_limit:
        score -= policy.broken_promise_penalty
    score -= policy.returned_payment_penalty * factors.returnedPaymentCount
    return clamp(score, 0, 100)


def calculate_likelihood_score(
    factors: AccountScoringFactors,
    policy: ScoringPolicy = PREDICTION_POLICY,
) -> float:
    """Breakdown total after penalties, in [0, 100]."""
    breakdown = calculate_score_breakdown(factors, policy)
    return apply_penalties(total_score(breakdown), factors, policy)


# =============================================================================
# Probabilities and Expected Collection
# =============================================================================


def _full_collection_probability(score: float, factors: AccountScoringFactors) -> int:
    probability = score * FULL_PROBABILITY_WEIGHT

    if factors.previousPaymentCount > 0:
        probability += 10
    if factors.paymentHistory == PaymentHistoryRating.EXCELLENT:
        probability += 10
    if factors.insurance == InsuranceCategory.INSURED:
        probability += 5

    if factors.daysPastDue > 180:
        probability -= 15
    if factors.brokenPromiseCount > 1:
        probability -= 10
    if factors.balance > 10000:
        probability -= 10

    return int(clamp(round_half_up(probability), *FULL_PROBABILITY_BOUNDS))


def _partial_collection_probability(score: float, factors: AccountScoringFactors) -> int:
    probability = score * PARTIAL_PROBABILITY_WEIGHT + PARTIAL_PROBABILITY_BASE

    if factors.balance > 5000:
        probability += 5
    if factors.previousPaymentCount > 0:
        probability += 5

    return int(clamp(round_half_up(probability), *PARTIAL_PROBABILITY_BOUNDS))


def _expected_collection_percent(full_probability: int, partial_probability: int) -> int:
    return round_half_up(
        full_probability + (partial_probability - full_probability) * PARTIAL_COLLECTION_SHARE
    )


def _confidence_interval(expected: float, score: float) -> ConfidenceInterval:
    """Asymmetric interval that widens as the score falls; more upside than downside."""
    variance_factor = (100 - score) / 100
    margin = expected * variance_factor * INTERVAL_MARGIN_RATE
    return ConfidenceInterval(
        low=max(0, round_half_up(expected - margin)),
        high=round_half_up(expected + margin * INTERVAL_UPSIDE_SHARE),
        confidence=INTERVAL_CONFIDENCE,
    )


# =============================================================================
# Time to Collection
# =============================================================================


def estimate_days_to_payment(score: float, factors: AccountScoringFactors) -> Optional[int]:
    """
    Estimate days until the first payment.

    Returns None below a score of 15, meaning no payment date should be
    projected. Otherwise the estimate is bounded to [7, 180] days.
    """
    if score < MIN_SCORE_FOR_FIRST_PAYMENT:
        return None

    days = round_half_up(90 - score * 0.7)

    if factors.hasRespondedToContact:
        days -= 15
    if factors.previousPaymentCount > 0:
        days -= 10
    if factors.paymentHistory in (PaymentHistoryRating.EXCELLENT, PaymentHistoryRating.GOOD):
        days -= 10

    if factors.daysPastDue > 120:
        days += 20
    days += factors.brokenPromiseCount * 7

    return int(clamp(days, *FIRST_PAYMENT_DAYS_BOUNDS))


def estimate_days_to_full_collection(score: float, factors: AccountScoringFactors) -> Optional[int]:
    """
    Estimate days until the balance is fully collected.

    Larger balances take longer (30 days per order of magnitude) and lower
    scores stretch the estimate. Never sooner than 30 days after the first
    payment and capped at one year. None below a score of 25.
    """
    if score < MIN_SCORE_FOR_FULL_COLLECTION:
        return None

    days_to_first = estimate_days_to_payment(score, factors)
    if days_to_first is None:
        return None

    balance_days = math.log10(factors.balance + 1) * 30
    days = (days_to_first + balance_days) * (1 + (100 - score) / 200)

    return round_half_up(max(days_to_first + 30, min(FULL_COLLECTION_MAX_DAYS, days)))


# =============================================================================
# Strategy Selection
# =============================================================================


def determine_strategy(score: float, factors: AccountScoringFactors) -> CollectionStrategy:
    """Evaluate the prediction decision table; the first matching rule wins."""
    context = RuleContext(score=score, factors=factors)
    return select_strategy(PREDICTION_STRATEGY_RULES, context).strategy


def alternative_strategies(
    score: float,
    factors: AccountScoringFactors,
    primary: CollectionStrategy,
) -> List[CollectionStrategy]:
    """
    Up to three other strategies whose eligibility windows contain the account.

    Windows are checked in table order; the primary strategy and HOLD are
    never offered as alternatives.
    """
    alternatives = [
        window.strategy
        for window in STRATEGY_WINDOWS
        if window.strategy not in (primary, CollectionStrategy.HOLD)
        and window.contains(score, factors.balance)
    ]
    return alternatives[:MAX_ALTERNATIVE_STRATEGIES]


def get_strategy_rules() -> List[Dict[str, str]]:
    """
    Describe the ordered strategy decision table for audit screens.

    Returns:
        List of {"priority", "ruleId", "strategy"} dicts in evaluation order.
    """
    return [
        {"priority": str(position), "ruleId": rule.rule_id, "strategy": rule.strategy.value}
        for position, rule in enumerate(PREDICTION_STRATEGY_RULES, start=1)
    ]


# =============================================================================
# Explanations
# =============================================================================


def identify_risk_factors(factors: AccountScoringFactors) -> List[str]:
    risks = []
    if factors.daysPastDue > 120:
        risks.append("Account significantly past due (120+ days)")
    if factors.daysPastDue > 180:
        risks.append("Very old account (180+ days)")
    if factors.brokenPromiseCount > 0:
        risks.append(f"{factors.brokenPromiseCount} broken promise(s) to pay")
    if factors.returnedPaymentCount > 0:
        risks.append(f"{factors.returnedPaymentCount} returned payment(s)")
    if not factors.hasValidPhone and not factors.hasValidEmail:
        risks.append("No valid contact information")
    if factors.hasActiveDispute:
        risks.append("Active dispute on account")
    if factors.isOnHardship:
        risks.append("Patient on hardship status")
    if factors.paymentHistory == PaymentHistoryRating.POOR:
        risks.append("Poor payment history")
    if factors.insurance == InsuranceCategory.UNINSURED:
        risks.append("Patient is uninsured")
    if factors.balance > 10000:
        risks.append("High balance may be difficult to collect in full")
    if factors.contactAttemptCount > 5 and not factors.hasRespondedToContact:
        risks.append("Multiple contact attempts with no response")
    return risks


def identify_positive_indicators(factors: AccountScoringFactors) -> List[str]:
    positives = []
    if factors.previousPaymentCount > 0:
        positives.append("Has made previous payments")
    if factors.hasRespondedToContact:
        positives.append("Responsive to contact attempts")
    if factors.paymentHistory == PaymentHistoryRating.EXCELLENT:
        positives.append("Excellent payment history")
    if factors.paymentHistory == PaymentHistoryRating.GOOD:
        positives.append("Good payment history")
    if factors.insurance == InsuranceCategory.INSURED:
        positives.append("Has insurance coverage")
    if factors.daysPastDue <= 30:
        positives.append("Recently past due - in collection window")
    if 100 <= factors.balance <= 2500:
        positives.append("Balance in optimal collection range")
    if factors.hasValidPhone and factors.hasValidEmail:
        positives.append("Multiple valid contact methods")
    return positives


# =============================================================================
# Public Prediction API
# =============================================================================


def score_factors(factors: AccountScoringFactors, account_id: str = "") -> CollectionPrediction:
    """
    Predict collectability for a set of scoring factors.

    Total over valid input: every well-formed factor set yields a prediction.

    Args:
        factors: Validated account scoring factors.
        account_id: Identifier copied onto the prediction.

    Returns:
        CollectionPrediction with score, class, probabilities, expected
        collection (never above the balance), interval, day estimates,
        strategy, alternatives and explanations.

    Example:
        >>> prediction = score_factors(factors, "ACC-1")
        >>> prediction.likelihoodClass
        <LikelihoodClass.VERY_HIGH: 'very-high'>
    """
    breakdown = calculate_score_breakdown(factors, PREDICTION_POLICY)
    score = apply_penalties(total_score(breakdown), factors, PREDICTION_POLICY)

    full_probability = _full_collection_probability(score, factors)
    partial_probability = _partial_collection_probability(score, factors)
    expected_percent = _expected_collection_percent(full_probability, partial_probability)
    expected = min(factors.balance, round_half_up(factors.balance * expected_percent / 100))

    strategy = determine_strategy(score, factors)

    return CollectionPrediction(
        accountId=account_id,
        likelihoodScore=score,
        likelihoodClass=PREDICTION_POLICY.classify(score),
        fullCollectionProbability=full_probability,
        partialCollectionProbability=partial_probability,
        expectedCollection=expected,
        expectedCollectionPercent=expected_percent,
        estimatedDaysToPayment=estimate_days_to_payment(score, factors),
        estimatedDaysToFullCollection=estimate_days_to_full_collection(score, factors),
        confidenceInterval=_confidence_interval(expected, score),
        recommendedStrategy=strategy,
        alternativeStrategies=alternative_strategies(score, factors, strategy),
        riskFactors=identify_risk_factors(factors),
        positiveIndicators=identify_positive_indicators(factors),
        scoreBreakdown=breakdown,
    )


def predict_collection_likelihood(account: AccountForPrediction) -> CollectionPrediction:
    """Predict collectability for one account."""
    return score_factors(account.factors, account.accountId)


def batch_predict_collection(accounts: List[AccountForPrediction]) -> List[CollectionPrediction]:
    """Predict collectability for many accounts, preserving input order."""
    predictions = [predict_collection_likelihood(account) for account in accounts]
    logger.debug(f"Scored {len(predictions)} accounts")
    return predictions


def predict_time_to_collection(account: AccountForPrediction) -> TimeToCollection:
    """Days to first payment and to full collection, with confidence capped at 80."""
    prediction = predict_collection_likelihood(account)
    return TimeToCollection(
        daysToFirstPayment=prediction.estimatedDaysToPayment,
        daysToFullCollection=prediction.estimatedDaysToFullCollection,
        confidence=min(TIME_TO_COLLECTION_MAX_CONFIDENCE, prediction.likelihoodScore),
    )


def get_optimal_strategy(account: AccountForPrediction) -> StrategyRecommendation:
    """
    Recommended strategy with its rationale and the expected outcome text.

    Example:
        >>> get_optimal_strategy(account).expectedOutcome
        'Expected collection: $700 (70% of balance)'
    """
    prediction = predict_collection_likelihood(account)
    strategy = prediction.recommendedStrategy
    return StrategyRecommendation(
        strategy=strategy,
        rationale=STRATEGY_WINDOW_BY_STRATEGY[strategy].description,
        alternatives=prediction.alternativeStrategies,
        expectedOutcome=(
            f"Expected collection: ${format_amount(prediction.expectedCollection)} "
            f"({format_number(prediction.expectedCollectionPercent)}% of balance)"
        ),
    )


__all__ = [
    "calculate_score_breakdown",
    "total_score",
    "apply_penalties",
    "calculate_likelihood_score",
    "estimate_days_to_payment",
    "estimate_days_to_full_collection",
    "determine_strategy",
    "alternative_strategies",
    "get_strategy_rules",
    "identify_risk_factors",
    "identify_positive_indicators",
    "score_factors",
    "predict_collection_likelihood",
    "batch_predict_collection",
    "predict_time_to_collection",
    "get_optimal_strategy",
]
