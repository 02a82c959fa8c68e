"""
Work-Queue Scoring Service

Ranks accounts for the daily collector work queue. Uses the same six
sub-score arithmetic as the collection scorer but under WORK_QUEUE_POLICY:
different weights, dispute -15 / hardship -20, credit band in the
demographic factor, and four bands (>=70 high, >=50 medium, >=30 low,
else very-low).

Outputs per account:
- collectionProbability = round(0.9 x score)
- expectedRecovery = round(balance x probability / 100)
- a work-queue strategy from WORK_QUEUE_STRATEGY_RULES
- a concrete list of next actions for the collector

Portfolio helpers: prioritize_accounts (expected recovery, then score),
get_accounts_by_strategy and calculate_portfolio_metrics.
"""

import logging
from typing import Dict, List

from rcm_analytics.models.enums import (
    InsuranceCategory,
    PaymentHistoryRating,
    WorkQueueClass,
    WorkQueueStrategy,
)
from rcm_analytics.models.schemas import (
    AccountForPrediction,
    AccountScoringFactors,
    CollectionScoreResult,
    PortfolioMetrics,
    PrioritizedAccount,
)
from rcm_analytics.services.collection_scorer import (
    apply_penalties,
    calculate_score_breakdown,
    total_score,
)
from rcm_analytics.services.numeric import round_half_up
from rcm_analytics.services.scoring_policy import (
    WORK_QUEUE_POLICY,
    WORK_QUEUE_STRATEGY_RULES,
    RuleContext,
    select_strategy,
)

logger = logging.getLogger(__name__)


# Score roughly correlates to collection probability
PROBABILITY_PER_POINT = 0.9

# Monthly installment suggested for payment-plan offers
PAYMENT_PLAN_MONTHS = 12
PAYMENT_PLAN_MIN_INSTALLMENT = 25

STRATEGY_ACTIONS: Dict[WorkQueueStrategy, List[str]] = {
    WorkQueueStrategy.STANDARD_DUNNING: [
        "Continue standard dunning sequence",
    ],
    WorkQueueStrategy.ACCELERATED_DUNNING: [
        "Accelerate dunning sequence - reduce intervals",
        "Increase contact frequency",
    ],
    WorkQueueStrategy.CALL_CAMPAIGN: [
        "Prioritize outbound calling",
        "Prepare negotiation parameters",
        "Have payment plan options ready",
    ],
    WorkQueueStrategy.PAYMENT_PLAN_OFFER: [
        "Offer structured payment plan",
    ],
    WorkQueueStrategy.CHARITY_SCREENING: [
        "Screen for charity care eligibility",
        "Request financial assistance application",
        "Hold aggressive collection activity",
    ],
    WorkQueueStrategy.AGENCY_PLACEMENT: [
        "Prepare for external agency placement",
        "Ensure all internal collection efforts documented",
        "Send final demand letter",
    ],
    WorkQueueStrategy.WRITE_OFF: [
        "Review for write-off approval",
        "Document collection efforts",
        "Consider small balance write-off policy",
    ],
    WorkQueueStrategy.HOLD_FOR_REVIEW: [
        "Hold collection activity",
        "Review dispute details",
        "Escalate to supervisor if needed",
    ],
    WorkQueueStrategy.LEGAL_ACTION: [
        "Review for legal action criteria",
        "Ensure proper documentation",
        "Consult with legal team",
    ],
}


def recommend_work_queue_strategy(
    factors: AccountScoringFactors,
    score: float,
    classification: WorkQueueClass,
) -> WorkQueueStrategy:
    """First matching rule of the work-queue decision table."""
    context = RuleContext(score=score, factors=factors, band=classification)
    return select_strategy(WORK_QUEUE_STRATEGY_RULES, context).strategy


def recommended_actions(factors: AccountScoringFactors, strategy: WorkQueueStrategy) -> List[str]:
    """Strategy-specific collector actions followed by account-state reminders."""
    actions = list(STRATEGY_ACTIONS[strategy])

    if strategy == WorkQueueStrategy.STANDARD_DUNNING and not factors.hasValidEmail:
        actions.append("Verify and update email address")
    elif strategy == WorkQueueStrategy.ACCELERATED_DUNNING and factors.balance > 500:
        actions.append("Consider phone outreach")
    elif strategy == WorkQueueStrategy.PAYMENT_PLAN_OFFER:
        installment = max(PAYMENT_PLAN_MIN_INSTALLMENT, round_half_up(factors.balance / PAYMENT_PLAN_MONTHS))
        actions.append(f"Suggest {installment}/month for {PAYMENT_PLAN_MONTHS} months")

    if not factors.hasValidPhone and not factors.hasValidEmail:
        actions.append("Attempt to verify contact information")
    if factors.brokenPromiseCount > 2:
        actions.append("Require payment before extending new promise dates")

    return actions


def _risk_factors(factors: AccountScoringFactors) -> List[str]:
    risks = []
    if factors.daysPastDue > 120:
        risks.append("Account significantly past due")
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
    return risks


def _positive_factors(factors: AccountScoringFactors) -> List[str]:
    positives = []
    if factors.previousPaymentCount > 0:
        positives.append("Previous payment activity")
    if factors.hasRespondedToContact:
        positives.append("Patient responsive to contact")
    if factors.paymentHistory in (PaymentHistoryRating.EXCELLENT, PaymentHistoryRating.GOOD):
        positives.append("Good payment history")
    if factors.insurance == InsuranceCategory.INSURED:
        positives.append("Patient has insurance coverage")
    if factors.daysPastDue <= 30:
        positives.append("Recently past due - high collection window")
    if 500 <= factors.balance <= 5000:
        positives.append("Balance in optimal collection range")
    return positives


def calculate_collection_score(account: AccountForPrediction) -> CollectionScoreResult:
    """
    Score one account for the collector work queue.

    Args:
        account: Account with its scoring factors.

    Returns:
        CollectionScoreResult with score, band, probability, expected
        recovery, strategy, breakdown, explanations and next actions.
    """
    factors = account.factors
    breakdown = calculate_score_breakdown(factors, WORK_QUEUE_POLICY)
    score = apply_penalties(total_score(breakdown), factors, WORK_QUEUE_POLICY)
    classification = WORK_QUEUE_POLICY.classify(score)

    probability = round_half_up(score * PROBABILITY_PER_POINT)
    expected_recovery = round_half_up(factors.balance * probability / 100)
    strategy = recommend_work_queue_strategy(factors, score, classification)

    return CollectionScoreResult(
        accountId=account.accountId,
        score=score,
        classification=classification,
        collectionProbability=probability,
        expectedRecovery=expected_recovery,
        recommendedStrategy=strategy,
        breakdown=breakdown,
        riskFactors=_risk_factors(factors),
        positiveFactors=_positive_factors(factors),
        recommendedActions=recommended_actions(factors, strategy),
    )


def prioritize_accounts(accounts: List[AccountForPrediction]) -> List[PrioritizedAccount]:
    """
    Rank accounts for the work queue.

    Sorted by expected recovery descending, then score descending. The sort
    is stable, so full ties keep their input order. Ranks start at 1.
    """
    scored = [(account, calculate_collection_score(account)) for account in accounts]
    scored.sort(key=lambda pair: (-pair[1].expectedRecovery, -pair[1].score))

    return [
        PrioritizedAccount(
            accountId=result.accountId,
            score=result.score,
            rank=rank,
            expectedRecovery=result.expectedRecovery,
            recommendedStrategy=result.recommendedStrategy,
            balance=account.factors.balance,
            daysPastDue=account.factors.daysPastDue,
        )
        for rank, (account, result) in enumerate(scored, start=1)
    ]


def get_accounts_by_strategy(
    accounts: List[AccountForPrediction],
    strategy: WorkQueueStrategy,
) -> List[CollectionScoreResult]:
    """Score every account and keep those whose recommended strategy matches."""
    results = [calculate_collection_score(account) for account in accounts]
    return [result for result in results if result.recommendedStrategy == strategy]


def calculate_portfolio_metrics(accounts: List[AccountForPrediction]) -> PortfolioMetrics:
    """
    Aggregate work-queue metrics for a portfolio.

    low priority counts both the low and very-low bands. The strategy
    distribution always lists every work-queue strategy, with zero counts
    for an empty portfolio.
    """
    distribution = {strategy: 0 for strategy in WorkQueueStrategy}
    if not accounts:
        return PortfolioMetrics(strategyDistribution=distribution)

    results = [calculate_collection_score(account) for account in accounts]
    for result in results:
        distribution[result.recommendedStrategy] += 1

    classifications = [result.classification for result in results]
    metrics = PortfolioMetrics(
        totalBalance=sum(account.factors.balance for account in accounts),
        totalExpectedRecovery=sum(result.expectedRecovery for result in results),
        averageScore=round_half_up(sum(result.score for result in results) / len(results)),
        highPriorityCount=classifications.count(WorkQueueClass.HIGH),
        mediumPriorityCount=classifications.count(WorkQueueClass.MEDIUM),
        lowPriorityCount=(
            classifications.count(WorkQueueClass.LOW) + classifications.count(WorkQueueClass.VERY_LOW)
        ),
        strategyDistribution=distribution,
    )
    logger.debug(
        f"Portfolio metrics for {len(accounts)} accounts: "
        f"expected recovery {metrics.totalExpectedRecovery}"
    )
    return metrics


__all__ = [
    "STRATEGY_ACTIONS",
    "recommend_work_queue_strategy",
    "recommended_actions",
    "calculate_collection_score",
    "prioritize_accounts",
    "get_accounts_by_strategy",
    "calculate_portfolio_metrics",
]
