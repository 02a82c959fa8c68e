"""
Test suite for work-queue scoring.

The work-queue policy shares the sub-score arithmetic with the collection
scorer but weighs factors differently, so the same account scores
differently under the two policies.
"""

from typing import Any, Callable, Dict

import pytest

from rcm_analytics.models import (
    AccountForPrediction,
    WorkQueueClass,
    WorkQueueStrategy,
)
from rcm_analytics.services.collection_scorer import calculate_score_breakdown
from rcm_analytics.services.scoring_policy import WORK_QUEUE_POLICY
from rcm_analytics.services.work_queue_scoring import (
    calculate_collection_score,
    calculate_portfolio_metrics,
    get_accounts_by_strategy,
    prioritize_accounts,
)


@pytest.mark.reference
class TestReferenceAccountWorkQueue:

    def test_breakdown_differs_from_prediction_policy(self, reference_account: AccountForPrediction) -> None:
        breakdown = calculate_score_breakdown(reference_account.factors, WORK_QUEUE_POLICY)

        # Remaining share 50% -> 14 under the work-queue table
        assert breakdown.balanceScore == 14
        assert breakdown.ageScore == 20
        assert breakdown.paymentHistoryScore == 12
        assert breakdown.insuranceScore == 15
        assert breakdown.contactabilityScore == 4
        assert breakdown.demographicScore == 7

    def test_score_band_and_recovery(self, reference_account: AccountForPrediction) -> None:
        result = calculate_collection_score(reference_account)

        assert result.score == 72
        assert result.classification == WorkQueueClass.HIGH
        assert result.collectionProbability == 65
        assert result.expectedRecovery == 650
        assert result.recommendedStrategy == WorkQueueStrategy.STANDARD_DUNNING

    def test_actions_and_explanations(self, reference_account: AccountForPrediction) -> None:
        result = calculate_collection_score(reference_account)

        assert result.recommendedActions == [
            'Continue standard dunning sequence',
            'Verify and update email address',
        ]
        assert result.riskFactors == []
        assert result.positiveFactors == [
            'Good payment history',
            'Patient has insurance coverage',
            'Recently past due - high collection window',
            'Balance in optimal collection range',
        ]


class TestWorkQueueStrategies:

    def test_tier_portfolio_strategies(self, tiered_portfolio) -> None:
        results = [calculate_collection_score(account) for account in tiered_portfolio]

        assert [r.score for r in results] == [72, 69, 50, 33, 18]
        assert [r.classification for r in results] == [
            WorkQueueClass.HIGH,
            WorkQueueClass.MEDIUM,
            WorkQueueClass.MEDIUM,
            WorkQueueClass.LOW,
            WorkQueueClass.VERY_LOW,
        ]
        assert [r.recommendedStrategy for r in results] == [
            WorkQueueStrategy.STANDARD_DUNNING,
            WorkQueueStrategy.STANDARD_DUNNING,
            WorkQueueStrategy.CALL_CAMPAIGN,
            WorkQueueStrategy.CHARITY_SCREENING,
            WorkQueueStrategy.HOLD_FOR_REVIEW,
        ]

    def test_payment_plan_offer_suggests_installment(
        self,
        make_account: Callable[..., AccountForPrediction],
    ) -> None:
        # One prior payment adds 0.5, landing at 69.5: still medium
        account = make_account(
            'ACC-PLAN',
            balance=3000,
            originalAmount=3000,
            daysPastDue=45,
            hasValidPhone=True,
            hasValidEmail=True,
            previousPaymentCount=1,
        )
        result = calculate_collection_score(account)

        assert result.score == 69.5
        assert result.classification == WorkQueueClass.MEDIUM
        assert result.recommendedStrategy == WorkQueueStrategy.PAYMENT_PLAN_OFFER
        assert result.recommendedActions == [
            'Offer structured payment plan',
            'Suggest 250/month for 12 months',
        ]

    def test_credit_band_only_counts_for_work_queue(
        self,
        make_account: Callable[..., AccountForPrediction],
    ) -> None:
        strong = make_account(creditScoreRange='excellent', patientAge=40)
        weak = make_account(creditScoreRange='poor', patientAge=20)

        assert calculate_score_breakdown(strong.factors, WORK_QUEUE_POLICY).demographicScore == 10
        assert calculate_score_breakdown(weak.factors, WORK_QUEUE_POLICY).demographicScore == 3
        assert calculate_score_breakdown(strong.factors).demographicScore == 8

    def test_hardship_penalty_larger_than_dispute(
        self,
        reference_factors: Dict[str, Any],
        make_account: Callable[..., AccountForPrediction],
    ) -> None:
        disputed = calculate_collection_score(make_account(hasActiveDispute=True, **reference_factors))
        hardship = calculate_collection_score(make_account(isOnHardship=True, **reference_factors))

        assert disputed.score == 57
        assert hardship.score == 52
        assert disputed.recommendedStrategy == WorkQueueStrategy.HOLD_FOR_REVIEW
        assert hardship.recommendedStrategy == WorkQueueStrategy.CHARITY_SCREENING


class TestPrioritization:

    def test_ranked_by_expected_recovery(self, tiered_portfolio) -> None:
        ranked = prioritize_accounts(tiered_portfolio)

        assert [a.accountId for a in ranked] == ['ACC-GOLD', 'ACC-BRNZ', 'ACC-IRON', 'ACC-PLAT', 'ACC-SILV']
        assert [a.rank for a in ranked] == [1, 2, 3, 4, 5]
        assert [a.expectedRecovery for a in ranked] == [1860, 1800, 960, 650, 360]

    def test_full_ties_keep_input_order(self, make_account: Callable[..., AccountForPrediction]) -> None:
        ranked = prioritize_accounts([make_account('ACC-B'), make_account('ACC-A')])

        assert [a.accountId for a in ranked] == ['ACC-B', 'ACC-A']

    def test_empty_queue(self) -> None:
        assert prioritize_accounts([]) == []

    def test_filter_by_strategy(self, tiered_portfolio) -> None:
        dunning = get_accounts_by_strategy(tiered_portfolio, WorkQueueStrategy.STANDARD_DUNNING)

        assert [r.accountId for r in dunning] == ['ACC-PLAT', 'ACC-GOLD']


class TestPortfolioMetrics:

    def test_tier_portfolio(self, tiered_portfolio) -> None:
        metrics = calculate_portfolio_metrics(tiered_portfolio)

        assert metrics.totalBalance == 16800
        assert metrics.totalExpectedRecovery == 5630
        # (72 + 69 + 50 + 33 + 18) / 5 = 48.4
        assert metrics.averageScore == 48
        assert metrics.highPriorityCount == 1
        assert metrics.mediumPriorityCount == 2
        assert metrics.lowPriorityCount == 2
        assert metrics.strategyDistribution[WorkQueueStrategy.STANDARD_DUNNING] == 2
        assert metrics.strategyDistribution[WorkQueueStrategy.CALL_CAMPAIGN] == 1
        assert metrics.strategyDistribution[WorkQueueStrategy.LEGAL_ACTION] == 0
        assert sum(metrics.strategyDistribution.values()) == 5

    def test_empty_portfolio_lists_every_strategy(self) -> None:
        metrics = calculate_portfolio_metrics([])

        assert metrics.totalBalance == 0
        assert metrics.averageScore == 0
        assert len(metrics.strategyDistribution) == len(WorkQueueStrategy)
        assert set(metrics.strategyDistribution.values()) == {0}
