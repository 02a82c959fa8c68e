"""
Test suite for the Collection Scorer.

Verifies:
1. The reference account scores exactly (breakdown, class, strategy,
   expected collection, days to payment)
2. Score and probability bounds hold across a spread of accounts
3. Classification bands are contiguous with inclusive lower bounds
4. Strategy decision table priority (dispute > hardship > tiny balance ...)
5. Expected collection never exceeds the balance
6. Input validation rejects malformed records
7. Identical input yields identical output
"""

import itertools
from typing import Any, Callable, Dict

import pytest
from pydantic import ValidationError

from rcm_analytics.models import (
    AccountForPrediction,
    AccountScoringFactors,
    CollectionStrategy,
    LikelihoodClass,
)
from rcm_analytics.services.collection_scorer import (
    batch_predict_collection,
    calculate_likelihood_score,
    calculate_score_breakdown,
    get_optimal_strategy,
    get_strategy_rules,
    predict_collection_likelihood,
    predict_time_to_collection,
    score_factors,
)
from rcm_analytics.services.scoring_policy import PREDICTION_POLICY


# =============================================================================
# Reference Account
# =============================================================================


@pytest.mark.reference
class TestReferenceAccount:
    """The hand-checked reference account from conftest.reference_factors."""

    def test_breakdown(self, reference_account: AccountForPrediction) -> None:
        breakdown = calculate_score_breakdown(reference_account.factors)

        assert breakdown.balanceScore == 18
        assert breakdown.ageScore == 20
        assert breakdown.paymentHistoryScore == 14
        assert breakdown.insuranceScore == 15
        assert breakdown.contactabilityScore == 5
        assert breakdown.demographicScore == 8

    def test_score_class_and_strategy(self, reference_account: AccountForPrediction) -> None:
        prediction = predict_collection_likelihood(reference_account)

        assert prediction.accountId == 'ACC-REF'
        assert prediction.likelihoodScore == 80
        assert prediction.likelihoodClass == LikelihoodClass.VERY_HIGH
        assert prediction.recommendedStrategy == CollectionStrategy.STANDARD_DUNNING

    def test_probabilities_and_expected_collection(self, reference_account: AccountForPrediction) -> None:
        prediction = predict_collection_likelihood(reference_account)

        # full = 0.7 x 80 + 5 (insured); partial = 0.85 x 80 + 10
        assert prediction.fullCollectionProbability == 61
        assert prediction.partialCollectionProbability == 78
        # 61 + (78 - 61) / 2 = 69.5 rounds half-up
        assert prediction.expectedCollectionPercent == 70
        assert prediction.expectedCollection == 700

    def test_confidence_interval(self, reference_account: AccountForPrediction) -> None:
        interval = predict_collection_likelihood(reference_account).confidenceInterval

        # margin = 700 x 0.2 x 0.4 = 56, upside 60% of margin
        assert interval.low == 644
        assert interval.high == 734
        assert interval.confidence == 80

    def test_days_to_payment(self, reference_account: AccountForPrediction) -> None:
        prediction = predict_collection_likelihood(reference_account)

        # 90 - 0.7 x 80 = 34, minus 10 for good history
        assert prediction.estimatedDaysToPayment == 24
        assert prediction.estimatedDaysToFullCollection == 125

    def test_explanations(self, reference_account: AccountForPrediction) -> None:
        prediction = predict_collection_likelihood(reference_account)

        assert prediction.riskFactors == []
        assert prediction.positiveIndicators == [
            'Good payment history',
            'Has insurance coverage',
            'Recently past due - in collection window',
            'Balance in optimal collection range',
        ]
        assert prediction.alternativeStrategies == []

    def test_optimal_strategy_text(self, reference_account: AccountForPrediction) -> None:
        recommendation = get_optimal_strategy(reference_account)

        assert recommendation.strategy == CollectionStrategy.STANDARD_DUNNING
        assert recommendation.rationale == 'Continue standard collection sequence'
        assert recommendation.expectedOutcome == 'Expected collection: $700 (70% of balance)'

    def test_time_to_collection(self, reference_account: AccountForPrediction) -> None:
        timing = predict_time_to_collection(reference_account)

        assert timing.daysToFirstPayment == 24
        assert timing.daysToFullCollection == 125
        assert timing.confidence == 80


# =============================================================================
# Bounds and Classification
# =============================================================================


class TestBounds:

    def test_scores_and_probabilities_stay_in_bounds(
        self,
        make_account: Callable[..., AccountForPrediction],
    ) -> None:
        """Spread of good and bad accounts, including every penalty at once."""
        balances = [0, 20, 75, 1500, 50000]
        days_past_due = [-10, 0, 95, 500]
        histories = ['excellent', 'poor', 'no-history']
        insurances = ['insured', 'uninsured']
        troubles = [
            {},
            {
                'hasActiveDispute': True,
                'isOnHardship': True,
                'brokenPromiseCount': 5,
                'returnedPaymentCount': 4,
                'contactAttemptCount': 12,
            },
        ]

        for balance, dpd, history, insurance, trouble in itertools.product(
            balances, days_past_due, histories, insurances, troubles
        ):
            account = make_account(
                balance=balance,
                originalAmount=max(balance, 1),
                daysPastDue=dpd,
                paymentHistory=history,
                insurance=insurance,
                previousPaymentCount=3 if history == 'excellent' else 0,
                **trouble,
            )
            prediction = predict_collection_likelihood(account)

            assert 0 <= prediction.likelihoodScore <= 100
            assert 5 <= prediction.fullCollectionProbability <= 85
            assert 20 <= prediction.partialCollectionProbability <= 95
            assert 0 <= prediction.expectedCollection <= balance
            assert len(prediction.alternativeStrategies) <= 3
            assert prediction.recommendedStrategy not in prediction.alternativeStrategies

    def test_penalties_clamp_score_at_zero(self, make_account: Callable[..., AccountForPrediction]) -> None:
        account = make_account(
            balance=10,
            originalAmount=10,
            daysPastDue=900,
            paymentHistory='poor',
            insurance='uninsured',
            hasActiveDispute=True,
            isOnHardship=True,
            brokenPromiseCount=4,
            returnedPaymentCount=3,
        )

        assert calculate_likelihood_score(account.factors) == 0

    @pytest.mark.parametrize('score,expected', [
        (100, LikelihoodClass.VERY_HIGH),
        (80, LikelihoodClass.VERY_HIGH),
        (79.9, LikelihoodClass.HIGH),
        (60, LikelihoodClass.HIGH),
        (59.5, LikelihoodClass.MEDIUM),
        (40, LikelihoodClass.MEDIUM),
        (39, LikelihoodClass.LOW),
        (20, LikelihoodClass.LOW),
        (19.99, LikelihoodClass.VERY_LOW),
        (0, LikelihoodClass.VERY_LOW),
    ])
    def test_classification_bands_inclusive_lower_bound(self, score: float, expected: LikelihoodClass) -> None:
        assert PREDICTION_POLICY.classify(score) == expected

    def test_no_payment_dates_for_very_low_scores(self, tiered_portfolio) -> None:
        iron = tiered_portfolio[-1]
        prediction = predict_collection_likelihood(iron)

        assert prediction.likelihoodScore == 9
        assert prediction.estimatedDaysToPayment is None
        assert prediction.estimatedDaysToFullCollection is None


# =============================================================================
# Sub-Score Details
# =============================================================================


class TestSubScores:

    def test_paid_share_skipped_without_original_amount(
        self,
        make_account: Callable[..., AccountForPrediction],
    ) -> None:
        account = make_account(balance=1000, originalAmount=0)

        assert calculate_score_breakdown(account.factors).balanceScore == 20

    def test_small_balance_steps(self, make_account: Callable[..., AccountForPrediction]) -> None:
        scores = [
            calculate_score_breakdown(make_account(balance=b, originalAmount=b).factors).balanceScore
            for b in (10, 30, 80, 200)
        ]

        assert scores == [5, 8, 12, 20]

    def test_unanswered_contact_penalty(self, make_account: Callable[..., AccountForPrediction]) -> None:
        answered = make_account(hasValidPhone=True, hasRespondedToContact=True, contactAttemptCount=8)
        ignored = make_account(hasValidPhone=True, contactAttemptCount=8)

        assert calculate_score_breakdown(answered.factors).contactabilityScore == 11
        assert calculate_score_breakdown(ignored.factors).contactabilityScore == 3

    def test_history_bonus_and_penalties(self, make_account: Callable[..., AccountForPrediction]) -> None:
        account = make_account(
            paymentHistory='excellent',
            previousPaymentCount=6,
            previousPaymentTotal=600,
            originalAmount=1000,
        )
        # 18 + min(2, 3) + 2 (60% paid), capped at 20
        assert calculate_score_breakdown(account.factors).paymentHistoryScore == 20

        broken = make_account(paymentHistory='good', brokenPromiseCount=2, returnedPaymentCount=1)
        # 14 - 6 - 4
        assert calculate_score_breakdown(broken.factors).paymentHistoryScore == 4


# =============================================================================
# Strategy Selection
# =============================================================================


class TestStrategySelection:

    def test_dispute_outranks_everything(self, reference_factors: Dict[str, Any], make_account) -> None:
        account = make_account(hasActiveDispute=True, isOnHardship=True, **reference_factors)

        assert predict_collection_likelihood(account).recommendedStrategy == CollectionStrategy.HOLD

    def test_hardship_goes_to_charity_screening(self, reference_factors: Dict[str, Any], make_account) -> None:
        account = make_account(isOnHardship=True, **reference_factors)

        assert predict_collection_likelihood(account).recommendedStrategy == CollectionStrategy.CHARITY_SCREENING

    def test_tiny_balance_written_off(self, make_account: Callable[..., AccountForPrediction]) -> None:
        account = make_account(balance=20, originalAmount=20)

        assert predict_collection_likelihood(account).recommendedStrategy == CollectionStrategy.WRITE_OFF

    def test_tier_portfolio_strategies(self, tiered_portfolio) -> None:
        strategies = [p.recommendedStrategy for p in batch_predict_collection(tiered_portfolio)]

        assert strategies == [
            CollectionStrategy.STANDARD_DUNNING,
            CollectionStrategy.ACCELERATED_DUNNING,
            CollectionStrategy.ACCELERATED_DUNNING,
            CollectionStrategy.CHARITY_SCREENING,
            CollectionStrategy.HOLD,
        ]

    def test_alternatives_follow_window_order(self, tiered_portfolio) -> None:
        silver = predict_collection_likelihood(tiered_portfolio[2])

        assert silver.likelihoodScore == 54
        assert silver.alternativeStrategies == [
            CollectionStrategy.PHONE_OUTREACH,
            CollectionStrategy.PAYMENT_PLAN,
        ]

    def test_strategy_rules_listed_in_priority_order(self) -> None:
        rules = get_strategy_rules()

        assert len(rules) == 16
        assert rules[0] == {'priority': '1', 'ruleId': 'active-dispute', 'strategy': 'hold'}
        assert rules[-1]['strategy'] == 'agency-placement'


# =============================================================================
# Batch, Validation, Determinism
# =============================================================================


class TestBatchAndValidation:

    def test_batch_preserves_order(self, tiered_portfolio) -> None:
        predictions = batch_predict_collection(tiered_portfolio)

        assert [p.accountId for p in predictions] == [a.accountId for a in tiered_portfolio]
        assert [p.likelihoodScore for p in predictions] == [80, 72, 54, 29, 9]

    def test_batch_empty(self) -> None:
        assert batch_predict_collection([]) == []

    def test_negative_balance_rejected(self, reference_factors: Dict[str, Any]) -> None:
        reference_factors['balance'] = -5

        with pytest.raises(ValidationError):
            AccountScoringFactors(**reference_factors)

    @pytest.mark.parametrize('field', ['balance', 'originalAmount', 'previousPaymentTotal'])
    @pytest.mark.parametrize('value', [float('inf'), float('nan')])
    def test_non_finite_amount_rejected(self, reference_factors: Dict[str, Any], field: str, value: float) -> None:
        reference_factors[field] = value

        with pytest.raises(ValidationError):
            AccountScoringFactors(**reference_factors)

    def test_unknown_enum_rejected(self, reference_factors: Dict[str, Any]) -> None:
        reference_factors['paymentHistory'] = 'stellar'

        with pytest.raises(ValidationError):
            AccountScoringFactors(**reference_factors)

    def test_identical_input_identical_output(self, reference_account: AccountForPrediction) -> None:
        first = score_factors(reference_account.factors, 'ACC-REF')
        second = score_factors(reference_account.factors, 'ACC-REF')

        assert first.model_dump_json() == second.model_dump_json()
