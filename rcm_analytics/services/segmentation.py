"""
Portfolio Segmentation Service

Scores every account with the collection scorer and groups the results into
five fixed recovery tiers, each bound to one recommended strategy:

    Tier      Score     Strategy
    platinum  80-100    standard-dunning
    gold      60-79     accelerated-dunning
    silver    40-59     payment-plan
    bronze    20-39     settlement-offer
    iron      0-19      agency-placement

Tiers partition [0, 100]: a score belongs to the highest tier whose lower
bound it reaches, so every account lands in exactly one tier.

The summary reports both the plain average likelihood and the
balance-weighted average, which answers "what is my dollar-weighted risk"
rather than "what is my account-count risk".
"""

import logging
from typing import Dict, List

import numpy as np

from rcm_analytics.models.enums import SegmentTier
from rcm_analytics.models.schemas import (
    AccountForPrediction,
    AccountSegment,
    CollectionPrediction,
    SegmentationResult,
    SegmentationSummary,
)
from rcm_analytics.services.collection_scorer import predict_collection_likelihood
from rcm_analytics.services.numeric import round_half_up
from rcm_analytics.services.scoring_policy import SEGMENT_TIERS, tier_for_score

logger = logging.getLogger(__name__)


def segment_accounts(accounts: List[AccountForPrediction]) -> SegmentationResult:
    """
    Segment a portfolio into recovery tiers.

    Args:
        accounts: Accounts to score and segment. May be empty.

    Returns:
        SegmentationResult with all five tiers (highest first) and a
        portfolio summary. An empty portfolio yields five empty tiers and an
        all-zero summary.
    """
    members: Dict[SegmentTier, List[tuple]] = {definition.tier: [] for definition in SEGMENT_TIERS}
    predictions: List[CollectionPrediction] = []

    for account in accounts:
        prediction = predict_collection_likelihood(account)
        predictions.append(prediction)
        tier = tier_for_score(prediction.likelihoodScore).tier
        members[tier].append((account, prediction))

    segments = [
        AccountSegment(
            tier=definition.tier,
            minScore=definition.min_score,
            maxScore=definition.max_score,
            accountCount=len(members[definition.tier]),
            totalBalance=sum(account.factors.balance for account, _ in members[definition.tier]),
            expectedRecovery=sum(prediction.expectedCollection for _, prediction in members[definition.tier]),
            recommendedStrategy=definition.strategy,
            accountIds=[account.accountId for account, _ in members[definition.tier]],
        )
        for definition in SEGMENT_TIERS
    ]

    if not accounts:
        return SegmentationResult(segments=segments, summary=SegmentationSummary())

    balances = np.array([account.factors.balance for account in accounts], dtype=float)
    scores = np.array([prediction.likelihoodScore for prediction in predictions], dtype=float)
    total_balance = float(balances.sum())

    # np.average raises on all-zero weights
    weighted_average = float(np.average(scores, weights=balances)) if total_balance > 0 else 0.0

    summary = SegmentationSummary(
        totalAccounts=len(accounts),
        totalBalance=round_half_up(total_balance),
        totalExpectedRecovery=round_half_up(sum(p.expectedCollection for p in predictions)),
        averageLikelihood=round_half_up(float(scores.mean())),
        weightedAverageLikelihood=round_half_up(weighted_average),
    )

    logger.debug(
        f"Segmented {summary.totalAccounts} accounts: "
        + ", ".join(f"{segment.tier.value}={segment.accountCount}" for segment in segments)
    )

    return SegmentationResult(segments=segments, summary=summary)


__all__ = ["segment_accounts"]
