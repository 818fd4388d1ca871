"""Gift recommendation scoring.

Score components:
    - within budget: +50; over budget: minus 1 per 10 USD over, capped at 40
    - +20 per interest mentioned in the reason (case-insensitive)
    - +5 for a title longer than 4 characters

Ties are broken by lower price first; the sort is stable otherwise.
"""

from typing import List, Sequence

from valentine_flows.core.ai.schemas import GiftRecommendation

MAX_RECOMMENDATIONS = 5


def score_recommendation(
    recommendation: GiftRecommendation,
    budget: int,
    interests: Sequence[str],
) -> int:
    score = 0

    if recommendation.estimated_price <= budget:
        score += 50
    else:
        over_budget = recommendation.estimated_price - budget
        score -= min(40, over_budget // 10)

    reason = recommendation.reason.lower()
    score += 20 * sum(1 for interest in interests if interest.lower() in reason)

    if len(recommendation.title) > 4:
        score += 5

    return score


def rank_recommendations(
    recommendations: Sequence[GiftRecommendation],
    budget: int,
    interests: Sequence[str],
) -> List[GiftRecommendation]:
    """Return *recommendations* ordered best first."""
    return sorted(
        recommendations,
        key=lambda rec: (-score_recommendation(rec, budget, interests), rec.estimated_price),
    )
