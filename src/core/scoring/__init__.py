from .incentives import detect_incentives, incentive_bonus
from .scorer import (
    bedroom_points,
    borough_fit,
    borough_points,
    budget_points,
    pets_amenities_points,
    rank_analyses,
    score_listing,
    validate_inputs,
)

__all__ = [
    "score_listing",
    "rank_analyses",
    "validate_inputs",
    "budget_points",
    "bedroom_points",
    "borough_fit",
    "borough_points",
    "pets_amenities_points",
    "detect_incentives",
    "incentive_bonus",
]
