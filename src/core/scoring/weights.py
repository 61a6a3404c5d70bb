# src/core/scoring/weights.py
"""
Canonical weight table for listing match scoring.

Money thresholds are expressed in whole percent of the renter's budget so every
comparison stays in integer arithmetic (price * 100 <= budget * pct).
"""

from __future__ import annotations

# Budget (max 40): first tier whose ceiling the price fits under wins.
BUDGET_MAX_POINTS = 40
BUDGET_TIERS: tuple[tuple[int, int], ...] = (
    (90, 40),
    (100, 30),
    (110, 15),
)

# Bedrooms (max 20)
BEDROOMS_EXACT_POINTS = 20
BEDROOMS_OFF_BY_ONE_POINTS = 10
BEDROOMS_PLUS_FLOOR = 3  # "3+" is satisfied by any listing with >= 3 bedrooms

# Borough (max 20)
BOROUGH_MATCH_POINTS = 20
BOROUGH_NO_PREFERENCE_POINTS = 20
BOROUGH_OTHER_NYC_POINTS = 5
BOROUGH_OUTSIDE_NYC_POINTS = 0

# Pets & amenities (max 10)
PETS_POINTS = 10
AMENITY_MATCH_POINTS = 2
PETS_AMENITIES_CAP = 10

# Incentive bonus
INCENTIVE_BONUS_SINGLE = 6
INCENTIVE_BONUS_MULTIPLE = 10

# Clamp & caps
SCORE_MIN = 0
SCORE_MAX = 100
NO_PHOTO_SCORE_CAP = 59

# Tag thresholds
PRICE_FAR_ABOVE_PCT = 110
BELOW_BUDGET_PCT = 95
WELL_BELOW_BUDGET_PCT = 85
LOW_SCORE_THRESHOLD = 50
HIGH_SCORE_THRESHOLD = 80
MIN_DESCRIPTION_CHARS = 30

# Reasoning: savings below this read as "right at your budget"
BUDGET_SAVINGS_NOTABLE = 200
