# src/core/scoring/scorer.py
"""
Listing match scorer: (Listing, UserCriteria) → MatchAnalysis.

Pure and deterministic. Four capped categories (budget 40, bedrooms 20,
borough 20, pets & amenities 10) plus an incentive bonus, clamped to [0, 100],
then capped at 59 for listings without a photo or an apply link.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from src.core.errors import InputValidationError
from src.schemas.labels import (
    AdvantageTag,
    RiskTag,
    amenity_phrases,
    badge_for,
    borough_for,
)
from src.schemas.models import Listing, MatchAnalysis, ScoreBreakdown, UserCriteria

from .incentives import detect_incentives, has_free_month, has_no_fee, incentive_bonus
from .reasoning import build_reasoning
from .weights import (
    AMENITY_MATCH_POINTS,
    BEDROOMS_EXACT_POINTS,
    BEDROOMS_OFF_BY_ONE_POINTS,
    BEDROOMS_PLUS_FLOOR,
    BELOW_BUDGET_PCT,
    BOROUGH_MATCH_POINTS,
    BOROUGH_NO_PREFERENCE_POINTS,
    BOROUGH_OTHER_NYC_POINTS,
    BOROUGH_OUTSIDE_NYC_POINTS,
    BUDGET_TIERS,
    HIGH_SCORE_THRESHOLD,
    LOW_SCORE_THRESHOLD,
    MIN_DESCRIPTION_CHARS,
    NO_PHOTO_SCORE_CAP,
    PETS_AMENITIES_CAP,
    PETS_POINTS,
    PRICE_FAR_ABOVE_PCT,
    SCORE_MAX,
    SCORE_MIN,
    WELL_BELOW_BUDGET_PCT,
)

BoroughFit = Literal["preferred", "no_preference", "other_nyc", "outside_nyc"]


# -------------------------
# Validation
# -------------------------


def validate_inputs(listing: Listing, criteria: UserCriteria) -> None:
    """Reject malformed inputs before any arithmetic happens."""
    if criteria.budget_max <= 0:
        raise InputValidationError(f"budget_max must be positive (got {criteria.budget_max})")
    if listing.price <= 0:
        raise InputValidationError(f"listing {listing.id!r}: price must be positive (got {listing.price})")
    if listing.bedrooms < 0:
        raise InputValidationError(f"listing {listing.id!r}: bedrooms must be >= 0 (got {listing.bedrooms})")
    if not listing.is_active:
        raise InputValidationError(f"listing {listing.id!r}: status {listing.status!r} is not scoreable")


# -------------------------
# Category rules
# -------------------------


def desired_bedrooms(criteria: UserCriteria) -> int:
    return BEDROOMS_PLUS_FLOOR if criteria.bedrooms == "3+" else int(criteria.bedrooms)


def bedroom_gap(listing: Listing, criteria: UserCriteria) -> int:
    """Distance from the desired bedroom count; "3+" treats any count >= 3 as exact."""
    needed = desired_bedrooms(criteria)
    if criteria.bedrooms == "3+" and listing.bedrooms >= BEDROOMS_PLUS_FLOOR:
        return 0
    return abs(listing.bedrooms - needed)


def budget_points(price: int, budget: int) -> int:
    for pct, pts in BUDGET_TIERS:
        if price * 100 <= budget * pct:
            return pts
    return 0


def bedroom_points(listing: Listing, criteria: UserCriteria) -> int:
    gap = bedroom_gap(listing, criteria)
    if gap == 0:
        return BEDROOMS_EXACT_POINTS
    if gap == 1:
        return BEDROOMS_OFF_BY_ONE_POINTS
    return 0


def _preferred_tokens(criteria: UserCriteria) -> list[str]:
    return [b.strip().lower() for b in criteria.boroughs if b and b.strip()]


def borough_fit(listing: Listing, criteria: UserCriteria) -> BoroughFit:
    prefs = _preferred_tokens(criteria)
    if not prefs:
        return "no_preference"
    borough = (listing.borough or "").lower()
    hood = (listing.neighborhood or "").lower()
    if any(p in borough or p in hood for p in prefs):
        return "preferred"
    if borough_for(listing.borough) or borough_for(listing.neighborhood):
        return "other_nyc"
    return "outside_nyc"


def borough_points(fit: BoroughFit) -> int:
    return {
        "preferred": BOROUGH_MATCH_POINTS,
        "no_preference": BOROUGH_NO_PREFERENCE_POINTS,
        "other_nyc": BOROUGH_OTHER_NYC_POINTS,
        "outside_nyc": BOROUGH_OUTSIDE_NYC_POINTS,
    }[fit]


def matched_amenities(listing: Listing, criteria: UserCriteria) -> list[str]:
    """Criteria amenity tokens evidenced by the listing's amenity list or description."""
    haystack = " | ".join([*(a.lower() for a in listing.amenities), (listing.description or "").lower()])
    if not haystack.strip(" |"):
        return []
    return [tok for tok, phrases in amenity_phrases(criteria.amenities).items() if any(p in haystack for p in phrases)]


def pets_amenities_points(listing: Listing, criteria: UserCriteria, amenity_hits: Iterable[str]) -> int:
    if not criteria.wants_pets or listing.pets_allowed is True:
        pts = PETS_POINTS
    else:
        pts = 0
    pts += AMENITY_MATCH_POINTS * len(list(amenity_hits))
    return min(pts, PETS_AMENITIES_CAP)


# -------------------------
# Tags
# -------------------------


def _risk_tags(
    listing: Listing,
    criteria: UserCriteria,
    *,
    fit: BoroughFit,
    score: int,
) -> list[RiskTag]:
    budget = criteria.budget_max
    desc = (listing.description or "").strip()
    flags = {
        RiskTag.price_above_budget: listing.price > budget,
        RiskTag.price_far_above_budget: listing.price * 100 > budget * PRICE_FAR_ABOVE_PCT,
        RiskTag.wrong_borough: fit in ("other_nyc", "outside_nyc"),
        RiskTag.wrong_bedrooms: bedroom_gap(listing, criteria) > 1,
        RiskTag.no_photo: not listing.has_photo,
        RiskTag.no_pets: criteria.wants_pets and listing.pets_allowed is not True,
        RiskTag.low_score: score < LOW_SCORE_THRESHOLD,
        RiskTag.missing_description: len(desc) < MIN_DESCRIPTION_CHARS,
    }
    return [tag for tag in RiskTag if flags[tag]]


def _advantage_tags(
    listing: Listing,
    criteria: UserCriteria,
    *,
    incentives: list[str],
    score: int,
) -> list[AdvantageTag]:
    budget = criteria.budget_max
    prefs = _preferred_tokens(criteria)
    exact_borough = bool(prefs) and (listing.borough or "").strip().lower() in prefs
    flags = {
        AdvantageTag.below_budget: listing.price * 100 < budget * BELOW_BUDGET_PCT,
        AdvantageTag.well_below_budget: listing.price * 100 < budget * WELL_BELOW_BUDGET_PCT,
        AdvantageTag.pets_ok: criteria.wants_pets and listing.pets_allowed is True,
        AdvantageTag.preferred_borough: exact_borough,
        AdvantageTag.free_month: has_free_month(incentives),
        AdvantageTag.no_fee: has_no_fee(incentives),
        AdvantageTag.exact_bedrooms: bedroom_gap(listing, criteria) == 0,
        AdvantageTag.high_score: score >= HIGH_SCORE_THRESHOLD,
    }
    return [tag for tag in AdvantageTag if flags[tag]]


# -------------------------
# Public API
# -------------------------


def score_listing(listing: Listing, criteria: UserCriteria) -> MatchAnalysis:
    """
    Score one Active listing against the renter's criteria.

    Raises:
        InputValidationError: non-positive price or budget, negative bedrooms,
            or a listing that is not Active.
    """
    validate_inputs(listing, criteria)

    fit = borough_fit(listing, criteria)
    amenity_hits = matched_amenities(listing, criteria)
    incentives = detect_incentives(listing.description)

    parts = ScoreBreakdown(
        budget=budget_points(listing.price, criteria.budget_max),
        bedrooms=bedroom_points(listing, criteria),
        borough=borough_points(fit),
        pets_amenities=pets_amenities_points(listing, criteria, amenity_hits),
        incentives=incentive_bonus(incentives),
    )
    raw = parts.budget + parts.bedrooms + parts.borough + parts.pets_amenities + parts.incentives
    score = max(SCORE_MIN, min(SCORE_MAX, raw))

    capped = False
    if not (listing.has_photo and listing.has_apply_url) and score > NO_PHOTO_SCORE_CAP:
        score = NO_PHOTO_SCORE_CAP
        capped = True

    badge, rec = badge_for(score)
    risks = _risk_tags(listing, criteria, fit=fit, score=score)
    advantages = _advantage_tags(listing, criteria, incentives=incentives, score=score)

    return MatchAnalysis(
        listing_id=listing.id,
        score=score,
        badge=badge,
        recommendation=rec,
        risks=risks,
        advantages=advantages,
        incentives_detected=incentives,
        reasoning=build_reasoning(listing, criteria, badge=badge, fit=fit, incentives=incentives),
        components=parts.model_copy(update={"raw_total": raw, "photo_capped": capped}),
    )


def rank_analyses(analyses: Iterable[MatchAnalysis]) -> list[MatchAnalysis]:
    """Best first: score desc, then advantage count desc; ties keep input order."""
    return sorted(analyses, key=lambda a: (-a.score, -len(a.advantages)))
