# src/core/scoring/reasoning.py
"""
Deterministic one-to-two sentence explanation of a match score.
Same inputs always produce the same text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.schemas.labels import Badge
from src.schemas.models import Listing, UserCriteria

from .weights import BUDGET_SAVINGS_NOTABLE

if TYPE_CHECKING:
    from .scorer import BoroughFit

_INTRO = {
    Badge.ACT_NOW: "Strong match.",
    Badge.CONSIDER: "Solid option.",
    Badge.WAIT: "Close, but not quite.",
    Badge.PASS: "Not a fit right now.",
}


def _budget_clause(price: int, budget: int) -> str:
    if price <= budget:
        savings = budget - price
        if savings > BUDGET_SAVINGS_NOTABLE:
            return f"${price:,}/mo leaves ${savings:,} of your ${budget:,} budget"
        return f"${price:,}/mo is right at your ${budget:,} budget"
    over = price - budget
    pct = round(over * 100 / budget)
    return f"${price:,}/mo is ${over:,} ({pct}%) over your ${budget:,} budget"


def _place(listing: Listing) -> str:
    hood = (listing.neighborhood or "").strip()
    borough = (listing.borough or "").strip()
    if hood and borough and hood.lower() != borough.lower():
        return f"{hood}, {borough}"
    return hood or borough or "an unlisted area"


def _borough_clause(listing: Listing, fit: BoroughFit) -> str:
    place = _place(listing)
    if fit == "preferred":
        return f"in your preferred area ({place})"
    if fit == "no_preference":
        return f"in {place}"
    if fit == "other_nyc":
        return f"outside your preferred boroughs ({place})"
    return f"outside NYC ({place})"


def _pets_clause(listing: Listing, criteria: UserCriteria) -> str | None:
    if not criteria.wants_pets:
        return None
    if listing.pets_allowed is True:
        return "pets welcome"
    if listing.pets_allowed is False:
        return "no pets allowed"
    return "pet policy unconfirmed"


def build_reasoning(
    listing: Listing,
    criteria: UserCriteria,
    *,
    badge: Badge,
    fit: BoroughFit,
    incentives: list[str],
) -> str:
    parts = [_budget_clause(listing.price, criteria.budget_max), _borough_clause(listing, fit)]
    pets = _pets_clause(listing, criteria)
    if pets:
        parts.append(pets)

    text = f"{_INTRO[badge]} {', '.join(parts)}."
    if incentives:
        text += f" Plus: {', '.join(incentives)}."
    return text
