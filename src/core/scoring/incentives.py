# src/core/scoring/incentives.py
"""
Landlord incentive detection (free month, no fee, concessions...) from listing text.
"""

from __future__ import annotations

from src.schemas.labels import INCENTIVE_PHRASES, MULTI_MONTH_FREE_RE, parse_month_count

from .weights import INCENTIVE_BONUS_MULTIPLE, INCENTIVE_BONUS_SINGLE

FREE_MONTH = "free month"
NO_FEE = "no fee"


def detect_incentives(description: str | None) -> list[str]:
    """
    Return one label per incentive kind found, in table order.
    "N months free" (N >= 2) renders the free-month label with its count.
    """
    if not description:
        return []

    found: list[str] = []
    for label, pattern in INCENTIVE_PHRASES:
        if not pattern.search(description):
            continue
        if label == FREE_MONTH:
            m = MULTI_MONTH_FREE_RE.search(description)
            months = parse_month_count(m.group(1)) if m else 1
            found.append(f"{months} months free" if months >= 2 else FREE_MONTH)
        else:
            found.append(label)
    return found


def incentive_bonus(incentives: list[str]) -> int:
    n = len(set(incentives))
    if n >= 2:
        return INCENTIVE_BONUS_MULTIPLE
    if n == 1:
        return INCENTIVE_BONUS_SINGLE
    return 0


def has_free_month(incentives: list[str]) -> bool:
    return any(i == FREE_MONTH or i.endswith("months free") for i in incentives)


def has_no_fee(incentives: list[str]) -> bool:
    return NO_FEE in incentives
