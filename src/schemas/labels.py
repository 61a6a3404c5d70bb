# src/schemas/labels.py
from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from re import Pattern

# =========================
# Canonical label enums
# =========================


class Badge(str, Enum):
    ACT_NOW = "ACT_NOW"
    CONSIDER = "CONSIDER"
    WAIT = "WAIT"
    PASS = "PASS"


class Recommendation(str, Enum):
    apply = "Apply"
    apply_with_caveats = "ApplyWithCaveats"
    wait_consciously = "WaitConsciously"
    wait = "Wait"


class RiskTag(str, Enum):
    price_above_budget = "price_above_budget"
    price_far_above_budget = "price_far_above_budget"
    wrong_borough = "wrong_borough"
    wrong_bedrooms = "wrong_bedrooms"
    no_photo = "no_photo"
    no_pets = "no_pets"
    low_score = "low_score"
    missing_description = "missing_description"


class AdvantageTag(str, Enum):
    below_budget = "below_budget"
    well_below_budget = "well_below_budget"
    pets_ok = "pets_ok"
    preferred_borough = "preferred_borough"
    free_month = "free_month"
    no_fee = "no_fee"
    exact_bedrooms = "exact_bedrooms"
    high_score = "high_score"


class Borough(str, Enum):
    manhattan = "Manhattan"
    brooklyn = "Brooklyn"
    queens = "Queens"
    bronx = "Bronx"
    staten_island = "Staten Island"


class ListingStatus(str, Enum):
    active = "Active"
    inactive = "Inactive"
    rented = "Rented"
    expired = "Expired"


# =========================
# Canonical surfaces/sets
# =========================

# Badge bands, highest first. Every integer score in [0, 100] lands in exactly one band.
BADGE_BANDS: list[tuple[int, Badge, Recommendation]] = [
    (80, Badge.ACT_NOW, Recommendation.apply),
    (60, Badge.CONSIDER, Recommendation.apply_with_caveats),
    (40, Badge.WAIT, Recommendation.wait_consciously),
    (0, Badge.PASS, Recommendation.wait),
]

BEDROOM_CHOICES: dict[str, int] = {"0": 0, "1": 1, "2": 2, "3+": 3}

# Stock image the listing vendors serve when a unit has no real photo.
PLACEHOLDER_IMAGE_TOKENS: tuple[str, ...] = ("add7ffb",)


# =========================
# Alias/token maps (with synonyms)
# =========================

NEIGHBORHOOD_BOROUGH: dict[str, Borough] = {
    # Manhattan
    "east village": Borough.manhattan,
    "west village": Borough.manhattan,
    "greenwich village": Borough.manhattan,
    "lower east side": Borough.manhattan,
    "upper east side": Borough.manhattan,
    "upper west side": Borough.manhattan,
    "chelsea": Borough.manhattan,
    "harlem": Borough.manhattan,
    "east harlem": Borough.manhattan,
    "washington heights": Borough.manhattan,
    "inwood": Borough.manhattan,
    "murray hill": Borough.manhattan,
    "midtown": Borough.manhattan,
    "hell's kitchen": Borough.manhattan,
    "soho": Borough.manhattan,
    "tribeca": Borough.manhattan,
    "financial district": Borough.manhattan,
    "kips bay": Borough.manhattan,
    "gramercy": Borough.manhattan,
    # Brooklyn
    "williamsburg": Borough.brooklyn,
    "greenpoint": Borough.brooklyn,
    "bushwick": Borough.brooklyn,
    "bed-stuy": Borough.brooklyn,
    "bedford-stuyvesant": Borough.brooklyn,
    "park slope": Borough.brooklyn,
    "crown heights": Borough.brooklyn,
    "prospect heights": Borough.brooklyn,
    "fort greene": Borough.brooklyn,
    "clinton hill": Borough.brooklyn,
    "dumbo": Borough.brooklyn,
    "brooklyn heights": Borough.brooklyn,
    "cobble hill": Borough.brooklyn,
    "carroll gardens": Borough.brooklyn,
    "flatbush": Borough.brooklyn,
    "sunset park": Borough.brooklyn,
    "bay ridge": Borough.brooklyn,
    # Queens
    "astoria": Borough.queens,
    "long island city": Borough.queens,
    "sunnyside": Borough.queens,
    "woodside": Borough.queens,
    "jackson heights": Borough.queens,
    "ridgewood": Borough.queens,
    "forest hills": Borough.queens,
    "flushing": Borough.queens,
    "elmhurst": Borough.queens,
    # Bronx
    "mott haven": Borough.bronx,
    "riverdale": Borough.bronx,
    "fordham": Borough.bronx,
    "concourse": Borough.bronx,
    "kingsbridge": Borough.bronx,
    "pelham bay": Borough.bronx,
    # Staten Island
    "st. george": Borough.staten_island,
    "st george": Borough.staten_island,
    "tompkinsville": Borough.staten_island,
    "stapleton": Borough.staten_island,
}

# Questionnaire amenity values → phrases that evidence them in listing text/amenity lists.
AMENITY_TOKEN_ALIASES: dict[str, tuple[str, ...]] = {
    "washer_dryer": ("washer_dryer", "washer/dryer", "washer dryer", "w/d", "in-unit laundry", "in unit laundry"),
    "elevator": ("elevator",),
    "doorman": ("doorman", "concierge"),
    "gym": ("gym", "fitness center", "fitness room"),
    "dishwasher": ("dishwasher",),
    "laundry": ("laundry",),
    "outdoor_space": ("outdoor space", "balcony", "terrace", "backyard", "patio", "roof deck"),
}

# Incentive kinds, in reporting order. A kind is recorded once even when several of its
# phrases appear; the first pattern per kind is the canonical label.
INCENTIVE_PHRASES: list[tuple[str, Pattern[str]]] = [
    ("free month", re.compile(r"\b(?:free\s+months?|months?\s+free)\b", re.IGNORECASE)),
    ("no fee", re.compile(r"\bno[\s-]+(?:broker(?:'s)?\s+)?fee\b", re.IGNORECASE)),
    ("concession", re.compile(r"\bconcessions?\b", re.IGNORECASE)),
    ("reduced deposit", re.compile(r"\breduced\s+(?:security\s+)?deposit\b", re.IGNORECASE)),
    ("flexible lease", re.compile(r"\bflexible\s+lease(?:\s+terms?)?\b", re.IGNORECASE)),
]

# "2 months free" / "two months free" upgrades the free-month label.
MULTI_MONTH_FREE_RE: Pattern[str] = re.compile(
    r"\b(\d+|two|three|four|five|six)\s+months?\s+free\b",
    re.IGNORECASE,
)

_NUMBER_WORDS = {"two": 2, "three": 3, "four": 4, "five": 5, "six": 6}


# =========================
# Helpers
# =========================


def borough_for(text: str | None) -> Borough | None:
    """
    Map a free-text borough or neighborhood string to a canonical Borough.
    Borough names win over neighborhood lookups.
    """
    if not text:
        return None
    t = text.strip().lower()
    if not t:
        return None
    for b in Borough:
        if b.value.lower() in t:
            return b
    for name, b in NEIGHBORHOOD_BOROUGH.items():
        if name in t:
            return b
    return None


def parse_month_count(token: str) -> int:
    """'2' → 2, 'three' → 3. Unknown words count as one month."""
    t = token.strip().lower()
    if t.isdigit():
        return int(t)
    return _NUMBER_WORDS.get(t, 1)


def amenity_phrases(tokens: Iterable[str]) -> dict[str, tuple[str, ...]]:
    """
    Resolve questionnaire amenity tokens to their evidence phrases.
    Unknown tokens match themselves (underscores read as spaces).
    """
    out: dict[str, tuple[str, ...]] = {}
    for tok in tokens:
        key = (tok or "").strip().lower()
        if not key or key in out:
            continue
        out[key] = AMENITY_TOKEN_ALIASES.get(key, (key.replace("_", " "),))
    return out


def is_placeholder_image(url: str | None) -> bool:
    if not url:
        return False
    return any(tok in url for tok in PLACEHOLDER_IMAGE_TOKENS)


def badge_for(score: int) -> tuple[Badge, Recommendation]:
    for floor, badge, rec in BADGE_BANDS:
        if score >= floor:
            return badge, rec
    return Badge.PASS, Recommendation.wait


__all__ = [
    "Badge",
    "Recommendation",
    "RiskTag",
    "AdvantageTag",
    "Borough",
    "ListingStatus",
    "BADGE_BANDS",
    "BEDROOM_CHOICES",
    "PLACEHOLDER_IMAGE_TOKENS",
    "NEIGHBORHOOD_BOROUGH",
    "AMENITY_TOKEN_ALIASES",
    "INCENTIVE_PHRASES",
    "MULTI_MONTH_FREE_RE",
    "borough_for",
    "parse_month_count",
    "amenity_phrases",
    "is_placeholder_image",
    "badge_for",
    "parse_pets_policy",
    "parse_price",
]


# =========================
# Row-level normalizers
# =========================

_PRICE_STRIP_RE = re.compile(r"[$,\s]")


def parse_pets_policy(text: object) -> bool | None:
    """
    Free-text pet policy → True (some pets allowed), False (no pets), None (unknown).
    'Case by case' stays unknown.
    """
    if isinstance(text, bool):
        return text
    if text is None:
        return None
    t = str(text).strip().lower()
    if not t or t in {"unknown", "n/a", "?"}:
        return None
    if t in {"no", "none", "false", "0"} or "no pets" in t or "not allowed" in t:
        return False
    if "case by case" in t:
        return None
    if t in {"yes", "allowed", "true", "1"} or "cat" in t or "dog" in t or "pets allowed" in t or "pet friendly" in t:
        return True
    return None


def parse_price(text: object) -> int:
    """'$3,200' → 3200. Unparseable values become 0 (filtered out upstream)."""
    if isinstance(text, bool) or text is None:
        return 0
    if isinstance(text, (int, float)):
        return int(text)
    cleaned = _PRICE_STRIP_RE.sub("", str(text))
    try:
        return int(float(cleaned))
    except ValueError:
        return 0
