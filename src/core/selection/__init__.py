from .hygiene import HygieneStats, sanitize_candidates
from .selector import ListingSelector, attempt_cap, hard_filter, relaxed_filter

__all__ = [
    "HygieneStats",
    "sanitize_candidates",
    "ListingSelector",
    "attempt_cap",
    "hard_filter",
    "relaxed_filter",
]
