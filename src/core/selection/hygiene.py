# src/core/selection/hygiene.py
"""
Candidate hygiene applied before counting or selecting.

Rules (first occurrence wins, in the order given):
  - no id → dropped
  - non-positive price or negative bedrooms → dropped (never scoreable)
  - no photo or a stock placeholder photo → dropped
  - repeated id → dropped
  - repeated image URL → dropped (duplicate-looking cards)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.schemas.labels import is_placeholder_image
from src.schemas.models import Listing


@dataclass
class HygieneStats:
    total: int = 0
    missing_id: int = 0
    bad_values: int = 0
    missing_image: int = 0
    placeholder_image: int = 0
    duplicate_id: int = 0
    duplicate_image: int = 0
    kept: int = 0
    dropped_ids: list[str] = field(default_factory=list)


def sanitize_candidates(listings: Iterable[Listing], stats: HygieneStats | None = None) -> list[Listing]:
    st = stats if stats is not None else HygieneStats()
    seen_ids: set[str] = set()
    seen_images: set[str] = set()
    kept: list[Listing] = []

    for listing in listings:
        st.total += 1
        ident = (listing.id or "").strip()
        image = (listing.image_url or "").strip()

        if not ident:
            st.missing_id += 1
            continue
        if listing.price <= 0 or listing.bedrooms < 0:
            st.bad_values += 1
            st.dropped_ids.append(ident)
            continue
        if not image:
            st.missing_image += 1
            st.dropped_ids.append(ident)
            continue
        if is_placeholder_image(image):
            st.placeholder_image += 1
            st.dropped_ids.append(ident)
            continue
        if ident in seen_ids:
            st.duplicate_id += 1
            st.dropped_ids.append(ident)
            continue
        if image in seen_images:
            st.duplicate_image += 1
            st.dropped_ids.append(ident)
            continue

        seen_ids.add(ident)
        seen_images.add(image)
        kept.append(listing)

    st.kept = len(kept)
    return kept
