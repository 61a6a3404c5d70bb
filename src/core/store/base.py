# src/core/store/base.py
"""
Listing Store Interface

Purpose
-------
Define the narrow read-only contract the selector uses against a listing store,
plus a snapshot base class that implements it on top of a single `_load()`.

Public API
----------
class ListingStore(Protocol):
    def count(self, flt: ListingFilter) -> int
    def fetch_at(self, flt: ListingFilter, offset: int, sort_key: str = "id") -> Listing | None

class SnapshotListingStore:
    # subclasses implement _load(flt) -> list[Listing]

Invariants & Guardrails
-----------------------
- Candidate hygiene (no photo, placeholder photo, duplicate id/image) is applied
  before counting, so count() and fetch_at() always agree on the same pool.
- Pool order is stable: sort by `sort_key`, then by id.
- Adapter failures surface as StoreUnavailable / StoreError, never as stale data.
"""

from __future__ import annotations

from typing import Any, Protocol

from src.core.errors import InputValidationError, StoreError, store_error_guard
from src.core.log import get_logger
from src.core.selection.hygiene import HygieneStats, sanitize_candidates
from src.schemas.models import Listing, ListingFilter

logger = get_logger(__name__)

SORTABLE_KEYS = frozenset({"id", "price", "bedrooms", "bathrooms", "borough", "neighborhood"})


class ListingStore(Protocol):
    def count(self, flt: ListingFilter) -> int: ...

    def fetch_at(self, flt: ListingFilter, offset: int, sort_key: str = "id") -> Listing | None: ...


def _sort_value(listing: Listing, sort_key: str) -> tuple[Any, str]:
    return (getattr(listing, sort_key), listing.id)


class SnapshotListingStore:
    """
    Implements count/fetch_at over a freshly loaded snapshot.

    count() reloads the pool for its filter; fetch_at() reuses that snapshot when
    the filter matches, otherwise reloads. A selection step always counts first,
    so one step sees one consistent pool.
    """

    def __init__(self) -> None:
        self._snapshot_filter: ListingFilter | None = None
        self._snapshot: list[Listing] = []
        self.last_stats: HygieneStats | None = None

    # ---------- subclass hook ----------

    def _load(self, flt: ListingFilter) -> list[Listing]:
        raise NotImplementedError

    # ---------- ListingStore ----------

    def count(self, flt: ListingFilter) -> int:
        return len(self._refresh(flt))

    def fetch_at(self, flt: ListingFilter, offset: int, sort_key: str = "id") -> Listing | None:
        if sort_key not in SORTABLE_KEYS:
            raise InputValidationError(f"unsupported sort key: {sort_key!r}")
        pool = self._snapshot if self._snapshot_filter == flt else self._refresh(flt)
        if offset < 0:
            return None
        ordered = pool if sort_key == "id" else sorted(pool, key=lambda item: _sort_value(item, sort_key))
        if offset >= len(ordered):
            return None
        return ordered[offset]

    # ---------- internals ----------

    def _refresh(self, flt: ListingFilter) -> list[Listing]:
        # cleared before loading; a failed load leaves no snapshot
        self._snapshot_filter = None
        self._snapshot = []
        try:
            with store_error_guard():
                raw = self._load(flt)
        except StoreError as e:
            logger.error("%s load failed: %s", type(self).__name__, e)
            raise
        matched = sorted((item for item in raw if flt.matches(item)), key=lambda item: item.id)
        stats = HygieneStats()
        pool = sanitize_candidates(matched, stats)
        logger.debug(
            "store snapshot: raw=%d matched=%d kept=%d (bad_values=%d no_image=%d placeholder=%d dup_id=%d dup_image=%d)",
            len(raw),
            len(matched),
            stats.kept,
            stats.bad_values,
            stats.missing_image,
            stats.placeholder_image,
            stats.duplicate_id,
            stats.duplicate_image,
        )
        self._snapshot_filter = flt
        self._snapshot = pool
        self.last_stats = stats
        return pool
