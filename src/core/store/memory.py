# src/core/store/memory.py
"""In-memory and JSON-file listing stores."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any, cast

from pydantic import ValidationError

from src.core.errors import StoreError
from src.schemas.models import Listing, ListingFilter

from .base import SnapshotListingStore


class InMemoryListingStore(SnapshotListingStore):
    """Holds listings in a list. Used by tests and local runs."""

    def __init__(self, listings: Iterable[Listing] = ()) -> None:
        super().__init__()
        self._items: list[Listing] = list(listings)

    def add(self, listing: Listing) -> None:
        self._items.append(listing)

    def all(self) -> list[Listing]:
        return list(self._items)

    def _load(self, flt: ListingFilter) -> list[Listing]:
        return list(self._items)


class JsonFileListingStore(SnapshotListingStore):
    """
    Reads a JSON array of Listing objects on every snapshot refresh, so edits to
    the file (e.g. a fresh import) are picked up between selection steps.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)

    def _load(self, flt: ListingFilter) -> list[Listing]:
        # OSError → StoreUnavailable via store_error_guard
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise StoreError(f"{self.path}: expected a JSON array of listings")
        out: list[Listing] = []
        for i, item in enumerate(cast(list[dict[str, Any]], raw)):
            try:
                out.append(Listing.model_validate(item))
            except ValidationError as e:
                raise StoreError(f"{self.path}: listing #{i} invalid: {e}") from e
        return out


def write_listings_json(path: str | Path, listings: Iterable[Listing]) -> Path:
    """Write listings as a JSON array (the format JsonFileListingStore reads)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = [item.model_dump(mode="json") for item in listings]
    p.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return p
