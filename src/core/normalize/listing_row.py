# src/core/normalize/listing_row.py

"""
Deterministic row normalizer (store row / CSV row → Listing).

Each source declares its column mapping explicitly; there is no guessing of
identifier columns. Unknown or blank values stay None / defaults.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup
from pydantic import ValidationError

from src.core.errors import StoreError
from src.schemas.labels import parse_pets_policy, parse_price
from src.schemas.models import Listing

# Listing field → source column. The store schema (listings table).
STORE_COLUMNS: dict[str, str] = {
    "id": "id",
    "price": "price",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "borough": "borough",
    "neighborhood": "neighborhood",
    "address": "address",
    "pets_allowed": "pets",
    "description": "description",
    "image_url": "image_url",
    "apply_url": "original_url",
    "amenities": "amenities",
    "status": "status",
}

_STATUSES = {"active": "Active", "inactive": "Inactive", "rented": "Rented", "expired": "Expired"}


def _text(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def _first_line(v: Any) -> str | None:
    s = _text(v)
    if s is None:
        return None
    return s.splitlines()[0].strip() or None


def _int(v: Any, default: int = 0) -> int:
    if v is None or isinstance(v, bool):
        return default
    try:
        return int(float(str(v).strip()))
    except ValueError:
        return default


def _float(v: Any, default: float = 1.0) -> float:
    if v is None or isinstance(v, bool):
        return default
    try:
        return float(str(v).strip())
    except ValueError:
        return default


def _amenities(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [str(a).strip() for a in v if str(a).strip()]
    return [a.strip() for a in str(v).replace(";", ",").split(",") if a.strip()]


def clean_description(text: Any) -> str | None:
    """Strip markup from HTML descriptions and collapse whitespace."""
    s = _text(text)
    if s is None:
        return None
    if "<" in s and ">" in s:
        s = BeautifulSoup(s, "html.parser").get_text(" ", strip=True)
    return " ".join(s.split()) or None


def normalize_status(v: Any) -> str:
    s = (_text(v) or "Active").lower()
    return _STATUSES.get(s, "Inactive")


def listing_from_row(row: Mapping[str, Any], columns: Mapping[str, str] = STORE_COLUMNS) -> Listing:
    """
    Build a Listing from a raw row using an explicit column mapping.

    Raises:
        StoreError: the row has no identifier or fails model validation.
    """

    def col(field: str) -> Any:
        name = columns.get(field)
        return row.get(name) if name else None

    ident = _text(col("id"))
    if ident is None:
        raise StoreError(f"row without {columns.get('id', 'id')!r} column value")

    data = {
        "id": ident,
        "price": parse_price(col("price")),
        "bedrooms": _int(col("bedrooms"), 0),
        "bathrooms": _float(col("bathrooms"), 1.0),
        "borough": _text(col("borough")) or "",
        "neighborhood": _text(col("neighborhood")) or "",
        "address": _text(col("address")),
        "pets_allowed": parse_pets_policy(col("pets_allowed")),
        "description": clean_description(col("description")),
        "image_url": _first_line(col("image_url")),
        "apply_url": _text(col("apply_url")),
        "amenities": _amenities(col("amenities")),
        "status": normalize_status(col("status")),
    }
    try:
        return Listing.model_validate(data)
    except ValidationError as e:
        raise StoreError(f"row {ident!r} failed validation: {e}") from e
