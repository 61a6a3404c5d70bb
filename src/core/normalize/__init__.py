# src/core/normalize/__init__.py
from .listing_row import STORE_COLUMNS, clean_description, listing_from_row, normalize_status

__all__ = [
    "STORE_COLUMNS",
    "clean_description",
    "listing_from_row",
    "normalize_status",
]
