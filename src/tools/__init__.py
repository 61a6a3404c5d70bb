# src/tools/__init__.py
"""
The Steady One tools package

Exports only modules that live under `src/tools`:
  - import_csv_to_json / read_listings_csv   (from .listing_import)
"""

from __future__ import annotations

from .listing_import import EXPORT_COLUMNS, ImportReport, import_csv_to_json, read_listings_csv

__all__ = ["EXPORT_COLUMNS", "ImportReport", "import_csv_to_json", "read_listings_csv"]
