# src/tools/listing_import.py
"""
Listing import tool (CSV export → canonical JSON pool).

Pipeline (deterministic, offline):
  1) Read the CSV (UTF-8, BOM tolerated, blank lines skipped, cells trimmed).
  2) Pick the column layout from the header: the curated export layout
     (listing_id, monthly_rent_usd, primary_image_url, apply_url, curation_note)
     or the store layout (id, price, image_url, original_url, description).
  3) core.normalize.listing_from_row(row, layout) → Listing
  4) Drop rows without an id or with a non-positive price (counted in ImportReport).
  5) Write a JSON array readable by JsonFileListingStore.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from src.core.errors import StoreError
from src.core.log import get_logger
from src.core.normalize.listing_row import STORE_COLUMNS, listing_from_row
from src.core.store.memory import write_listings_json
from src.schemas.models import Listing

logger = get_logger(__name__)

EXPORT_COLUMNS: dict[str, str] = {
    "id": "listing_id",
    "price": "monthly_rent_usd",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "borough": "borough",
    "neighborhood": "neighborhood",
    "address": "street_or_area",
    "pets_allowed": "pets",
    "description": "curation_note",
    "image_url": "primary_image_url",
    "apply_url": "apply_url",
    "amenities": "amenities",
    "status": "status",
}


@dataclass
class ImportReport:
    rows: int = 0
    imported: int = 0
    invalid: int = 0
    non_positive_price: int = 0
    errors: list[str] = field(default_factory=list)


def layout_for(header: Iterable[str]) -> Mapping[str, str]:
    cols = {h.strip() for h in header if h}
    return EXPORT_COLUMNS if "listing_id" in cols else STORE_COLUMNS


def parse_rows(rows: Iterable[Mapping[str, str]], layout: Mapping[str, str], report: ImportReport) -> list[Listing]:
    out: list[Listing] = []
    for n, row in enumerate(rows, start=1):
        report.rows += 1
        cleaned = {k.strip(): (v.strip() if isinstance(v, str) else v) for k, v in row.items() if k}
        try:
            listing = listing_from_row(cleaned, layout)
        except StoreError as e:
            report.invalid += 1
            report.errors.append(f"row {n}: {e}")
            continue
        if listing.price <= 0:
            report.non_positive_price += 1
            continue
        out.append(listing)
    report.imported = len(out)
    return out


def read_listings_csv(path: str | Path, report: ImportReport | None = None) -> list[Listing]:
    rep = report if report is not None else ImportReport()
    p = Path(path)
    with p.open(encoding="utf-8-sig", newline="") as fh:
        reader = csv.DictReader(fh)
        layout = layout_for(reader.fieldnames or [])
        rows = (r for r in reader if any((v or "").strip() for v in r.values() if isinstance(v, str)))
        listings = parse_rows(rows, layout, rep)
    logger.info(
        "imported %d/%d rows from %s (invalid=%d, non_positive_price=%d)",
        rep.imported,
        rep.rows,
        p,
        rep.invalid,
        rep.non_positive_price,
    )
    return listings


def import_csv_to_json(csv_path: str | Path, out_path: str | Path) -> ImportReport:
    report = ImportReport()
    listings = read_listings_csv(csv_path, report)
    write_listings_json(out_path, listings)
    return report
