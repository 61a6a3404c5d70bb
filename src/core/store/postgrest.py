# src/core/store/postgrest.py
"""
Hosted listing store over a PostgREST endpoint (Supabase `/rest/v1`).

Only the hard filter is pushed down to the server; candidate hygiene runs
locally on the returned rows (see SnapshotListingStore).
"""

from __future__ import annotations

from typing import Any, cast

import requests

from src.core.errors import StoreError, StoreUnavailable
from src.core.log import get_logger
from src.core.normalize.listing_row import STORE_COLUMNS, listing_from_row
from src.schemas.models import Listing, ListingFilter

from .base import SnapshotListingStore

logger = get_logger(__name__)

DEFAULT_TIMEOUT_S = 10.0
DEFAULT_USER_AGENT = "steady-engine/0.1"


class PostgrestClient:
    """Minimal PostgREST client: filtered selects and single-row inserts."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("PostgREST base URL is required")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def _url(self, table: str) -> str:
        root = self.base_url if self.base_url.endswith("/rest/v1") else f"{self.base_url}/rest/v1"
        return f"{root}/{table}"

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "application/json",
        }
        headers.update(extra)
        return headers

    def select(self, table: str, params: list[tuple[str, str]]) -> list[dict[str, Any]]:
        try:
            resp = self.session.request(
                "GET",
                self._url(table),
                params=params,
                headers=self._headers(),
                timeout=self.timeout_s,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise StoreUnavailable(f"select {table}: {e}") from e
        try:
            body = resp.json()
        except ValueError as e:
            raise StoreError(f"select {table}: response is not JSON") from e
        if not isinstance(body, list):
            raise StoreError(f"select {table}: expected a JSON array, got {type(body).__name__}")
        return cast(list[dict[str, Any]], body)

    def insert(self, table: str, row: dict[str, Any]) -> None:
        resp = self.session.request(
            "POST",
            self._url(table),
            json=row,
            headers=self._headers(Prefer="return=minimal", **{"Content-Type": "application/json"}),
            timeout=self.timeout_s,
        )
        resp.raise_for_status()


def filter_params(flt: ListingFilter) -> list[tuple[str, str]]:
    """Translate a ListingFilter into PostgREST query parameters (ordered by id)."""
    params: list[tuple[str, str]] = [
        ("select", "*"),
        ("status", f"eq.{flt.status}"),
        ("image_url", "not.is.null"),
    ]
    if flt.max_price is not None:
        params.append(("price", f"lte.{flt.max_price}"))
    if flt.exact_bedrooms is not None:
        params.append(("bedrooms", f"eq.{flt.exact_bedrooms}"))
    if flt.min_bedrooms is not None:
        params.append(("bedrooms", f"gte.{flt.min_bedrooms}"))
    if flt.max_bedrooms is not None:
        params.append(("bedrooms", f"lte.{flt.max_bedrooms}"))
    params.append(("order", "id.asc"))
    return params


class PostgrestListingStore(SnapshotListingStore):
    """Reads the `listings` table through PostgREST."""

    def __init__(self, client: PostgrestClient, *, table: str = "listings") -> None:
        super().__init__()
        self.client = client
        self.table = table

    def _load(self, flt: ListingFilter) -> list[Listing]:
        rows = self.client.select(self.table, filter_params(flt))
        out: list[Listing] = []
        skipped = 0
        for row in rows:
            try:
                out.append(listing_from_row(row, STORE_COLUMNS))
            except StoreError as e:
                skipped += 1
                logger.warning("skipping malformed listing row: %s", e)
        if skipped:
            logger.info("postgrest load: %d rows, %d skipped", len(rows), skipped)
        return out
