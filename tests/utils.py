# tests/utils.py
"""
Single source of truth for test data, factories, and canonical payloads.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

from typing import Any

from src.schemas.models import Listing, SessionState, UserCriteria

# -----------------------------
# Global defaults (edit once)
# -----------------------------

DEFAULT_BUDGET = 3500
DEFAULT_BOROUGH = "Brooklyn"
DEFAULT_NEIGHBORHOOD = "Bushwick"
DEFAULT_IMAGE_BASE = "https://images.example.com/listing"
DEFAULT_DESCRIPTION = "Sunny one bedroom near the L train with renovated kitchen and hardwood floors."

CSV_EXPORT_HEADER = (
    "listing_id,borough,neighborhood,street_or_area,monthly_rent_usd,bedrooms,bathrooms,pets,"
    "primary_image_url,apply_url,curation_note,status"
)


# -----------------------------
# Criteria / listing factories
# -----------------------------


def make_criteria(
    boroughs: list[str] | None = None,
    budget_max: int = DEFAULT_BUDGET,
    bedrooms: str = "1",
    pets: str = "none",
    amenities: list[str] | None = None,
    bathrooms: str | None = None,
) -> UserCriteria:
    return UserCriteria(
        boroughs=[DEFAULT_BOROUGH] if boroughs is None else boroughs,
        budget_max=budget_max,
        bedrooms=bedrooms,  # type: ignore[arg-type]
        pets=pets,  # type: ignore[arg-type]
        amenities=amenities or [],
        bathrooms=bathrooms,  # type: ignore[arg-type]
    )


def make_listing(
    id: str = "L-001",
    price: int = 2800,
    bedrooms: int = 1,
    bathrooms: float = 1.0,
    borough: str = DEFAULT_BOROUGH,
    neighborhood: str = DEFAULT_NEIGHBORHOOD,
    pets_allowed: bool | None = None,
    description: str | None = DEFAULT_DESCRIPTION,
    image_url: str | None = "default",
    apply_url: str | None = "https://apply.example.com/L-001",
    amenities: list[str] | None = None,
    status: str = "Active",
) -> Listing:
    if image_url == "default":
        image_url = f"{DEFAULT_IMAGE_BASE}/{id}.jpg"
    return Listing(
        id=id,
        price=price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        borough=borough,
        neighborhood=neighborhood,
        pets_allowed=pets_allowed,
        description=description,
        image_url=image_url,
        apply_url=apply_url,
        amenities=amenities or [],
        status=status,  # type: ignore[arg-type]
    )


def make_pool(n: int = 5, *, price: int = 3000, bedrooms: int = 1, prefix: str = "L", **overrides: Any) -> list[Listing]:
    """n distinct, eligible listings with ids L-000..L-(n-1) and unique photos."""
    return [make_listing(id=f"{prefix}-{i:03d}", price=price, bedrooms=bedrooms, **overrides) for i in range(n)]


def make_session(session_id: str = "sess_test", criteria: UserCriteria | None = None, seen: list[str] | None = None) -> SessionState:
    state = SessionState(session_id=session_id, criteria=criteria or make_criteria())
    for ident in seen or []:
        state.mark_seen(ident)
    return state


def csv_row(
    listing_id: str = "NYC-0001",
    borough: str = "Brooklyn",
    neighborhood: str = "Bushwick",
    street: str = "12 Wilson Ave",
    rent: str = "$3,200",
    bedrooms: str = "1",
    bathrooms: str = "1",
    pets: str = "Cats allowed",
    image: str = "https://images.example.com/nyc-0001.jpg",
    apply_url: str = "https://apply.example.com/nyc-0001",
    note: str = "Bright corner unit, first month free.",
    status: str = "Active",
) -> str:
    cells = [listing_id, borough, neighborhood, street, rent, bedrooms, bathrooms, pets, image, apply_url, note, status]
    return ",".join(f'"{c}"' for c in cells)
