# src/schemas/models.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.schemas.labels import AdvantageTag, Badge, Recommendation, RiskTag

BedroomChoice = Literal["0", "1", "2", "3+"]
BathroomChoice = Literal["1", "1.5", "2+"]
PetChoice = Literal["none", "cats", "dogs", "both"]
ListingStatusValue = Literal["Active", "Inactive", "Rented", "Expired"]
Outcome = Literal["apply", "wait"]
SessionPhase = Literal["idle", "loading", "showing", "exhausted", "no_matches", "feedback"]
FeedbackReason = Literal["price", "location", "style", "other"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =========================
# Core inputs
# =========================


class UserCriteria(BaseModel):
    """
    Questionnaire answers for one session. Immutable once built; a criteria change
    starts a fresh seen set (see SessionState.with_criteria).
    """

    boroughs: list[str] = Field(default_factory=list, description="Preferred boroughs. Empty means no preference.")
    budget_max: int = Field(..., description="Monthly rent ceiling in whole dollars. Must be > 0 to score or select.")
    bedrooms: BedroomChoice = Field("1", description='Desired bedrooms: "0" (studio), "1", "2" or "3+".')
    bathrooms: BathroomChoice | None = Field(None, description="Minimum acceptable bathrooms (informational).")
    pets: PetChoice = Field("none", description="Pets the renter brings along.")
    amenities: list[str] = Field(default_factory=list, description="Wanted amenity tokens, e.g. 'washer_dryer', 'gym'.")
    timing: str | None = Field(None, description="Move timing hint from the questionnaire (asap, 30days, researching).")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("bedrooms", mode="before")
    @classmethod
    def _coerce_bedrooms(cls, v: object) -> object:
        if isinstance(v, bool):
            return v
        if isinstance(v, int):
            return "3+" if v >= 3 else str(max(v, 0))
        if isinstance(v, str) and v.strip() == "3":
            return "3+"
        return v

    @field_validator("bathrooms", mode="before")
    @classmethod
    def _coerce_bathrooms(cls, v: object) -> object:
        if v == "":
            return None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            if v >= 2:
                return "2+"
            return "1.5" if v > 1 else "1"
        return v

    @property
    def wants_pets(self) -> bool:
        return self.pets != "none"


class Listing(BaseModel):
    """
    A rental unit as served by the listing store. Read-only to the engine.
    Numeric fields are not range-checked here; the scorer rejects malformed values.
    """

    id: str = Field(..., description="Stable listing identifier (single canonical id column).")
    price: int = Field(..., description="Monthly rent in whole dollars.")
    bedrooms: int = Field(0, description="Bedroom count (0 = studio).")
    bathrooms: float = Field(1.0, description="Bathroom count; halves allowed.")
    borough: str = Field("", description="Borough as stored, e.g. 'Brooklyn'.")
    neighborhood: str = Field("", description="Neighborhood as stored, e.g. 'Bushwick'.")
    address: str | None = Field(None, description="Street address or building name, if known.")
    pets_allowed: bool | None = Field(None, description="True/False when the policy is known; None when unknown.")
    description: str | None = Field(None, description="Free-text listing description or curation note.")
    image_url: str | None = Field(None, description="Primary photo URL.")
    apply_url: str | None = Field(None, description="Where the renter applies (original listing URL).")
    amenities: list[str] = Field(default_factory=list, description="Amenity phrases advertised by the listing.")
    status: ListingStatusValue = Field("Active", description="Only Active listings are selectable or scoreable.")

    model_config = ConfigDict(extra="ignore")

    @property
    def is_active(self) -> bool:
        return self.status == "Active"

    @property
    def has_photo(self) -> bool:
        return bool((self.image_url or "").strip())

    @property
    def has_apply_url(self) -> bool:
        return bool((self.apply_url or "").strip())


# =========================
# Computed outputs
# =========================


class ScoreBreakdown(BaseModel):
    """Per-category points behind a MatchAnalysis score."""

    budget: int = Field(0, description="Budget category points (max 40).")
    bedrooms: int = Field(0, description="Bedroom category points (max 20).")
    borough: int = Field(0, description="Borough category points (max 20).")
    pets_amenities: int = Field(0, description="Pets & amenities category points (max 10).")
    incentives: int = Field(0, description="Incentive bonus (0, 6 or 10).")
    raw_total: int = Field(0, description="Sum of all categories before clamping and caps.")
    photo_capped: bool = Field(False, description="True when the missing photo / apply link cap lowered the score.")


class MatchAnalysis(BaseModel):
    """Derived analysis of one listing for one set of criteria. Recomputed on every view."""

    listing_id: str = Field(..., description="Listing the analysis belongs to.")
    score: int = Field(..., ge=0, le=100, description="Match score in [0, 100].")
    badge: Badge = Field(..., description="Coarse bucket derived from score.")
    recommendation: Recommendation = Field(..., description="Apply / ApplyWithCaveats / WaitConsciously / Wait.")
    risks: list[RiskTag] = Field(default_factory=list, description="Risk tags, in canonical enum order.")
    advantages: list[AdvantageTag] = Field(default_factory=list, description="Advantage tags, in canonical enum order.")
    incentives_detected: list[str] = Field(default_factory=list, description="Incentive labels found in the description.")
    reasoning: str = Field("", description="One or two deterministic sentences explaining the score.")
    components: ScoreBreakdown = Field(default_factory=ScoreBreakdown, description="Category breakdown.")

    model_config = ConfigDict(frozen=True)


class Decision(BaseModel):
    """Append-only record of an apply/wait choice."""

    session_id: str = Field(..., description="Session that made the decision.")
    listing_id: str = Field(..., description="Listing the decision refers to.")
    outcome: Outcome = Field(..., description='"apply" or "wait".')
    timestamp: datetime = Field(default_factory=_utcnow, description="UTC time the decision was made.")

    model_config = ConfigDict(frozen=True)


class ExitFeedback(BaseModel):
    """Why a renter ran out of listings they liked."""

    reasons: list[FeedbackReason] = Field(default_factory=list, description="Coarse reasons (price/location/style/other).")
    note: str | None = Field(None, description="Optional free-text note.")
    timestamp: datetime = Field(default_factory=_utcnow)


class ListingFilter(BaseModel):
    """
    Hard filter handed to a listing store. Borough and pets are score-time concerns
    and intentionally absent here.
    """

    status: ListingStatusValue = Field("Active", description="Status listings must have.")
    max_price: int | None = Field(None, description="Inclusive monthly rent ceiling.")
    exact_bedrooms: int | None = Field(None, description="Exact bedroom count required.")
    min_bedrooms: int | None = Field(None, description="Inclusive bedroom floor (used for '3+').")
    max_bedrooms: int | None = Field(None, description="Inclusive bedroom ceiling (relaxed searches).")

    model_config = ConfigDict(frozen=True)

    def matches(self, listing: Listing) -> bool:
        if listing.status != self.status:
            return False
        if self.max_price is not None and listing.price > self.max_price:
            return False
        if self.exact_bedrooms is not None and listing.bedrooms != self.exact_bedrooms:
            return False
        if self.min_bedrooms is not None and listing.bedrooms < self.min_bedrooms:
            return False
        if self.max_bedrooms is not None and listing.bedrooms > self.max_bedrooms:
            return False
        return True


class SelectionResult(BaseModel):
    """Outcome of one selection step."""

    status: Literal["showing", "exhausted", "no_matches"] = Field(..., description="Selection state reached.")
    listing: Listing | None = Field(None, description="Listing to show; None for terminal states.")
    eligible_count: int = Field(0, ge=0, description="Active listings passing the hard filters.")
    attempts: int = Field(0, ge=0, description="Fetch attempts spent finding an unseen listing.")
    possibly_repeated: bool = Field(False, description="True when the retry cap was hit and a seen listing was served.")
    relaxed: bool = Field(False, description="True when the relaxed filter produced the pool.")


# =========================
# Session state
# =========================


class SessionState(BaseModel):
    """
    Per-session state owned by the caller and passed into engine calls.
    The seen list is insertion-ordered and free of duplicates.
    """

    session_id: str = Field(..., description="Opaque session identifier.")
    criteria: UserCriteria | None = Field(None, description="Active questionnaire answers, if any.")
    seen_ids: list[str] = Field(default_factory=list, description="Listing ids already shown this session.")
    phase: SessionPhase = Field("idle", description="Current selection phase.")
    current_listing_id: str | None = Field(None, description="Listing currently on screen.")
    last_decision: Decision | None = Field(None, description="Most recent apply/wait decision.")
    feedback: list[ExitFeedback] = Field(default_factory=list, description="Exit feedback collected on exhaustion.")

    @property
    def seen(self) -> frozenset[str]:
        return frozenset(self.seen_ids)

    def mark_seen(self, listing_id: str) -> None:
        """Idempotent: re-adding an id is a no-op."""
        if listing_id not in self.seen_ids:
            self.seen_ids.append(listing_id)

    def restart(self, *, clear_criteria: bool = False) -> None:
        self.seen_ids = []
        self.phase = "idle"
        self.current_listing_id = None
        if clear_criteria:
            self.criteria = None

    def with_criteria(self, criteria: UserCriteria) -> None:
        """Install criteria; a change of criteria clears the seen set."""
        if self.criteria != criteria:
            self.seen_ids = []
            self.current_listing_id = None
        self.criteria = criteria
        self.phase = "idle"
