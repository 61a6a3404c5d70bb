# src/core/selection/selector.py
"""
Listing selector: picks the next unseen Active listing for a session.

Per step:
  1) eligible = count(hard filter)                 → 0 ⇒ no_matches
  2) len(seen) >= eligible                         → exhausted
     Seen ids are counted as-is: an id that has since left the pool (rented,
     filtered out on a later read) still counts, so a session can report
     exhausted while an unseen listing remains. count/fetch_at cannot tell
     which seen ids are still present; restart clears the set.
  3) probe distinct offsets (random, or sequential from a caller offset) under a
     stable id order, at most `max_attempts` of them; first unseen listing wins.
     If every probe hits a seen listing, serve the last one fetched
     (possibly_repeated=True) rather than loop.
  4) mark the served id as seen (only after a successful fetch).

Borough and pets are score-time concerns; the hard filter covers budget and
bedrooms only.
"""

from __future__ import annotations

import random
from collections.abc import Iterator
from typing import TYPE_CHECKING

from src.core.errors import InputValidationError, StoreUnavailable
from src.core.log import get_logger
from src.core.scoring.weights import BEDROOMS_PLUS_FLOOR
from src.schemas.models import Listing, ListingFilter, SelectionResult, SessionState, UserCriteria

if TYPE_CHECKING:
    from src.core.store.base import ListingStore

logger = get_logger(__name__)

ATTEMPT_HARD_CAP = 100
RELAXED_BUDGET_PCT = 110


def hard_filter(criteria: UserCriteria) -> ListingFilter:
    if criteria.budget_max <= 0:
        raise InputValidationError(f"budget_max must be positive (got {criteria.budget_max})")
    if criteria.bedrooms == "3+":
        return ListingFilter(max_price=criteria.budget_max, min_bedrooms=BEDROOMS_PLUS_FLOOR)
    return ListingFilter(max_price=criteria.budget_max, exact_bedrooms=int(criteria.bedrooms))


def relaxed_filter(criteria: UserCriteria) -> ListingFilter:
    """Budget +10%, bedrooms ±1 ("3+" accepts 2 and up)."""
    if criteria.budget_max <= 0:
        raise InputValidationError(f"budget_max must be positive (got {criteria.budget_max})")
    ceiling = criteria.budget_max * RELAXED_BUDGET_PCT // 100
    if criteria.bedrooms == "3+":
        return ListingFilter(max_price=ceiling, min_bedrooms=BEDROOMS_PLUS_FLOOR - 1)
    needed = int(criteria.bedrooms)
    return ListingFilter(max_price=ceiling, min_bedrooms=max(0, needed - 1), max_bedrooms=needed + 1)


def attempt_cap(eligible: int) -> int:
    return min(ATTEMPT_HARD_CAP, max(1, 2 * eligible))


class ListingSelector:
    """
    Stateless apart from its RNG; all per-session state lives in the SessionState
    passed to select_next().
    """

    def __init__(
        self,
        store: ListingStore,
        *,
        rng: random.Random | None = None,
        max_attempts: int | None = None,
        sort_key: str = "id",
        relax: bool = False,
    ) -> None:
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.store = store
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.sort_key = sort_key
        self.relax = relax

    # ---------- public ----------

    def select_next(self, session: SessionState, *, offset: int | None = None) -> SelectionResult:
        """
        Choose the next listing for `session` and mark it seen.

        Raises:
            InputValidationError: session has no criteria, or the budget is not positive.
            StoreUnavailable / StoreError: the store failed; `session` is left unchanged.
        """
        criteria = session.criteria
        if criteria is None:
            raise InputValidationError(f"session {session.session_id!r} has no criteria")

        previous_phase = session.phase
        session.phase = "loading"
        try:
            result = self._select(criteria, session.seen, offset)
        except BaseException:
            session.phase = previous_phase
            raise

        if result.listing is None:
            session.phase = result.status
            session.current_listing_id = None
            logger.info("session %s: %s (eligible=%d)", session.session_id, result.status, result.eligible_count)
            return result

        session.mark_seen(result.listing.id)
        session.phase = "showing"
        session.current_listing_id = result.listing.id
        logger.debug(
            "session %s: showing %s (eligible=%d attempts=%d repeated=%s)",
            session.session_id,
            result.listing.id,
            result.eligible_count,
            result.attempts,
            result.possibly_repeated,
        )
        return result

    # ---------- internals ----------

    def _eligible(self, criteria: UserCriteria) -> tuple[ListingFilter, int, bool]:
        flt = hard_filter(criteria)
        eligible = self.store.count(flt)
        if eligible == 0 and self.relax:
            flt = relaxed_filter(criteria)
            eligible = self.store.count(flt)
            return flt, eligible, True
        return flt, eligible, False

    def _offsets(self, eligible: int, offset: int | None) -> Iterator[int]:
        budget = min(self.max_attempts or attempt_cap(eligible), eligible)
        if offset is not None:
            start = offset % eligible
            for k in range(budget):
                yield (start + k) % eligible
            return
        yield from self.rng.sample(range(eligible), budget)

    def _select(self, criteria: UserCriteria, seen: frozenset[str], offset: int | None) -> SelectionResult:
        flt, eligible, relaxed = self._eligible(criteria)

        if eligible == 0:
            return SelectionResult(status="no_matches", eligible_count=0, relaxed=relaxed)
        # stale seen ids count too
        if len(seen) >= eligible:
            return SelectionResult(status="exhausted", eligible_count=eligible, relaxed=relaxed)

        fallback: Listing | None = None
        attempts = 0
        for off in self._offsets(eligible, offset):
            attempts += 1
            listing = self.store.fetch_at(flt, off, self.sort_key)
            if listing is None:
                continue
            if listing.id not in seen:
                return SelectionResult(
                    status="showing",
                    listing=listing,
                    eligible_count=eligible,
                    attempts=attempts,
                    relaxed=relaxed,
                )
            fallback = listing

        if fallback is None:
            raise StoreUnavailable(f"store reported {eligible} eligible listings but returned none in {attempts} fetches")

        logger.warning("retry cap reached after %d attempts; serving a previously seen listing", attempts)
        return SelectionResult(
            status="showing",
            listing=fallback,
            eligible_count=eligible,
            attempts=attempts,
            possibly_repeated=True,
            relaxed=relaxed,
        )
