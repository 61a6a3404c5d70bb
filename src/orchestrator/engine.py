# src/orchestrator/engine.py
"""
Decision Engine (selection → scoring → decision log)

Purpose
-------
Drive one renter session through the listing flow:
  1) start(criteria)          → idle, fresh seen set
  2) next()                   → Selector picks a listing, Scorer analyses it
  3) decide("apply"|"wait")   → Decision Log (fire-and-forget), last decision kept
  4) exhausted → submit_feedback() → restart()

State machine
-------------
idle → loading → showing → {showing | exhausted | no_matches}
exhausted → feedback → (restart) → idle
no_matches → (restart) → idle

Public API
----------
DecisionEngine(selector, decision_log=None, sessions=None)
  .start(session, criteria) -> SessionState
  .next(session, offset=None) -> EngineView
  .decide(session, outcome) -> Decision
  .submit_feedback(session, reasons, note=None) -> ExitFeedback
  .restart(session, clear_criteria=False, force=False) -> SessionState
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from src.core.decisions.log import DecisionLog, record_decision
from src.core.errors import InputValidationError
from src.core.log import get_logger
from src.core.scoring import score_listing
from src.core.selection.selector import ListingSelector
from src.core.session.store import SessionStore
from src.schemas.models import (
    Decision,
    ExitFeedback,
    FeedbackReason,
    Listing,
    MatchAnalysis,
    Outcome,
    SelectionResult,
    SessionState,
    UserCriteria,
)

logger = get_logger(__name__)

_TERMINAL: dict[str, Literal["exhausted", "no_matches"]] = {
    "exhausted": "exhausted",
    "no_matches": "no_matches",
    "feedback": "exhausted",
}


@dataclass(frozen=True)
class EngineView:
    """What the presentation layer renders for one step."""

    selection: SelectionResult
    analysis: MatchAnalysis | None = None

    @property
    def status(self) -> str:
        return self.selection.status

    @property
    def listing(self) -> Listing | None:
        return self.selection.listing


class DecisionEngine:
    def __init__(
        self,
        selector: ListingSelector,
        *,
        decision_log: DecisionLog | None = None,
        sessions: SessionStore | None = None,
    ) -> None:
        self.selector = selector
        self.decision_log = decision_log
        self.sessions = sessions

    # ---------- lifecycle ----------

    def start(self, session: SessionState, criteria: UserCriteria) -> SessionState:
        session.with_criteria(criteria)
        self._persist(session)
        return session

    def next(self, session: SessionState, *, offset: int | None = None) -> EngineView:
        """
        Advance to the next listing. Terminal phases answer without touching the store
        until restart().
        """
        if session.phase in _TERMINAL:
            return EngineView(selection=SelectionResult(status=_TERMINAL[session.phase]))

        result = self.selector.select_next(session, offset=offset)
        self._persist(session)

        if result.listing is None or session.criteria is None:
            return EngineView(selection=result)
        return EngineView(selection=result, analysis=score_listing(result.listing, session.criteria))

    def decide(self, session: SessionState, outcome: Outcome) -> Decision:
        """Record apply/wait for the listing on screen. Log failures never block."""
        if session.phase != "showing" or not session.current_listing_id:
            raise InputValidationError("no listing is being shown; nothing to decide on")

        decision = Decision(session_id=session.session_id, listing_id=session.current_listing_id, outcome=outcome)
        if not record_decision(self.decision_log, decision):
            logger.debug("decision kept locally only (session=%s)", session.session_id)
        session.last_decision = decision
        self._persist(session)
        return decision

    def submit_feedback(
        self,
        session: SessionState,
        reasons: Sequence[FeedbackReason],
        note: str | None = None,
    ) -> ExitFeedback:
        if session.phase not in ("exhausted", "feedback"):
            raise InputValidationError("feedback is collected once the listings run out")
        fb = ExitFeedback(reasons=list(dict.fromkeys(reasons)), note=(note or "").strip() or None)
        session.feedback.append(fb)
        session.phase = "feedback"
        self._persist(session)
        logger.info("session %s feedback: %s", session.session_id, ",".join(fb.reasons) or "-")
        return fb

    def restart(self, session: SessionState, *, clear_criteria: bool = False, force: bool = False) -> SessionState:
        """
        Clear the seen set (and optionally criteria). An exhausted session must
        leave feedback first unless `force` is set.
        """
        if session.phase == "exhausted" and not force:
            raise InputValidationError("collect exit feedback before restarting an exhausted session")
        session.restart(clear_criteria=clear_criteria)
        self._persist(session)
        return session

    # ---------- internals ----------

    def _persist(self, session: SessionState) -> None:
        if self.sessions is not None:
            self.sessions.save(session)
