# src/core/decisions/log.py
"""
Decision Log adapters (write-only, fire-and-forget).

Public API
----------
class DecisionLog(Protocol):
    def append(self, session_id, listing_id, outcome, *, timestamp=None) -> None

record_decision(log, decision) -> bool
    Never raises for adapter failures: they are logged and reported as False.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Protocol

import requests

from src.core.errors import DecisionLogError, InputValidationError
from src.core.log import get_logger
from src.core.store.postgrest import PostgrestClient
from src.schemas.models import Decision, Outcome

logger = get_logger(__name__)

_OUTCOMES = ("apply", "wait")


class DecisionLog(Protocol):
    def append(
        self, session_id: str, listing_id: str, outcome: Outcome, *, timestamp: datetime | None = None
    ) -> None: ...


def _check(session_id: str, listing_id: str, outcome: str) -> None:
    if not session_id or not listing_id:
        raise InputValidationError("decision needs a session id and a listing id")
    if outcome not in _OUTCOMES:
        raise InputValidationError(f"unknown decision outcome: {outcome!r}")


def _entry(session_id: str, listing_id: str, outcome: str, timestamp: datetime | None) -> Decision:
    _check(session_id, listing_id, outcome)
    if timestamp is None:
        return Decision(session_id=session_id, listing_id=listing_id, outcome=outcome)
    return Decision(session_id=session_id, listing_id=listing_id, outcome=outcome, timestamp=timestamp)


class InMemoryDecisionLog:
    def __init__(self) -> None:
        self.entries: list[Decision] = []

    def append(
        self, session_id: str, listing_id: str, outcome: Outcome, *, timestamp: datetime | None = None
    ) -> None:
        self.entries.append(_entry(session_id, listing_id, outcome, timestamp))

    def for_session(self, session_id: str) -> list[Decision]:
        return [d for d in self.entries if d.session_id == session_id]


class JsonlDecisionLog:
    """One JSON object per line; the file only ever grows."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def append(
        self, session_id: str, listing_id: str, outcome: Outcome, *, timestamp: datetime | None = None
    ) -> None:
        entry = _entry(session_id, listing_id, outcome, timestamp)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(entry.model_dump_json() + "\n")
        except OSError as e:
            raise DecisionLogError(f"cannot write {self.path}: {e}") from e

    def read_all(self) -> list[Decision]:
        if not self.path.exists():
            return []
        out: list[Decision] = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if line.strip():
                out.append(Decision.model_validate(json.loads(line)))
        return out


class PostgrestDecisionLog:
    """Inserts into the `decision_logs` table (session_id, listing_id, outcome, created_at)."""

    def __init__(self, client: PostgrestClient, *, table: str = "decision_logs") -> None:
        self.client = client
        self.table = table

    def append(
        self, session_id: str, listing_id: str, outcome: Outcome, *, timestamp: datetime | None = None
    ) -> None:
        entry = _entry(session_id, listing_id, outcome, timestamp)
        row = {
            "session_id": entry.session_id,
            "listing_id": entry.listing_id,
            "outcome": entry.outcome,
            "created_at": entry.timestamp.isoformat(),
        }
        try:
            self.client.insert(self.table, row)
        except requests.RequestException as e:
            raise DecisionLogError(f"insert {self.table}: {e}") from e


def record_decision(log: DecisionLog | None, decision: Decision) -> bool:
    """
    Fire-and-forget append. Returns True when the entry was written.
    Adapter failures are logged at WARNING and swallowed; they never block the flow.
    """
    if log is None:
        return False
    try:
        log.append(decision.session_id, decision.listing_id, decision.outcome, timestamp=decision.timestamp)
    except Exception as e:  # noqa: BLE001
        logger.warning(
            "decision log write failed (session=%s listing=%s outcome=%s): %s",
            decision.session_id,
            decision.listing_id,
            decision.outcome,
            e,
        )
        return False
    return True
