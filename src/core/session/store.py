# src/core/session/store.py
"""
File-backed session persistence: one JSON document per session id.

Layout (under base_dir/):
  - <sha256(session_id)[:16]>.json   → SessionState
"""

from __future__ import annotations

import json
import uuid
from hashlib import sha256
from pathlib import Path

from pydantic import ValidationError

from src.core.log import get_logger
from src.schemas.models import SessionState

logger = get_logger(__name__)


def new_session_id() -> str:
    return f"sess_{uuid.uuid4().hex}"


class SessionStore:
    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def path_for(self, session_id: str) -> Path:
        h = sha256(session_id.encode("utf-8")).hexdigest()[:16]
        return self.base_dir / f"{h}.json"

    def load(self, session_id: str) -> SessionState:
        """Return the saved state, or a fresh idle state when missing or unreadable."""
        p = self.path_for(session_id)
        if not p.exists():
            return SessionState(session_id=session_id)
        try:
            state = SessionState.model_validate(json.loads(p.read_text(encoding="utf-8")))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("discarding unreadable session file %s: %s", p, e)
            return SessionState(session_id=session_id)
        if state.session_id != session_id:
            logger.warning("session file %s belongs to %s; starting fresh", p, state.session_id)
            return SessionState(session_id=session_id)
        return state

    def save(self, state: SessionState) -> Path:
        p = self.path_for(state.session_id)
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(".json.tmp")
        tmp.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(p)
        return p

    def clear(self, session_id: str) -> None:
        self.path_for(session_id).unlink(missing_ok=True)
