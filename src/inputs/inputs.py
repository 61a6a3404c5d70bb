# src/inputs/inputs.py
"""
Inputs loader for The Steady One matching engine.

Goals
-----
- Deterministic, file-first configuration with validation via Pydantic.
- Questionnaire answers (criteria) accepted in both the questionnaire's own
  JSON shape and the canonical UserCriteria shape.
- Minimal environment-variable overrides for CI/CLI convenience.

Supported JSON shapes
---------------------
1) Config (root = AppConfig)
   {
     "store": {"backend": "json", "path": "data/listings.json"},
     "decisions": {"backend": "jsonl", "path": "data/decisions.jsonl"},
     "sessions": {"dir": "data/sessions"},
     "selection": {"max_attempts": null, "relax": false},
     "seed": null
   }

2) Criteria, questionnaire shape (budget / bedrooms as in the web flow)
   {"boroughs": ["Brooklyn"], "budget": 3500, "bedrooms": "1", "pets": "cats", ...}

   or canonical shape ({"budget_max": 3500, ...}).

Environment overrides (optional)
--------------------------------
- STEADY_STORE_BACKEND -> store.backend (memory|json|postgrest)
- STEADY_LISTINGS      -> store.path
- STEADY_SUPABASE_URL  -> store.url
- STEADY_SUPABASE_KEY  -> store.api_key
- STEADY_DECISIONS     -> decisions.path (switches backend to jsonl)
- STEADY_SESSION_DIR   -> sessions.dir
- STEADY_SEED          -> seed (int)

Public API
----------
- class InputsLoader:
    - load(path: str | Path | None) -> AppConfig
    - load_json(text: str) -> AppConfig
    - load_criteria(path: str | Path) -> UserCriteria
    - criteria_from_dict(raw: dict) -> UserCriteria
- function load_config(path: str | Path | None) -> AppConfig  (convenience)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, cast

from pydantic import BaseModel, Field, ValidationError

from src.schemas.models import UserCriteria

# ----------------------------
# Pydantic models for structured config
# ----------------------------


class StoreOptions(BaseModel):
    """Where listings come from."""

    backend: Literal["memory", "json", "postgrest"] = Field("json", description="Listing store adapter.")
    path: str = Field("data/listings.json", description="JSON listings file (json backend).")
    url: str | None = Field(None, description="PostgREST / Supabase project URL (postgrest backend).")
    api_key: str | None = Field(None, description="PostgREST API key (postgrest backend).")
    table: str = Field("listings", description="Listings table name.")
    timeout_s: float = Field(10.0, gt=0, description="HTTP timeout in seconds.")


class DecisionOptions(BaseModel):
    """Where apply/wait decisions are appended."""

    backend: Literal["memory", "jsonl", "postgrest"] = Field("jsonl", description="Decision log adapter.")
    path: str = Field("data/decisions.jsonl", description="JSONL file (jsonl backend).")
    table: str = Field("decision_logs", description="Decision log table (postgrest backend).")


class SessionOptions(BaseModel):
    dir: str | None = Field("data/sessions", description="Session state directory; None disables persistence.")


class SelectionOptions(BaseModel):
    max_attempts: int | None = Field(None, ge=1, description="Override the probe cap (default min(100, 2×pool)).")
    relax: bool = Field(False, description="Fall back to relaxed filters when the strict pool is empty.")
    sort_key: Literal["id", "price", "bedrooms", "bathrooms", "borough", "neighborhood"] = Field(
        "id", description="Stable order used for offset-based fetches."
    )


class AppConfig(BaseModel):
    """Full engine configuration."""

    store: StoreOptions = StoreOptions()
    decisions: DecisionOptions = DecisionOptions()
    sessions: SessionOptions = SessionOptions()
    selection: SelectionOptions = SelectionOptions()
    seed: int | None = Field(None, description="RNG seed for reproducible selection.")


# ----------------------------
# Loader
# ----------------------------


@dataclass(frozen=True)
class InputsLoader:
    """
    File-first config loader with light env overrides.

    Default search (when path=None):
        1) ./steady.json
        2) ./config.json
        3) built-in defaults
    """

    env_prefix: str = "STEADY_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> AppConfig:
        p = self._resolve_path(path)
        raw: dict[str, Any] = self._read_json_file(p) if p is not None else {}
        cfg = self._parse_root(raw)
        return self._apply_env_overrides(cfg)

    def load_json(self, text: str) -> AppConfig:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError("Config JSON must be an object.")
        cfg = self._parse_root(raw)
        return self._apply_env_overrides(cfg)

    def load_criteria(self, path: str | Path) -> UserCriteria:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Criteria file not found: {p}")
        return self.criteria_from_dict(self._read_json_file(p))

    def criteria_from_dict(self, raw: dict[str, Any]) -> UserCriteria:
        """
        Accept the questionnaire shape ("budget") or the canonical shape ("budget_max").
        """
        data = dict(raw)
        if "budget_max" not in data and "budget" in data:
            data["budget_max"] = data.pop("budget")
        if isinstance(data.get("budget_max"), str):
            digits = data["budget_max"].replace("$", "").replace(",", "").strip()
            data["budget_max"] = int(float(digits)) if digits else 0
        try:
            return UserCriteria.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Criteria validation failed:\n{e}") from e

    # ---------- Internals ----------

    def _resolve_path(self, path: str | Path | None) -> Path | None:
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise FileNotFoundError(f"Config file not found: {p}")
            return p
        for candidate in (Path("steady.json"), Path("config.json")):
            if candidate.exists():
                return candidate
        return None

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported inputs format for {p.name}; only .json is supported.")
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {p}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"{p}: expected a JSON object at the root.")
        return cast(dict[str, Any], data)

    def _parse_root(self, data: dict[str, Any]) -> AppConfig:
        try:
            return AppConfig.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Config validation failed:\n{e}") from e

    def _apply_env_overrides(self, cfg: AppConfig) -> AppConfig:
        prefix = self.env_prefix
        store: dict[str, Any] = {}
        decisions: dict[str, Any] = {}
        sessions: dict[str, Any] = {}
        top: dict[str, Any] = {}

        backend = os.getenv(f"{prefix}STORE_BACKEND")
        if backend:
            normalized = backend.strip().lower()
            if normalized in ("memory", "json", "postgrest"):
                store["backend"] = normalized

        listings = os.getenv(f"{prefix}LISTINGS")
        if listings:
            store["path"] = listings

        url = os.getenv(f"{prefix}SUPABASE_URL")
        if url:
            store["url"] = url

        key = os.getenv(f"{prefix}SUPABASE_KEY")
        if key:
            store["api_key"] = key

        dec_path = os.getenv(f"{prefix}DECISIONS")
        if dec_path:
            decisions["path"] = dec_path
            decisions["backend"] = "jsonl"

        session_dir = os.getenv(f"{prefix}SESSION_DIR")
        if session_dir:
            sessions["dir"] = session_dir

        seed = os.getenv(f"{prefix}SEED")
        if seed:
            try:
                top["seed"] = int(seed)
            except ValueError:
                # Ignore bad value; keep validated cfg.seed
                pass

        if store:
            top["store"] = cfg.store.model_copy(update=store)
        if decisions:
            top["decisions"] = cfg.decisions.model_copy(update=decisions)
        if sessions:
            top["sessions"] = cfg.sessions.model_copy(update=sessions)
        if not top:
            return cfg
        return cfg.model_copy(update=top)


# ----------------------------
# Convenience function
# ----------------------------


def load_config(path: str | Path | None = None) -> AppConfig:
    """Convenience wrapper for one-shot callers."""
    return InputsLoader().load(path)
