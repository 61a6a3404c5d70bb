# src/orchestrator/wiring.py
"""Build stores, logs and the engine from an AppConfig."""

from __future__ import annotations

import random

from src.core.decisions.log import DecisionLog, InMemoryDecisionLog, JsonlDecisionLog, PostgrestDecisionLog
from src.core.selection.selector import ListingSelector
from src.core.session.store import SessionStore
from src.core.store import InMemoryListingStore, JsonFileListingStore, ListingStore, PostgrestClient, PostgrestListingStore
from src.inputs.inputs import AppConfig
from src.orchestrator.engine import DecisionEngine


def _postgrest_client(cfg: AppConfig) -> PostgrestClient:
    if not cfg.store.url or not cfg.store.api_key:
        raise ValueError("postgrest backend needs store.url and store.api_key (STEADY_SUPABASE_URL / STEADY_SUPABASE_KEY)")
    return PostgrestClient(cfg.store.url, cfg.store.api_key, timeout_s=cfg.store.timeout_s)


def build_store(cfg: AppConfig) -> ListingStore:
    if cfg.store.backend == "postgrest":
        return PostgrestListingStore(_postgrest_client(cfg), table=cfg.store.table)
    if cfg.store.backend == "json":
        return JsonFileListingStore(cfg.store.path)
    return InMemoryListingStore()


def build_decision_log(cfg: AppConfig) -> DecisionLog:
    if cfg.decisions.backend == "postgrest":
        return PostgrestDecisionLog(_postgrest_client(cfg), table=cfg.decisions.table)
    if cfg.decisions.backend == "jsonl":
        return JsonlDecisionLog(cfg.decisions.path)
    return InMemoryDecisionLog()


def build_engine(cfg: AppConfig, *, store: ListingStore | None = None) -> DecisionEngine:
    selector = ListingSelector(
        store or build_store(cfg),
        rng=random.Random(cfg.seed),
        max_attempts=cfg.selection.max_attempts,
        sort_key=cfg.selection.sort_key,
        relax=cfg.selection.relax,
    )
    sessions = SessionStore(cfg.sessions.dir) if cfg.sessions.dir else None
    return DecisionEngine(selector, decision_log=build_decision_log(cfg), sessions=sessions)
