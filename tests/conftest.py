# tests/conftest.py
from __future__ import annotations

import os
import random
from pathlib import Path

import pytest

from src.core.decisions.log import InMemoryDecisionLog
from src.core.selection.selector import ListingSelector
from src.core.session.store import SessionStore
from src.core.store.memory import InMemoryListingStore
from src.orchestrator.engine import DecisionEngine
from tests.utils import make_criteria, make_listing, make_pool, make_session


# -------- Global deterministic seed --------
@pytest.fixture(autouse=True, scope="session")
def _seed_session():
    random.seed(1337)
    os.environ.setdefault("PYTHONHASHSEED", "0")
    yield


@pytest.fixture(autouse=True)
def _clean_steady_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("STEADY_"):
            monkeypatch.delenv(key, raising=False)
    yield


# -------- Domain fixtures --------
@pytest.fixture
def criteria_factory():
    def _factory(**overrides):
        return make_criteria(**overrides)

    return _factory


@pytest.fixture
def listing_factory():
    def _factory(**overrides):
        return make_listing(**overrides)

    return _factory


@pytest.fixture
def pool_store():
    """Factory: in-memory store holding `n` eligible listings (plus any extras)."""

    def _factory(n: int = 5, extras=None, **overrides):
        return InMemoryListingStore([*make_pool(n, **overrides), *(extras or [])])

    return _factory


@pytest.fixture
def session_factory():
    def _factory(**kwargs):
        return make_session(**kwargs)

    return _factory


@pytest.fixture
def engine_factory(tmp_path: Path):
    """
    Callable factory wiring store → selector → engine with an in-memory decision log.

    Usage:
        engine, log = engine_factory(store)
        engine, log = engine_factory(store, persist=True)
    """

    def _factory(store, *, seed: int = 7, persist: bool = False, relax: bool = False, decision_log=None):
        log = decision_log if decision_log is not None else InMemoryDecisionLog()
        selector = ListingSelector(store, rng=random.Random(seed), relax=relax)
        sessions = SessionStore(tmp_path / "sessions") if persist else None
        return DecisionEngine(selector, decision_log=log, sessions=sessions), log

    return _factory


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: marks integration tests")
