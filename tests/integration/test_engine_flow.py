# tests/integration/test_engine_flow.py
from __future__ import annotations

import json

import pytest

from src.core.decisions import InMemoryDecisionLog
from src.core.errors import InputValidationError, StoreUnavailable
from src.core.store import InMemoryListingStore, JsonFileListingStore, write_listings_json
from src.inputs.inputs import InputsLoader
from src.orchestrator.wiring import build_engine
from src.schemas.labels import Badge
from src.schemas.models import SessionState
from tests import make_criteria, make_listing, make_pool

pytestmark = pytest.mark.integration


class _DownLog:
    def append(self, session_id, listing_id, outcome, *, timestamp=None):
        raise ConnectionError("decision log offline")


def test_full_session_until_exhausted_then_restart(engine_factory):
    store = InMemoryListingStore(make_pool(3))
    engine, log = engine_factory(store)
    session = engine.start(SessionState(session_id="sess_flow"), make_criteria())

    shown = []
    for outcome in ("wait", "apply", "wait"):
        view = engine.next(session)
        assert view.status == "showing"
        assert view.analysis is not None
        assert view.analysis.listing_id == view.listing.id
        shown.append(view.listing.id)
        decision = engine.decide(session, outcome)
        assert decision.listing_id == view.listing.id

    assert sorted(shown) == ["L-000", "L-001", "L-002"]
    assert [d.outcome for d in log.for_session("sess_flow")] == ["wait", "apply", "wait"]
    assert session.last_decision is not None and session.last_decision.outcome == "wait"

    done = engine.next(session)
    assert done.status == "exhausted"
    assert done.analysis is None

    # terminal phase answers without a store round-trip
    assert engine.next(session).status == "exhausted"

    with pytest.raises(InputValidationError):
        engine.decide(session, "apply")
    with pytest.raises(InputValidationError):
        engine.restart(session)

    fb = engine.submit_feedback(session, ["price", "location", "price"], note="  too far from work ")
    assert fb.reasons == ["price", "location"]
    assert fb.note == "too far from work"
    assert session.phase == "feedback"
    assert engine.next(session).status == "exhausted"

    engine.restart(session)
    assert session.phase == "idle"
    assert session.seen_ids == []
    assert engine.next(session).status == "showing"


def test_no_matches_then_new_criteria(engine_factory):
    store = InMemoryListingStore(make_pool(2, price=4200))
    engine, _ = engine_factory(store)
    session = engine.start(SessionState(session_id="sess_none"), make_criteria(budget_max=3000))

    assert engine.next(session).status == "no_matches"
    with pytest.raises(InputValidationError):
        engine.submit_feedback(session, ["price"])

    engine.start(session, make_criteria(budget_max=4500))
    view = engine.next(session)
    assert view.status == "showing"
    assert view.analysis.badge in set(Badge)


def test_decision_log_outage_never_blocks(engine_factory):
    engine, _ = engine_factory(InMemoryListingStore(make_pool(2)), decision_log=_DownLog())
    session = engine.start(SessionState(session_id="sess_down"), make_criteria())

    engine.next(session)
    decision = engine.decide(session, "apply")

    assert session.last_decision == decision
    assert engine.next(session).status == "showing"


def test_store_outage_keeps_session_retryable(tmp_path, engine_factory):
    path = tmp_path / "listings.json"
    engine, _ = engine_factory(JsonFileListingStore(path))
    session = engine.start(SessionState(session_id="sess_retry"), make_criteria())

    with pytest.raises(StoreUnavailable):
        engine.next(session)
    assert session.phase == "idle"
    assert session.seen_ids == []

    write_listings_json(path, make_pool(2))
    assert engine.next(session).status == "showing"


def test_session_persists_between_steps(tmp_path, engine_factory):
    engine, _ = engine_factory(InMemoryListingStore(make_pool(4)), persist=True)
    session = engine.start(SessionState(session_id="sess_disk"), make_criteria())
    first = engine.next(session).listing.id
    engine.decide(session, "wait")

    reloaded = engine.sessions.load("sess_disk")
    assert reloaded.seen_ids == [first]
    assert reloaded.phase == "showing"
    assert reloaded.last_decision.outcome == "wait"

    # a fresh engine over the reloaded state never re-serves the first listing
    engine2, _ = engine_factory(InMemoryListingStore(make_pool(4)), seed=99)
    nexts = {engine2.next(reloaded).listing.id for _ in range(3)}
    assert first not in nexts


def test_incentive_listing_scores_through_engine(engine_factory):
    listing = make_listing(id="PROMO", description="First month free, no broker fee")
    engine, _ = engine_factory(InMemoryListingStore([listing]))
    session = engine.start(SessionState(session_id="sess_promo"), make_criteria())

    view = engine.next(session)
    assert view.analysis.incentives_detected == ["free month", "no fee"]
    assert view.analysis.score == 100


def test_build_engine_from_config(tmp_path):
    listings = write_listings_json(tmp_path / "listings.json", make_pool(3))
    cfg = InputsLoader().load_json(
        json.dumps(
            {
                "store": {"backend": "json", "path": str(listings)},
                "decisions": {"backend": "jsonl", "path": str(tmp_path / "decisions.jsonl")},
                "sessions": {"dir": str(tmp_path / "sessions")},
                "seed": 5,
            }
        )
    )
    engine = build_engine(cfg)
    session = engine.start(SessionState(session_id="sess_cfg"), make_criteria())
    engine.next(session)
    engine.decide(session, "apply")

    lines = (tmp_path / "decisions.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["outcome"] == "apply"
    assert engine.sessions is not None
    assert engine.sessions.path_for("sess_cfg").exists()


def test_build_engine_postgrest_requires_credentials():
    cfg = InputsLoader().load_json('{"store": {"backend": "postgrest"}}')
    with pytest.raises(ValueError):
        build_engine(cfg)


def test_seeded_engines_agree(tmp_path):
    listings = write_listings_json(tmp_path / "listings.json", make_pool(6))
    cfg = InputsLoader().load_json(
        json.dumps(
            {
                "store": {"backend": "json", "path": str(listings)},
                "decisions": {"backend": "memory"},
                "sessions": {"dir": None},
                "seed": 21,
            }
        )
    )
    runs = []
    for _ in range(2):
        engine = build_engine(cfg)
        session = engine.start(SessionState(session_id="sess_seed"), make_criteria())
        runs.append([engine.next(session).listing.id for _ in range(6)])
    assert runs[0] == runs[1]
    assert sorted(runs[0]) == [f"L-{i:03d}" for i in range(6)]
    assert isinstance(engine.decision_log, InMemoryDecisionLog)


def test_malformed_price_never_reaches_scoring(engine_factory):
    engine, log = engine_factory(InMemoryListingStore([make_listing(id="bad", price=0)]))
    session = engine.start(SessionState(session_id="sess_bad"), make_criteria())

    view = engine.next(session)

    assert view.status == "no_matches"
    assert view.analysis is None
    assert session.seen_ids == []
    with pytest.raises(InputValidationError):
        engine.decide(session, "apply")
    assert log.entries == []


def test_logged_decision_matches_session_timestamp(engine_factory):
    engine, log = engine_factory(InMemoryListingStore(make_pool(2)))
    session = engine.start(SessionState(session_id="sess_stamp"), make_criteria())

    engine.next(session)
    decision = engine.decide(session, "apply")

    assert log.entries[-1].timestamp == decision.timestamp
    assert log.entries[-1].timestamp == session.last_decision.timestamp
