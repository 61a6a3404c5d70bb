# main.py
"""
Entry Point: The Steady One matching engine

Purpose
-------
Run a renter session from the command line:
  1) Load config (file or defaults, STEADY_* env overrides).
  2) Load criteria (questionnaire JSON) and resume or start the session.
  3) Show the next listing(s) with score, badge, risks, advantages and reasoning.
  4) Optionally record an apply/wait decision, exit feedback, or restart.

Usage
-----
    python main.py --criteria data/sample/criteria.json --listings data/listings.json
    python main.py --criteria answers.json --session sess_abc --steps 3 --seed 7
    python main.py --session sess_abc --decide apply
    python main.py --session sess_abc --feedback price,location --note "too pricey"
    python main.py --session sess_abc --restart
"""

from __future__ import annotations

import argparse
from typing import cast

from src.core.errors import ENGINE_ERRORS
from src.core.session.store import SessionStore, new_session_id
from src.inputs.inputs import AppConfig, InputsLoader
from src.orchestrator.engine import DecisionEngine, EngineView
from src.orchestrator.wiring import build_engine
from src.schemas.models import FeedbackReason, SessionState

_FEEDBACK_REASONS = ("price", "location", "style", "other")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="The Steady One listing match engine")
    p.add_argument("--config", type=str, default=None, help="Path to JSON config.")
    p.add_argument("--criteria", type=str, default=None, help="Questionnaire answers JSON (starts/replaces criteria).")
    p.add_argument("--listings", type=str, default=None, help="Listings JSON file (forces the json store).")
    p.add_argument("--session", type=str, default=None, help="Session id to resume (new one if omitted).")
    p.add_argument("--steps", type=int, default=1, help="How many listings to show.")
    p.add_argument("--offset", type=int, default=None, help="Deterministic offset for the first pick.")
    p.add_argument("--seed", type=int, default=None, help="RNG seed (overrides config).")
    p.add_argument("--relax", action="store_true", help="Relax filters when nothing matches strictly.")
    p.add_argument("--decide", choices=["apply", "wait"], default=None, help="Record a decision on the current listing.")
    p.add_argument("--feedback", type=str, default=None, help="Comma-separated exit reasons: price,location,style,other.")
    p.add_argument("--note", type=str, default=None, help="Free-text exit feedback.")
    p.add_argument("--restart", action="store_true", help="Clear the seen set and start over.")
    return p.parse_args()


def _apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    updates: dict[str, object] = {}
    if args.listings:
        updates["store"] = cfg.store.model_copy(update={"backend": "json", "path": args.listings})
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.relax:
        updates["selection"] = cfg.selection.model_copy(update={"relax": True})
    return cfg.model_copy(update=updates) if updates else cfg


def _load_session(engine: DecisionEngine, session_id: str | None) -> SessionState:
    sid = session_id or new_session_id()
    store: SessionStore | None = engine.sessions
    return store.load(sid) if store else SessionState(session_id=sid)


def _print_view(view: EngineView) -> None:
    sel = view.selection
    if view.listing is None:
        if sel.status == "no_matches":
            print("No listings match your budget and bedrooms. Relax the filters (--relax) or restart.")
        else:
            print("You've seen every match. Tell us why (--feedback price,location,style) before restarting.")
        return

    lst = view.listing
    a = view.analysis
    where = ", ".join(x for x in (lst.neighborhood, lst.borough) if x)
    print(f"[{lst.id}] {where} | ${lst.price:,}/mo | {lst.bedrooms} bd / {lst.bathrooms:g} ba")
    if a is not None:
        print(f"  score={a.score} badge={a.badge.value} recommendation={a.recommendation.value}")
        if a.advantages:
            print("  advantages: " + ", ".join(t.value for t in a.advantages))
        if a.risks:
            print("  risks: " + ", ".join(t.value for t in a.risks))
        print(f"  {a.reasoning}")
    if sel.possibly_repeated:
        print("  (shown before; pool nearly exhausted)")
    if sel.relaxed:
        print("  (relaxed match)")


def main() -> int:
    args = parse_args()
    loader = InputsLoader()
    cfg = _apply_overrides(loader.load(args.config), args)
    engine = build_engine(cfg)
    session = _load_session(engine, args.session)
    print(f"session: {session.session_id}")

    try:
        if args.restart:
            engine.restart(session, force=True)
            print("Session restarted.")
        if args.criteria:
            engine.start(session, loader.load_criteria(args.criteria))
        if args.decide:
            d = engine.decide(session, args.decide)
            print(f"Recorded {d.outcome} for {d.listing_id}.")
            return 0
        if args.feedback is not None:
            reasons = [r.strip() for r in args.feedback.split(",") if r.strip()]
            bad = [r for r in reasons if r not in _FEEDBACK_REASONS]
            if bad:
                raise SystemExit(f"invalid feedback reason(s): {', '.join(bad)}")
            engine.submit_feedback(session, cast(list[FeedbackReason], reasons), args.note)
            print("Thanks, feedback saved. Use --restart to browse again.")
            return 0
        if session.criteria is None:
            print("No criteria yet: pass --criteria answers.json")
            return 2

        for i in range(max(1, args.steps)):
            view = engine.next(session, offset=args.offset if i == 0 else None)
            _print_view(view)
            if view.listing is None:
                break
    except ENGINE_ERRORS as e:
        retry = " (retryable)" if e.retryable else ""
        print(f"Error{retry}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
