# tests/unit/test_inputs.py
from __future__ import annotations

import json

import pytest

from src.inputs.inputs import AppConfig, InputsLoader, load_config


def test_defaults_when_no_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_config()
    assert cfg == AppConfig()
    assert cfg.store.backend == "json"
    assert cfg.decisions.backend == "jsonl"
    assert cfg.seed is None


def test_file_search_prefers_steady_json(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.json").write_text(json.dumps({"seed": 1}), encoding="utf-8")
    (tmp_path / "steady.json").write_text(json.dumps({"seed": 2}), encoding="utf-8")
    assert load_config().seed == 2


def test_load_explicit_file(tmp_path):
    p = tmp_path / "engine.json"
    p.write_text(
        json.dumps(
            {
                "store": {"backend": "memory"},
                "decisions": {"backend": "memory"},
                "sessions": {"dir": None},
                "selection": {"max_attempts": 5, "relax": True, "sort_key": "price"},
            }
        ),
        encoding="utf-8",
    )
    cfg = InputsLoader().load(p)
    assert cfg.store.backend == "memory"
    assert cfg.sessions.dir is None
    assert cfg.selection.max_attempts == 5
    assert cfg.selection.relax is True


def test_missing_or_invalid_files(tmp_path):
    loader = InputsLoader()
    with pytest.raises(FileNotFoundError):
        loader.load(tmp_path / "absent.json")

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        loader.load(bad)

    yaml = tmp_path / "cfg.yaml"
    yaml.write_text("seed: 1", encoding="utf-8")
    with pytest.raises(ValueError):
        loader.load(yaml)

    with pytest.raises(ValueError):
        loader.load_json('{"selection": {"max_attempts": 0}}')


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("STEADY_STORE_BACKEND", "PostgREST")
    monkeypatch.setenv("STEADY_SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.setenv("STEADY_SUPABASE_KEY", "anon")
    monkeypatch.setenv("STEADY_DECISIONS", "/tmp/decisions.jsonl")
    monkeypatch.setenv("STEADY_SESSION_DIR", "/tmp/sessions")
    monkeypatch.setenv("STEADY_SEED", "99")

    cfg = InputsLoader().load_json('{"decisions": {"backend": "memory"}}')

    assert cfg.store.backend == "postgrest"
    assert cfg.store.url == "https://proj.supabase.co"
    assert cfg.store.api_key == "anon"
    assert cfg.decisions.backend == "jsonl"
    assert cfg.decisions.path == "/tmp/decisions.jsonl"
    assert cfg.sessions.dir == "/tmp/sessions"
    assert cfg.seed == 99


def test_bad_env_values_are_ignored(monkeypatch):
    monkeypatch.setenv("STEADY_STORE_BACKEND", "oracle")
    monkeypatch.setenv("STEADY_SEED", "abc")
    cfg = InputsLoader().load_json('{"seed": 4}')
    assert cfg.store.backend == "json"
    assert cfg.seed == 4


def test_criteria_questionnaire_shape(tmp_path):
    p = tmp_path / "criteria.json"
    p.write_text(
        json.dumps({"boroughs": ["Queens"], "budget": "$3,200", "bedrooms": 2, "pets": "dogs", "moveIn": "asap"}),
        encoding="utf-8",
    )
    crit = InputsLoader().load_criteria(p)
    assert crit.budget_max == 3200
    assert crit.bedrooms == "2"
    assert crit.pets == "dogs"
    assert crit.boroughs == ["Queens"]


def test_criteria_validation_errors(tmp_path):
    loader = InputsLoader()
    with pytest.raises(ValueError):
        loader.criteria_from_dict({"budget_max": 3000, "bedrooms": "7 rooms"})
    with pytest.raises(ValueError):
        loader.criteria_from_dict({"boroughs": ["Bronx"]})
    with pytest.raises(FileNotFoundError):
        loader.load_criteria(tmp_path / "missing.json")
