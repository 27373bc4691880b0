import json
from types import SimpleNamespace

import pytest

pytest.importorskip("sqlalchemy")
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import seed_hackathons
from backend.db import Base
from backend.models import HackathonDB
from backend.schemas import Hackathon


def fake_session_factory(sessions):
    def factory():
        session = SimpleNamespace(rollback=lambda: None, close=lambda: None)
        sessions.append(session)
        return session
    return factory


def test_store_hackathons_returns_only_new_hackathons(monkeypatch):
    sessions = []
    upsert_results = [(object(), True), (object(), False), (object(), True)]
    hacks = [SimpleNamespace(id="1"), SimpleNamespace(id="2"), SimpleNamespace(id="3")]

    monkeypatch.setattr(seed_hackathons, "SessionLocal", fake_session_factory(sessions))
    monkeypatch.setattr(seed_hackathons, "upsert_hackathon", lambda _db, _h: upsert_results.pop(0))

    result = seed_hackathons.store_hackathons(hacks)

    assert [h.id for h in result] == ["1", "3"]
    assert len(sessions) == 1


def test_store_hackathons_retries_on_database_error(monkeypatch):
    attempts = {"count": 0}
    sessions = []
    sleeps = []
    hack = SimpleNamespace(id="10")

    def flaky_upsert(_db, _hack):
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise SQLAlchemyError("temporary db error")
        return object(), True

    monkeypatch.setattr(seed_hackathons, "SessionLocal", fake_session_factory(sessions))
    monkeypatch.setattr(seed_hackathons, "upsert_hackathon", flaky_upsert)
    monkeypatch.setattr(seed_hackathons.time, "sleep", lambda seconds: sleeps.append(seconds))

    result = seed_hackathons.store_hackathons([hack])

    assert [h.id for h in result] == ["10"]
    assert attempts["count"] == 2
    assert sleeps == [1]
    assert len(sessions) == 2


def test_store_hackathons_gives_up_after_three_attempts(monkeypatch):
    sleeps = []

    def always_fails(_db, _hack):
        raise SQLAlchemyError("db down")

    monkeypatch.setattr(seed_hackathons, "SessionLocal", fake_session_factory([]))
    monkeypatch.setattr(seed_hackathons, "upsert_hackathon", always_fails)
    monkeypatch.setattr(seed_hackathons.time, "sleep", lambda seconds: sleeps.append(seconds))

    assert seed_hackathons.store_hackathons([SimpleNamespace(id="1")]) == []
    assert sleeps == [1, 2]


def test_store_hackathons_does_not_retry_on_non_database_error(monkeypatch):
    attempts = {"count": 0}

    def broken_upsert(_db, _hack):
        attempts["count"] += 1
        raise RuntimeError("non-db failure")

    monkeypatch.setattr(seed_hackathons, "SessionLocal", fake_session_factory([]))
    monkeypatch.setattr(seed_hackathons, "upsert_hackathon", broken_upsert)

    result = seed_hackathons.store_hackathons([SimpleNamespace(id="1")])

    assert result == []
    assert attempts["count"] == 1


def test_load_seed_file_skips_invalid_entries(tmp_path):
    path = tmp_path / "hackathons.json"
    path.write_text(json.dumps([
        {"id": "ok", "title": "Valid", "startDate": "2026-01-01T00:00:00Z", "endDate": "2026-01-02T00:00:00Z"},
        {"id": "bad", "title": "No dates"},
        {"id": "neg", "title": "Negative", "prizeAmount": -5,
         "startDate": "2026-01-01T00:00:00Z", "endDate": "2026-01-02T00:00:00Z"},
    ]))

    hackathons = seed_hackathons.load_seed_file(path)

    assert [h.id for h in hackathons] == ["ok"]


def test_bundled_seed_file_is_valid():
    hackathons = seed_hackathons.load_seed_file(seed_hackathons.DEFAULT_SEED_FILE)

    assert len(hackathons) == 7
    assert {h.publish_status for h in hackathons} == {"published", "draft"}


def test_store_hackathons_reports_rows_committed_before_a_retry(monkeypatch):
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(bind=engine, autoflush=False)
    real_upsert = seed_hackathons.upsert_hackathon
    calls = {"count": 0}

    def upsert_failing_on_second_call(db, hack):
        calls["count"] += 1
        if calls["count"] == 2:
            raise SQLAlchemyError("connection reset")
        return real_upsert(db, hack)

    hacks = [
        Hackathon(id=hid, title=hid, start_date="2026-01-01T00:00:00Z", end_date="2026-01-02T00:00:00Z")
        for hid in ("h1", "h2")
    ]
    monkeypatch.setattr(seed_hackathons, "SessionLocal", session_factory)
    monkeypatch.setattr(seed_hackathons, "upsert_hackathon", upsert_failing_on_second_call)
    monkeypatch.setattr(seed_hackathons.time, "sleep", lambda seconds: None)

    try:
        result = seed_hackathons.store_hackathons(hacks)

        assert [h.id for h in result] == ["h1", "h2"]
        check = session_factory()
        assert sorted(row.id for row in check.query(HackathonDB)) == ["h1", "h2"]
        check.close()
    finally:
        engine.dispose()


def test_load_seed_file_skips_entries_that_are_not_objects(tmp_path):
    path = tmp_path / "hackathons.json"
    path.write_text(json.dumps([
        "not-a-hackathon",
        42,
        {"id": "ok", "title": "Valid", "startDate": "2026-01-01T00:00:00Z", "endDate": "2026-01-02T00:00:00Z"},
    ]))

    hackathons = seed_hackathons.load_seed_file(path)

    assert [h.id for h in hackathons] == ["ok"]
