"""Run store tests."""

import tempfile
from pathlib import Path

import pytest

from matchsim.config.settings import Settings
from matchsim.simulation.result import MatchResult
from matchsim.simulation.runner import get_match_result, list_match_results, run_match, save_match_result
from matchsim.storage.db import get_connection, init_schema


@pytest.fixture
def temp_db():
    tmp = tempfile.mkdtemp()
    path = Path(tmp) / "test.duckdb"
    conn = get_connection(path)
    init_schema(conn)
    yield conn
    conn.close()
    path.unlink(missing_ok=True)
    Path(tmp).rmdir()


def _result(run_id, **overrides):
    fields = dict(
        run_id=run_id,
        seed=7,
        home_team="Quantum Strikers",
        away_team="Celestial FC",
        home_score=2,
        away_score=1,
        final_outcome="home",
        starting_balance=1000.0,
        final_balance=1042.5,
        wagers_placed=4,
        wagers_won=2,
        events_processed=12,
        feed=[{"time": 12.3, "text": "GOAL!"}],
        params={"duration": 90, "pauses": 3},
    )
    fields.update(overrides)
    return MatchResult(**fields)


def test_save_and_load_round_trip(temp_db):
    saved = _result("abc12345")
    save_match_result(temp_db, saved)
    loaded = get_match_result(temp_db, "abc12345")
    assert loaded == saved
    assert loaded.profit == pytest.approx(42.5)


def test_bet_summary_round_trip(temp_db):
    wagers = [
        {
            "wager_id": "W1",
            "kind": "opportunity",
            "outcome_id": "goal",
            "stake": 50.0,
            "odds": 4.5,
            "status": "won",
            "multiplier_applied": False,
            "payout": 225.0,
        }
    ]
    saved = _result("bets0001", total_staked=50.0, wagers=wagers)
    save_match_result(temp_db, saved)
    loaded = get_match_result(temp_db, "bets0001")
    assert loaded.total_staked == 50.0
    assert loaded.wagers == wagers


def test_missing_run_is_none(temp_db):
    assert get_match_result(temp_db, "nope") is None


def test_list_respects_limit(temp_db):
    for i in range(3):
        save_match_result(temp_db, _result(f"run{i}", seed=None))
    assert len(list_match_results(temp_db, limit=2)) == 2
    assert {r.run_id for r in list_match_results(temp_db)} == {"run0", "run1", "run2"}
    assert all(r.seed is None for r in list_match_results(temp_db))


def test_init_schema_is_idempotent(temp_db):
    init_schema(temp_db)
    assert list_match_results(temp_db) == []


def test_simulated_run_persists(temp_db):
    result = run_match(Settings.from_dict({}), seed=5)
    save_match_result(temp_db, result)
    loaded = get_match_result(temp_db, result.run_id)
    assert (loaded.home_score, loaded.away_score) == (result.home_score, result.away_score)
    assert loaded.feed == result.feed
    assert loaded.final_balance == result.final_balance
