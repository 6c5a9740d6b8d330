"""Match runner: session + bettor, persist results."""

from __future__ import annotations

import json
import time
from typing import Any

from matchsim.config.settings import Settings
from matchsim.simulation.bettor import Bettor
from matchsim.simulation.result import MatchResult
from matchsim.simulation.session import MatchSession


def run_match(
    settings: Settings,
    seed: int | None = None,
    bettor: Bettor | None = None,
    step: float = 1.0,
) -> MatchResult:
    """Simulate one full match headlessly and return its MatchResult."""
    session = MatchSession(settings, seed=seed, bettor=bettor)
    return session.run(step=step)


def save_match_result(conn: Any, result: MatchResult) -> None:
    """Persist MatchResult to match_runs table."""
    conn.execute(
        """
        INSERT INTO match_runs (run_id, seed, home_team, away_team, home_score, away_score, final_outcome, starting_balance, final_balance, wagers_placed, wagers_won, events_processed, total_staked, wagers, feed, params, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            result.run_id,
            result.seed,
            result.home_team,
            result.away_team,
            result.home_score,
            result.away_score,
            result.final_outcome,
            result.starting_balance,
            result.final_balance,
            result.wagers_placed,
            result.wagers_won,
            result.events_processed,
            result.total_staked,
            json.dumps(result.wagers),
            json.dumps(result.feed),
            json.dumps(result.params),
            int(time.time() * 1000),
        ],
    )


_COLUMNS = (
    "run_id, seed, home_team, away_team, home_score, away_score, final_outcome, "
    "starting_balance, final_balance, wagers_placed, wagers_won, events_processed, total_staked, wagers, feed, params"
)


def _row_to_result(row: tuple) -> MatchResult:
    return MatchResult(
        run_id=row[0],
        seed=row[1],
        home_team=row[2],
        away_team=row[3],
        home_score=row[4],
        away_score=row[5],
        final_outcome=row[6],
        starting_balance=row[7],
        final_balance=row[8],
        wagers_placed=row[9],
        wagers_won=row[10],
        events_processed=row[11],
        total_staked=row[12] or 0.0,
        wagers=json.loads(row[13]) if row[13] else [],
        feed=json.loads(row[14]) if row[14] else [],
        params=json.loads(row[15]) if row[15] else {},
    )


def get_match_result(conn: Any, run_id: str) -> MatchResult | None:
    """Load MatchResult by run_id."""
    row = conn.execute(f"SELECT {_COLUMNS} FROM match_runs WHERE run_id = ?", [run_id]).fetchone()
    if not row:
        return None
    return _row_to_result(row)


def list_match_results(conn: Any, limit: int = 20) -> list[MatchResult]:
    """Most recent runs first."""
    rows = conn.execute(
        f"SELECT {_COLUMNS} FROM match_runs ORDER BY created_at DESC LIMIT ?", [limit]
    ).fetchall()
    return [_row_to_result(r) for r in rows]
