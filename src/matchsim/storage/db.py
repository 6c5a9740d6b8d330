"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
-- Finished headless matches
CREATE TABLE IF NOT EXISTS match_runs (
    run_id           VARCHAR PRIMARY KEY,
    seed             BIGINT,
    home_team        VARCHAR NOT NULL,
    away_team        VARCHAR NOT NULL,
    home_score       INTEGER NOT NULL,
    away_score       INTEGER NOT NULL,
    final_outcome    VARCHAR NOT NULL,
    starting_balance DOUBLE NOT NULL,
    final_balance    DOUBLE NOT NULL,
    wagers_placed    INTEGER,
    wagers_won       INTEGER,
    events_processed INTEGER,
    total_staked     DOUBLE,
    wagers           JSON,
    feed             JSON,
    params           JSON,
    created_at       BIGINT
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager."""
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
