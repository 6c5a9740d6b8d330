"""Summary of a finished headless match."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class MatchResult:
    """Result of a simulated match."""

    run_id: str
    seed: int | None
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    final_outcome: str
    starting_balance: float
    final_balance: float
    wagers_placed: int
    wagers_won: int
    events_processed: int
    total_staked: float = 0.0
    wagers: list[dict] = field(default_factory=list)  # bet summary rows
    feed: list[dict] = field(default_factory=list)
    params: dict = field(default_factory=dict)

    @property
    def profit(self) -> float:
        return self.final_balance - self.starting_balance
