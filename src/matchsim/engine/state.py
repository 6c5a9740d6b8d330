"""MatchState and event feed entries."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from matchsim.engine.odds import Odds
from matchsim.models.event import EventKind


@dataclass(frozen=True)
class FeedEntry:
    """One line of the match feed."""

    time: float
    text: str
    event_id: str | None = None
    kind: EventKind | None = None
    betting_opportunity: bool = False
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MatchState:
    """Score, odds, clock and recent feed. Owned by the dispatcher, replaced whole on change."""

    odds: Odds
    clock_time: float = 0.0
    home_score: int = 0
    away_score: int = 0
    feed: tuple[FeedEntry, ...] = ()
    cursor: int = 0
    active: bool = True

    @property
    def score(self) -> tuple[int, int]:
        return (self.home_score, self.away_score)

    @property
    def final_outcome(self) -> str:
        if self.home_score > self.away_score:
            return "home"
        if self.away_score > self.home_score:
            return "away"
        return "draw"

    def with_feed(self, entry: FeedEntry, limit: int) -> MatchState:
        """Append entry, keeping the most recent `limit` entries."""
        return replace(self, feed=(self.feed + (entry,))[-limit:])
