"""Typed notifications returned by the dispatcher for the UI, audio and pause collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from matchsim.betting.account import Settlement
from matchsim.engine.odds import Odds
from matchsim.models.event import BetChoice, Team


@dataclass(frozen=True)
class GoalScored:
    event_id: str
    time: float
    team: Team
    scorer: str
    goal_type: str
    previous_score: tuple[int, int]
    score: tuple[int, int]
    previous_odds: Odds
    odds: Odds


@dataclass(frozen=True)
class PauseRequested:
    """Ask the pause coordinator to suspend the clock for a betting window."""

    event_id: str
    reason: str
    suggested_timeout_ms: int


@dataclass(frozen=True)
class BettingOpportunityOpened:
    event_id: str
    time: float
    description: str
    bet_type: str
    choices: tuple[BetChoice, ...]
    resolves_at: float


@dataclass(frozen=True)
class CommentaryPosted:
    event_id: str
    time: float
    description: str
    category: str
    intensity: int


@dataclass(frozen=True)
class WagerResolved:
    event_id: str  # the opportunity, not the resolution event
    time: float
    bet_type: str
    winning_outcome_id: str
    winning_description: str
    settlement: Settlement
    forced: bool = False


@dataclass(frozen=True)
class MultiplierAwarded:
    time: float
    event_id: str


@dataclass(frozen=True)
class MatchEnded:
    time: float
    home_score: int
    away_score: int
    final_outcome: str
    settlement: Settlement
    refunded: float = 0.0  # stakes returned on opportunity wagers left unsettled


Notification = Union[
    GoalScored,
    PauseRequested,
    BettingOpportunityOpened,
    CommentaryPosted,
    WagerResolved,
    MultiplierAwarded,
    MatchEnded,
]
