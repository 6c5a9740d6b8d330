"""Canonical schema (Pydantic) - MatchEvent, payloads, Wager."""

from matchsim.models.event import (
    BetChoice,
    CommentaryPayload,
    EventKind,
    GoalPayload,
    MatchEvent,
    OpportunityPayload,
    ResolutionPayload,
    Team,
)
from matchsim.models.wager import Wager, WagerKind, WagerStatus

__all__ = [
    "MatchEvent",
    "EventKind",
    "Team",
    "GoalPayload",
    "BetChoice",
    "OpportunityPayload",
    "CommentaryPayload",
    "ResolutionPayload",
    "Wager",
    "WagerKind",
    "WagerStatus",
]
