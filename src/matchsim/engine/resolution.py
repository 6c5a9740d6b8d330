"""Deferred-resolution records: the injected Resolution event and force-resolve results."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum

from matchsim.betting.account import Settlement
from matchsim.engine.notifications import Notification
from matchsim.models.event import BetChoice, EventKind, MatchEvent, OpportunityPayload, ResolutionPayload

RESOLUTION_OFFSET = 4.0  # match-minutes between an opportunity and its resolution


class ResolutionFailureCode(str, Enum):
    NOT_FOUND = "not_found"
    NOT_AN_OPPORTUNITY = "not_an_opportunity"
    ALREADY_RESOLVED = "already_resolved"
    UNKNOWN_OUTCOME = "unknown_outcome"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ResolutionFailure:
    event_id: str
    code: ResolutionFailureCode
    message: str


@dataclass(frozen=True)
class ResolutionResult:
    event_id: str
    winning_outcome_id: str
    settlement: Settlement
    notifications: tuple[Notification, ...] = field(default_factory=tuple)


def resolution_event_for(opportunity: MatchEvent, bet_type: str, offset: float) -> MatchEvent:
    """Build the companion Resolution event, scheduled offset match-minutes after the opportunity."""
    payload = ResolutionPayload(
        original_event_id=opportunity.event_id,
        original_event=opportunity.model_dump(mode="json"),
        resolution_kind=bet_type,
    )
    return MatchEvent(
        event_id=f"{opportunity.event_id}-R",
        kind=EventKind.RESOLUTION,
        time=opportunity.time + offset,
        description=f"Resolution: {opportunity.description}",
        payload=payload.model_dump(mode="json"),
    )


def pick_outcome(rng: random.Random, opportunity: OpportunityPayload) -> BetChoice:
    """Uniform over the listed choices; posted odds do not weight the draw."""
    return rng.choice(opportunity.choices)
