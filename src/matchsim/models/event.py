"""MatchEvent and kind-specific payloads - canonical timeline entities."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """Kind of a timeline event. Resolution events are injected, never synthesized."""

    GOAL = "goal"
    BETTING_OPPORTUNITY = "betting_opportunity"
    COMMENTARY = "commentary"
    RESOLUTION = "resolution"


class Team(str, Enum):
    HOME = "home"
    AWAY = "away"


class GoalPayload(BaseModel):
    """Goal payload: which side scored, who, and how."""

    team: Team
    scorer: str = Field(..., min_length=1)
    goal_type: str = Field(..., min_length=1)


class BetChoice(BaseModel):
    """Single selectable outcome of a betting opportunity."""

    outcome_id: str = Field(..., min_length=1)
    description: str
    odds: float = Field(..., gt=0)


class OpportunityPayload(BaseModel):
    """Time-limited betting opportunity: a short menu of mutually exclusive outcomes."""

    bet_type: str = Field(..., min_length=1)
    choices: list[BetChoice] = Field(..., min_length=1)

    def choice(self, outcome_id: str) -> BetChoice | None:
        for c in self.choices:
            if c.outcome_id == outcome_id:
                return c
        return None


class CommentaryPayload(BaseModel):
    category: str = Field(..., min_length=1)
    intensity: int = Field(..., ge=1, le=5)


class ResolutionPayload(BaseModel):
    """Companion of a betting opportunity, injected at dispatch time."""

    original_event_id: str = Field(..., min_length=1)
    original_event: dict[str, Any] | None = None  # snapshot of the opportunity when it opened
    resolution_kind: str
    resolved: bool = False
    winning_outcome_id: str | None = None


PAYLOAD_MODELS: dict[EventKind, type[BaseModel]] = {
    EventKind.GOAL: GoalPayload,
    EventKind.BETTING_OPPORTUNITY: OpportunityPayload,
    EventKind.COMMENTARY: CommentaryPayload,
    EventKind.RESOLUTION: ResolutionPayload,
}


class MatchEvent(BaseModel):
    """Timeline event. Immutable; resolution metadata is added by replacing the event with a copy."""

    model_config = ConfigDict(frozen=True)

    event_id: str
    kind: EventKind
    time: float = Field(..., ge=0, description="Scheduled match-minute")
    description: str = ""
    payload: dict[str, Any] = Field(default_factory=dict)  # validated per kind at dispatch
    resolved: bool = False
    winning_outcome_id: str | None = None
    forced: bool = False

    def parsed_payload(self) -> BaseModel:
        """Validate payload against the kind's model. Raises pydantic.ValidationError if malformed."""
        return PAYLOAD_MODELS[self.kind].model_validate(self.payload)
