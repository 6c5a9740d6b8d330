"""Fixed template pools for synthesized event payloads."""

from __future__ import annotations

import random
from typing import Any

from matchsim.models.event import (
    BetChoice,
    CommentaryPayload,
    EventKind,
    GoalPayload,
    OpportunityPayload,
    Team,
)

GOAL_TYPES = ["Header", "Volley", "Penalty", "Long-range strike", "Tap-in", "Free kick"]

SCORERS = {
    Team.HOME: ["Okafor", "Lindqvist", "Moreau", "Castillo", "Brennan"],
    Team.AWAY: ["Tanaka", "Adeyemi", "Kowalski", "Ferreira", "Haddad"],
}

OPPORTUNITIES: list[dict[str, Any]] = [
    {
        "bet_type": "FOUL_OUTCOME",
        "description": "Crunching tackle near the box! What will the ref do?",
        "choices": [
            ("yellow_card", "Yellow Card", 2.5),
            ("red_card", "Red Card", 8.0),
            ("warning", "Warning", 1.5),
        ],
    },
    {
        "bet_type": "PENALTY_OUTCOME",
        "description": "Penalty awarded! Who wins the duel from the spot?",
        "choices": [
            ("goal", "Goal", 1.4),
            ("saved", "Saved", 4.5),
            ("missed", "Missed", 6.0),
        ],
    },
    {
        "bet_type": "CORNER_OUTCOME",
        "description": "Corner kick swinging in. What happens next?",
        "choices": [
            ("goal", "Goal", 4.5),
            ("cleared", "Cleared", 1.3),
            ("another_corner", "Another Corner", 3.0),
        ],
    },
    {
        "bet_type": "FREE_KICK_OUTCOME",
        "description": "Free kick in a dangerous position!",
        "choices": [
            ("goal", "Goal", 5.0),
            ("on_target", "On Target", 2.2),
            ("off_target", "Off Target", 1.8),
        ],
    },
]

COMMENTARY: list[tuple[str, str]] = [
    ("save", "A great save by the keeper!"),
    ("miss", "The shot goes just wide!"),
    ("tackle", "A crunching tackle in midfield."),
    ("attack", "A promising attack breaks down."),
    ("crowd", "The crowd roars as the pressure builds."),
]

BET_TYPE_LABELS = {
    "FOUL_OUTCOME": "Foul outcome",
    "PENALTY_OUTCOME": "Penalty outcome",
    "CORNER_OUTCOME": "Corner outcome",
    "FREE_KICK_OUTCOME": "Free kick outcome",
}


def bet_type_label(bet_type: str) -> str:
    return BET_TYPE_LABELS.get(bet_type, bet_type.replace("_", " ").capitalize())


def build_payload(
    kind: EventKind,
    rng: random.Random,
    home_team: str = "Home",
    away_team: str = "Away",
) -> tuple[str, dict[str, Any]]:
    """Return (description, payload) for a synthesized event of the given kind."""
    if kind is EventKind.GOAL:
        team = rng.choice([Team.HOME, Team.AWAY])
        goal = GoalPayload(
            team=team,
            scorer=rng.choice(SCORERS[team]),
            goal_type=rng.choice(GOAL_TYPES),
        )
        team_name = home_team if team is Team.HOME else away_team
        description = f"GOAL! {goal.goal_type} from {goal.scorer} for {team_name}!"
        return description, goal.model_dump(mode="json")
    if kind is EventKind.BETTING_OPPORTUNITY:
        template = rng.choice(OPPORTUNITIES)
        opportunity = OpportunityPayload(
            bet_type=template["bet_type"],
            choices=[
                BetChoice(outcome_id=oid, description=text, odds=odds)
                for oid, text, odds in template["choices"]
            ],
        )
        return template["description"], opportunity.model_dump(mode="json")
    if kind is EventKind.COMMENTARY:
        category, text = rng.choice(COMMENTARY)
        commentary = CommentaryPayload(category=category, intensity=rng.randint(1, 5))
        return text, commentary.model_dump(mode="json")
    raise ValueError(f"No template pool for {kind.value} events")
