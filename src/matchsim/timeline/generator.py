"""Timeline synthesis: spaced event times, exact per-kind counts, shuffled kinds, templated payloads."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Mapping

import structlog

from matchsim.models.event import EventKind, MatchEvent
from matchsim.timeline.templates import build_payload

log = structlog.get_logger(__name__)

SYNTHESIZED_KINDS = (EventKind.GOAL, EventKind.BETTING_OPPORTUNITY, EventKind.COMMENTARY)


def default_distribution() -> dict[EventKind, float]:
    """20% goals, 45% betting opportunities, 35% commentary."""
    return {
        EventKind.GOAL: 0.20,
        EventKind.BETTING_OPPORTUNITY: 0.45,
        EventKind.COMMENTARY: 0.35,
    }


@dataclass(frozen=True)
class SpacingBounds:
    """Allowed gap (match-minutes) between consecutive synthesized events."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if self.min <= 0:
            raise ValueError(f"spacing min must be > 0, got {self.min}")
        if self.min > self.max:
            raise ValueError(f"spacing min {self.min} exceeds max {self.max}")


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _normalized(distribution: Mapping[EventKind, float]) -> list[tuple[EventKind, float]]:
    if not distribution:
        raise ValueError("distribution must name at least one kind")
    items = []
    for kind, weight in distribution.items():
        kind = EventKind(kind)
        if kind not in SYNTHESIZED_KINDS:
            raise ValueError(f"{kind.value} events cannot be synthesized")
        if weight < 0:
            raise ValueError(f"negative weight for {kind.value}: {weight}")
        items.append((kind, float(weight)))
    total_weight = sum(w for _, w in items)
    if total_weight <= 0:
        raise ValueError("distribution weights sum to zero")
    return [(k, w / total_weight) for k, w in items]


def event_times(duration: float, spacing: SpacingBounds, rng: random.Random) -> list[float]:
    """Strictly increasing times: first in [min, max), then previous + U[min, max], while < duration."""
    if duration <= 0:
        raise ValueError(f"duration must be > 0, got {duration}")
    times: list[float] = []
    t = spacing.min + rng.random() * (spacing.max - spacing.min)
    while t < duration:
        times.append(t)
        t += rng.uniform(spacing.min, spacing.max)
    return times


def kind_counts(total: int, distribution: Mapping[EventKind, float]) -> dict[EventKind, int]:
    """
    Integer count per kind, summing exactly to total.
    Every kind but the last gets round(total * weight) (capped by what is left); the last takes the remainder.
    """
    weights = _normalized(distribution)
    counts: dict[EventKind, int] = {}
    remaining = total
    for kind, weight in weights[:-1]:
        n = min(_round_half_up(total * weight), remaining)
        counts[kind] = n
        remaining -= n
    last_kind = weights[-1][0]
    counts[last_kind] = counts.get(last_kind, 0) + remaining
    return counts


def assign_kinds(
    total: int, distribution: Mapping[EventKind, float], rng: random.Random
) -> list[EventKind]:
    """Kind sequence with exact counts, uniformly permuted (Fisher-Yates)."""
    kinds: list[EventKind] = []
    for kind, n in kind_counts(total, distribution).items():
        kinds.extend([kind] * n)
    rng.shuffle(kinds)
    return kinds


def generate(
    duration: float,
    distribution: Mapping[EventKind, float] | None = None,
    spacing: SpacingBounds | None = None,
    *,
    seed: int | None = None,
    rng: random.Random | None = None,
    home_team: str = "Home",
    away_team: str = "Away",
    id_prefix: str = "E",
) -> list[MatchEvent]:
    """
    Synthesize a time-sorted match timeline.
    Pass rng to share a random source with the caller, or seed for a private deterministic one.
    Ties cannot occur between synthesized events (spacing min > 0).
    """
    rng = rng or random.Random(seed)
    distribution = distribution if distribution is not None else default_distribution()
    spacing = spacing or SpacingBounds(8.0, 18.0)

    times = event_times(duration, spacing, rng)
    kinds = assign_kinds(len(times), distribution, rng)

    events: list[MatchEvent] = []
    for i, (kind, t) in enumerate(zip(kinds, times), start=1):
        description, payload = build_payload(kind, rng, home_team, away_team)
        events.append(
            MatchEvent(
                event_id=f"{id_prefix}{i}",
                kind=kind,
                time=t,
                description=description,
                payload=payload,
            )
        )
    log.debug(
        "timeline_generated",
        duration=duration,
        events=len(events),
        counts={k.value: n for k, n in kind_counts(len(times), distribution).items()},
    )
    return events
