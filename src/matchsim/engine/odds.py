"""Match-result odds as a deterministic function of the score differential."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Odds:
    """Decimal odds for the three full-match outcomes."""

    home: float
    draw: float
    away: float

    def for_outcome(self, outcome: str) -> float:
        return {"home": self.home, "draw": self.draw, "away": self.away}[outcome]

    def as_dict(self) -> dict[str, float]:
        return {"home": self.home, "draw": self.draw, "away": self.away}


@dataclass(frozen=True)
class OddsModel:
    """
    Reprice from the opening odds per goal of lead: the leader's odds are multiplied by
    lead_factor, the trailer's by trail_factor and the draw by draw_factor.
    Level scores return the opening odds. Every price is clamped to [floor, ceiling].
    """

    opening: Odds
    floor: float = 1.05
    ceiling: float = 50.0
    lead_factor: float = 0.8
    trail_factor: float = 1.5
    draw_factor: float = 1.25

    def __post_init__(self) -> None:
        if not 0 < self.floor < self.ceiling:
            raise ValueError(f"odds bounds must satisfy 0 < floor < ceiling, got {self.floor}, {self.ceiling}")
        if not 0 < self.lead_factor < 1:
            raise ValueError(f"lead_factor must be in (0, 1), got {self.lead_factor}")
        if self.trail_factor <= 1 or self.draw_factor <= 1:
            raise ValueError("trail_factor and draw_factor must be > 1")

    def _clamp(self, value: float) -> float:
        return min(self.ceiling, max(self.floor, value))

    def price(self, home_score: int, away_score: int) -> Odds:
        lead = home_score - away_score
        n = abs(lead)
        draw = self.opening.draw * self.draw_factor**n
        if lead > 0:
            home = self.opening.home * self.lead_factor**n
            away = self.opening.away * self.trail_factor**n
        elif lead < 0:
            home = self.opening.home * self.trail_factor**n
            away = self.opening.away * self.lead_factor**n
        else:
            home, away = self.opening.home, self.opening.away
        return Odds(home=self._clamp(home), draw=self._clamp(draw), away=self._clamp(away))
