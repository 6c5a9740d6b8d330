"""Wager - canonical bet record."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class WagerKind(str, Enum):
    """Continuous wagers stay open all match; opportunity wagers bind to one event."""

    CONTINUOUS = "continuous"
    OPPORTUNITY = "opportunity"


class WagerStatus(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    CANCELLED = "cancelled"


class Wager(BaseModel):
    """Placed wager. Odds are captured at placement and never change."""

    model_config = ConfigDict(frozen=True)

    wager_id: str
    kind: WagerKind
    outcome_id: str
    stake: float = Field(..., gt=0)
    odds: float = Field(..., gt=0)
    potential_payout: float = Field(..., ge=0)
    status: WagerStatus = WagerStatus.PENDING
    multiplier_applied: bool = False
    event_id: str | None = None  # opportunity wagers only
    payout: float = 0.0
    placed_at: float | None = None  # match-minute
    settled_at: float | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is WagerStatus.PENDING

    @property
    def multiplier_factor(self) -> int:
        return 2 if self.multiplier_applied else 1
