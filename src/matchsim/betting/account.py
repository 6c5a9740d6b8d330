"""Account state (balance, wagers by kind, multiplier tokens) and settlement records."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from matchsim.models.wager import Wager, WagerKind


@dataclass(frozen=True)
class Account:
    """Wallet snapshot. Replaced whole by the ledger on every mutation."""

    balance: float = 1000.0
    wagers: dict[WagerKind, tuple[Wager, ...]] = field(
        default_factory=lambda: {kind: () for kind in WagerKind}
    )
    multiplier_tokens: int = 0

    def by_kind(self, kind: WagerKind) -> tuple[Wager, ...]:
        return self.wagers.get(kind, ())

    def all_wagers(self) -> list[Wager]:
        return [w for kind in WagerKind for w in self.by_kind(kind)]

    def find(self, wager_id: str) -> Wager | None:
        for w in self.all_wagers():
            if w.wager_id == wager_id:
                return w
        return None

    def with_wagers(self, kind: WagerKind, wagers: tuple[Wager, ...], balance: float | None = None) -> Account:
        updated = dict(self.wagers)
        updated[kind] = wagers
        return replace(
            self,
            wagers=updated,
            balance=self.balance if balance is None else balance,
        )


@dataclass(frozen=True)
class WagerResult:
    """Outcome of one wager in a settlement."""

    wager_id: str
    outcome_id: str
    won: bool
    payout: float


@dataclass(frozen=True)
class Settlement:
    """Result of settling the pending wagers of one kind (and optionally one event)."""

    winning_outcome_id: str
    kind: WagerKind
    event_id: str | None = None
    total_payout: float = 0.0
    settled_count: int = 0
    results: tuple[WagerResult, ...] = ()

    @property
    def won_count(self) -> int:
        return sum(1 for r in self.results if r.won)
