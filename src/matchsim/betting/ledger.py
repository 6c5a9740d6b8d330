"""Wager ledger - validation, stake accounting, multiplier tokens, settlement."""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

import structlog

from matchsim.betting.account import Account, Settlement, WagerResult
from matchsim.models.wager import Wager, WagerKind, WagerStatus

log = structlog.get_logger(__name__)


class LedgerErrorCode(str, Enum):
    INVALID_KIND = "invalid_kind"
    INVALID_OUTCOME = "invalid_outcome"
    INVALID_STAKE = "invalid_stake"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_ODDS = "invalid_odds"
    WAGER_NOT_FOUND = "wager_not_found"
    WAGER_NOT_PENDING = "wager_not_pending"
    ALREADY_MULTIPLIED = "already_multiplied"
    NO_MULTIPLIER = "no_multiplier"


@dataclass(frozen=True)
class LedgerError:
    """Tagged failure returned (never raised) by ledger operations."""

    code: LedgerErrorCode
    message: str


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def parse_kind(kind: WagerKind | str) -> WagerKind | None:
    """Accept a WagerKind or its name/value in any case ("Opportunity", "continuous")."""
    if isinstance(kind, WagerKind):
        return kind
    if not isinstance(kind, str):
        return None
    try:
        return WagerKind(kind.strip().lower())
    except ValueError:
        return None


class WagerLedger:
    """Owns the Account. Every operation is one whole-value Account replacement or nothing."""

    def __init__(
        self,
        account: Account | None = None,
        *,
        starting_balance: float = 1000.0,
        min_stake: float = 1.0,
    ) -> None:
        self._account = account if account is not None else Account(balance=starting_balance)
        self.min_stake = min_stake
        self._ids = itertools.count(1)

    @property
    def account(self) -> Account:
        return self._account

    @property
    def balance(self) -> float:
        return self._account.balance

    @property
    def multiplier_tokens(self) -> int:
        return self._account.multiplier_tokens

    def place_wager(
        self,
        kind: WagerKind | str,
        outcome_id: str,
        stake: float,
        odds: float,
        event_id: str | None = None,
        *,
        placed_at: float | None = None,
    ) -> Wager | LedgerError:
        """Validate (kind, outcome, stake, odds in that order), debit stake, record a Pending wager."""
        parsed = parse_kind(kind)
        if parsed is None:
            return LedgerError(LedgerErrorCode.INVALID_KIND, f"Unknown wager kind: {kind!r}")
        if not isinstance(outcome_id, str) or not outcome_id.strip():
            return LedgerError(LedgerErrorCode.INVALID_OUTCOME, "Outcome must be a non-empty string")
        if not _is_number(stake) or stake < self.min_stake:
            return LedgerError(
                LedgerErrorCode.INVALID_STAKE, f"Stake must be a number >= {self.min_stake:g}"
            )
        account = self._account
        if stake > account.balance:
            return LedgerError(
                LedgerErrorCode.INSUFFICIENT_FUNDS,
                f"Stake {stake:.2f} exceeds balance {account.balance:.2f}",
            )
        if not _is_number(odds) or odds <= 0 or math.isinf(odds):
            return LedgerError(LedgerErrorCode.INVALID_ODDS, f"Odds must be a positive number, got {odds!r}")

        wager = Wager(
            wager_id=f"W{next(self._ids)}",
            kind=parsed,
            outcome_id=outcome_id,
            stake=float(stake),
            odds=float(odds),
            potential_payout=float(stake) * float(odds),
            event_id=event_id,
            placed_at=placed_at,
        )
        self._account = account.with_wagers(
            parsed, account.by_kind(parsed) + (wager,), balance=account.balance - wager.stake
        )
        log.info(
            "wager_placed",
            wager_id=wager.wager_id,
            kind=parsed.value,
            outcome_id=outcome_id,
            stake=wager.stake,
            odds=wager.odds,
            event_id=event_id,
        )
        return wager

    def award_multiplier(self) -> bool:
        """Grant a multiplier token. At most one can be held; returns False if one already is."""
        if self._account.multiplier_tokens >= 1:
            return False
        self._account = replace(self._account, multiplier_tokens=1)
        log.info("multiplier_awarded")
        return True

    def apply_multiplier(self, wager_id: str) -> Wager | LedgerError:
        """Spend the held token to double a pending wager's payout."""
        account = self._account
        wager = account.find(wager_id)
        if wager is None:
            return LedgerError(LedgerErrorCode.WAGER_NOT_FOUND, f"No wager {wager_id}")
        if not wager.is_pending:
            return LedgerError(LedgerErrorCode.WAGER_NOT_PENDING, f"Wager {wager_id} is {wager.status.value}")
        if wager.multiplier_applied:
            return LedgerError(LedgerErrorCode.ALREADY_MULTIPLIED, f"Wager {wager_id} already multiplied")
        if account.multiplier_tokens != 1:
            return LedgerError(LedgerErrorCode.NO_MULTIPLIER, "No multiplier token held")

        boosted = wager.model_copy(
            update={"multiplier_applied": True, "potential_payout": wager.potential_payout * 2}
        )
        wagers = tuple(boosted if w.wager_id == wager_id else w for w in account.by_kind(wager.kind))
        self._account = replace(account.with_wagers(wager.kind, wagers), multiplier_tokens=0)
        log.info("multiplier_applied", wager_id=wager_id, potential_payout=boosted.potential_payout)
        return boosted

    def cancel_wager(self, wager_id: str) -> float | LedgerError:
        """Refund the full stake of a pending wager. Returns the refund."""
        account = self._account
        wager = account.find(wager_id)
        if wager is None:
            return LedgerError(LedgerErrorCode.WAGER_NOT_FOUND, f"No wager {wager_id}")
        if not wager.is_pending:
            return LedgerError(LedgerErrorCode.WAGER_NOT_PENDING, f"Wager {wager_id} is {wager.status.value}")
        cancelled = wager.model_copy(update={"status": WagerStatus.CANCELLED})
        wagers = tuple(cancelled if w.wager_id == wager_id else w for w in account.by_kind(wager.kind))
        self._account = account.with_wagers(wager.kind, wagers, balance=account.balance + wager.stake)
        log.info("wager_cancelled", wager_id=wager_id, refund=wager.stake)
        return wager.stake

    def settle(
        self,
        winning_outcome_id: str,
        kind: WagerKind | str,
        event_id: str | None = None,
        *,
        at: float | None = None,
    ) -> Settlement:
        """
        Settle pending wagers of kind (bound to event_id when given) against the winning outcome.
        Winners pay stake * odds * multiplier factor. Non-pending wagers are never touched,
        so a repeated call settles nothing.
        """
        parsed = parse_kind(kind)
        if parsed is None:
            raise ValueError(f"Unknown wager kind: {kind!r}")
        account = self._account
        results: list[WagerResult] = []
        updated: list[Wager] = []
        total = 0.0
        for wager in account.by_kind(parsed):
            if not wager.is_pending or (event_id is not None and wager.event_id != event_id):
                updated.append(wager)
                continue
            won = wager.outcome_id == winning_outcome_id
            payout = wager.stake * wager.odds * wager.multiplier_factor if won else 0.0
            total += payout
            results.append(WagerResult(wager.wager_id, wager.outcome_id, won, payout))
            updated.append(
                wager.model_copy(
                    update={
                        "status": WagerStatus.WON if won else WagerStatus.LOST,
                        "payout": payout,
                        "settled_at": at,
                    }
                )
            )
        if results:
            self._account = account.with_wagers(parsed, tuple(updated), balance=account.balance + total)
            log.info(
                "wagers_settled",
                kind=parsed.value,
                event_id=event_id,
                winning_outcome_id=winning_outcome_id,
                settled=len(results),
                total_payout=total,
            )
        return Settlement(
            winning_outcome_id=winning_outcome_id,
            kind=parsed,
            event_id=event_id,
            total_payout=total,
            settled_count=len(results),
            results=tuple(results),
        )

    def pending_wagers(
        self, kind: WagerKind | str | None = None, event_id: str | None = None
    ) -> list[Wager]:
        kinds = list(WagerKind) if kind is None else [parse_kind(kind)]
        return [
            w
            for k in kinds
            if k is not None
            for w in self._account.by_kind(k)
            if w.is_pending and (event_id is None or w.event_id == event_id)
        ]

    def total_staked(self) -> float:
        return sum(w.stake for w in self._account.all_wagers() if w.status is not WagerStatus.CANCELLED)

    def summary(self) -> list[dict[str, Any]]:
        """Per-wager rows for the end-of-match summary."""
        return [
            {
                "wager_id": w.wager_id,
                "kind": w.kind.value,
                "outcome_id": w.outcome_id,
                "stake": w.stake,
                "odds": w.odds,
                "status": w.status.value,
                "multiplier_applied": w.multiplier_applied,
                "payout": w.payout,
            }
            for w in self._account.all_wagers()
        ]
