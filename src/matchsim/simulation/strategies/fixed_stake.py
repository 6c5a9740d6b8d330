"""Fixed-stake bettor: backs one full-match outcome and takes a random side of every opportunity."""

from __future__ import annotations

import random

import structlog

from matchsim.betting.ledger import LedgerError, WagerLedger
from matchsim.engine.notifications import BettingOpportunityOpened, MultiplierAwarded, Notification
from matchsim.models.wager import WagerKind
from matchsim.simulation.bettor import Bettor, MatchView

log = structlog.get_logger(__name__)


class FixedStakeBettor(Bettor):
    """Same stake on everything; spends multiplier tokens on its full-match wager."""

    def __init__(
        self,
        stake: float = 10.0,
        back: str = "home",
        rng: random.Random | None = None,
        use_multiplier: bool = True,
    ) -> None:
        if back not in ("home", "draw", "away"):
            raise ValueError(f"back must be home, draw or away, got {back!r}")
        self.stake = stake
        self.back = back
        self.rng = rng or random.Random()
        self.use_multiplier = use_multiplier
        self.rejections: list[LedgerError] = []
        self._full_match_wager_id: str | None = None

    def on_kickoff(self, ledger: WagerLedger, match: MatchView) -> None:
        result = ledger.place_wager(
            WagerKind.CONTINUOUS, self.back, self.stake, match.odds.for_outcome(self.back), placed_at=match.clock_time
        )
        if isinstance(result, LedgerError):
            self.rejections.append(result)
            return
        self._full_match_wager_id = result.wager_id

    def on_opportunity(self, ledger: WagerLedger, opened: BettingOpportunityOpened) -> None:
        choice = self.rng.choice(opened.choices)
        result = ledger.place_wager(
            WagerKind.OPPORTUNITY,
            choice.outcome_id,
            self.stake,
            choice.odds,
            event_id=opened.event_id,
            placed_at=opened.time,
        )
        if isinstance(result, LedgerError):
            log.debug("bettor_wager_rejected", code=result.code.value, event_id=opened.event_id)
            self.rejections.append(result)

    def on_notification(self, ledger: WagerLedger, notification: Notification) -> None:
        if not isinstance(notification, MultiplierAwarded) or not self.use_multiplier:
            return
        if self._full_match_wager_id is None:
            return
        result = ledger.apply_multiplier(self._full_match_wager_id)
        if isinstance(result, LedgerError):
            self.rejections.append(result)
