"""Bettor protocol - automated player driving the ledger during a headless match."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from matchsim.betting.ledger import WagerLedger
from matchsim.engine.notifications import BettingOpportunityOpened, Notification
from matchsim.engine.odds import Odds


class MatchView(Protocol):
    """Minimal match state passed to bettors."""

    @property
    def clock_time(self) -> float: ...
    @property
    def home_score(self) -> int: ...
    @property
    def away_score(self) -> int: ...
    @property
    def odds(self) -> Odds: ...


class Bettor(ABC):
    """Base for automated bettors. Called by the session in place of the betting UI."""

    @abstractmethod
    def on_kickoff(self, ledger: WagerLedger, match: MatchView) -> None:
        """Called once before the first tick (full-match bets)."""
        ...

    @abstractmethod
    def on_opportunity(self, ledger: WagerLedger, opened: BettingOpportunityOpened) -> None:
        """Called while the clock is paused for a betting window."""
        ...

    def on_notification(self, ledger: WagerLedger, notification: Notification) -> None:
        """Called for every other notification. Optional."""
        pass
