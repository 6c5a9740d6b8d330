"""Match session: wires settings, timeline, ledger and dispatcher, and runs a headless clock."""

from __future__ import annotations

import random
import uuid

import structlog

from matchsim.betting.ledger import WagerLedger
from matchsim.config.settings import Settings
from matchsim.engine.dispatcher import EventDispatcher
from matchsim.engine.notifications import BettingOpportunityOpened, Notification, PauseRequested
from matchsim.engine.odds import Odds, OddsModel
from matchsim.models.wager import WagerStatus
from matchsim.simulation.bettor import Bettor
from matchsim.simulation.result import MatchResult
from matchsim.timeline.generator import SpacingBounds, generate

log = structlog.get_logger(__name__)


def odds_model_from_settings(settings: Settings) -> OddsModel:
    return OddsModel(
        opening=Odds(**settings.opening_odds),
        floor=settings.odds_floor,
        ceiling=settings.odds_ceiling,
        lead_factor=settings.odds_lead_factor,
        trail_factor=settings.odds_trail_factor,
        draw_factor=settings.odds_draw_factor,
    )


class MatchSession:
    """One match: a seeded timeline, a fresh ledger and the dispatcher that owns match state."""

    def __init__(self, settings: Settings, seed: int | None = None, bettor: Bettor | None = None) -> None:
        self.settings = settings
        self.seed = seed
        self.bettor = bettor
        self.rng = random.Random(seed)
        events = generate(
            settings.match_duration,
            settings.distribution,
            SpacingBounds(settings.spacing_min, settings.spacing_max),
            rng=self.rng,
            home_team=settings.home_team,
            away_team=settings.away_team,
        )
        self.ledger = WagerLedger(starting_balance=settings.starting_balance, min_stake=settings.min_stake)
        self.dispatcher = EventDispatcher(
            events,
            self.ledger,
            odds_model=odds_model_from_settings(settings),
            resolution_offset=settings.resolution_offset,
            feed_size=settings.feed_size,
            pause_timeout_ms=settings.betting_timeout_ms,
            multiplier_award_chance=settings.multiplier_award_chance,
            classic_mode=settings.classic_mode,
            rng=self.rng,
        )
        self.pauses = 0

    def tick(self, minute: float) -> list[Notification]:
        """
        Advance the clock to minute one event time at a time, handing notifications to the
        bettor after each, so a betting window always closes before its resolution fires.
        """
        notifications: list[Notification] = []
        timeline = self.dispatcher.timeline
        while self.dispatcher.state.active:
            due = timeline.next_time()
            if due is None or due > minute:
                break
            notifications.extend(self._advance(due))
        notifications.extend(self._advance(minute))
        return notifications

    def _advance(self, minute: float) -> list[Notification]:
        notifications = self.dispatcher.advance_to(minute)
        for note in notifications:
            self._handle(note)
        return notifications

    def _handle(self, note: Notification) -> None:
        if isinstance(note, PauseRequested):
            # Headless pause: the betting window opens and closes within the same tick.
            self.pauses += 1
            log.debug("clock_paused", event_id=note.event_id, reason=note.reason)
            return
        if self.bettor is None:
            return
        if isinstance(note, BettingOpportunityOpened):
            self.bettor.on_opportunity(self.ledger, note)
        else:
            self.bettor.on_notification(self.ledger, note)

    def run(self, step: float = 1.0) -> MatchResult:
        """Tick from kick-off to full time in step-minute increments, then end the match."""
        if step <= 0:
            raise ValueError(f"step must be > 0, got {step}")
        if self.bettor is not None:
            self.bettor.on_kickoff(self.ledger, self.dispatcher.state)
        minute = 0.0
        duration = self.settings.match_duration
        while minute < duration:
            minute = min(minute + step, duration)
            self.tick(minute)
        for note in self.dispatcher.end_match():
            self._handle(note)
        return self.result()

    def result(self) -> MatchResult:
        state = self.dispatcher.state
        wagers = self.ledger.account.all_wagers()
        return MatchResult(
            run_id=str(uuid.uuid4())[:8],
            seed=self.seed,
            home_team=self.settings.home_team,
            away_team=self.settings.away_team,
            home_score=state.home_score,
            away_score=state.away_score,
            final_outcome=state.final_outcome,
            starting_balance=self.settings.starting_balance,
            final_balance=self.ledger.balance,
            wagers_placed=len(wagers),
            wagers_won=sum(1 for w in wagers if w.status is WagerStatus.WON),
            events_processed=self.dispatcher.cursor,
            total_staked=self.ledger.total_staked(),
            wagers=self.ledger.summary(),
            feed=[{"time": round(e.time, 2), "text": e.text} for e in state.feed],
            params={
                "duration": self.settings.match_duration,
                "resolution_offset": self.settings.resolution_offset,
                "pauses": self.pauses,
                "bettor": type(self.bettor).__name__ if self.bettor else None,
            },
        )
