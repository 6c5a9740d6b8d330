"""Event dispatcher - walks the timeline as the match clock advances, mutating score, odds, feed and wagers."""

from __future__ import annotations

import math
import random
from dataclasses import replace
from typing import Any, Callable, Iterable

import structlog
from pydantic import ValidationError

from matchsim.betting.ledger import WagerLedger
from matchsim.engine.notifications import (
    BettingOpportunityOpened,
    CommentaryPosted,
    GoalScored,
    MatchEnded,
    MultiplierAwarded,
    Notification,
    PauseRequested,
    WagerResolved,
)
from matchsim.engine.odds import Odds, OddsModel
from matchsim.engine.resolution import (
    RESOLUTION_OFFSET,
    ResolutionFailure,
    ResolutionFailureCode,
    ResolutionResult,
    pick_outcome,
    resolution_event_for,
)
from matchsim.engine.state import FeedEntry, MatchState
from matchsim.models.event import (
    BetChoice,
    CommentaryPayload,
    EventKind,
    GoalPayload,
    MatchEvent,
    OpportunityPayload,
    ResolutionPayload,
    Team,
)
from matchsim.models.wager import WagerKind
from matchsim.timeline.store import Timeline
from matchsim.timeline.templates import bet_type_label

log = structlog.get_logger(__name__)

DEFAULT_OPENING_ODDS = Odds(home=1.85, draw=3.50, away=4.20)

Handler = Callable[[MatchState, MatchEvent], tuple[MatchState, list[Notification]]]


class EventDispatcher:
    """
    Single owner of MatchState for one match. Driven by advance_to(minute) from the clock;
    delegates settlement to the WagerLedger. All randomness comes from the injected rng.
    """

    def __init__(
        self,
        events: Iterable[MatchEvent] | Timeline,
        ledger: WagerLedger,
        *,
        odds_model: OddsModel | None = None,
        resolution_offset: float = RESOLUTION_OFFSET,
        feed_size: int = 50,
        pause_timeout_ms: int = 10_000,
        multiplier_award_chance: float = 0.8,
        classic_mode: bool = False,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.timeline = events if isinstance(events, Timeline) else Timeline(events)
        self.ledger = ledger
        self.odds_model = odds_model or OddsModel(DEFAULT_OPENING_ODDS)
        self.resolution_offset = resolution_offset
        self.feed_size = feed_size
        self.pause_timeout_ms = pause_timeout_ms
        self.multiplier_award_chance = multiplier_award_chance
        self.classic_mode = classic_mode
        self.rng = rng or random.Random(seed)
        self._state = MatchState(odds=self.odds_model.price(0, 0))
        # opportunity id -> resolution event id
        self._scheduled: dict[str, str] = {}
        self._settled_count = 0
        self._total_payout = 0.0
        self._handlers: dict[EventKind, Handler] = {
            EventKind.GOAL: self._on_goal,
            EventKind.BETTING_OPPORTUNITY: self._on_opportunity,
            EventKind.COMMENTARY: self._on_commentary,
            EventKind.RESOLUTION: self._on_resolution,
        }
        missing = set(EventKind) - set(self._handlers)
        if missing:
            raise RuntimeError(f"no handler for event kinds: {sorted(k.value for k in missing)}")

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def cursor(self) -> int:
        return self.timeline.cursor

    # --- clock interface ---

    def advance_to(self, minute: float) -> list[Notification]:
        """Process every unprocessed event with time <= minute, in timeline order."""
        if not self._state.active:
            log.debug("advance_ignored_match_over", minute=minute)
            return []
        notifications: list[Notification] = []
        while True:
            event = self.timeline.next_due(minute)
            if event is None:
                break
            notifications.extend(self._dispatch(event))
        self._state = replace(
            self._state,
            clock_time=max(self._state.clock_time, minute),
            cursor=self.timeline.cursor,
        )
        return notifications

    def end_match(self) -> list[Notification]:
        """
        Full time: settle resolutions still scheduled past the final minute, refund opportunity
        wagers left pending, then settle continuous wagers on the final outcome.
        Further advance_to calls do nothing.
        """
        if not self._state.active:
            return []
        notifications: list[Notification] = []
        while True:
            event = self.timeline.next_due(math.inf)
            if event is None:
                break
            if event.kind is EventKind.RESOLUTION:
                notifications.extend(self._dispatch(event))
            else:
                log.warning("event_after_full_time_skipped", event_id=event.event_id, time=event.time)

        refunded = self._refund_unsettled()
        state = self._state
        outcome = state.final_outcome
        settlement = self.ledger.settle(outcome, WagerKind.CONTINUOUS, at=state.clock_time)
        self._record_settlement(settlement.settled_count, settlement.total_payout)
        entry = FeedEntry(
            time=state.clock_time,
            text="The referee blows the final whistle. Full Time!",
            details={
                "score": [state.home_score, state.away_score],
                "final_outcome": outcome,
                "total_payout": settlement.total_payout,
                "refunded": refunded,
            },
        )
        self._state = replace(state.with_feed(entry, self.feed_size), active=False, cursor=self.timeline.cursor)
        log.info(
            "match_ended",
            home_score=state.home_score,
            away_score=state.away_score,
            final_outcome=outcome,
            continuous_settled=settlement.settled_count,
            total_payout=settlement.total_payout,
        )
        notifications.append(
            MatchEnded(
                time=state.clock_time,
                home_score=state.home_score,
                away_score=state.away_score,
                final_outcome=outcome,
                settlement=settlement,
                refunded=refunded,
            )
        )
        return notifications

    def _refund_unsettled(self) -> float:
        """Opportunity wagers no resolution will ever settle get their stake back."""
        refunded = 0.0
        for wager in self.ledger.pending_wagers(WagerKind.OPPORTUNITY):
            refund = self.ledger.cancel_wager(wager.wager_id)
            if isinstance(refund, float):
                refunded += refund
                log.warning("wager_refunded_at_full_time", wager_id=wager.wager_id, event_id=wager.event_id)
        return refunded

    # --- dispatch ---

    def _dispatch(self, event: MatchEvent) -> list[Notification]:
        """Run the kind handler; a malformed or failing event is logged and skipped."""
        handler = self._handlers[event.kind]
        try:
            state, notifications = handler(self._state, event)
        except ValidationError as e:
            log.warning(
                "event_malformed",
                event_id=event.event_id,
                kind=event.kind.value,
                errors=[err.get("msg") for err in e.errors()],
            )
            return []
        except Exception:
            log.exception("event_processing_failed", event_id=event.event_id, kind=event.kind.value)
            return []
        self._state = replace(state, cursor=self.timeline.cursor)
        return notifications

    def _on_goal(self, state: MatchState, event: MatchEvent) -> tuple[MatchState, list[Notification]]:
        goal = GoalPayload.model_validate(event.payload)
        previous_score = state.score
        previous_odds = state.odds
        home, away = previous_score
        if goal.team is Team.HOME:
            home += 1
        else:
            away += 1
        odds = self.odds_model.price(home, away)
        entry = FeedEntry(
            time=event.time,
            text=event.description,
            event_id=event.event_id,
            kind=event.kind,
            details={
                "team": goal.team.value,
                "scorer": goal.scorer,
                "goal_type": goal.goal_type,
                "previous_score": list(previous_score),
                "score": [home, away],
                "previous_odds": previous_odds.as_dict(),
                "odds": odds.as_dict(),
            },
        )
        new_state = replace(state, home_score=home, away_score=away, odds=odds).with_feed(entry, self.feed_size)
        log.info("goal_scored", event_id=event.event_id, time=event.time, team=goal.team.value, score=f"{home}-{away}")
        return new_state, [
            GoalScored(
                event_id=event.event_id,
                time=event.time,
                team=goal.team,
                scorer=goal.scorer,
                goal_type=goal.goal_type,
                previous_score=previous_score,
                score=(home, away),
                previous_odds=previous_odds,
                odds=odds,
            )
        ]

    def _on_opportunity(self, state: MatchState, event: MatchEvent) -> tuple[MatchState, list[Notification]]:
        opportunity = OpportunityPayload.model_validate(event.payload)
        if event.resolved:
            # Forced before the clock reached it: no betting window, no second resolution.
            entry = FeedEntry(
                time=event.time,
                text=event.description,
                event_id=event.event_id,
                kind=event.kind,
                details={"bet_type": opportunity.bet_type, "winning_outcome_id": event.winning_outcome_id},
            )
            log.info("betting_opportunity_already_resolved", event_id=event.event_id, time=event.time)
            return state.with_feed(entry, self.feed_size), []
        resolution = resolution_event_for(event, opportunity.bet_type, self.resolution_offset)
        self.timeline.insert(resolution)
        self._scheduled[event.event_id] = resolution.event_id
        entry = FeedEntry(
            time=event.time,
            text=event.description,
            event_id=event.event_id,
            kind=event.kind,
            betting_opportunity=True,
            details={
                "bet_type": opportunity.bet_type,
                "choices": [c.model_dump() for c in opportunity.choices],
                "resolves_at": resolution.time,
            },
        )
        log.info(
            "betting_opportunity_opened",
            event_id=event.event_id,
            time=event.time,
            bet_type=opportunity.bet_type,
            resolves_at=resolution.time,
        )
        return state.with_feed(entry, self.feed_size), [
            PauseRequested(
                event_id=event.event_id,
                reason=f"betting_opportunity:{opportunity.bet_type}",
                suggested_timeout_ms=self.pause_timeout_ms,
            ),
            BettingOpportunityOpened(
                event_id=event.event_id,
                time=event.time,
                description=event.description,
                bet_type=opportunity.bet_type,
                choices=tuple(opportunity.choices),
                resolves_at=resolution.time,
            ),
        ]

    def _on_commentary(self, state: MatchState, event: MatchEvent) -> tuple[MatchState, list[Notification]]:
        commentary = CommentaryPayload.model_validate(event.payload)
        entry = FeedEntry(
            time=event.time,
            text=event.description,
            event_id=event.event_id,
            kind=event.kind,
            details={"category": commentary.category, "intensity": commentary.intensity},
        )
        return state.with_feed(entry, self.feed_size), [
            CommentaryPosted(
                event_id=event.event_id,
                time=event.time,
                description=event.description,
                category=commentary.category,
                intensity=commentary.intensity,
            )
        ]

    def _on_resolution(self, state: MatchState, event: MatchEvent) -> tuple[MatchState, list[Notification]]:
        payload = ResolutionPayload.model_validate(event.payload)
        original = self.timeline.get(payload.original_event_id)
        if original is None or original.kind is not EventKind.BETTING_OPPORTUNITY:
            log.warning("resolution_orphaned", event_id=event.event_id, original_event_id=payload.original_event_id)
            return state, []
        if original.resolved:
            # Already settled through force_resolve; only record the chosen outcome.
            self._mark_resolution(event, original.winning_outcome_id or "")
            log.info("resolution_already_settled", event_id=event.event_id, original_event_id=original.event_id)
            return state, []
        opportunity = OpportunityPayload.model_validate(original.payload)
        choice = pick_outcome(self.rng, opportunity)
        return self._resolve(state, original, opportunity, choice, at=event.time, resolution_event=event)

    # --- resolution / settlement ---

    def _resolve(
        self,
        state: MatchState,
        original: MatchEvent,
        opportunity: OpportunityPayload,
        choice: BetChoice,
        *,
        at: float,
        resolution_event: MatchEvent | None = None,
        forced: bool = False,
    ) -> tuple[MatchState, list[Notification]]:
        settlement = self.ledger.settle(choice.outcome_id, WagerKind.OPPORTUNITY, original.event_id, at=at)
        self._record_settlement(settlement.settled_count, settlement.total_payout)
        self.timeline.replace(
            original.model_copy(update={"resolved": True, "winning_outcome_id": choice.outcome_id, "forced": forced})
        )
        if resolution_event is not None:
            self._mark_resolution(resolution_event, choice.outcome_id)

        label = bet_type_label(opportunity.bet_type)
        entry = FeedEntry(
            time=at,
            text=f"✅ {label}: {choice.description}",
            event_id=original.event_id,
            kind=EventKind.RESOLUTION,
            details={
                "winning_outcome_id": choice.outcome_id,
                "settled": settlement.settled_count,
                "won": settlement.won_count,
                "total_payout": settlement.total_payout,
                "forced": forced,
            },
        )
        notifications: list[Notification] = [
            WagerResolved(
                event_id=original.event_id,
                time=at,
                bet_type=opportunity.bet_type,
                winning_outcome_id=choice.outcome_id,
                winning_description=choice.description,
                settlement=settlement,
                forced=forced,
            )
        ]
        if settlement.won_count and self._maybe_award_multiplier():
            notifications.append(MultiplierAwarded(time=at, event_id=original.event_id))
        log.info(
            "opportunity_resolved",
            event_id=original.event_id,
            winning_outcome_id=choice.outcome_id,
            settled=settlement.settled_count,
            total_payout=settlement.total_payout,
            forced=forced,
        )
        return state.with_feed(entry, self.feed_size), notifications

    def _mark_resolution(self, event: MatchEvent, winning_outcome_id: str) -> None:
        payload = dict(event.payload, resolved=True, winning_outcome_id=winning_outcome_id)
        self.timeline.replace(
            event.model_copy(update={"resolved": True, "winning_outcome_id": winning_outcome_id, "payload": payload})
        )

    def _maybe_award_multiplier(self) -> bool:
        if self.classic_mode or self.ledger.multiplier_tokens:
            return False
        if self.rng.random() >= self.multiplier_award_chance:
            return False
        return self.ledger.award_multiplier()

    def _record_settlement(self, count: int, payout: float) -> None:
        self._settled_count += count
        self._total_payout += payout

    # --- administrative / test surface ---

    def force_resolve(self, event_id: str, outcome_id: str | None = None) -> ResolutionResult | ResolutionFailure:
        """Resolve an opportunity now, optionally pinning the outcome. A second call fails."""
        event = self.timeline.get(event_id)
        if event is None:
            return ResolutionFailure(event_id, ResolutionFailureCode.NOT_FOUND, f"No event {event_id}")
        if event.kind is not EventKind.BETTING_OPPORTUNITY:
            return ResolutionFailure(
                event_id, ResolutionFailureCode.NOT_AN_OPPORTUNITY, f"{event_id} is a {event.kind.value} event"
            )
        if event.resolved:
            return ResolutionFailure(event_id, ResolutionFailureCode.ALREADY_RESOLVED, f"{event_id} already resolved")
        try:
            opportunity = OpportunityPayload.model_validate(event.payload)
        except ValidationError:
            return ResolutionFailure(event_id, ResolutionFailureCode.MALFORMED, f"{event_id} has a malformed payload")
        if outcome_id is None:
            choice = pick_outcome(self.rng, opportunity)
        else:
            choice = opportunity.choice(outcome_id)
            if choice is None:
                return ResolutionFailure(
                    event_id, ResolutionFailureCode.UNKNOWN_OUTCOME, f"{outcome_id!r} is not a choice of {event_id}"
                )
        state, notifications = self._resolve(
            self._state, event, opportunity, choice, at=self._state.clock_time, forced=True
        )
        self._state = state
        return ResolutionResult(
            event_id=event_id,
            winning_outcome_id=choice.outcome_id,
            settlement=notifications[0].settlement,
            notifications=tuple(notifications),
        )

    def get_events_by_kind(self, kind: EventKind | str) -> list[MatchEvent]:
        return self.timeline.by_kind(EventKind(kind))

    def get_pending_resolutions(self) -> list[MatchEvent]:
        """Scheduled Resolution events not yet reached whose opportunity is still open."""
        pending = []
        for event in self.timeline.pending():
            if event.kind is not EventKind.RESOLUTION:
                continue
            original = self.timeline.get(event.payload.get("original_event_id", ""))
            if original is not None and not original.resolved:
                pending.append(event)
        return pending

    def get_resolution_statistics(self) -> dict[str, Any]:
        opportunities = self.timeline.by_kind(EventKind.BETTING_OPPORTUNITY)
        resolved = [e for e in opportunities if e.resolved]
        return {
            "opportunities": len(opportunities),
            "opportunities_dispatched": sum(1 for e in opportunities if self.timeline.is_processed(e.event_id)),
            "resolutions_scheduled": len(self._scheduled),
            "resolved": len(resolved),
            "forced": sum(1 for e in resolved if e.forced),
            "pending": len(self.get_pending_resolutions()),
            "wagers_settled": self._settled_count,
            "total_payout": self._total_payout,
            # percent of opportunities resolved, one decimal
            "resolution_rate": round(len(resolved) / len(opportunities) * 100, 1) if opportunities else 0.0,
        }
