"""Index-stable ordered event store - arena of events plus sorted keys and a pending heap."""

from __future__ import annotations

import bisect
import heapq
import itertools
from typing import Iterable, Iterator

from matchsim.models.event import EventKind, MatchEvent

# (time, insertion seq, event_id): equal times keep insertion order
_Key = tuple[float, int, str]


class Timeline:
    """
    Ordered match events. Events are never removed; processing moves them from the
    pending heap to the processed list, so inserting mid-walk cannot disturb the cursor.
    """

    def __init__(self, events: Iterable[MatchEvent] = ()) -> None:
        self._events: dict[str, MatchEvent] = {}
        self._keys: list[_Key] = []
        self._pending: list[_Key] = []
        self._processed: list[str] = []
        self._processed_ids: set[str] = set()
        self._seq = itertools.count()
        for event in events:
            self.insert(event)

    def insert(self, event: MatchEvent) -> None:
        """Insert in sorted position. Raises ValueError on duplicate event_id."""
        if event.event_id in self._events:
            raise ValueError(f"duplicate event id: {event.event_id}")
        key = (event.time, next(self._seq), event.event_id)
        self._events[event.event_id] = event
        bisect.insort(self._keys, key)
        heapq.heappush(self._pending, key)

    def replace(self, event: MatchEvent) -> None:
        """Swap in an updated copy of an existing event (same id, same time)."""
        current = self._events.get(event.event_id)
        if current is None:
            raise KeyError(event.event_id)
        if current.time != event.time:
            raise ValueError(f"cannot move event {event.event_id} from {current.time} to {event.time}")
        self._events[event.event_id] = event

    def next_due(self, until: float) -> MatchEvent | None:
        """Pop the earliest unprocessed event with time <= until, marking it processed."""
        if not self._pending or self._pending[0][0] > until:
            return None
        _, _, event_id = heapq.heappop(self._pending)
        self._processed.append(event_id)
        self._processed_ids.add(event_id)
        return self._events[event_id]

    def next_time(self) -> float | None:
        """Time of the earliest unprocessed event, or None when the walk is done."""
        return self._pending[0][0] if self._pending else None

    def get(self, event_id: str) -> MatchEvent | None:
        return self._events.get(event_id)

    def is_processed(self, event_id: str) -> bool:
        return event_id in self._processed_ids

    @property
    def cursor(self) -> int:
        """Number of events processed so far."""
        return len(self._processed)

    def events(self) -> list[MatchEvent]:
        return [self._events[eid] for _, _, eid in self._keys]

    def pending(self) -> list[MatchEvent]:
        return [self._events[eid] for _, _, eid in sorted(self._pending)]

    def processed(self) -> list[MatchEvent]:
        return [self._events[eid] for eid in self._processed]

    def by_kind(self, kind: EventKind) -> list[MatchEvent]:
        return [e for e in self.events() if e.kind is kind]

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[MatchEvent]:
        return iter(self.events())
