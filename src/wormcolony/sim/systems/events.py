from __future__ import annotations

import logging
from typing import Callable, List

from ..core.config import EventLogConfig
from ..types.events import EventKind, EventLogEntry, SimEvent

logger = logging.getLogger(__name__)

EventListener = Callable[[SimEvent], None]


class EventBus:
    """Synchronous notification channel for simulation events.

    Listeners run inside the step that produced the event, so they observe
    the state exactly as it was when the change happened. A listener must
    not mutate the simulation.
    """

    def __init__(self) -> None:
        self._listeners: List[EventListener] = []
        self.tick = 0
        self.sim_time = 0.0

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, kind: EventKind, message: str) -> SimEvent:
        event = SimEvent(kind=kind, message=message, tick=self.tick, sim_time=self.sim_time)
        logger.info("%s: %s", kind.value, message)
        for listener in list(self._listeners):
            listener(event)
        return event


class EventLog:
    """Bounded, newest-first feed of events for display."""

    def __init__(self, config: EventLogConfig | None = None):
        self._config = config or EventLogConfig()
        self._entries: List[EventLogEntry] = []

    def __call__(self, event: SimEvent) -> None:
        self.record(event)

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, event: SimEvent) -> EventLogEntry:
        newest = self._entries[0] if self._entries else None
        if (
            newest is not None
            and newest.kind == event.kind
            and newest.message == event.message
            and event.sim_time - newest.sim_time < self._config.merge_window_seconds
        ):
            newest.count += 1
            newest.sim_time = event.sim_time
            return newest
        entry = EventLogEntry(kind=event.kind, message=event.message, sim_time=event.sim_time)
        self._entries.insert(0, entry)
        del self._entries[self._config.capacity :]
        return entry

    def entries(self, kind: EventKind | None = None) -> List[EventLogEntry]:
        if kind is None:
            return list(self._entries)
        return [entry for entry in self._entries if entry.kind == kind]

    def clear(self) -> None:
        self._entries.clear()
