"""Observable ledger facts.

Each successful state-changing operation produces exactly one event. Events
are buffered while the operation runs, numbered while the ledger lock is
still held (so sequence order is commit order), and handed to listeners once
the lock is released. A rejected operation never emits anything.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class EventKind(StrEnum):
    ACCOUNT_VERIFIED = "account_verified"
    ACCOUNT_ACTIVATED = "account_activated"
    ACCOUNT_DEACTIVATED = "account_deactivated"
    POST_CREATED = "post_created"
    POST_TIPPED = "post_tipped"
    REPORTED = "reported"
    VOTED = "voted"
    REPORT_RESOLVED = "report_resolved"


@dataclass(frozen=True)
class LedgerEvent:
    """A committed fact about the ledger."""

    kind: EventKind
    timestamp: int
    data: dict[str, Any] = field(default_factory=dict)
    seq: int = -1

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def to_dict(self) -> dict[str, Any]:
        return {
            "seq": self.seq,
            "kind": self.kind.value,
            "timestamp": self.timestamp,
            "data": dict(self.data),
        }


EventListener = Callable[[LedgerEvent], None]


class EventLog:
    """Ordered history of committed events with subscriber fan-out."""

    def __init__(self, next_seq: int = 0):
        self._events: list[LedgerEvent] = []
        self._listeners: list[EventListener] = []
        self._next_seq = next_seq
        self._lock = threading.Lock()

    @property
    def next_seq(self) -> int:
        return self._next_seq

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register ``listener`` and return a function that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def record(self, event: LedgerEvent) -> LedgerEvent:
        """Number ``event`` and append it to the history without notifying anyone."""
        with self._lock:
            numbered = LedgerEvent(kind=event.kind, timestamp=event.timestamp, data=event.data, seq=self._next_seq)
            self._next_seq += 1
            self._events.append(numbered)
            return numbered

    def notify(self, event: LedgerEvent) -> None:
        """Hand a recorded event to every listener.

        A failing listener is logged and skipped; the event stays committed.
        """
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener failed for %s #%d", event.kind.value, event.seq)

    def publish(self, event: LedgerEvent) -> LedgerEvent:
        """Record ``event`` and notify listeners."""
        numbered = self.record(event)
        self.notify(numbered)
        return numbered

    def events(self, kind: EventKind | None = None) -> list[LedgerEvent]:
        with self._lock:
            if kind is None:
                return list(self._events)
            return [e for e in self._events if e.kind == kind]

    def last(self) -> LedgerEvent | None:
        with self._lock:
            return self._events[-1] if self._events else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
