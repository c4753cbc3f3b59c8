"""The atomic unit every ledger operation runs in.

A ``Transaction`` pins one reading of the clock, gives the operation the
state it may mutate, and buffers the events it produces. Operations check
every precondition before their first mutation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config import LedgerRules
from .events import EventKind, LedgerEvent
from .exceptions import ValidationException
from .models import LedgerState


@dataclass
class Transaction:
    state: LedgerState
    rules: LedgerRules
    now: int
    operation: str = ""
    events: list[LedgerEvent] = field(default_factory=list)

    def emit(self, kind: EventKind, **data: Any) -> LedgerEvent:
        event = LedgerEvent(kind=kind, timestamp=self.now, data=data)
        self.events.append(event)
        return event


def require_address(value: Any, field_name: str = "address") -> str:
    """Validate an address argument. Addresses are opaque, non-empty strings."""
    if not isinstance(value, str) or not value:
        raise ValidationException("Address must be a non-empty string", field=field_name, value=value)
    return value


def require_index(value: Any, field_name: str) -> int:
    """Validate an integer id argument. Range checks belong to the operation."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationException(f"{field_name} must be an integer", field=field_name, value=value)
    return value


def require_amount(value: Any, field_name: str = "amount") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationException(f"{field_name} must be an integer", field=field_name, value=value)
    if value < 0:
        raise ValidationException(f"{field_name} must not be negative", field=field_name, value=value)
    return value
