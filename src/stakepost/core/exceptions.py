# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for stakepost.

Every rejected ledger operation raises a ``LedgerError`` carrying an
``ErrorKind``. Rejections are deterministic precondition failures against the
current state; nothing here is retried internally.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class StakepostException(Exception):  # noqa: N818
    """Base exception for all stakepost errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(StakepostException):
    """Exception for malformed input.

    Raised when:
    - An address is empty or not a string
    - An amount is negative or not an integer
    - An id is not an integer
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ConfigException(StakepostException):
    """Exception for configuration errors.

    Raised when:
    - Ledger rules carry non-positive prices or windows
    - The human registry file cannot be read
    """

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []


class ErrorKind(StrEnum):
    """Precondition violations reported by ledger operations."""

    # Account registry
    ALREADY_VERIFIED = "already_verified"
    NOT_HUMAN_VERIFIED = "not_human_verified"
    ACCOUNT_ALREADY_ACTIVE = "account_already_active"
    INVALID_DEPOSIT = "invalid_deposit"
    ACCOUNT_NOT_ACTIVE = "account_not_active"
    REPORT_IN_PROGRESS = "report_in_progress"
    POST_COOLDOWN_ACTIVE = "post_cooldown_active"

    # Post store
    EMPTY_CONTENT = "empty_content"
    INVALID_POST_ID = "invalid_post_id"
    SELF_TIP = "self_tip"
    POST_DISABLED = "post_disabled"
    AUTHOR_NOT_ACTIVE = "author_not_active"
    INVALID_TIP_AMOUNT = "invalid_tip_amount"

    # Report / vote engine
    SELF_REPORT = "self_report"
    REPORTER_ALREADY_INVOLVED = "reporter_already_involved"
    TARGET_ALREADY_INVOLVED = "target_already_involved"
    INVALID_REPORT_ID = "invalid_report_id"
    VOTING_ENDED = "voting_ended"
    SELF_INVOLVED = "self_involved"
    ALREADY_VOTED = "already_voted"
    VOTING_NOT_ENDED = "voting_not_ended"
    REVEAL_WINDOW_EXPIRED = "reveal_window_expired"
    ALREADY_RESOLVED = "already_resolved"


class LedgerError(StakepostException):
    """A ledger operation was rejected.

    The operation had no effect: no state change, no transfer, no event.
    """

    def __init__(self, kind: ErrorKind, message: str, **details: Any):
        super().__init__(message, {"kind": kind.value, **details})
        self.kind = kind

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["kind"] = self.kind.value
        return d


class EscrowError(StakepostException):
    """Exception for escrow accounting failures.

    Raised when:
    - A payout would take the pool below zero
    - A payout sink fails to deliver a transfer
    """

    pass


class ReentrancyError(StakepostException):
    """A ledger operation was invoked from inside another operation."""

    def __init__(self, operation: str):
        super().__init__(
            f"Re-entrant call to {operation} while a ledger transaction is in progress",
            {"operation": operation},
        )
        self.operation = operation


class StorageError(StakepostException):
    """Exception for snapshot persistence errors.

    Raised when:
    - A snapshot file cannot be read or written
    - A snapshot fails schema validation
    - A snapshot was written by an unsupported format version
    """

    def __init__(self, message: str, path: str | None = None):
        details = {}
        if path:
            details["path"] = path
        super().__init__(message, details)
        self.path = path


class ClockError(StakepostException):
    """Exception for a clock reading earlier than one the ledger already saw.

    Raised when:
    - ``--at`` names a time before the snapshot's last observed time
    - The system clock has stepped backwards since the last command
    """

    def __init__(self, now: int, not_before: int):
        super().__init__(
            f"Clock reads {now}, earlier than already observed time {not_before}",
            {"now": now, "not_before": not_before},
        )
        self.now = now
        self.not_before = not_before
