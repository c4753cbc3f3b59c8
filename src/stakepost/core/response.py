# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Standard response envelope for stakepost command results.

The CLI wraps every ledger call in a ``StakepostResponse`` so output always
has the same ``{success, data, error, kind}`` shape.

Usage::

    from stakepost.core.response import ok, err, from_exception

    return ok(data=post.to_dict())
    return from_exception(ledger_error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .exceptions import LedgerError, StakepostException


@dataclass
class StakepostResponse:
    """Unified result envelope.

    Attributes:
        success: True when the operation completed without error.
        data:    Payload returned on success. None for void operations.
        error:   Human-readable error message on failure. None on success.
        kind:    Machine-readable error kind on failure, when there is one.
    """

    success: bool
    data: Any = None
    error: str | None = None
    kind: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict, keeping only keys that carry information."""
        d: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            d["data"] = self.data
        if self.error:
            d["error"] = self.error
        if self.kind:
            d["kind"] = self.kind
        return d


def ok(data: Any = None) -> StakepostResponse:
    return StakepostResponse(success=True, data=data)


def err(error: str, kind: str | None = None) -> StakepostResponse:
    return StakepostResponse(success=False, error=error, kind=kind)


def from_exception(exc: StakepostException) -> StakepostResponse:
    """Build a failure envelope from a stakepost exception."""
    if isinstance(exc, LedgerError):
        return err(exc.message, kind=exc.kind.value)
    return err(exc.message, kind=exc.__class__.__name__)
