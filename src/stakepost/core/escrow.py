"""Value escrow: the contract-held pool and the transfers out of it.

Pure accounting, no policy. Deposits land in ``pool``; every outbound
payment is booked immediately (pool debited, payee credited) and queued as a
``Transfer``. Queued transfers are handed to a ``PayoutSink`` only after the
owning operation has finalized its internal effects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from .exceptions import EscrowError, ValidationException

logger = logging.getLogger(__name__)


class TransferReason(StrEnum):
    REFUND = "refund"
    TIP = "tip"
    FORFEIT = "forfeit"


@dataclass(frozen=True)
class Transfer:
    """An outbound movement of value to a participant."""

    payee: str
    amount: int
    reason: TransferReason
    payer: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "payee": self.payee,
            "amount": self.amount,
            "reason": self.reason.value,
            "payer": self.payer,
        }


@runtime_checkable
class PayoutSink(Protocol):
    """Delivers transfers to their payees outside the ledger.

    ``deliver`` must either complete or raise; a raised exception rolls the
    whole operation back.
    """

    def deliver(self, transfer: Transfer) -> None: ...


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationException("Amount must be an integer", field="amount", value=amount)
    if amount < 0:
        raise ValidationException("Amount must not be negative", field="amount", value=amount)


@dataclass
class ValueEscrow:
    """Holds the pool and the per-address payment totals."""

    pool: int = 0
    contributed: dict[str, int] = field(default_factory=dict)
    credited: dict[str, int] = field(default_factory=dict)
    pending: list[Transfer] = field(default_factory=list)

    def receive(self, payer: str, amount: int) -> None:
        """Take ``amount`` from ``payer`` into the pool."""
        _check_amount(amount)
        self.pool += amount
        self.contributed[payer] = self.contributed.get(payer, 0) + amount

    def pay(
        self,
        payee: str,
        amount: int,
        reason: TransferReason,
        payer: str | None = None,
    ) -> Transfer:
        """Pay ``amount`` out of the pool to ``payee``.

        Raises:
            EscrowError: If the pool does not hold ``amount``.
        """
        _check_amount(amount)
        if amount > self.pool:
            raise EscrowError(
                f"Pool underflow: cannot pay {amount} from pool of {self.pool}",
                {"payee": payee, "amount": amount, "pool": self.pool},
            )
        self.pool -= amount
        self.credited[payee] = self.credited.get(payee, 0) + amount
        transfer = Transfer(payee=payee, amount=amount, reason=reason, payer=payer)
        self.pending.append(transfer)
        return transfer

    def route(self, payer: str, payee: str, amount: int, reason: TransferReason) -> Transfer:
        """Pass ``amount`` straight from ``payer`` to ``payee`` through the pool."""
        self.receive(payer, amount)
        return self.pay(payee, amount, reason, payer=payer)

    def take_pending(self) -> list[Transfer]:
        """Remove and return the queued outbound transfers."""
        pending, self.pending = self.pending, []
        return pending

    def credited_to(self, address: str) -> int:
        return self.credited.get(address, 0)

    def contributed_by(self, address: str) -> int:
        return self.contributed.get(address, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pool": self.pool,
            "contributed": dict(self.contributed),
            "credited": dict(self.credited),
        }


class RecordingSink:
    """Payout sink that keeps every delivered transfer in order."""

    def __init__(self) -> None:
        self.delivered: list[Transfer] = []

    def deliver(self, transfer: Transfer) -> None:
        self.delivered.append(transfer)
        logger.debug("Delivered %s of %d to %s", transfer.reason.value, transfer.amount, transfer.payee)

    def total_for(self, payee: str) -> int:
        return sum(t.amount for t in self.delivered if t.payee == payee)
