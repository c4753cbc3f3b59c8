"""Tests for stakepost.core.escrow."""

from __future__ import annotations

import pytest

from stakepost.core.escrow import (
    PayoutSink,
    RecordingSink,
    Transfer,
    TransferReason,
    ValueEscrow,
)
from stakepost.core.exceptions import EscrowError, ValidationException


class TestValueEscrow:
    def test_receive(self):
        escrow = ValueEscrow()
        escrow.receive("alice", 100)
        escrow.receive("alice", 50)
        assert escrow.pool == 150
        assert escrow.contributed_by("alice") == 150
        assert escrow.contributed_by("bob") == 0

    def test_pay_books_and_queues(self):
        escrow = ValueEscrow()
        escrow.receive("alice", 100)

        transfer = escrow.pay("bob", 40, TransferReason.REFUND, payer="alice")

        assert escrow.pool == 60
        assert escrow.credited_to("bob") == 40
        assert transfer == Transfer(payee="bob", amount=40, reason=TransferReason.REFUND, payer="alice")
        assert escrow.pending == [transfer]

    def test_pay_underflow(self):
        escrow = ValueEscrow(pool=10)
        with pytest.raises(EscrowError) as exc_info:
            escrow.pay("bob", 11, TransferReason.FORFEIT)
        assert exc_info.value.details["pool"] == 10
        assert escrow.pool == 10
        assert escrow.pending == []

    @pytest.mark.parametrize("amount", [-1, 1.5, "10", True])
    def test_bad_amounts(self, amount):
        escrow = ValueEscrow(pool=100)
        with pytest.raises(ValidationException):
            escrow.receive("alice", amount)
        with pytest.raises(ValidationException):
            escrow.pay("alice", amount, TransferReason.TIP)

    def test_route_leaves_pool_unchanged(self):
        escrow = ValueEscrow(pool=7)
        transfer = escrow.route("fan", "author", 25, TransferReason.TIP)
        assert escrow.pool == 7
        assert escrow.contributed_by("fan") == 25
        assert escrow.credited_to("author") == 25
        assert transfer.payer == "fan"

    def test_take_pending_drains(self):
        escrow = ValueEscrow(pool=10)
        escrow.pay("a", 3, TransferReason.REFUND)
        escrow.pay("b", 4, TransferReason.REFUND)
        assert [t.payee for t in escrow.take_pending()] == ["a", "b"]
        assert escrow.take_pending() == []

    def test_to_dict(self):
        escrow = ValueEscrow()
        escrow.route("fan", "author", 5, TransferReason.TIP)
        assert escrow.to_dict() == {
            "pool": 0,
            "contributed": {"fan": 5},
            "credited": {"author": 5},
        }


class TestTransfer:
    def test_to_dict(self):
        transfer = Transfer(payee="bob", amount=3, reason=TransferReason.FORFEIT, payer="eve")
        assert transfer.to_dict() == {"payee": "bob", "amount": 3, "reason": "forfeit", "payer": "eve"}


class TestRecordingSink:
    def test_is_payout_sink(self):
        assert isinstance(RecordingSink(), PayoutSink)

    def test_records_in_order(self):
        sink = RecordingSink()
        sink.deliver(Transfer("a", 1, TransferReason.TIP))
        sink.deliver(Transfer("b", 2, TransferReason.TIP))
        sink.deliver(Transfer("a", 3, TransferReason.REFUND))
        assert [t.amount for t in sink.delivered] == [1, 2, 3]
        assert sink.total_for("a") == 4
        assert sink.total_for("c") == 0
