"""Tests for stakepost.core.accounts - verification, activation, deactivation.

Tests cover:
- get_verified against the oracle
- Activation price tiers and penalty scaling
- Exact-deposit activation
- Deactivation refunds, beneficiary, involvement lock and post cooldown
"""

from __future__ import annotations

import pytest

from stakepost.core.config import LedgerRules
from stakepost.core.events import EventKind
from stakepost.core.exceptions import ErrorKind, LedgerError, ValidationException
from stakepost.core.ledger import Ledger

PRICE_UNVERIFIED = 10**17
PRICE_VERIFIED = 10**16
CID = "QmPK1s3pNYLi9ERiq3BDxKa4XosgWwFRQUydHUtz4YgpqB"


# ============================================================================
# Verification
# ============================================================================


class TestGetVerified:
    """Tests for get_verified."""

    def test_unregistered_address_rejected(self, ledger):
        with pytest.raises(LedgerError) as exc_info:
            ledger.get_verified("user1")
        assert exc_info.value.kind == ErrorKind.NOT_HUMAN_VERIFIED
        assert ledger.is_verified("user1") is False

    def test_registered_address_verified(self, ledger):
        account = ledger.get_verified("human1")

        assert account.is_verified is True
        assert ledger.is_verified("human1") is True
        event = ledger.events.last()
        assert event.kind == EventKind.ACCOUNT_VERIFIED
        assert event["address"] == "human1"

    def test_cannot_verify_twice(self, ledger):
        ledger.get_verified("human1")
        with pytest.raises(LedgerError) as exc_info:
            ledger.get_verified("human1")
        assert exc_info.value.kind == ErrorKind.ALREADY_VERIFIED
        assert len(ledger.events.events(EventKind.ACCOUNT_VERIFIED)) == 1

    def test_verification_does_not_activate(self, ledger):
        ledger.get_verified("human1")
        assert ledger.has_active_account("human1") is False

    def test_failed_verification_creates_no_account(self, ledger):
        with pytest.raises(LedgerError):
            ledger.get_verified("stranger")
        assert ledger.accounts() == []

    def test_empty_address_rejected(self, ledger):
        with pytest.raises(ValidationException):
            ledger.get_verified("")


# ============================================================================
# Activation price
# ============================================================================


class TestActivationPrice:
    """Tests for activation_price tiers."""

    def test_unverified_price(self, ledger):
        assert ledger.activation_price("user1") == PRICE_UNVERIFIED

    def test_verified_price_is_a_tenth(self, ledger):
        ledger.get_verified("human1")
        assert ledger.activation_price("human1") == PRICE_VERIFIED
        assert ledger.activation_price("human1") * 10 == PRICE_UNVERIFIED

    def test_price_ignores_penalties_by_default(self, ledger, clock, open_report, activate):
        report_id = open_report(author="author", reporter="reporter")
        activate("v1")
        ledger.vote("v1", report_id, True)
        clock.advance(60)
        ledger.get_report_winner("v1", report_id)

        assert ledger.get_account("author").penalty_count == 1
        assert ledger.activation_price("author") == PRICE_UNVERIFIED

    def test_penalty_price_scaling(self, clock, oracle):
        ledger = Ledger(rules=LedgerRules(penalty_price_scaling=True), clock=clock, oracle=oracle)
        for address in ("author", "reporter", "v1"):
            ledger.activate_account(address, ledger.activation_price(address))
        post = ledger.upload_post("author", CID)
        report = ledger.report("reporter", post.id)
        ledger.vote("v1", report.id, True)
        clock.advance(60)
        ledger.get_report_winner("v1", report.id)

        assert ledger.activation_price("author") == 2 * PRICE_UNVERIFIED
        with pytest.raises(LedgerError) as exc_info:
            ledger.activate_account("author", PRICE_UNVERIFIED)
        assert exc_info.value.kind == ErrorKind.INVALID_DEPOSIT
        ledger.activate_account("author", 2 * PRICE_UNVERIFIED)
        assert ledger.has_active_account("author")


# ============================================================================
# Activation
# ============================================================================


class TestActivateAccount:
    """Tests for activate_account."""

    def test_activate_unverified(self, ledger):
        account = ledger.activate_account("user1", PRICE_UNVERIFIED)

        assert account.is_active is True
        assert account.staked_amount == PRICE_UNVERIFIED
        assert ledger.pool_balance() == PRICE_UNVERIFIED
        event = ledger.events.last()
        assert event.kind == EventKind.ACCOUNT_ACTIVATED
        assert event["address"] == "user1"
        assert event["price_paid"] == PRICE_UNVERIFIED

    def test_activate_verified(self, ledger):
        ledger.get_verified("human1")
        account = ledger.activate_account("human1", PRICE_VERIFIED)
        assert account.staked_amount == PRICE_VERIFIED

    @pytest.mark.parametrize("amount", [0, PRICE_VERIFIED, PRICE_UNVERIFIED - 1, PRICE_UNVERIFIED + 1])
    def test_wrong_deposit_rejected(self, ledger, amount):
        with pytest.raises(LedgerError) as exc_info:
            ledger.activate_account("user1", amount)

        assert exc_info.value.kind == ErrorKind.INVALID_DEPOSIT
        assert exc_info.value.details["expected"] == PRICE_UNVERIFIED
        assert ledger.has_active_account("user1") is False
        assert ledger.pool_balance() == 0

    def test_verified_cannot_pay_unverified_price(self, ledger):
        ledger.get_verified("human1")
        with pytest.raises(LedgerError) as exc_info:
            ledger.activate_account("human1", PRICE_UNVERIFIED)
        assert exc_info.value.kind == ErrorKind.INVALID_DEPOSIT

    def test_already_active(self, ledger):
        ledger.activate_account("user1", PRICE_UNVERIFIED)
        with pytest.raises(LedgerError) as exc_info:
            ledger.activate_account("user1", PRICE_UNVERIFIED)
        assert exc_info.value.kind == ErrorKind.ACCOUNT_ALREADY_ACTIVE
        assert ledger.pool_balance() == PRICE_UNVERIFIED

    def test_negative_amount_is_validation_error(self, ledger):
        with pytest.raises(ValidationException):
            ledger.activate_account("user1", -1)


# ============================================================================
# Deactivation
# ============================================================================


class TestDeactivateAccount:
    """Tests for deactivate_account."""

    def test_not_active(self, ledger):
        with pytest.raises(LedgerError) as exc_info:
            ledger.deactivate_account("user3", "user4")
        assert exc_info.value.kind == ErrorKind.ACCOUNT_NOT_ACTIVE

    def test_refund_to_beneficiary(self, ledger, sink):
        ledger.activate_account("user3", PRICE_UNVERIFIED)

        refunded = ledger.deactivate_account("user3", "user4")

        assert refunded == PRICE_UNVERIFIED
        assert ledger.has_active_account("user3") is False
        assert ledger.get_account("user3").staked_amount == 0
        assert ledger.credited_to("user4") == PRICE_UNVERIFIED
        assert sink.total_for("user4") == PRICE_UNVERIFIED
        assert ledger.pool_balance() == 0
        event = ledger.events.last()
        assert event.kind == EventKind.ACCOUNT_DEACTIVATED
        assert event["beneficiary"] == "user4"
        assert event["amount_refunded"] == PRICE_UNVERIFIED

    def test_refund_to_self_by_default(self, ledger):
        ledger.activate_account("user3", PRICE_UNVERIFIED)
        ledger.deactivate_account("user3")
        assert ledger.credited_to("user3") == PRICE_UNVERIFIED

    def test_post_cooldown_blocks_deactivation(self, ledger, clock):
        ledger.activate_account("user2", PRICE_UNVERIFIED)
        ledger.upload_post("user2", CID)

        clock.advance(59)
        with pytest.raises(LedgerError) as exc_info:
            ledger.deactivate_account("user2")
        assert exc_info.value.kind == ErrorKind.POST_COOLDOWN_ACTIVE
        assert exc_info.value.details["seconds_remaining"] == 1

        clock.advance(1)
        assert ledger.deactivate_account("user2") == PRICE_UNVERIFIED

    def test_involved_reporter_and_author_cannot_deactivate(self, ledger, clock, open_report):
        open_report(author="author", reporter="reporter")
        clock.advance(60)

        for address in ("author", "reporter"):
            with pytest.raises(LedgerError) as exc_info:
                ledger.deactivate_account(address)
            assert exc_info.value.kind == ErrorKind.REPORT_IN_PROGRESS

    def test_lock_clears_when_report_lapses(self, ledger, clock, open_report):
        open_report(author="author", reporter="reporter")
        clock.advance(119)
        with pytest.raises(LedgerError):
            ledger.deactivate_account("reporter")

        clock.advance(1)
        assert ledger.deactivate_account("reporter") == PRICE_UNVERIFIED
        assert ledger.deactivate_account("author") == PRICE_UNVERIFIED

    def test_reactivation_after_deactivation(self, ledger):
        ledger.activate_account("user1", PRICE_UNVERIFIED)
        ledger.deactivate_account("user1")
        ledger.activate_account("user1", PRICE_UNVERIFIED)
        assert ledger.has_active_account("user1")
