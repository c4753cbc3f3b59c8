"""Tests for stakepost.core.posts - publishing and tipping."""

from __future__ import annotations

import pytest

from stakepost.core.escrow import TransferReason
from stakepost.core.events import EventKind
from stakepost.core.exceptions import ErrorKind, LedgerError, ValidationException

PRICE_UNVERIFIED = 10**17
CID = "QmPK1s3pNYLi9ERiq3BDxKa4XosgWwFRQUydHUtz4YgpqB"
CID2 = "QmT78zSuBmuS4z925WZfrqQ1qHaJ56DQaTfyMUF7F8ff5o"


class TestUploadPost:
    """Tests for upload_post."""

    def test_inactive_author_rejected(self, ledger):
        with pytest.raises(LedgerError) as exc_info:
            ledger.upload_post("user1", CID)
        assert exc_info.value.kind == ErrorKind.ACCOUNT_NOT_ACTIVE
        assert ledger.post_count() == 0

    def test_empty_content_rejected(self, ledger, activate):
        activate("user1")
        with pytest.raises(LedgerError) as exc_info:
            ledger.upload_post("user1", "")
        assert exc_info.value.kind == ErrorKind.EMPTY_CONTENT

    def test_first_post(self, ledger, clock, activate):
        activate("user1")

        post = ledger.upload_post("user1", CID)

        assert post.id == 0
        assert post.content_ref == CID
        assert post.author == "user1"
        assert post.created_at == clock.now()
        assert post.tip_amount == 0
        assert post.is_disabled is False
        assert ledger.last_post_id("user1") == 0
        event = ledger.events.last()
        assert event.kind == EventKind.POST_CREATED
        assert event.data == {"post_id": 0, "content_ref": CID, "author": "user1"}

    def test_cooldown_between_posts(self, ledger, clock, activate):
        activate("user1")
        ledger.upload_post("user1", CID)

        clock.advance(30)
        with pytest.raises(LedgerError) as exc_info:
            ledger.upload_post("user1", CID2)
        assert exc_info.value.kind == ErrorKind.POST_COOLDOWN_ACTIVE
        assert ledger.cooldown_remaining("user1") == 30

        clock.advance(30)
        assert ledger.cooldown_remaining("user1") == 0
        post = ledger.upload_post("user1", CID2)
        assert post.id == 1
        assert ledger.last_post_id("user1") == 1

    def test_ids_are_global_and_dense(self, ledger, activate):
        activate("a", "b", "c")
        ids = [ledger.upload_post(author, CID).id for author in ("a", "b", "c")]
        assert ids == [0, 1, 2]
        assert [p.id for p in ledger.posts()] == [0, 1, 2]

    def test_posts_by_author(self, ledger, clock, activate):
        activate("a", "b")
        ledger.upload_post("a", CID)
        ledger.upload_post("b", CID)
        clock.advance(60)
        ledger.upload_post("a", CID2)

        assert [p.id for p in ledger.posts_by("a")] == [0, 2]
        assert [p.id for p in ledger.posts_by("b")] == [1]
        assert ledger.posts_by("nobody") == []

    def test_returned_post_is_detached(self, ledger, activate):
        activate("a")
        post = ledger.upload_post("a", CID)
        post.is_disabled = True
        assert ledger.get_post(0).is_disabled is False


class TestTipPostOwner:
    """Tests for tip_post_owner."""

    @pytest.fixture
    def post_id(self, ledger, activate):
        activate("author")
        return ledger.upload_post("author", CID).id

    def test_invalid_post_id(self, ledger):
        with pytest.raises(LedgerError) as exc_info:
            ledger.tip_post_owner("fan", 0, 100)
        assert exc_info.value.kind == ErrorKind.INVALID_POST_ID

    def test_negative_post_id_is_validation_error(self, ledger):
        with pytest.raises(ValidationException):
            ledger.tip_post_owner("fan", -1, 100)

    def test_self_tip(self, ledger, post_id):
        with pytest.raises(LedgerError) as exc_info:
            ledger.tip_post_owner("author", post_id, 100)
        assert exc_info.value.kind == ErrorKind.SELF_TIP

    def test_zero_tip_rejected(self, ledger, post_id):
        with pytest.raises(LedgerError) as exc_info:
            ledger.tip_post_owner("fan", post_id, 0)
        assert exc_info.value.kind == ErrorKind.INVALID_TIP_AMOUNT

    def test_tip_forwarded_to_author(self, ledger, sink, post_id):
        post = ledger.tip_post_owner("fan", post_id, 1000)

        assert post.tip_amount == 1000
        assert ledger.credited_to("author") == 1000
        assert sink.delivered[-1].reason == TransferReason.TIP
        assert sink.delivered[-1].payer == "fan"
        assert ledger.pool_balance() == PRICE_UNVERIFIED
        event = ledger.events.last()
        assert event.kind == EventKind.POST_TIPPED
        assert event["tip"] == 1000
        assert event["tip_amount"] == 1000
        assert event["by"] == "fan"

    def test_tips_accumulate(self, ledger, post_id):
        ledger.tip_post_owner("fan", post_id, 1000)
        post = ledger.tip_post_owner("fan2", post_id, 500)
        assert post.tip_amount == 1500
        assert ledger.credited_to("author") == 1500

    def test_tipper_need_not_be_active(self, ledger, post_id):
        assert ledger.has_active_account("fan") is False
        ledger.tip_post_owner("fan", post_id, 1)
        assert [a.address for a in ledger.accounts()] == ["author"]

    def test_inactive_author(self, ledger, clock, post_id):
        clock.advance(60)
        ledger.deactivate_account("author")
        with pytest.raises(LedgerError) as exc_info:
            ledger.tip_post_owner("fan", post_id, 100)
        assert exc_info.value.kind == ErrorKind.AUTHOR_NOT_ACTIVE

    def test_disabled_post(self, ledger, clock, activate, post_id):
        activate("reporter", "v1")
        report = ledger.report("reporter", post_id)
        ledger.vote("v1", report.id, True)
        clock.advance(60)
        ledger.get_report_winner("v1", report.id)

        with pytest.raises(LedgerError) as exc_info:
            ledger.tip_post_owner("fan", post_id, 100)
        assert exc_info.value.kind == ErrorKind.POST_DISABLED
        assert ledger.credited_to("author") == 0
