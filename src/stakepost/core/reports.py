# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Report / vote engine: disputes over posts, settled by majority vote.

Lifecycle of a report (all transitions driven by the clock):

1. voting: ``now < created_at + voting_window``; active bystanders vote once.
2. awaiting_resolution: voting closed, ``now < created_at + voting_window +
   grace_window``; any active account may resolve it.
3. finished: resolved. More up votes than down votes disables the post and
   moves the author's whole stake to the reporter; anything else (ties
   included) changes nothing.
4. lapsed: the grace window passed without resolution. Nothing is moved and
   nobody is penalized; the report simply stops locking its participants.

While a report is open (voting or awaiting resolution) neither the reporter
nor the reported author can take part in another report or deactivate.
Involvement is always computed from the report list, never stored.
"""

from __future__ import annotations

import logging

from .config import LedgerRules
from .escrow import TransferReason
from .events import EventKind
from .exceptions import ErrorKind, LedgerError
from .models import LedgerState, Report
from .posts import require_post
from .transaction import Transaction, require_address, require_index

logger = logging.getLogger(__name__)


def open_report_for(state: LedgerState, rules: LedgerRules, address: str, now: int) -> Report | None:
    """Return the open report ``address`` is involved in, if any."""
    for report in reversed(state.reports):
        if report.involves(address) and report.is_open(now, rules):
            return report
    return None


def is_involved_in_open_report(state: LedgerState, rules: LedgerRules, address: str, now: int) -> bool:
    return open_report_for(state, rules, address, now) is not None


def _require_report(state: LedgerState, report_id: int) -> Report:
    require_index(report_id, "report_id")
    report = state.get_report(report_id)
    if report is None:
        raise LedgerError(ErrorKind.INVALID_REPORT_ID, "Invalid report id", report_id=report_id)
    return report


def _require_active(state: LedgerState, address: str) -> None:
    if not state.get_account(address).is_active:
        raise LedgerError(ErrorKind.ACCOUNT_NOT_ACTIVE, "Account not active", address=address)


def file_report(tx: Transaction, reporter: str, post_id: int) -> Report:
    """Open a dispute against ``post_id`` on behalf of ``reporter``.

    Both the reporter and the post's author are checked for involvement in
    the same transaction that appends the report, so of two competing
    reports over overlapping participants at most one can succeed.

    Raises:
        LedgerError: ACCOUNT_NOT_ACTIVE, INVALID_POST_ID, POST_DISABLED,
            SELF_REPORT, AUTHOR_NOT_ACTIVE, REPORTER_ALREADY_INVOLVED or
            TARGET_ALREADY_INVOLVED.
    """
    require_address(reporter, "reporter")
    _require_active(tx.state, reporter)
    post = require_post(tx.state, post_id)
    if post.is_disabled:
        raise LedgerError(ErrorKind.POST_DISABLED, "Cannot report a disabled post", post_id=post_id)
    if reporter == post.author:
        raise LedgerError(ErrorKind.SELF_REPORT, "Cannot report your own post", post_id=post_id)
    if not tx.state.get_account(post.author).is_active:
        raise LedgerError(
            ErrorKind.AUTHOR_NOT_ACTIVE,
            "The author of this post is not active",
            post_id=post_id,
            author=post.author,
        )

    existing = open_report_for(tx.state, tx.rules, reporter, tx.now)
    if existing is not None:
        raise LedgerError(
            ErrorKind.REPORTER_ALREADY_INVOLVED,
            "Reporter is already involved in an open report",
            address=reporter,
            report_id=existing.id,
        )
    existing = open_report_for(tx.state, tx.rules, post.author, tx.now)
    if existing is not None:
        raise LedgerError(
            ErrorKind.TARGET_ALREADY_INVOLVED,
            "The reported author is already involved in an open report",
            address=post.author,
            report_id=existing.id,
        )

    report = Report(
        id=len(tx.state.reports),
        post_id=post.id,
        reporter=reporter,
        author=post.author,
        created_at=tx.now,
    )
    tx.state.reports.append(report)
    tx.emit(EventKind.REPORTED, report_id=report.id, post_id=post.id, by=reporter, author=post.author)
    logger.info("Report %d filed by %s against post %d (%s)", report.id, reporter, post.id, post.author)
    return report


def vote(tx: Transaction, voter: str, report_id: int, upvote: bool) -> Report:
    """Record one vote on ``report_id``. Up votes favour the reporter.

    Raises:
        LedgerError: INVALID_REPORT_ID, VOTING_ENDED, ACCOUNT_NOT_ACTIVE,
            SELF_INVOLVED or ALREADY_VOTED.
    """
    require_address(voter, "voter")
    report = _require_report(tx.state, report_id)
    if tx.now >= report.voting_deadline(tx.rules):
        raise LedgerError(ErrorKind.VOTING_ENDED, "Voting session ended", report_id=report_id)
    _require_active(tx.state, voter)
    if voter == report.author:
        raise LedgerError(ErrorKind.SELF_INVOLVED, "Cannot vote on a report against you", report_id=report_id)
    if voter == report.reporter:
        raise LedgerError(ErrorKind.SELF_INVOLVED, "Cannot vote on your own report", report_id=report_id)
    if voter in report.voters:
        raise LedgerError(ErrorKind.ALREADY_VOTED, "Already voted on this report", report_id=report_id)

    if upvote:
        report.up_votes += 1
    else:
        report.down_votes += 1
    report.voters.add(voter)
    tx.emit(
        EventKind.VOTED,
        report_id=report.id,
        voter=voter,
        up_vote=bool(upvote),
        up_votes=report.up_votes,
        down_votes=report.down_votes,
    )
    logger.debug("Vote on report %d by %s: %s", report.id, voter, "up" if upvote else "down")
    return report


def get_report_winner(tx: Transaction, caller: str, report_id: int) -> Report:
    """Resolve ``report_id`` once voting has closed.

    Must be called inside the grace window. Past it the report has lapsed:
    the call fails and the report stays unfinished for good.

    Raises:
        LedgerError: ACCOUNT_NOT_ACTIVE, INVALID_REPORT_ID, ALREADY_RESOLVED,
            VOTING_NOT_ENDED or REVEAL_WINDOW_EXPIRED.
    """
    require_address(caller, "caller")
    _require_active(tx.state, caller)
    report = _require_report(tx.state, report_id)
    if report.is_finished:
        raise LedgerError(ErrorKind.ALREADY_RESOLVED, "Report already finished", report_id=report_id)
    if tx.now < report.voting_deadline(tx.rules):
        raise LedgerError(
            ErrorKind.VOTING_NOT_ENDED,
            "Voting session has not ended yet",
            report_id=report_id,
            seconds_remaining=report.voting_deadline(tx.rules) - tx.now,
        )
    if tx.now >= report.resolution_deadline(tx.rules):
        raise LedgerError(ErrorKind.REVEAL_WINDOW_EXPIRED, "Winner reveal time ended", report_id=report_id)

    post = tx.state.posts[report.post_id]
    succeeded = report.up_votes > report.down_votes
    amount_won = 0
    if succeeded:
        author = tx.state.ensure_account(report.author)
        amount_won = author.staked_amount
        author.staked_amount = 0
        author.penalty_count += 1
        post.is_disabled = True
        if amount_won:
            tx.state.escrow.pay(report.reporter, amount_won, TransferReason.FORFEIT, payer=report.author)
        logger.warning(
            "Report %d upheld (%d-%d): post %d disabled, %d forfeited by %s to %s",
            report.id, report.up_votes, report.down_votes, post.id, amount_won, report.author, report.reporter,
        )
    else:
        logger.info("Report %d rejected (%d-%d)", report.id, report.up_votes, report.down_votes)

    report.is_finished = True
    tx.emit(
        EventKind.REPORT_RESOLVED,
        report_id=report.id,
        post_id=post.id,
        winner=report.reporter if succeeded else report.author,
        amount_won=amount_won,
        up_votes=report.up_votes,
        down_votes=report.down_votes,
        post_disabled=succeeded,
        resolved_by=caller,
    )
    return report
