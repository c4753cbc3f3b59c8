# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Ledger data model: accounts, posts, reports and the state aggregate.

Posts and reports are append-only lists; an entity's id is its index and
indices are never reused. Accounts are created lazily, the first time an
operation changes them, and are never removed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .config import LedgerRules
from .escrow import ValueEscrow


class ReportStatus(StrEnum):
    """Lifecycle of a report, derived from the clock and ``is_finished``."""

    VOTING = "voting"
    AWAITING_RESOLUTION = "awaiting_resolution"
    FINISHED = "finished"
    LAPSED = "lapsed"


@dataclass
class Account:
    """Per-address registry entry.

    ``is_active`` is derived from the stake so that an active account always
    holds a deposit and an inactive one never does.
    """

    address: str
    is_verified: bool = False
    staked_amount: int = 0
    penalty_count: int = 0
    last_post_id: int | None = None
    post_ids: list[int] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.staked_amount > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "is_verified": self.is_verified,
            "is_active": self.is_active,
            "staked_amount": self.staked_amount,
            "penalty_count": self.penalty_count,
            "last_post_id": self.last_post_id,
            "post_ids": list(self.post_ids),
        }


@dataclass
class Post:
    """A published content reference."""

    id: int
    content_ref: str
    author: str
    created_at: int
    tip_amount: int = 0
    is_disabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content_ref": self.content_ref,
            "author": self.author,
            "created_at": self.created_at,
            "tip_amount": self.tip_amount,
            "is_disabled": self.is_disabled,
        }


@dataclass
class Report:
    """A dispute over a post, settled by vote."""

    id: int
    post_id: int
    reporter: str
    author: str
    created_at: int
    up_votes: int = 0
    down_votes: int = 0
    voters: set[str] = field(default_factory=set)
    is_finished: bool = False

    def voting_deadline(self, rules: LedgerRules) -> int:
        return self.created_at + rules.voting_window

    def resolution_deadline(self, rules: LedgerRules) -> int:
        return self.created_at + rules.resolution_deadline_offset

    def involves(self, address: str) -> bool:
        return address == self.reporter or address == self.author

    def is_open(self, now: int, rules: LedgerRules) -> bool:
        """Open reports hold the involvement lock on both participants."""
        return not self.is_finished and now < self.resolution_deadline(rules)

    def status(self, now: int, rules: LedgerRules) -> ReportStatus:
        if self.is_finished:
            return ReportStatus.FINISHED
        if now < self.voting_deadline(rules):
            return ReportStatus.VOTING
        if now < self.resolution_deadline(rules):
            return ReportStatus.AWAITING_RESOLUTION
        return ReportStatus.LAPSED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "post_id": self.post_id,
            "reporter": self.reporter,
            "author": self.author,
            "created_at": self.created_at,
            "up_votes": self.up_votes,
            "down_votes": self.down_votes,
            "voters": sorted(self.voters),
            "is_finished": self.is_finished,
        }


@dataclass
class LedgerState:
    """Everything the ledger owns. Mutated only inside a ledger transaction."""

    accounts: dict[str, Account] = field(default_factory=dict)
    posts: list[Post] = field(default_factory=list)
    reports: list[Report] = field(default_factory=list)
    escrow: ValueEscrow = field(default_factory=ValueEscrow)

    def get_account(self, address: str) -> Account:
        """Return the account for ``address`` without registering it.

        Unknown addresses get a detached default account, so read paths and
        precondition checks never create state.
        """
        account = self.accounts.get(address)
        if account is None:
            return Account(address=address)
        return account

    def ensure_account(self, address: str) -> Account:
        """Return the stored account for ``address``, creating it if needed."""
        account = self.accounts.get(address)
        if account is None:
            account = Account(address=address)
            self.accounts[address] = account
        return account

    def get_post(self, post_id: int) -> Post | None:
        if 0 <= post_id < len(self.posts):
            return self.posts[post_id]
        return None

    def get_report(self, report_id: int) -> Report | None:
        if 0 <= report_id < len(self.reports):
            return self.reports[report_id]
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "accounts": [a.to_dict() for a in self.accounts.values()],
            "posts": [p.to_dict() for p in self.posts],
            "reports": [r.to_dict() for r in self.reports],
            "escrow": self.escrow.to_dict(),
        }
