# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""The ledger: one owned state, mutated only through atomic operations.

Every state-changing call runs inside ``Ledger.transaction()``:

1. the ledger lock is taken and the clock is read once;
2. the operation checks all of its preconditions, then applies its effects;
3. escrow payouts queued by the operation are handed to the payout sinks;
4. the buffered events are numbered into the event log;
5. the lock is released and listeners are notified.

If any step before 4 raises, the state is restored to what it was before
step 1 and no event is recorded. The clock never runs backwards from the
ledger's point of view: a reading earlier than the latest one already seen
raises ``ClockError``. A call back into the ledger from inside a
transaction (an oracle or payout sink re-entering, for example) raises
``ReentrancyError``.

Usage::

    from stakepost.core import Ledger, ManualClock, RegistryOracle

    ledger = Ledger(clock=ManualClock(1_700_000_000), oracle=RegistryOracle({"alice"}))
    ledger.activate_account("bob", ledger.activation_price("bob"))
    post = ledger.upload_post("bob", "QmPK1s3pNYLi9ERiq3BDxKa4XosgWwFRQUydHUtz4YgpqB")
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from typing import Any

from . import accounts, posts, reports
from .clock import Clock, SystemClock
from .config import LedgerRules
from .escrow import PayoutSink, Transfer
from .events import EventLog
from .exceptions import (
    ClockError,
    ErrorKind,
    EscrowError,
    LedgerError,
    ReentrancyError,
    StakepostException,
)
from .models import Account, LedgerState, Post, Report, ReportStatus
from .oracle import RegistryOracle, VerificationOracle
from .transaction import Transaction, require_address, require_index

logger = logging.getLogger(__name__)


class Ledger:
    """Staked-reputation content ledger.

    Args:
        rules: Prices and time windows. Defaults to ``LedgerRules()``.
        clock: Shared time source. Defaults to the system clock.
        oracle: Human-verification oracle. Defaults to an empty registry.
        state: Existing state to take ownership of (e.g. loaded from a snapshot).
        payout_sinks: Receivers of outbound transfers, called in order.
        events: Event log to publish into. A new one is created if omitted.
        not_before: Latest time a previous run of this ledger observed.
    """

    def __init__(
        self,
        rules: LedgerRules | None = None,
        clock: Clock | None = None,
        oracle: VerificationOracle | None = None,
        state: LedgerState | None = None,
        payout_sinks: Iterable[PayoutSink] = (),
        events: EventLog | None = None,
        not_before: int = 0,
    ):
        self.rules = rules or LedgerRules()
        self.clock = clock or SystemClock()
        self.oracle = oracle or RegistryOracle()
        self.events = events or EventLog()
        self._state = state or LedgerState()
        self._sinks: list[PayoutSink] = list(payout_sinks)
        self._lock = threading.Lock()
        self._owner: int | None = None
        self._high_water = not_before

    @property
    def high_water(self) -> int:
        """Latest clock reading the ledger has accepted."""
        return self._high_water

    def _now(self) -> int:
        # Caller holds self._lock
        now = self.clock.now()
        if now < self._high_water:
            raise ClockError(now, self._high_water)
        self._high_water = now
        return now

    # =========================================================================
    # Transactions
    # =========================================================================

    @contextmanager
    def transaction(self, operation: str) -> Generator[Transaction, None, None]:
        """Run one atomic, serialized unit of work against the ledger state."""
        if self._owner == threading.get_ident():
            raise ReentrancyError(operation)

        with self._lock:
            now = self._now()
            self._owner = threading.get_ident()
            snapshot = copy.deepcopy(self._state)
            tx = Transaction(state=self._state, rules=self.rules, now=now, operation=operation)
            try:
                yield tx
                self._deliver(tx.state.escrow.take_pending())
            except LedgerError as e:
                self._state = snapshot
                logger.debug("%s rejected: %s (%s)", operation, e.kind.value, e.message)
                raise
            except BaseException:
                self._state = snapshot
                logger.error("%s failed; state rolled back", operation)
                raise
            finally:
                self._owner = None
            committed = [self.events.record(event) for event in tx.events]

        for event in committed:
            self.events.notify(event)

    def _deliver(self, transfers: list[Transfer]) -> None:
        for transfer in transfers:
            for sink in self._sinks:
                try:
                    sink.deliver(transfer)
                except StakepostException:
                    raise
                except Exception as e:
                    raise EscrowError(
                        f"Payout of {transfer.amount} to {transfer.payee} failed: {e}",
                        transfer.to_dict(),
                    ) from e

    def add_payout_sink(self, sink: PayoutSink) -> None:
        self._sinks.append(sink)

    @contextmanager
    def _read(self) -> Generator[tuple[LedgerState, int], None, None]:
        if self._owner == threading.get_ident():
            raise ReentrancyError("read")
        with self._lock:
            yield self._state, self._now()

    # =========================================================================
    # Account registry
    # =========================================================================

    def get_verified(self, address: str) -> Account:
        """Mark ``address`` as a verified human, as confirmed by the oracle."""
        with self.transaction("get_verified") as tx:
            account = accounts.get_verified(tx, self.oracle, address)
            return copy.deepcopy(account)

    def activation_price(self, address: str) -> int:
        require_address(address)
        with self._read() as (state, _):
            return accounts.activation_price(state.get_account(address), self.rules)

    def activate_account(self, address: str, amount: int) -> Account:
        with self.transaction("activate_account") as tx:
            account = accounts.activate_account(tx, address, amount)
            return copy.deepcopy(account)

    def deactivate_account(self, address: str, beneficiary: str | None = None) -> int:
        """Deactivate ``address``; the stake goes to ``beneficiary`` (default: itself)."""
        with self.transaction("deactivate_account") as tx:
            return accounts.deactivate_account(tx, address, beneficiary if beneficiary is not None else address)

    def get_account(self, address: str) -> Account:
        require_address(address)
        with self._read() as (state, _):
            return copy.deepcopy(state.get_account(address))

    def has_active_account(self, address: str) -> bool:
        return self.get_account(address).is_active

    def is_verified(self, address: str) -> bool:
        return self.get_account(address).is_verified

    def accounts(self) -> list[Account]:
        with self._read() as (state, _):
            return [copy.deepcopy(a) for a in state.accounts.values()]

    def cooldown_remaining(self, address: str) -> int:
        """Seconds before ``address`` may post or deactivate again."""
        require_address(address)
        with self._read() as (state, now):
            tx = Transaction(state=state, rules=self.rules, now=now)
            return posts.cooldown_remaining(tx, state.get_account(address))

    # =========================================================================
    # Post store
    # =========================================================================

    def upload_post(self, author: str, content_ref: str) -> Post:
        with self.transaction("upload_post") as tx:
            return copy.deepcopy(posts.upload_post(tx, author, content_ref))

    def tip_post_owner(self, tipper: str, post_id: int, amount: int) -> Post:
        with self.transaction("tip_post_owner") as tx:
            return copy.deepcopy(posts.tip_post_owner(tx, tipper, post_id, amount))

    def post_count(self) -> int:
        with self._read() as (state, _):
            return len(state.posts)

    def get_post(self, post_id: int) -> Post:
        with self._read() as (state, _):
            return copy.deepcopy(posts.require_post(state, post_id))

    def posts(self) -> list[Post]:
        with self._read() as (state, _):
            return copy.deepcopy(state.posts)

    def posts_by(self, author: str) -> list[Post]:
        require_address(author, "author")
        with self._read() as (state, _):
            return copy.deepcopy(posts.posts_by_author(state, author))

    def last_post_id(self, author: str) -> int | None:
        return self.get_account(author).last_post_id

    # =========================================================================
    # Report / vote engine
    # =========================================================================

    def report(self, reporter: str, post_id: int) -> Report:
        with self.transaction("report") as tx:
            return copy.deepcopy(reports.file_report(tx, reporter, post_id))

    def vote(self, voter: str, report_id: int, upvote: bool) -> Report:
        with self.transaction("vote") as tx:
            return copy.deepcopy(reports.vote(tx, voter, report_id, upvote))

    def get_report_winner(self, caller: str, report_id: int) -> Report:
        with self.transaction("get_report_winner") as tx:
            return copy.deepcopy(reports.get_report_winner(tx, caller, report_id))

    def report_count(self) -> int:
        with self._read() as (state, _):
            return len(state.reports)

    def _require_report(self, state: LedgerState, report_id: int) -> Report:
        require_index(report_id, "report_id")
        report = state.get_report(report_id)
        if report is None:
            raise LedgerError(ErrorKind.INVALID_REPORT_ID, "Invalid report id", report_id=report_id)
        return report

    def get_report(self, report_id: int) -> Report:
        with self._read() as (state, _):
            return copy.deepcopy(self._require_report(state, report_id))

    def reports(self) -> list[Report]:
        with self._read() as (state, _):
            return copy.deepcopy(state.reports)

    def report_status(self, report_id: int) -> ReportStatus:
        with self._read() as (state, now):
            return self._require_report(state, report_id).status(now, self.rules)

    def voting_time_left(self, report_id: int) -> int:
        """Seconds until voting closes on ``report_id``; 0 once it has."""
        with self._read() as (state, now):
            report = self._require_report(state, report_id)
            return max(0, report.voting_deadline(self.rules) - now)

    def resolution_time_left(self, report_id: int) -> int:
        """Seconds until ``report_id`` lapses; 0 once finished or lapsed."""
        with self._read() as (state, now):
            report = self._require_report(state, report_id)
            if report.is_finished:
                return 0
            return max(0, report.resolution_deadline(self.rules) - now)

    def has_voted(self, report_id: int, address: str) -> bool:
        with self._read() as (state, _):
            return address in self._require_report(state, report_id).voters

    def open_report_for(self, address: str) -> Report | None:
        require_address(address)
        with self._read() as (state, now):
            return copy.deepcopy(reports.open_report_for(state, self.rules, address, now))

    def is_involved_in_open_report(self, address: str) -> bool:
        return self.open_report_for(address) is not None

    # =========================================================================
    # Escrow and integrity
    # =========================================================================

    def pool_balance(self) -> int:
        with self._read() as (state, _):
            return state.escrow.pool

    def credited_to(self, address: str) -> int:
        """Total value the escrow has paid out to ``address``."""
        with self._read() as (state, _):
            return state.escrow.credited_to(address)

    def snapshot(self) -> LedgerState:
        """Detached copy of the whole state."""
        with self._read() as (state, _):
            return copy.deepcopy(state)

    def check_invariants(self) -> list[str]:
        """Return a description of every broken state invariant (empty if none)."""
        problems: list[str] = []
        with self._read() as (state, now):
            total_staked = 0
            for account in state.accounts.values():
                if account.staked_amount < 0:
                    problems.append(f"{account.address}: negative stake {account.staked_amount}")
                total_staked += account.staked_amount
                if account.post_ids and account.last_post_id != account.post_ids[-1]:
                    problems.append(f"{account.address}: last_post_id does not match post_ids")
            if state.escrow.pool != total_staked:
                problems.append(f"escrow pool {state.escrow.pool} != total staked {total_staked}")
            for index, post in enumerate(state.posts):
                if post.id != index:
                    problems.append(f"post at index {index} has id {post.id}")
            involved: dict[str, int] = {}
            for index, report in enumerate(state.reports):
                if report.id != index:
                    problems.append(f"report at index {index} has id {report.id}")
                if report.up_votes + report.down_votes != len(report.voters):
                    problems.append(f"report {report.id}: tally does not match voter set")
                if not report.is_open(now, self.rules):
                    continue
                for address in {report.reporter, report.author}:
                    if address in involved:
                        problems.append(
                            f"{address} involved in open reports {involved[address]} and {report.id}"
                        )
                    involved[address] = report.id
        return problems

    def to_dict(self) -> dict[str, Any]:
        with self._read() as (state, now):
            data = state.to_dict()
            data["rules"] = self.rules.to_dict()
            data["now"] = now
            return data
