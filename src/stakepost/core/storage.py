# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""JSON snapshot persistence for a ledger.

A snapshot holds the whole ``LedgerState``, the next event sequence number
and the latest clock reading the ledger accepted. Files are validated with
pydantic models on load and written atomically (temp file + rename) on save.
Processes sharing a snapshot serialise on an exclusive POSIX file lock
(``fcntl``) held from load through save.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .escrow import ValueEscrow
from .events import EventLog
from .exceptions import StorageError
from .ledger import Ledger
from .models import Account, LedgerState, Post, Report

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

# =============================================================================
# Snapshot Models
# =============================================================================


class AccountRecord(BaseModel):
    address: str = Field(..., min_length=1)
    is_verified: bool = False
    staked_amount: int = Field(0, ge=0)
    penalty_count: int = Field(0, ge=0)
    last_post_id: int | None = None
    post_ids: list[int] = Field(default_factory=list)


class PostRecord(BaseModel):
    id: int = Field(..., ge=0)
    content_ref: str = Field(..., min_length=1)
    author: str
    created_at: int
    tip_amount: int = Field(0, ge=0)
    is_disabled: bool = False


class ReportRecord(BaseModel):
    id: int = Field(..., ge=0)
    post_id: int = Field(..., ge=0)
    reporter: str
    author: str
    created_at: int
    up_votes: int = Field(0, ge=0)
    down_votes: int = Field(0, ge=0)
    voters: list[str] = Field(default_factory=list)
    is_finished: bool = False


class EscrowRecord(BaseModel):
    pool: int = Field(0, ge=0)
    contributed: dict[str, int] = Field(default_factory=dict)
    credited: dict[str, int] = Field(default_factory=dict)


class LedgerSnapshot(BaseModel):
    """On-disk representation of a ledger."""

    version: int = SNAPSHOT_VERSION
    next_event_seq: int = Field(0, ge=0)
    clock_high_water: int = Field(0, ge=0)
    accounts: list[AccountRecord] = Field(default_factory=list)
    posts: list[PostRecord] = Field(default_factory=list)
    reports: list[ReportRecord] = Field(default_factory=list)
    escrow: EscrowRecord = Field(default_factory=EscrowRecord)


# =============================================================================
# Conversion
# =============================================================================


def snapshot_from_state(state: LedgerState, next_event_seq: int = 0, clock_high_water: int = 0) -> LedgerSnapshot:
    return LedgerSnapshot(
        next_event_seq=next_event_seq,
        clock_high_water=clock_high_water,
        accounts=[
            AccountRecord(
                address=a.address,
                is_verified=a.is_verified,
                staked_amount=a.staked_amount,
                penalty_count=a.penalty_count,
                last_post_id=a.last_post_id,
                post_ids=list(a.post_ids),
            )
            for a in state.accounts.values()
        ],
        posts=[PostRecord(**p.to_dict()) for p in state.posts],
        reports=[ReportRecord(**r.to_dict()) for r in state.reports],
        escrow=EscrowRecord(**state.escrow.to_dict()),
    )


def state_from_snapshot(snapshot: LedgerSnapshot) -> LedgerState:
    """Rebuild a ``LedgerState``, checking ids and the references between records.

    Raises:
        StorageError: If post or report ids do not match their positions, or
            an account or report points at a post it does not own.
    """
    for index, post in enumerate(snapshot.posts):
        if post.id != index:
            raise StorageError(f"Snapshot post at position {index} has id {post.id}")
    for account in snapshot.accounts:
        for post_id in account.post_ids:
            if post_id >= len(snapshot.posts) or snapshot.posts[post_id].author != account.address:
                raise StorageError(f"Snapshot account {account.address} lists post {post_id} it did not author")
        if account.last_post_id is not None and account.last_post_id not in account.post_ids:
            raise StorageError(
                f"Snapshot account {account.address} has last post {account.last_post_id} outside its posts"
            )
    for index, report in enumerate(snapshot.reports):
        if report.id != index:
            raise StorageError(f"Snapshot report at position {index} has id {report.id}")
        if report.post_id >= len(snapshot.posts):
            raise StorageError(f"Snapshot report {report.id} references unknown post {report.post_id}")
        if report.author != snapshot.posts[report.post_id].author:
            raise StorageError(
                f"Snapshot report {report.id} names {report.author} but post {report.post_id} is not theirs"
            )

    accounts = {
        r.address: Account(
            address=r.address,
            is_verified=r.is_verified,
            staked_amount=r.staked_amount,
            penalty_count=r.penalty_count,
            last_post_id=r.last_post_id,
            post_ids=list(r.post_ids),
        )
        for r in snapshot.accounts
    }
    posts = [Post(**p.model_dump()) for p in snapshot.posts]
    reports = []
    for r in snapshot.reports:
        data = r.model_dump()
        data["voters"] = set(data["voters"])
        reports.append(Report(**data))
    escrow = ValueEscrow(
        pool=snapshot.escrow.pool,
        contributed=dict(snapshot.escrow.contributed),
        credited=dict(snapshot.escrow.credited),
    )
    return LedgerState(accounts=accounts, posts=posts, reports=reports, escrow=escrow)


# =============================================================================
# Files
# =============================================================================


def load_snapshot(path: str | Path) -> LedgerSnapshot:
    """Read and validate a snapshot file.

    A missing file yields an empty snapshot.

    Raises:
        StorageError: If the file is unreadable, invalid, or from another version.
    """
    path = Path(path)
    if not path.exists():
        logger.debug("No snapshot at %s, starting empty", path)
        return LedgerSnapshot()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Cannot read snapshot: {e}", path=str(path)) from e

    if not isinstance(raw, dict) or raw.get("version") != SNAPSHOT_VERSION:
        version = raw.get("version") if isinstance(raw, dict) else None
        raise StorageError(f"Unsupported snapshot version: {version!r}", path=str(path))

    try:
        return LedgerSnapshot.model_validate(raw)
    except ValidationError as e:
        raise StorageError(f"Invalid snapshot: {e.error_count()} validation error(s)", path=str(path)) from e


def save_snapshot(snapshot: LedgerSnapshot, path: str | Path) -> None:
    """Write ``snapshot`` to ``path`` atomically.

    Raises:
        StorageError: If the file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(snapshot.model_dump_json(indent=2))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise StorageError(f"Cannot write snapshot: {e}", path=str(path)) from e
    logger.debug("Saved snapshot to %s", path)


def load_state(path: str | Path) -> tuple[LedgerState, int]:
    """Load ``(state, next_event_seq)`` from a snapshot file."""
    snapshot = load_snapshot(path)
    return state_from_snapshot(snapshot), snapshot.next_event_seq


def load_ledger(path: str | Path, **kwargs: Any) -> Ledger:
    """Build a ``Ledger`` from a snapshot file.

    The ledger resumes the snapshot's event numbering and refuses clock
    readings earlier than the latest one the snapshot recorded. Extra keyword
    arguments go to the ``Ledger`` constructor.
    """
    snapshot = load_snapshot(path)
    return Ledger(
        state=state_from_snapshot(snapshot),
        events=EventLog(snapshot.next_event_seq),
        not_before=snapshot.clock_high_water,
        **kwargs,
    )


def save_ledger(ledger: Ledger, path: str | Path) -> None:
    """Persist a ``Ledger``'s current state."""
    state = ledger.snapshot()
    save_snapshot(snapshot_from_state(state, ledger.events.next_seq, ledger.high_water), path)


@contextmanager
def snapshot_lock(path: str | Path) -> Generator[None, None, None]:
    """Hold an exclusive lock on ``<path>.lock`` for the duration of the block.

    Blocks until any other holder, in this or another process, releases it.

    Raises:
        StorageError: If the lock file cannot be opened.
    """
    path = Path(path)
    lock_path = path.with_name(f"{path.name}.lock")
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock_file = open(lock_path, "a")  # noqa: SIM115
    except OSError as e:
        raise StorageError(f"Cannot open snapshot lock: {e}", path=str(lock_path)) from e

    with lock_file:
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
