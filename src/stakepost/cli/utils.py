"""Shared CLI helpers: opening the ledger snapshot and running one operation."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any

from ..core.clock import Clock, ManualClock, SystemClock
from ..core.config import get_config
from ..core.exceptions import LedgerError, StakepostException
from ..core.ledger import Ledger
from ..core.logging import EventLogger
from ..core.oracle import RegistryOracle
from ..core.response import from_exception, ok
from ..core.storage import load_ledger, save_ledger, snapshot_lock
from .config import get_cli_config
from .output import output_result

logger = logging.getLogger(__name__)


def build_clock(args: argparse.Namespace) -> Clock:
    at = getattr(args, "at", None)
    if at is not None:
        return ManualClock(at)
    return SystemClock()


@contextmanager
def open_ledger(args: argparse.Namespace, write: bool = True) -> Generator[Ledger, None, None]:
    """Load the ledger snapshot, yield the ledger, and save it afterwards.

    The snapshot stays locked against other processes from load through save.
    A write command that the ledger rejects still saves, so the time it
    observed becomes the floor for later commands.
    """
    config = get_cli_config()
    with snapshot_lock(config.state_path):
        oracle = RegistryOracle.from_file(config.registry_path) if config.registry_path else RegistryOracle()
        ledger = load_ledger(
            config.state_path,
            rules=get_config().rules,
            clock=build_clock(args),
            oracle=oracle,
        )
        ledger.events.subscribe(EventLogger())
        try:
            yield ledger
        except LedgerError:
            if write:
                save_ledger(ledger, config.state_path)
            raise
        if write:
            save_ledger(ledger, config.state_path)


def run_operation(
    args: argparse.Namespace,
    operation: Callable[[Ledger], Any],
    write: bool = True,
) -> int:
    """Run ``operation`` against the ledger and print its result.

    Returns:
        Process exit code: 0 on success, 1 when the ledger rejected the call.
    """
    try:
        with open_ledger(args, write=write) as ledger:
            data = operation(ledger)
    except StakepostException as e:
        logger.debug("Command %s failed: %s", args.command, e.message)
        output_result(from_exception(e))
        return 1
    output_result(ok(data))
    return 0
