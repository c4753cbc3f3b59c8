"""Global test fixtures for the stakepost test suite."""

from __future__ import annotations

import os
from collections.abc import Callable

import pytest

from stakepost.core.clock import ManualClock
from stakepost.core.config import LedgerRules, clear_config_cache
from stakepost.core.escrow import RecordingSink
from stakepost.core.ledger import Ledger
from stakepost.core.oracle import RegistryOracle

GENESIS = 1_700_000_000
CID = "QmPK1s3pNYLi9ERiq3BDxKa4XosgWwFRQUydHUtz4YgpqB"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all STAKEPOST_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("STAKEPOST_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def rules() -> LedgerRules:
    return LedgerRules()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(GENESIS)


@pytest.fixture
def oracle() -> RegistryOracle:
    """Oracle that recognises the ``human*`` addresses."""
    return RegistryOracle({"human1", "human2", "human3"})


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def ledger(rules, clock, oracle, sink) -> Ledger:
    return Ledger(rules=rules, clock=clock, oracle=oracle, payout_sinks=[sink])


@pytest.fixture
def activate(ledger) -> Callable[..., None]:
    """Activate each address at its current price."""

    def _activate(*addresses: str) -> None:
        for address in addresses:
            ledger.activate_account(address, ledger.activation_price(address))

    return _activate


@pytest.fixture
def open_report(ledger, clock, activate) -> Callable[..., int]:
    """Activate author and reporter, publish a post, report it; return the report id."""

    def _open_report(author: str = "author", reporter: str = "reporter") -> int:
        activate(author, reporter)
        post = ledger.upload_post(author, CID)
        return ledger.report(reporter, post.id).id

    return _open_report
