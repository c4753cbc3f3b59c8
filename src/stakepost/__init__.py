# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""stakepost - a staked-reputation content ledger.

Participants stake a refundable deposit to gain posting rights, publish
content references, tip each other, and settle disputes over posts through
a timed majority vote in which the loser of an upheld report forfeits their
stake to the reporter.

Architecture:
  Account registry (verification, deposits, cooldowns)
    → Post store (append-only posts, tips)
    → Report / vote engine (involvement locks, voting and grace windows)
  all over one ``LedgerState`` mutated only inside ``Ledger.transaction()``.

CLI entry point: ``stakepost``
"""

__version__ = "1.0.0"

from . import (
    core as core,
)
from .core import Ledger as Ledger
from .core import LedgerRules as LedgerRules
