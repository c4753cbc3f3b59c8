"""Status command."""

from __future__ import annotations

import argparse

from ..utils import run_operation


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the status command on the CLI parser."""
    status_parser = subparsers.add_parser("status", help="Show ledger totals, rules and invariant checks")
    status_parser.set_defaults(func=cmd_status)


def cmd_status(args: argparse.Namespace) -> int:
    """Show ledger statistics."""

    def status(ledger):
        accounts = ledger.accounts()
        problems = ledger.check_invariants()
        return {
            "now": ledger.clock.now(),
            "accounts": len(accounts),
            "active_accounts": sum(1 for a in accounts if a.is_active),
            "verified_accounts": sum(1 for a in accounts if a.is_verified),
            "posts": ledger.post_count(),
            "reports": ledger.report_count(),
            "events": ledger.events.next_seq,
            "pool_balance": ledger.pool_balance(),
            "rules": ledger.rules.to_dict(),
            "invariants": problems or "ok",
        }

    return run_operation(args, status, write=False)
