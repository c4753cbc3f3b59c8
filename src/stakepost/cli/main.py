#!/usr/bin/env python3
"""
stakepost CLI - operate a staked-reputation content ledger from a snapshot file.

Commands:
  stakepost verify <addr>                   Verify an address with the oracle
  stakepost activate <addr>                 Stake the deposit
  stakepost post <addr> <content_ref>       Publish a post
  stakepost report <addr> <post_id>         Dispute a post
  stakepost vote <addr> <report_id> up      Vote on a report
  stakepost resolve <addr> <report_id>      Resolve a report
  stakepost status                          Show ledger totals
"""

from __future__ import annotations

import argparse
import logging
import sys

from ..core.logging import configure_logging, correlation_context
from .commands import COMMAND_MODULES
from .config import CLIConfig, set_cli_config

logger = logging.getLogger(__name__)


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="stakepost",
        description="Staked-reputation content ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stakepost activate 0xabc                   Activate with the current price
  stakepost post 0xabc QmPK1s3pNYLi9ERiq3BD  Publish a content reference
  stakepost tip 0xdef 0 1000                 Tip post 0
  stakepost report 0xdef 0                   Report post 0
  stakepost vote 0x123 0 up                  Vote to uphold report 0
  stakepost --at 1700000200 resolve 0x123 0  Resolve report 0 at a fixed time
  stakepost --json reports --open            Open reports as JSON
        """,
    )
    parser.add_argument("--state", help="Ledger snapshot file (default: STAKEPOST_STATE_PATH)")
    parser.add_argument("--registry", help="Human registry file, one address per line")
    parser.add_argument("--at", type=int, default=None, help="Run at this unix timestamp instead of now")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log ledger activity to stderr")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in COMMAND_MODULES:
        module.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else "WARNING", json_format=False)
    set_cli_config(
        CLIConfig.load(
            state_path=args.state,
            registry_path=args.registry,
            output="json" if args.json else None,
        )
    )

    with correlation_context():
        return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
