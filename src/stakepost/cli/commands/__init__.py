"""CLI command modules for stakepost.

Each module exposes a ``register(subparsers)`` function that wires up
its argparse sub-commands and sets ``parser.set_defaults(func=handler)``.
"""

from . import accounts, posts, reports, status
from .accounts import cmd_account, cmd_activate, cmd_deactivate, cmd_price, cmd_verify
from .posts import cmd_post, cmd_posts, cmd_tip
from .reports import cmd_report, cmd_reports, cmd_resolve, cmd_vote
from .status import cmd_status

# All command modules with register() functions, in registration order.
COMMAND_MODULES = [
    accounts,
    posts,
    reports,
    status,
]

__all__ = [
    "COMMAND_MODULES",
    "cmd_account",
    "cmd_activate",
    "cmd_deactivate",
    "cmd_post",
    "cmd_posts",
    "cmd_price",
    "cmd_report",
    "cmd_reports",
    "cmd_resolve",
    "cmd_status",
    "cmd_tip",
    "cmd_verify",
    "cmd_vote",
]
