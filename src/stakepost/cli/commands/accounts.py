"""Account commands: verify, price, activate, deactivate, account."""

from __future__ import annotations

import argparse

from ..utils import run_operation


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register account commands on the CLI parser."""
    verify_parser = subparsers.add_parser("verify", help="Mark an address as human-verified via the oracle")
    verify_parser.add_argument("address", help="Address to verify")
    verify_parser.set_defaults(func=cmd_verify)

    price_parser = subparsers.add_parser("price", help="Show the activation deposit for an address")
    price_parser.add_argument("address", help="Address to price")
    price_parser.set_defaults(func=cmd_price)

    activate_parser = subparsers.add_parser("activate", help="Stake the deposit and activate an account")
    activate_parser.add_argument("address", help="Address to activate")
    activate_parser.add_argument(
        "--amount",
        "-a",
        type=int,
        default=None,
        help="Deposit to pay (default: the current activation price)",
    )
    activate_parser.set_defaults(func=cmd_activate)

    deactivate_parser = subparsers.add_parser("deactivate", help="Deactivate an account and refund its stake")
    deactivate_parser.add_argument("address", help="Address to deactivate")
    deactivate_parser.add_argument("--beneficiary", "-b", help="Refund recipient (default: the address itself)")
    deactivate_parser.set_defaults(func=cmd_deactivate)

    account_parser = subparsers.add_parser("account", help="Show an account")
    account_parser.add_argument("address", help="Address to show")
    account_parser.set_defaults(func=cmd_account)


def cmd_verify(args: argparse.Namespace) -> int:
    return run_operation(args, lambda ledger: ledger.get_verified(args.address).to_dict())


def cmd_price(args: argparse.Namespace) -> int:
    return run_operation(
        args,
        lambda ledger: {"address": args.address, "activation_price": ledger.activation_price(args.address)},
        write=False,
    )


def cmd_activate(args: argparse.Namespace) -> int:
    def activate(ledger):
        amount = args.amount if args.amount is not None else ledger.activation_price(args.address)
        return ledger.activate_account(args.address, amount).to_dict()

    return run_operation(args, activate)


def cmd_deactivate(args: argparse.Namespace) -> int:
    def deactivate(ledger):
        beneficiary = args.beneficiary or args.address
        refunded = ledger.deactivate_account(args.address, beneficiary)
        return {"address": args.address, "beneficiary": beneficiary, "refunded": refunded}

    return run_operation(args, deactivate)


def cmd_account(args: argparse.Namespace) -> int:
    def show(ledger):
        data = ledger.get_account(args.address).to_dict()
        data["activation_price"] = ledger.activation_price(args.address)
        data["cooldown_remaining"] = ledger.cooldown_remaining(args.address)
        report = ledger.open_report_for(args.address)
        data["open_report_id"] = report.id if report else None
        data["credited"] = ledger.credited_to(args.address)
        return data

    return run_operation(args, show, write=False)
