"""Report commands: report, vote, resolve, reports."""

from __future__ import annotations

import argparse

from ..utils import run_operation


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register report commands on the CLI parser."""
    report_parser = subparsers.add_parser("report", help="Open a dispute against a post")
    report_parser.add_argument("reporter", help="Reporting address (must be active)")
    report_parser.add_argument("post_id", type=int, help="Post id")
    report_parser.set_defaults(func=cmd_report)

    vote_parser = subparsers.add_parser("vote", help="Vote on an open report")
    vote_parser.add_argument("voter", help="Voting address (must be active)")
    vote_parser.add_argument("report_id", type=int, help="Report id")
    vote_parser.add_argument("direction", choices=["up", "down"], help="up upholds the report, down rejects it")
    vote_parser.set_defaults(func=cmd_vote)

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a report after voting closes")
    resolve_parser.add_argument("caller", help="Resolving address (must be active)")
    resolve_parser.add_argument("report_id", type=int, help="Report id")
    resolve_parser.set_defaults(func=cmd_resolve)

    reports_parser = subparsers.add_parser("reports", help="List reports with their current status")
    reports_parser.add_argument("--id", type=int, dest="report_id", help="Show a single report")
    reports_parser.add_argument("--open", action="store_true", help="Only reports still voting or awaiting resolution")
    reports_parser.set_defaults(func=cmd_reports)


def _describe(ledger, report) -> dict:
    data = report.to_dict()
    data["status"] = ledger.report_status(report.id).value
    data["voting_time_left"] = ledger.voting_time_left(report.id)
    data["resolution_time_left"] = ledger.resolution_time_left(report.id)
    return data


def cmd_report(args: argparse.Namespace) -> int:
    return run_operation(args, lambda ledger: ledger.report(args.reporter, args.post_id).to_dict())


def cmd_vote(args: argparse.Namespace) -> int:
    return run_operation(
        args,
        lambda ledger: ledger.vote(args.voter, args.report_id, args.direction == "up").to_dict(),
    )


def cmd_resolve(args: argparse.Namespace) -> int:
    def resolve(ledger):
        report = ledger.get_report_winner(args.caller, args.report_id)
        upheld = report.up_votes > report.down_votes
        data = report.to_dict()
        data["outcome"] = "upheld" if upheld else "rejected"
        data["winner"] = report.reporter if upheld else report.author
        return data

    return run_operation(args, resolve)


def cmd_reports(args: argparse.Namespace) -> int:
    def list_reports(ledger):
        if args.report_id is not None:
            return _describe(ledger, ledger.get_report(args.report_id))
        described = [_describe(ledger, r) for r in ledger.reports()]
        if args.open:
            described = [d for d in described if d["status"] in ("voting", "awaiting_resolution")]
        return described

    return run_operation(args, list_reports, write=False)
