"""Post commands: post, tip, posts."""

from __future__ import annotations

import argparse

from ..utils import run_operation


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register post commands on the CLI parser."""
    post_parser = subparsers.add_parser("post", help="Publish a content reference")
    post_parser.add_argument("author", help="Author address (must be active)")
    post_parser.add_argument("content_ref", help="Opaque content reference, e.g. an IPFS CID")
    post_parser.set_defaults(func=cmd_post)

    tip_parser = subparsers.add_parser("tip", help="Tip the author of a post")
    tip_parser.add_argument("tipper", help="Tipping address")
    tip_parser.add_argument("post_id", type=int, help="Post id")
    tip_parser.add_argument("amount", type=int, help="Tip amount (smallest unit)")
    tip_parser.set_defaults(func=cmd_tip)

    posts_parser = subparsers.add_parser("posts", help="List posts")
    posts_parser.add_argument("--author", help="Only posts by this author")
    posts_parser.add_argument("--id", type=int, dest="post_id", help="Show a single post")
    posts_parser.add_argument("--limit", "-n", type=int, default=None, help="Show only the latest N posts")
    posts_parser.set_defaults(func=cmd_posts)


def cmd_post(args: argparse.Namespace) -> int:
    return run_operation(args, lambda ledger: ledger.upload_post(args.author, args.content_ref).to_dict())


def cmd_tip(args: argparse.Namespace) -> int:
    return run_operation(
        args,
        lambda ledger: ledger.tip_post_owner(args.tipper, args.post_id, args.amount).to_dict(),
    )


def cmd_posts(args: argparse.Namespace) -> int:
    def list_posts(ledger):
        if args.post_id is not None:
            return ledger.get_post(args.post_id).to_dict()
        posts = ledger.posts_by(args.author) if args.author else ledger.posts()
        if args.limit is not None:
            posts = posts[-args.limit :] if args.limit > 0 else []
        return [p.to_dict() for p in posts]

    return run_operation(args, list_posts, write=False)
