"""Post store: publishing content references and tipping their authors."""

from __future__ import annotations

import logging

from .escrow import TransferReason
from .events import EventKind
from .exceptions import ErrorKind, LedgerError
from .models import Account, LedgerState, Post
from .transaction import Transaction, require_address, require_amount, require_index

logger = logging.getLogger(__name__)


def require_post(state: LedgerState, post_id: int) -> Post:
    require_index(post_id, "post_id")
    post = state.get_post(post_id)
    if post is None:
        raise LedgerError(ErrorKind.INVALID_POST_ID, "Invalid post id", post_id=post_id)
    return post


def cooldown_remaining(tx: Transaction, account: Account) -> int:
    """Seconds until ``account`` may post (or deactivate) again; 0 if it may now."""
    if account.last_post_id is None:
        return 0
    last_post = tx.state.posts[account.last_post_id]
    return max(0, last_post.created_at + tx.rules.post_cooldown - tx.now)


def upload_post(tx: Transaction, author: str, content_ref: str) -> Post:
    """Publish ``content_ref`` as a new post by ``author``.

    Raises:
        LedgerError: ACCOUNT_NOT_ACTIVE, EMPTY_CONTENT or POST_COOLDOWN_ACTIVE.
    """
    require_address(author, "author")
    account = tx.state.get_account(author)
    if not account.is_active:
        raise LedgerError(ErrorKind.ACCOUNT_NOT_ACTIVE, "Account not active", address=author)
    if not isinstance(content_ref, str) or not content_ref:
        raise LedgerError(ErrorKind.EMPTY_CONTENT, "Cannot publish an empty content reference", address=author)
    remaining = cooldown_remaining(tx, account)
    if remaining > 0:
        raise LedgerError(
            ErrorKind.POST_COOLDOWN_ACTIVE,
            "Post cooldown has not ended; cannot upload a new post yet",
            address=author,
            seconds_remaining=remaining,
        )

    post = Post(id=len(tx.state.posts), content_ref=content_ref, author=author, created_at=tx.now)
    tx.state.posts.append(post)
    account = tx.state.ensure_account(author)
    account.last_post_id = post.id
    account.post_ids.append(post.id)
    tx.emit(EventKind.POST_CREATED, post_id=post.id, content_ref=content_ref, author=author)
    logger.info("Post %d created by %s", post.id, author)
    return post


def tip_post_owner(tx: Transaction, tipper: str, post_id: int, amount: int) -> Post:
    """Send ``amount`` from ``tipper`` straight to the author of ``post_id``.

    The tipper does not need an active account; the author does.

    Raises:
        LedgerError: INVALID_POST_ID, SELF_TIP, POST_DISABLED, AUTHOR_NOT_ACTIVE
            or INVALID_TIP_AMOUNT.
    """
    require_address(tipper, "tipper")
    require_amount(amount)
    post = require_post(tx.state, post_id)
    if tipper == post.author:
        raise LedgerError(ErrorKind.SELF_TIP, "Cannot tip your own post", post_id=post_id)
    if post.is_disabled:
        raise LedgerError(ErrorKind.POST_DISABLED, "Cannot tip a disabled post", post_id=post_id)
    if not tx.state.get_account(post.author).is_active:
        raise LedgerError(
            ErrorKind.AUTHOR_NOT_ACTIVE,
            "The author of this post is not active",
            post_id=post_id,
            author=post.author,
        )
    if amount == 0:
        raise LedgerError(ErrorKind.INVALID_TIP_AMOUNT, "Tip amount must be positive", post_id=post_id)

    post.tip_amount += amount
    tx.state.escrow.route(tipper, post.author, amount, TransferReason.TIP)
    tx.emit(
        EventKind.POST_TIPPED,
        post_id=post.id,
        tip=amount,
        tip_amount=post.tip_amount,
        author=post.author,
        by=tipper,
    )
    logger.info("Post %d tipped %d by %s", post.id, amount, tipper)
    return post


def posts_by_author(state: LedgerState, author: str) -> list[Post]:
    return [state.posts[i] for i in state.get_account(author).post_ids]
