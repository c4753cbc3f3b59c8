# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Account registry: verification, activation deposits and deactivation.

Activation price tiers:
- unverified address: ``price_unverified``
- human-verified address: ``price_verified`` (a tenth of the unverified rate
  with the default rules)

With ``penalty_price_scaling`` enabled the tier price is multiplied by
``penalty_count + 1``, so every lost dispute makes re-activation dearer.

A deposit is refundable on deactivation, provided the account is not tied
to an open report and its last post is older than the post cooldown.
"""

from __future__ import annotations

import logging

from .config import LedgerRules
from .escrow import TransferReason
from .events import EventKind
from .exceptions import ErrorKind, LedgerError
from .models import Account
from .oracle import VerificationOracle
from .posts import cooldown_remaining
from .reports import is_involved_in_open_report
from .transaction import Transaction, require_address, require_amount

logger = logging.getLogger(__name__)


def activation_price(account: Account, rules: LedgerRules) -> int:
    """Deposit ``account`` must pay to become active.

    Args:
        account: The account (verified status and penalty count are read).
        rules: Ledger rules holding the two price tiers.

    Returns:
        The exact amount ``activate_account`` will accept.
    """
    price = rules.price_verified if account.is_verified else rules.price_unverified
    if rules.penalty_price_scaling:
        price *= account.penalty_count + 1
    return price


def get_verified(tx: Transaction, oracle: VerificationOracle, address: str) -> Account:
    """Mark ``address`` as human-verified after consulting the oracle.

    Raises:
        LedgerError: ALREADY_VERIFIED or NOT_HUMAN_VERIFIED.
    """
    require_address(address)
    if tx.state.get_account(address).is_verified:
        raise LedgerError(ErrorKind.ALREADY_VERIFIED, "Address was already verified", address=address)
    if not oracle.is_human_verified(address):
        raise LedgerError(
            ErrorKind.NOT_HUMAN_VERIFIED,
            "Address is not verified by the human-verification oracle",
            address=address,
        )

    account = tx.state.ensure_account(address)
    account.is_verified = True
    tx.emit(EventKind.ACCOUNT_VERIFIED, address=address)
    logger.info("Account verified: %s", address)
    return account


def activate_account(tx: Transaction, address: str, amount: int) -> Account:
    """Stake ``amount`` to activate ``address``.

    The amount must equal the activation price exactly.

    Raises:
        LedgerError: ACCOUNT_ALREADY_ACTIVE or INVALID_DEPOSIT.
    """
    require_address(address)
    require_amount(amount)
    current = tx.state.get_account(address)
    if current.is_active:
        raise LedgerError(ErrorKind.ACCOUNT_ALREADY_ACTIVE, "Account is already active", address=address)

    price = activation_price(current, tx.rules)
    if amount != price:
        raise LedgerError(
            ErrorKind.INVALID_DEPOSIT,
            f"Deposit must be exactly {price}, got {amount}",
            address=address,
            expected=price,
            received=amount,
        )

    account = tx.state.ensure_account(address)
    tx.state.escrow.receive(address, amount)
    account.staked_amount = amount
    tx.emit(EventKind.ACCOUNT_ACTIVATED, address=address, price_paid=amount)
    logger.info("Account activated: %s (deposit %d)", address, amount)
    return account


def deactivate_account(tx: Transaction, address: str, beneficiary: str) -> int:
    """Deactivate ``address`` and refund its stake to ``beneficiary``.

    Returns:
        The refunded amount.

    Raises:
        LedgerError: ACCOUNT_NOT_ACTIVE, REPORT_IN_PROGRESS or POST_COOLDOWN_ACTIVE.
    """
    require_address(address)
    require_address(beneficiary, "beneficiary")
    account = tx.state.get_account(address)
    if not account.is_active:
        raise LedgerError(ErrorKind.ACCOUNT_NOT_ACTIVE, "Account not active", address=address)
    if is_involved_in_open_report(tx.state, tx.rules, address, tx.now):
        raise LedgerError(
            ErrorKind.REPORT_IN_PROGRESS,
            "Account is currently involved in a report",
            address=address,
        )
    remaining = cooldown_remaining(tx, account)
    if remaining > 0:
        raise LedgerError(
            ErrorKind.POST_COOLDOWN_ACTIVE,
            "Post cooldown has not ended; cannot deactivate yet",
            address=address,
            seconds_remaining=remaining,
        )

    refund = account.staked_amount
    account.staked_amount = 0
    tx.state.escrow.pay(beneficiary, refund, TransferReason.REFUND, payer=address)
    tx.emit(
        EventKind.ACCOUNT_DEACTIVATED,
        address=address,
        beneficiary=beneficiary,
        amount_refunded=refund,
    )
    logger.info("Account deactivated: %s (refund %d to %s)", address, refund, beneficiary)
    return refund
