"""
Ledger side of a withdrawal.

A withdrawal is debited from its wallet at most once and re-credited at
most once; both entries reference the withdrawal id, so the wallet
transaction unique constraint enforces it even across processes.
"""

import logging
from typing import Optional

from apps.payouts.models import Withdrawal
from apps.wallets.models import ReferenceType, TransactionType, WalletTransaction
from apps.wallets.services import (
    credit_wallet,
    debit_wallet,
    has_ledger_entry,
    DuplicateLedgerEntryError,
)

logger = logging.getLogger(__name__)


def was_debited(withdrawal: Withdrawal) -> bool:
    return has_ledger_entry(
        transaction_type=TransactionType.WITHDRAWAL,
        reference_type=ReferenceType.WITHDRAWAL,
        reference_id=withdrawal.id,
        wallet_type=withdrawal.type,
    )


def debit_once(withdrawal: Withdrawal) -> Optional[WalletTransaction]:
    """Debit the withdrawal amount unless already done. Returns the new entry."""
    if was_debited(withdrawal):
        return None
    try:
        return debit_wallet(
            agent=withdrawal.agent,
            wallet_type=withdrawal.type,
            amount=withdrawal.amount,
            reference_type=ReferenceType.WITHDRAWAL,
            reference_id=withdrawal.id,
            description=f"Withdrawal {withdrawal.reference}",
        )
    except DuplicateLedgerEntryError:
        return None


def recredit_once(withdrawal: Withdrawal) -> Optional[WalletTransaction]:
    """Return a debited amount to the wallet after a failed transfer."""
    if not was_debited(withdrawal):
        return None
    try:
        entry = credit_wallet(
            agent=withdrawal.agent,
            wallet_type=withdrawal.type,
            amount=withdrawal.amount,
            reference_type=ReferenceType.WITHDRAWAL,
            reference_id=withdrawal.id,
            description=f"Refund of failed withdrawal {withdrawal.reference}",
        )
    except DuplicateLedgerEntryError:
        return None
    logger.info("Re-credited %s for failed withdrawal %s", withdrawal.amount, withdrawal.reference)
    return entry
