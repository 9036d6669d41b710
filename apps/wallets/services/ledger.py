"""
Ledger primitives.

Every balance change goes through `credit_wallet` or `debit_wallet`, which
lock the wallet row, move the balance and append one WalletTransaction in
the same savepoint. The unique constraint on the transaction reference
turns a repeated entry into DuplicateLedgerEntryError and rolls the balance
change back with it.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from django.db import transaction, IntegrityError

from apps.accounts.models import DeliveryAgent
from apps.wallets.models import (
    Wallet,
    WalletTransaction,
    WalletType,
    WALLET_TYPE_ALIASES,
    TransactionType,
)

from .exceptions import (
    AgentNotFoundError,
    InvalidWalletTypeError,
    InvalidAmountError,
    InsufficientBalanceError,
    DuplicateLedgerEntryError,
)

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def normalize_wallet_type(value: Optional[str], default: str = WalletType.EARNINGS) -> str:
    """
    Map a requested wallet type (or alias) to a WalletType value.

    An empty value falls back to `default`.
    """
    if value is None or value == '':
        return default
    if value in WalletType.values:
        return value
    if value in WALLET_TYPE_ALIASES:
        return WALLET_TYPE_ALIASES[value]
    raise InvalidWalletTypeError(f"Unknown wallet type: {value}")


def to_amount(value) -> Decimal:
    """Coerce to a positive Decimal with two decimal places."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(f"Invalid amount: {value}")
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError(f"Amount must be a positive number, got {value}")
    if amount != amount.quantize(CENT):
        raise InvalidAmountError(f"Amount has more than two decimal places: {value}")
    return amount.quantize(CENT)


def get_agent(agent_id: UUID) -> DeliveryAgent:
    try:
        return DeliveryAgent.objects.select_related('user').get(id=agent_id)
    except (DeliveryAgent.DoesNotExist, ValueError):
        raise AgentNotFoundError(f"Delivery agent {agent_id} not found")


def get_or_create_wallet(*, agent: DeliveryAgent, wallet_type: str, lock: bool = False) -> Wallet:
    """
    Return the agent's wallet of `wallet_type`, creating it at zero.

    With `lock=True` the row is fetched FOR UPDATE; the caller must be
    inside a transaction.
    """
    queryset = Wallet.objects.select_for_update() if lock else Wallet.objects
    wallet, created = queryset.get_or_create(
        agent=agent,
        wallet_type=wallet_type,
        defaults={'balance': Decimal('0.00')},
    )
    if created:
        logger.info("Created %s for agent %s", wallet_type, agent.id)
    return wallet


def has_ledger_entry(
    *,
    transaction_type: str,
    reference_type: str,
    reference_id,
    wallet_type: Optional[str] = None,
) -> bool:
    """Whether a ledger entry for this reference already exists."""
    queryset = WalletTransaction.objects.filter(
        transaction_type=transaction_type,
        reference_type=reference_type,
        reference_id=str(reference_id),
    )
    if wallet_type is not None:
        queryset = queryset.filter(wallet_type=wallet_type)
    return queryset.exists()


def _apply(
    *,
    agent: DeliveryAgent,
    wallet_type: str,
    amount,
    transaction_type: str,
    reference_type: str,
    reference_id,
    description: str,
) -> WalletTransaction:
    amount = to_amount(amount)
    try:
        with transaction.atomic():
            wallet = get_or_create_wallet(agent=agent, wallet_type=wallet_type, lock=True)

            balance_before = wallet.balance
            if transaction_type == TransactionType.WITHDRAWAL:
                if balance_before < amount:
                    raise InsufficientBalanceError(
                        f"Insufficient balance: available {balance_before}, requested {amount}",
                        available=balance_before,
                        requested=amount,
                    )
                balance_after = balance_before - amount
            else:
                balance_after = balance_before + amount

            wallet.balance = balance_after
            wallet.save(update_fields=['balance', 'updated_at'])

            entry = WalletTransaction.objects.create(
                wallet=wallet,
                agent=agent,
                wallet_type=wallet_type,
                transaction_type=transaction_type,
                amount=amount,
                balance_before=balance_before,
                balance_after=balance_after,
                reference_type=reference_type,
                reference_id=str(reference_id),
                description=description,
            )
    except IntegrityError:
        raise DuplicateLedgerEntryError(
            f"Ledger entry already exists for {reference_type} {reference_id}"
        )

    logger.info(
        "%s %s on %s of agent %s (%s -> %s) for %s %s",
        transaction_type, amount, wallet_type, agent.id,
        balance_before, balance_after, reference_type, reference_id,
    )
    return entry


def credit_wallet(
    *,
    agent: DeliveryAgent,
    wallet_type: str,
    amount,
    reference_type: str,
    reference_id,
    description: str = '',
) -> WalletTransaction:
    """
    Add `amount` to the agent's wallet and record a credit entry.

    Raises:
        InvalidAmountError: If amount is not positive
        DuplicateLedgerEntryError: If this reference was already credited
    """
    return _apply(
        agent=agent,
        wallet_type=wallet_type,
        amount=amount,
        transaction_type=TransactionType.CREDIT,
        reference_type=reference_type,
        reference_id=reference_id,
        description=description,
    )


def debit_wallet(
    *,
    agent: DeliveryAgent,
    wallet_type: str,
    amount,
    reference_type: str,
    reference_id,
    description: str = '',
) -> WalletTransaction:
    """
    Subtract `amount` from the agent's wallet and record a withdrawal entry.

    Raises:
        InvalidAmountError: If amount is not positive
        InsufficientBalanceError: If the balance would go negative
        DuplicateLedgerEntryError: If this reference was already debited
    """
    return _apply(
        agent=agent,
        wallet_type=wallet_type,
        amount=amount,
        transaction_type=TransactionType.WITHDRAWAL,
        reference_type=reference_type,
        reference_id=reference_id,
        description=description,
    )


def get_balances(*, agent: DeliveryAgent) -> Dict[str, Decimal]:
    balances = {wallet_type: Decimal('0.00') for wallet_type in WalletType.values}
    for wallet in Wallet.objects.filter(agent=agent):
        balances[wallet.wallet_type] = wallet.balance
    return balances


@transaction.atomic
def initialize_wallets(*, agent_id: UUID) -> Tuple[List[Wallet], bool]:
    """
    Make sure the agent owns one wallet of every type.

    Existing wallets are left untouched.

    Returns:
        (wallets, created) where `created` is True if any wallet was new

    Raises:
        AgentNotFoundError: If the agent doesn't exist
    """
    agent = get_agent(agent_id)

    wallets = []
    created_any = False
    for wallet_type in WalletType.values:
        wallet, created = Wallet.objects.get_or_create(
            agent=agent,
            wallet_type=wallet_type,
            defaults={'balance': Decimal('0.00')},
        )
        wallets.append(wallet)
        created_any = created_any or created

    if created_any:
        logger.info("Initialized wallets for agent %s", agent.id)
    return wallets, created_any
