"""
Wallets app services layer.

Ledger primitives used by the payment split and the payout flows.
"""

from .exceptions import (
    WalletsServiceError,
    AgentNotFoundError,
    InvalidWalletTypeError,
    InvalidAmountError,
    InsufficientBalanceError,
    DuplicateLedgerEntryError,
)

from .ledger import (
    normalize_wallet_type,
    to_amount,
    get_agent,
    get_or_create_wallet,
    has_ledger_entry,
    credit_wallet,
    debit_wallet,
    get_balances,
    initialize_wallets,
)


__all__ = [
    # Exceptions
    'WalletsServiceError',
    'AgentNotFoundError',
    'InvalidWalletTypeError',
    'InvalidAmountError',
    'InsufficientBalanceError',
    'DuplicateLedgerEntryError',
    # Ledger
    'normalize_wallet_type',
    'to_amount',
    'get_agent',
    'get_or_create_wallet',
    'has_ledger_entry',
    'credit_wallet',
    'debit_wallet',
    'get_balances',
    'initialize_wallets',
]
