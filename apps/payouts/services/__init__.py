"""
Payouts app services layer.

Withdrawal orchestration, transfer reconciliation and the payout
back-office operations. Gateway calls never run inside a database
transaction.
"""

from .exceptions import (
    PayoutsServiceError,
    InvalidWithdrawalAmountError,
    PayoutProfileMissingError,
    PayoutProfileUnverifiedError,
    RecipientCreationError,
    WithdrawalInProgressError,
    WithdrawalNotFoundError,
    InvalidWithdrawalTransitionError,
    AdminRequiredError,
    BankVerificationError,
    AgentNotFoundError,
    InsufficientBalanceError,
    InvalidWalletTypeError,
)

from .withdrawal import (
    request_withdrawal,
)

from .transfer_reconciliation import (
    reconcile_transfer,
    TRANSFER_EVENTS,
)

from .bank_verification import (
    verify_bank_account,
)

from .admin_completion import (
    complete_withdrawal_manually,
)

from .reconciliation_sweep import (
    find_stuck_withdrawals,
    sweep_stuck_withdrawals,
)


__all__ = [
    # Exceptions
    'PayoutsServiceError',
    'InvalidWithdrawalAmountError',
    'PayoutProfileMissingError',
    'PayoutProfileUnverifiedError',
    'RecipientCreationError',
    'WithdrawalInProgressError',
    'WithdrawalNotFoundError',
    'InvalidWithdrawalTransitionError',
    'AdminRequiredError',
    'BankVerificationError',
    'AgentNotFoundError',
    'InsufficientBalanceError',
    'InvalidWalletTypeError',
    # Withdrawals
    'request_withdrawal',
    # Reconciliation
    'reconcile_transfer',
    'TRANSFER_EVENTS',
    'find_stuck_withdrawals',
    'sweep_stuck_withdrawals',
    # Back office
    'verify_bank_account',
    'complete_withdrawal_manually',
]
