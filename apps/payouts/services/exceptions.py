"""
Domain-specific exceptions for the payouts app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""

from apps.wallets.services.exceptions import (
    AgentNotFoundError,
    InsufficientBalanceError,
    InvalidWalletTypeError,
)


class PayoutsServiceError(Exception):
    """Base exception for all payout service errors."""
    pass


class InvalidWithdrawalAmountError(PayoutsServiceError):
    """Raised when a withdrawal amount is not positive or below the minimum."""
    pass


class PayoutProfileMissingError(PayoutsServiceError):
    """Raised when the agent has no payout profile."""
    pass


class PayoutProfileUnverifiedError(PayoutsServiceError):
    """Raised when the agent's bank account has not been verified."""
    pass


class RecipientCreationError(PayoutsServiceError):
    """Raised when the gateway refuses to create a transfer recipient."""
    pass


class WithdrawalInProgressError(PayoutsServiceError):
    """Raised when the agent already has a pending withdrawal for the wallet."""
    pass


class WithdrawalNotFoundError(PayoutsServiceError):
    """Raised when a withdrawal does not exist."""
    pass


class InvalidWithdrawalTransitionError(PayoutsServiceError):
    """Raised when a withdrawal cannot move to the requested status."""
    pass


class AdminRequiredError(PayoutsServiceError):
    """Raised when a non-staff user attempts an admin-only action."""
    pass


class BankVerificationError(PayoutsServiceError):
    """Raised when the gateway cannot resolve a bank account."""
    pass


__all__ = [
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
    # Re-exported from the wallets app
    'AgentNotFoundError',
    'InsufficientBalanceError',
    'InvalidWalletTypeError',
]
