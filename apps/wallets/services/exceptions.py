"""
Domain-specific exceptions for the wallets app.

Raised by the ledger primitives and caught by the calling services or views.
"""


class WalletsServiceError(Exception):
    """Base exception for all wallet service errors."""
    pass


class AgentNotFoundError(WalletsServiceError):
    """Raised when a delivery agent does not exist."""
    pass


class InvalidWalletTypeError(WalletsServiceError):
    """Raised when a wallet type is neither a known type nor a known alias."""
    pass


class InvalidAmountError(WalletsServiceError):
    """Raised when a ledger amount is not a positive finite number."""
    pass


class InsufficientBalanceError(WalletsServiceError):
    """Raised when a debit would take a wallet below zero."""

    def __init__(self, message, *, available=None, requested=None):
        super().__init__(message)
        self.available = available
        self.requested = requested


class DuplicateLedgerEntryError(WalletsServiceError):
    """Raised when a ledger entry for the same reference already exists."""
    pass
