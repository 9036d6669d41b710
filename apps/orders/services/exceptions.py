"""
Domain-specific exceptions for the orders app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class OrdersServiceError(Exception):
    """Base exception for all orders service errors."""
    pass


class OrderNotFoundError(OrdersServiceError):
    """Raised when no order matches a payment reference."""
    pass


class NoAgentAssignedError(OrdersServiceError):
    """Raised when a paid order has no delivery agent to credit."""
    pass


class InvalidChargeAmountError(OrdersServiceError):
    """Raised when a charge amount is not a non-negative integer of minor units."""
    pass
