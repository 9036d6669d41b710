"""
Orders app services layer.

Settlement of confirmed charges against orders.
"""

from .exceptions import (
    OrdersServiceError,
    OrderNotFoundError,
    NoAgentAssignedError,
    InvalidChargeAmountError,
)

from .payment_split import (
    calculate_split,
    resolve_order,
    process_charge_success,
    OUTCOME_PROCESSED,
    OUTCOME_ALREADY_PROCESSED,
    OUTCOME_SKIPPED,
)


__all__ = [
    # Exceptions
    'OrdersServiceError',
    'OrderNotFoundError',
    'NoAgentAssignedError',
    'InvalidChargeAmountError',
    # Payment split
    'calculate_split',
    'resolve_order',
    'process_charge_success',
    'OUTCOME_PROCESSED',
    'OUTCOME_ALREADY_PROCESSED',
    'OUTCOME_SKIPPED',
]
