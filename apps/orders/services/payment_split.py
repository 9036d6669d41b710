"""
Payment split service.

Turns a confirmed charge into wallet credits for the order's delivery agent.
"""

import logging
from decimal import Decimal, ROUND_DOWN
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.orders.models import Order, PaymentStatus
from apps.wallets.models import WalletType, ReferenceType, TransactionType
from apps.wallets.services import (
    credit_wallet,
    has_ledger_entry,
    DuplicateLedgerEntryError,
)

from .exceptions import (
    OrderNotFoundError,
    NoAgentAssignedError,
    InvalidChargeAmountError,
)

logger = logging.getLogger(__name__)

OUTCOME_PROCESSED = 'processed'
OUTCOME_ALREADY_PROCESSED = 'already_processed'
OUTCOME_SKIPPED = 'skipped'


def _to_minor_units(amount) -> int:
    if isinstance(amount, bool):
        raise InvalidChargeAmountError(f"Invalid charge amount: {amount}")
    if isinstance(amount, str) and amount.strip().isdigit():
        amount = int(amount.strip())
    if not isinstance(amount, int):
        raise InvalidChargeAmountError(
            f"Charge amount must be an integer number of minor units, got {amount!r}"
        )
    if amount < 0:
        raise InvalidChargeAmountError(f"Charge amount cannot be negative: {amount}")
    return amount


def _percent_of(amount_minor: int, percent: Decimal) -> int:
    """Truncated share of `amount_minor`, in minor units."""
    return int((Decimal(amount_minor) * percent).to_integral_value(rounding=ROUND_DOWN))


def calculate_split(amount_minor) -> Dict[str, Decimal]:
    """
    Split a charge into food, platform fee and agent earnings.

    Works in integer minor units so the parts always add back up to the
    charged total. Fee and earnings are truncated to the cent; food takes
    whatever is left.

    Example:
        A 5000.00 charge (500000 minor units) with the default 4% / 6%::

            >>> calculate_split(500000)
            {'total': Decimal('5000.00'), 'platform_fee': Decimal('200.00'),
             'agent_earnings': Decimal('300.00'), 'food': Decimal('4500.00'),
             'delivery_fee': Decimal('500.00')}

    Raises:
        InvalidChargeAmountError: If amount is negative or not an integer
        ValueError: If the parts do not sum to the total (safety check)
    """
    amount_minor = _to_minor_units(amount_minor)

    fee_minor = _percent_of(amount_minor, settings.PLATFORM_FEE_PERCENT)
    earnings_minor = _percent_of(amount_minor, settings.AGENT_EARNINGS_PERCENT)
    food_minor = amount_minor - fee_minor - earnings_minor

    if food_minor < 0:
        raise ValueError("Platform fee and agent earnings exceed the charged amount")
    if food_minor + fee_minor + earnings_minor != amount_minor:
        raise ValueError(
            f"Split calculation error: parts do not sum to {amount_minor}"
        )

    cents = Decimal('0.01')
    return {
        'total': (Decimal(amount_minor) / 100).quantize(cents),
        'platform_fee': (Decimal(fee_minor) / 100).quantize(cents),
        'agent_earnings': (Decimal(earnings_minor) / 100).quantize(cents),
        'food': (Decimal(food_minor) / 100).quantize(cents),
        'delivery_fee': (Decimal(fee_minor + earnings_minor) / 100).quantize(cents),
    }


def resolve_order(reference: str) -> Order:
    order = Order.objects.by_reference(reference).select_related('delivery_agent').first()
    if order is None:
        raise OrderNotFoundError(f"Order not found for reference {reference}")
    return order


def _already_credited(order: Order) -> bool:
    return order.payment_status == PaymentStatus.PAID or has_ledger_entry(
        transaction_type=TransactionType.CREDIT,
        reference_type=ReferenceType.ORDER,
        reference_id=order.id,
    )


def _result(outcome: str, order: Order, split: Optional[Dict[str, Decimal]] = None) -> dict:
    return {'outcome': outcome, 'order': order, 'split': split}


def process_charge_success(*, reference: str, amount) -> dict:
    """
    Settle a successful charge against its order.

    Credits the food part to the agent's food wallet and the agent earnings
    to the earnings wallet, then marks the order paid. Both credits and the
    order update commit together or not at all. Replays of the same charge
    are reported as `already_processed` and change nothing.

    Args:
        reference: Gateway charge reference (payment reference, order
            number or order id)
        amount: Charged amount in minor units

    Returns:
        dict with `outcome` (processed, already_processed or skipped),
        `order` and `split`

    Raises:
        InvalidChargeAmountError: If amount is negative or not an integer
        OrderNotFoundError: If no order matches the reference
        NoAgentAssignedError: If the order has no delivery agent
    """
    amount_minor = _to_minor_units(amount)
    order = resolve_order(reference)

    if order.seller_type not in settings.WALLET_SELLER_TYPES:
        logger.info(
            "Order %s is a %s order; no wallet credit",
            order.order_number, order.seller_type,
        )
        return _result(OUTCOME_SKIPPED, order)

    if order.delivery_agent_id is None:
        raise NoAgentAssignedError(
            f"Order {order.order_number} has no delivery agent assigned"
        )

    if _already_credited(order):
        logger.info("Charge for order %s already processed", order.order_number)
        return _result(OUTCOME_ALREADY_PROCESSED, order, order.split_details)

    split = calculate_split(amount_minor)
    if split['total'] != order.total:
        logger.warning(
            "Charged amount %s differs from order %s total %s; using charged amount",
            split['total'], order.order_number, order.total,
        )

    try:
        with transaction.atomic():
            order = (
                Order.objects
                .select_for_update()
                .select_related('delivery_agent')
                .get(id=order.id)
            )
            if _already_credited(order):
                return _result(OUTCOME_ALREADY_PROCESSED, order, order.split_details)

            agent = order.delivery_agent
            credits = (
                (WalletType.FOOD, split['food'], 'Food payment'),
                (WalletType.EARNINGS, split['agent_earnings'], 'Delivery earnings'),
            )
            for wallet_type, amount_major, label in credits:
                if amount_major <= 0:
                    continue
                credit_wallet(
                    agent=agent,
                    wallet_type=wallet_type,
                    amount=amount_major,
                    reference_type=ReferenceType.ORDER,
                    reference_id=order.id,
                    description=f"{label} for order {order.order_number}",
                )

            order.payment_status = PaymentStatus.PAID
            order.split_details = {
                key: str(value) for key, value in split.items()
            }
            order.split_details['charged_amount_minor'] = amount_minor
            order.paid_at = timezone.now()
            order.save(update_fields=['payment_status', 'split_details', 'paid_at', 'updated_at'])
    except DuplicateLedgerEntryError:
        # A concurrent delivery of the same event won the race
        logger.info("Concurrent charge for order %s already processed", order.order_number)
        order.refresh_from_db()
        return _result(OUTCOME_ALREADY_PROCESSED, order, order.split_details)

    logger.info(
        "Processed charge %s for order %s: food %s, fee %s, earnings %s",
        reference, order.order_number,
        split['food'], split['platform_fee'], split['agent_earnings'],
    )
    return _result(OUTCOME_PROCESSED, order, split)
