"""
Withdrawal orchestration.

Moves money from an agent wallet to the agent's bank account through the
payment gateway. The wallet is only debited once the gateway has accepted
the transfer; gateway calls always happen outside database transactions.
"""

import logging
import uuid
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, DatabaseError
from django.utils import timezone

from apps.payouts.gateway import GatewayError, PaymentGatewayClient, get_gateway_client
from apps.payouts.models import PayoutProfile, Withdrawal, WithdrawalStatus
from apps.wallets.services import (
    get_agent,
    get_or_create_wallet,
    normalize_wallet_type,
    to_amount,
    InvalidAmountError,
)

from .exceptions import (
    InsufficientBalanceError,
    InvalidWithdrawalAmountError,
    PayoutProfileMissingError,
    PayoutProfileUnverifiedError,
    RecipientCreationError,
    WithdrawalInProgressError,
)
from .settlement import debit_once

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value())


def generate_reference() -> str:
    return f"withdraw_{uuid.uuid4().hex}"


def _validate_amount(amount) -> Decimal:
    try:
        amount = to_amount(amount)
    except InvalidAmountError as e:
        raise InvalidWithdrawalAmountError(str(e))

    minimum = settings.WITHDRAWAL_MIN_AMOUNT
    if minimum and amount < minimum:
        raise InvalidWithdrawalAmountError(f"Minimum withdrawal amount is {minimum}")
    return amount


def _insufficient(balance, amount):
    return InsufficientBalanceError(
        f"Insufficient balance: available {balance}, requested {amount}",
        available=balance,
        requested=amount,
    )


def _ensure_recipient(profile: PayoutProfile, gateway: PaymentGatewayClient) -> str:
    """Return the profile's transfer recipient, registering it if needed."""
    if profile.recipient_code:
        return profile.recipient_code

    try:
        response = gateway.create_recipient(
            type='nuban',
            name=profile.account_name or profile.user.get_display_name(),
            account_number=profile.account_number,
            bank_code=profile.bank_code,
            currency=settings.PAYOUT_CURRENCY,
        )
    except GatewayError as e:
        raise RecipientCreationError(f"Could not register transfer recipient: {e}")

    code = response['data'].get('recipient_code') if response['status'] else None
    if not code:
        raise RecipientCreationError(
            response['message'] or 'Could not register transfer recipient'
        )

    # Caching the code is an optimization; a failure here must not block the payout
    try:
        with transaction.atomic():
            PayoutProfile.objects.filter(id=profile.id).update(
                recipient_code=code,
                updated_at=timezone.now(),
            )
    except DatabaseError:
        logger.exception("Could not store recipient code for payout profile %s", profile.id)

    profile.recipient_code = code
    return code


def _reserve(*, agent, wallet_type: str, amount: Decimal) -> Withdrawal:
    with transaction.atomic():
        wallet = get_or_create_wallet(agent=agent, wallet_type=wallet_type, lock=True)
        if wallet.balance < amount:
            raise _insufficient(wallet.balance, amount)

        in_progress = Withdrawal.objects.filter(
            agent=agent,
            type=wallet_type,
            status=WithdrawalStatus.PENDING,
        ).exists()
        if in_progress:
            raise WithdrawalInProgressError(
                "Another withdrawal from this wallet is still being processed"
            )

        return Withdrawal.objects.create(
            agent=agent,
            amount=amount,
            type=wallet_type,
            status=WithdrawalStatus.PENDING,
            reference=generate_reference(),
        )


def _result(success: bool, withdrawal: Withdrawal, message: str) -> dict:
    return {
        'success': success,
        'withdrawal': withdrawal,
        'transfer_code': withdrawal.external_transfer_code,
        'message': message,
    }


def _reject(withdrawal: Withdrawal, message: str) -> dict:
    """Record a transfer the gateway did not take. No ledger change."""
    message = message or 'Transfer failed'
    with transaction.atomic():
        withdrawal = Withdrawal.objects.select_for_update().get(id=withdrawal.id)
        if withdrawal.status == WithdrawalStatus.PENDING:
            withdrawal.status = WithdrawalStatus.FAILED
            withdrawal.error_message = message
            withdrawal.processed_at = timezone.now()
            withdrawal.save(update_fields=['status', 'error_message', 'processed_at', 'updated_at'])

    logger.warning("Withdrawal %s failed: %s", withdrawal.reference, message)
    return _result(False, withdrawal, message)


def _accept(withdrawal: Withdrawal, data: dict, *, completed: bool) -> Withdrawal:
    """Record an accepted transfer and debit the wallet once."""
    with transaction.atomic():
        withdrawal = (
            Withdrawal.objects
            .select_for_update()
            .select_related('agent')
            .get(id=withdrawal.id)
        )
        # A transfer webhook may have finalized the row already
        if withdrawal.status == WithdrawalStatus.FAILED:
            return withdrawal

        debit_once(withdrawal)

        withdrawal.external_transfer_code = data.get('transfer_code') or withdrawal.external_transfer_code
        withdrawal.gateway_reference = str(data.get('reference') or withdrawal.reference)
        if completed or withdrawal.status == WithdrawalStatus.COMPLETED:
            withdrawal.status = WithdrawalStatus.COMPLETED
            withdrawal.processed_at = withdrawal.processed_at or timezone.now()
        else:
            withdrawal.status = WithdrawalStatus.PROCESSING
        withdrawal.save(update_fields=[
            'status', 'external_transfer_code', 'gateway_reference', 'processed_at', 'updated_at',
        ])
    return withdrawal


def _dispatch(withdrawal: Withdrawal, recipient_code: str, gateway: PaymentGatewayClient) -> dict:
    try:
        response = gateway.initiate_transfer(
            amount_minor=to_minor_units(withdrawal.amount),
            recipient_code=recipient_code,
            reference=withdrawal.reference,
            reason=f"Wallet withdrawal {withdrawal.reference}",
        )
    except GatewayError as e:
        return _reject(withdrawal, str(e) or 'Payment gateway error')

    if not response['status']:
        return _reject(withdrawal, response['message'] or 'Transfer rejected by payment gateway')

    data = response['data']
    transfer_status = data.get('status')
    if transfer_status == 'failed':
        return _reject(
            withdrawal,
            data.get('reason') or response['message'] or 'Transfer failed',
        )

    withdrawal = _accept(withdrawal, data, completed=transfer_status == 'success')
    if withdrawal.status == WithdrawalStatus.FAILED:
        return _result(False, withdrawal, withdrawal.error_message)

    logger.info(
        "Withdrawal %s of %s accepted by gateway (transfer %s, %s)",
        withdrawal.reference, withdrawal.amount,
        withdrawal.external_transfer_code, withdrawal.status,
    )
    return _result(True, withdrawal, response['message'] or 'Transfer initiated')


def _fail_if_pending(withdrawal: Withdrawal, message: str) -> None:
    now = timezone.now()
    Withdrawal.objects.filter(
        id=withdrawal.id,
        status=WithdrawalStatus.PENDING,
    ).update(
        status=WithdrawalStatus.FAILED,
        error_message=message,
        processed_at=now,
        updated_at=now,
    )


def request_withdrawal(
    *,
    agent_id: UUID,
    amount,
    wallet_type: Optional[str] = None,
    gateway: Optional[PaymentGatewayClient] = None,
) -> dict:
    """
    Withdraw `amount` from an agent wallet to their verified bank account.

    Checks run in a fixed order and stop at the first failure. Nothing is
    written before the gateway recipient exists; the withdrawal row is then
    reserved as pending, the transfer is sent, and the wallet is debited only
    if the gateway accepted it.

    Args:
        agent_id: UUID of the delivery agent
        amount: Amount in major currency units
        wallet_type: Wallet to withdraw from (defaults to earnings_wallet;
            customer_funds / delivery_earnings aliases accepted)
        gateway: Gateway client, defaults to the configured one

    Returns:
        dict with `success`, `withdrawal`, `transfer_code` and `message`.
        A gateway rejection is reported with success=False rather than
        raised.

    Raises:
        InvalidWithdrawalAmountError: If amount is invalid or below the minimum
        InvalidWalletTypeError: If the wallet type is unknown
        AgentNotFoundError: If the agent doesn't exist
        InsufficientBalanceError: If the wallet balance is too low
        PayoutProfileMissingError: If the agent has no payout profile
        PayoutProfileUnverifiedError: If the bank account is unverified
        RecipientCreationError: If the gateway recipient can't be created
        WithdrawalInProgressError: If another withdrawal is pending
    """
    amount = _validate_amount(amount)
    wallet_type = normalize_wallet_type(wallet_type)

    agent = get_agent(agent_id)

    wallet = get_or_create_wallet(agent=agent, wallet_type=wallet_type)
    if wallet.balance < amount:
        raise _insufficient(wallet.balance, amount)

    try:
        profile = PayoutProfile.objects.select_related('user').get(user_id=agent.user_id)
    except PayoutProfile.DoesNotExist:
        raise PayoutProfileMissingError("No payout account set up for this agent")
    if not profile.verified:
        raise PayoutProfileUnverifiedError("Payout bank account has not been verified")

    gateway = gateway or get_gateway_client()
    recipient_code = _ensure_recipient(profile, gateway)

    withdrawal = _reserve(agent=agent, wallet_type=wallet_type, amount=amount)
    logger.info(
        "Reserved withdrawal %s of %s from %s for agent %s",
        withdrawal.reference, amount, wallet_type, agent.id,
    )

    try:
        return _dispatch(withdrawal, recipient_code, gateway)
    except Exception:
        logger.exception("Unexpected error while processing withdrawal %s", withdrawal.reference)
        _fail_if_pending(withdrawal, 'Unexpected error while processing withdrawal')
        raise
