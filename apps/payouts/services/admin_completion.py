"""Manual completion of withdrawals by staff."""

import logging
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.accounts.models import User
from apps.payouts.models import Withdrawal, WithdrawalStatus

from .exceptions import (
    AdminRequiredError,
    InvalidWithdrawalTransitionError,
    WithdrawalNotFoundError,
)
from .settlement import debit_once

logger = logging.getLogger(__name__)


@transaction.atomic
def complete_withdrawal_manually(
    *,
    withdrawal_id: UUID,
    admin: User,
    reference: Optional[str] = None,
    admin_notes: str = '',
) -> Withdrawal:
    """
    Mark a pending or processing withdrawal as paid out by hand.

    Used when the transfer was settled outside the gateway. A pending
    withdrawal was never debited, so it is debited here.

    Args:
        withdrawal_id: UUID of the withdrawal
        admin: Staff user approving the completion
        reference: Optional external payment reference
        admin_notes: Free-form notes

    Raises:
        AdminRequiredError: If admin is not staff
        WithdrawalNotFoundError: If the withdrawal doesn't exist
        InvalidWithdrawalTransitionError: If the withdrawal is already
            completed or failed, or the reference is already in use
        InsufficientBalanceError: If a pending withdrawal can no longer be covered
    """
    if admin is None or not admin.is_staff:
        raise AdminRequiredError("Only staff can complete withdrawals")

    try:
        withdrawal = (
            Withdrawal.objects
            .select_for_update()
            .select_related('agent')
            .get(id=withdrawal_id)
        )
    except (Withdrawal.DoesNotExist, ValidationError, ValueError):
        raise WithdrawalNotFoundError(f"Withdrawal {withdrawal_id} not found")

    if withdrawal.is_terminal:
        raise InvalidWithdrawalTransitionError(
            f"Withdrawal is already {withdrawal.status}"
        )

    debit_once(withdrawal)

    now = timezone.now()
    withdrawal.status = WithdrawalStatus.COMPLETED
    withdrawal.approved_by = admin
    withdrawal.approved_at = now
    withdrawal.processed_at = now
    if reference:
        withdrawal.external_transfer_code = reference
    if admin_notes:
        withdrawal.admin_notes = admin_notes

    try:
        with transaction.atomic():
            withdrawal.save(update_fields=[
                'status', 'approved_by', 'approved_at', 'processed_at',
                'external_transfer_code', 'admin_notes', 'updated_at',
            ])
    except IntegrityError:
        raise InvalidWithdrawalTransitionError(
            f"Reference {reference} is already used by another withdrawal"
        )

    logger.info("Withdrawal %s completed manually by %s", withdrawal.reference, admin.email)
    return withdrawal
