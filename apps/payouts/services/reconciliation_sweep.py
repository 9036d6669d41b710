"""Failing withdrawals that never left the pending state."""

import logging
from datetime import timedelta
from typing import List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.payouts.models import Withdrawal, WithdrawalStatus

logger = logging.getLogger(__name__)

STUCK_MESSAGE = 'Withdrawal did not reach the payment gateway and was cancelled'


def find_stuck_withdrawals(*, older_than_minutes: Optional[int] = None):
    """
    Pending withdrawals created before the cutoff.

    The cutoff is never shorter than the gateway timeout, so a row whose
    transfer call may still be in flight is left alone.
    """
    minutes = settings.STUCK_WITHDRAWAL_MINUTES if older_than_minutes is None else older_than_minutes
    age = max(timedelta(minutes=minutes), timedelta(seconds=settings.PAYSTACK_TIMEOUT))
    cutoff = timezone.now() - age
    return Withdrawal.objects.filter(
        status=WithdrawalStatus.PENDING,
        created_at__lt=cutoff,
    ).order_by('created_at')


@transaction.atomic
def sweep_stuck_withdrawals(*, older_than_minutes: Optional[int] = None) -> List[Withdrawal]:
    """
    Fail pending withdrawals older than the cutoff.

    Pending withdrawals were never debited, so no ledger entry is written.
    Returns the withdrawals that were failed.
    """
    stuck = list(
        find_stuck_withdrawals(older_than_minutes=older_than_minutes).select_for_update()
    )
    now = timezone.now()
    for withdrawal in stuck:
        withdrawal.status = WithdrawalStatus.FAILED
        withdrawal.error_message = STUCK_MESSAGE
        withdrawal.processed_at = now
        withdrawal.save(update_fields=['status', 'error_message', 'processed_at', 'updated_at'])
        logger.warning("Failed stuck withdrawal %s (created %s)", withdrawal.reference, withdrawal.created_at)
    return stuck
