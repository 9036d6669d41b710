"""
Transfer status reconciliation.

Applies the gateway's asynchronous transfer outcome to the matching
withdrawal. Safe to replay: finalized withdrawals are left alone.
"""

import logging
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.payouts.models import Withdrawal, WithdrawalStatus

from .settlement import debit_once, recredit_once

logger = logging.getLogger(__name__)

TRANSFER_SUCCESS = 'transfer.success'
TRANSFER_FAILED = 'transfer.failed'
TRANSFER_REVERSED = 'transfer.reversed'
TRANSFER_EVENTS = (TRANSFER_SUCCESS, TRANSFER_FAILED, TRANSFER_REVERSED)

OUTCOME_COMPLETED = 'completed'
OUTCOME_FAILED = 'failed'
OUTCOME_REVERSED = 'reversed'
OUTCOME_ALREADY_FINALIZED = 'already_finalized'
OUTCOME_IGNORED = 'ignored'


def _locate(transfer_code: Optional[str], reference: Optional[str]) -> Optional[Withdrawal]:
    queryset = Withdrawal.objects.select_for_update().select_related('agent')
    withdrawal = None
    if transfer_code:
        withdrawal = queryset.filter(external_transfer_code=transfer_code).first()
    if withdrawal is None and reference:
        withdrawal = queryset.filter(reference=reference).first()
    return withdrawal


def _failure_reason(event: str, data: dict) -> str:
    reason = data.get('reason') or data.get('fail_reason') or data.get('failure_reason')
    if reason:
        return str(reason)
    if event == TRANSFER_REVERSED:
        return 'Transfer reversed by payment gateway'
    return 'Transfer failed'


@transaction.atomic
def reconcile_transfer(*, event: str, data: dict) -> dict:
    """
    Apply a transfer.success / transfer.failed / transfer.reversed event.

    The withdrawal is located by transfer code, falling back to our
    reference. Failed and reversed transfers return the money to the wallet
    when WITHDRAWAL_RECREDIT_ON_FAILURE is on and the wallet was debited.

    Returns:
        dict with `outcome` and `withdrawal` (None when no row matched)
    """
    if event not in TRANSFER_EVENTS:
        raise ValueError(f"Not a transfer event: {event}")

    data = data or {}
    transfer_code = data.get('transfer_code')
    reference = data.get('reference')

    withdrawal = _locate(transfer_code, reference)
    if withdrawal is None:
        logger.info(
            "No withdrawal for %s (transfer %s, reference %s)",
            event, transfer_code, reference,
        )
        return {'outcome': OUTCOME_IGNORED, 'withdrawal': None}

    now = timezone.now()

    if event == TRANSFER_SUCCESS:
        if withdrawal.is_terminal:
            return {'outcome': OUTCOME_ALREADY_FINALIZED, 'withdrawal': withdrawal}

        # Success can overtake the synchronous acceptance of a pending row
        debit_once(withdrawal)

        withdrawal.status = WithdrawalStatus.COMPLETED
        withdrawal.processed_at = now
        if transfer_code and not withdrawal.external_transfer_code:
            withdrawal.external_transfer_code = transfer_code
        withdrawal.save(update_fields=['status', 'processed_at', 'external_transfer_code', 'updated_at'])
        logger.info("Withdrawal %s completed", withdrawal.reference)
        return {'outcome': OUTCOME_COMPLETED, 'withdrawal': withdrawal}

    if withdrawal.status == WithdrawalStatus.FAILED:
        return {'outcome': OUTCOME_ALREADY_FINALIZED, 'withdrawal': withdrawal}
    if withdrawal.status == WithdrawalStatus.COMPLETED and event != TRANSFER_REVERSED:
        return {'outcome': OUTCOME_ALREADY_FINALIZED, 'withdrawal': withdrawal}

    withdrawal.status = WithdrawalStatus.FAILED
    withdrawal.error_message = _failure_reason(event, data)
    withdrawal.processed_at = now
    withdrawal.save(update_fields=['status', 'error_message', 'processed_at', 'updated_at'])
    logger.warning("Withdrawal %s %s: %s", withdrawal.reference, event, withdrawal.error_message)

    if settings.WITHDRAWAL_RECREDIT_ON_FAILURE:
        recredit_once(withdrawal)

    outcome = OUTCOME_REVERSED if event == TRANSFER_REVERSED else OUTCOME_FAILED
    return {'outcome': outcome, 'withdrawal': withdrawal}
