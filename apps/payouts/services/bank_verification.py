"""
Bank account verification.

Resolves an account number with the gateway and stores the result as the
agent's verified payout profile.
"""

import logging
import re
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction

from apps.payouts.gateway import GatewayError, PaymentGatewayClient, get_gateway_client
from apps.payouts.models import PayoutProfile
from apps.wallets.services import get_agent

from .exceptions import BankVerificationError

logger = logging.getLogger(__name__)

ACCOUNT_NUMBER_RE = re.compile(r'^\d{10}$')


def _bank_name(gateway: PaymentGatewayClient, bank_code: str) -> str:
    try:
        response = gateway.list_banks(currency=settings.PAYOUT_CURRENCY)
    except GatewayError as e:
        logger.warning("Could not fetch bank list: %s", e)
        return ''
    for bank in response['data'] or []:
        if str(bank.get('code')) == str(bank_code):
            return bank.get('name') or ''
    return ''


def verify_bank_account(
    *,
    agent_id: UUID,
    account_number: str,
    bank_code: str,
    gateway: Optional[PaymentGatewayClient] = None,
) -> PayoutProfile:
    """
    Verify a bank account and save it as the agent's payout profile.

    Raises:
        AgentNotFoundError: If the agent doesn't exist
        BankVerificationError: If the account can't be resolved
    """
    if not ACCOUNT_NUMBER_RE.match(account_number or ''):
        raise BankVerificationError("Account number must be 10 digits")
    if not bank_code:
        raise BankVerificationError("Bank code is required")

    agent = get_agent(agent_id)
    gateway = gateway or get_gateway_client()

    try:
        response = gateway.resolve_account(account_number=account_number, bank_code=bank_code)
    except GatewayError as e:
        raise BankVerificationError(f"Could not verify bank account: {e}")

    account_name = response['data'].get('account_name') if response['status'] else None
    if not account_name:
        raise BankVerificationError(response['message'] or 'Could not verify bank account')

    bank_name = _bank_name(gateway, bank_code)

    with transaction.atomic():
        profile, created = PayoutProfile.objects.select_for_update().get_or_create(
            user_id=agent.user_id,
            defaults={'account_number': account_number, 'bank_code': bank_code},
        )
        profile.set_account(account_number=account_number, bank_code=bank_code)
        profile.account_name = account_name
        profile.bank_name = bank_name
        profile.verified = True
        profile.save()

    logger.info("Verified payout account for agent %s", agent.id)
    return profile
