"""
Gateway webhook handling.

Verifies the signed body, decodes the event and routes it to the payment
split (charges) or the transfer reconciler (payouts).
"""

import json
import logging

from django.conf import settings

from apps.orders.services import process_charge_success
from apps.payouts.services import reconcile_transfer, TRANSFER_EVENTS
from apps.webhooks.signature import verify_signature

from .exceptions import (
    WebhookNotConfiguredError,
    SignatureInvalidError,
    MalformedPayloadError,
)

logger = logging.getLogger(__name__)

CHARGE_SUCCESS = 'charge.success'


def parse_verified_event(*, raw_body: bytes, signature: str) -> dict:
    """
    Check the signature of `raw_body` and decode it.

    Raises:
        WebhookNotConfiguredError: If no webhook secret is configured
        SignatureInvalidError: If the signature does not match
        MalformedPayloadError: If the body is not a JSON object with an event
    """
    secret = settings.PAYSTACK_WEBHOOK_SECRET
    if not secret:
        logger.error("Webhook received but PAYSTACK_WEBHOOK_SECRET is not configured")
        raise WebhookNotConfiguredError('Payment system not configured')

    if not verify_signature(raw_body, signature, secret):
        logger.warning("Rejected webhook with invalid signature")
        raise SignatureInvalidError('Invalid signature')

    try:
        payload = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError):
        raise MalformedPayloadError('Malformed JSON body')

    if not isinstance(payload, dict) or not payload.get('event'):
        raise MalformedPayloadError('Payload must be an object with an event')
    data = payload.get('data') or {}
    if not isinstance(data, dict):
        raise MalformedPayloadError('Event data must be an object')
    return {'event': payload['event'], 'data': data}


def handle_event(*, event: str, data: dict) -> dict:
    """
    Route a verified event.

    Returns the response body for the gateway. Events we do not act on are
    acknowledged with handled=False so the gateway stops retrying them.
    """
    if event == CHARGE_SUCCESS:
        reference = data.get('reference')
        if not reference:
            raise MalformedPayloadError('charge.success without a reference')
        result = process_charge_success(reference=reference, amount=data.get('amount'))
        return {
            'received': True,
            'handled': True,
            'outcome': result['outcome'],
            'order_id': str(result['order'].id),
        }

    if event in TRANSFER_EVENTS:
        result = reconcile_transfer(event=event, data=data)
        withdrawal = result['withdrawal']
        return {
            'received': True,
            'handled': True,
            'outcome': result['outcome'],
            'withdrawal_id': str(withdrawal.id) if withdrawal else None,
        }

    logger.info("Ignoring webhook event %s", event)
    return {'received': True, 'handled': False}
