"""
Payment gateway clients.

`PaymentGatewayClient` is the interface the payout services talk to;
`PaystackClient` implements it over the Paystack REST API with `requests`.
The active client class is chosen by the PAYMENT_GATEWAY_CLIENT setting.

Every method returns the decoded gateway envelope
``{'status': bool, 'message': str, 'data': dict}`` and raises GatewayError
when no usable envelope came back (transport error, timeout, non-2xx
status, malformed JSON).
"""

import logging

import requests
from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when the gateway could not be reached or answered garbage."""

    def __init__(self, message, *, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class PaymentGatewayClient:
    """Interface of the external transfer provider."""

    def create_recipient(self, *, name, account_number, bank_code, currency, type='nuban'):
        raise NotImplementedError

    def initiate_transfer(self, *, amount_minor, recipient_code, reference, reason=''):
        raise NotImplementedError

    def resolve_account(self, *, account_number, bank_code):
        raise NotImplementedError

    def list_banks(self, *, currency):
        raise NotImplementedError


class PaystackClient(PaymentGatewayClient):
    """Paystack REST client."""

    def __init__(self, secret_key=None, base_url=None, timeout=None):
        self.secret_key = secret_key if secret_key is not None else settings.PAYSTACK_SECRET_KEY
        self.base_url = (base_url or settings.PAYSTACK_BASE_URL).rstrip('/')
        self.timeout = timeout or settings.PAYSTACK_TIMEOUT

    def _headers(self):
        return {
            'Authorization': f'Bearer {self.secret_key}',
            'Content-Type': 'application/json',
        }

    def _request(self, method, path, *, json=None, params=None):
        if not self.secret_key:
            raise GatewayError('Payment gateway secret key is not configured')

        url = f'{self.base_url}{path}'
        try:
            response = requests.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.warning("Gateway timeout on %s %s", method, path)
            raise GatewayError('Payment gateway timed out')
        except requests.exceptions.RequestException as e:
            logger.warning("Gateway request %s %s failed: %s", method, path, e)
            raise GatewayError(f'Payment gateway unreachable: {e}')

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            message = None
            if isinstance(payload, dict):
                message = payload.get('message')
            logger.warning("Gateway %s %s returned HTTP %s", method, path, response.status_code)
            raise GatewayError(
                message or f'Payment gateway returned HTTP {response.status_code}',
                status_code=response.status_code,
            )

        if not isinstance(payload, dict):
            raise GatewayError('Malformed response from payment gateway',
                               status_code=response.status_code)

        return {
            'status': bool(payload.get('status')),
            'message': payload.get('message') or '',
            'data': payload.get('data') or {},
        }

    def create_recipient(self, *, name, account_number, bank_code, currency, type='nuban'):
        return self._request('POST', '/transferrecipient', json={
            'type': type,
            'name': name,
            'account_number': account_number,
            'bank_code': bank_code,
            'currency': currency,
        })

    def initiate_transfer(self, *, amount_minor, recipient_code, reference, reason=''):
        return self._request('POST', '/transfer', json={
            'source': 'balance',
            'amount': amount_minor,
            'recipient': recipient_code,
            'reference': reference,
            'reason': reason,
        })

    def resolve_account(self, *, account_number, bank_code):
        return self._request('GET', '/bank/resolve', params={
            'account_number': account_number,
            'bank_code': bank_code,
        })

    def list_banks(self, *, currency):
        return self._request('GET', '/bank', params={'currency': currency})


def get_gateway_client() -> PaymentGatewayClient:
    """Instantiate the configured gateway client."""
    return import_string(settings.PAYMENT_GATEWAY_CLIENT)()
