"""
Webhooks app services layer.
"""

from .exceptions import (
    WebhookError,
    WebhookNotConfiguredError,
    SignatureInvalidError,
    MalformedPayloadError,
)

from .dispatch import (
    parse_verified_event,
    handle_event,
)


__all__ = [
    'WebhookError',
    'WebhookNotConfiguredError',
    'SignatureInvalidError',
    'MalformedPayloadError',
    'parse_verified_event',
    'handle_event',
]
