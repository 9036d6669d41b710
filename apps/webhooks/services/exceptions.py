"""
Domain-specific exceptions for the webhooks app.
"""


class WebhookError(Exception):
    """Base exception for webhook handling errors."""
    pass


class WebhookNotConfiguredError(WebhookError):
    """Raised when no webhook secret is configured."""
    pass


class SignatureInvalidError(WebhookError):
    """Raised when the request signature is missing or wrong."""
    pass


class MalformedPayloadError(WebhookError):
    """Raised when the body is not a usable event payload."""
    pass
