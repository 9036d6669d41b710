import logging

from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.orders.services import (
    OrderNotFoundError,
    NoAgentAssignedError,
    InvalidChargeAmountError,
)
from apps.webhooks.services import (
    parse_verified_event,
    handle_event,
    WebhookNotConfiguredError,
    SignatureInvalidError,
    MalformedPayloadError,
)

logger = logging.getLogger(__name__)


def _signature_header(request):
    return (
        request.headers.get('X-Signature')
        or request.headers.get('X-Paystack-Signature')
        or ''
    )


@extend_schema(
    request=None,
    description="Signed payment gateway events (charge.success, transfer.*).",
    tags=['webhooks'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def paystack_webhook(request):
    """Receive a signed gateway event."""
    # Raw bytes; request.data would parse (and may normalize) the body
    raw_body = request.body

    try:
        event = parse_verified_event(raw_body=raw_body, signature=_signature_header(request))
    except WebhookNotConfiguredError as e:
        return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    except SignatureInvalidError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except MalformedPayloadError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    try:
        body = handle_event(event=event['event'], data=event['data'])
    except OrderNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (NoAgentAssignedError, InvalidChargeAmountError, MalformedPayloadError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except Exception:
        logger.exception("Failed to handle webhook event %s", event['event'])
        return Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(body)
