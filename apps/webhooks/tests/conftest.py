import json
import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework.test import APIClient
from apps.accounts.models import User, DeliveryAgent
from apps.orders.models import Order, SellerType
from apps.webhooks.signature import compute_signature

WEBHOOK_SECRET = 'sk_test_secret'


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def agent(db):
    user = User.objects.create_user(
        email='agent@example.com',
        password='TestPass123!',
        full_name='Ada Agent',
    )
    return DeliveryAgent.objects.create(user=user)


@pytest.fixture
def order(agent):
    """Unpaid 5000.00 vendor order assigned to the agent."""
    return Order.objects.create(
        order_number='ORD-1001',
        payment_reference='ref_1001',
        total=Decimal('5000.00'),
        seller_id='vendor-1',
        seller_type=SellerType.VENDOR,
        delivery_agent=agent,
    )


@pytest.fixture
def post_event(api_client, settings):
    """POST a signed event to the webhook endpoint."""
    settings.PAYSTACK_WEBHOOK_SECRET = WEBHOOK_SECRET

    def _post(payload, signature=None, header='HTTP_X_SIGNATURE'):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode('utf-8')
        if signature is None:
            signature = compute_signature(body, WEBHOOK_SECRET)
        return api_client.generic(
            'POST',
            reverse('webhooks:paystack'),
            data=body,
            content_type='application/json',
            **{header: signature}
        )

    return _post
