import pytest
from decimal import Decimal
from apps.accounts.models import User, DeliveryAgent
from apps.orders.models import Order, SellerType


@pytest.fixture
def agent(db):
    """Delivery agent with a user identity."""
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
def cafeteria_order(agent):
    return Order.objects.create(
        order_number='ORD-2001',
        payment_reference='ref_2001',
        total=Decimal('1500.00'),
        seller_id='cafeteria-1',
        seller_type=SellerType.CAFETERIA,
        delivery_agent=agent,
    )


@pytest.fixture
def unassigned_order(db):
    return Order.objects.create(
        order_number='ORD-3001',
        payment_reference='ref_3001',
        total=Decimal('1000.00'),
        seller_type=SellerType.LATE_NIGHT_VENDOR,
    )
