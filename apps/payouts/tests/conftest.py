import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, DeliveryAgent
from apps.payouts.models import PayoutProfile
from .factories import fund
from .fakes import FakeGatewayClient


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def agent_user(db):
    return User.objects.create_user(
        email='agent@example.com',
        password='TestPass123!',
        full_name='Ada Agent',
    )


@pytest.fixture
def agent(agent_user):
    return DeliveryAgent.objects.create(user=agent_user)


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        full_name='Other User',
    )


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(
        email='staff@example.com',
        password='TestPass123!',
        full_name='Payout Admin',
        is_staff=True,
    )


@pytest.fixture
def fake_gateway():
    return FakeGatewayClient()


@pytest.fixture
def use_fake_gateway(fake_gateway, monkeypatch):
    """Make get_gateway_client() hand out the shared fake."""
    monkeypatch.setattr(
        'apps.payouts.services.withdrawal.get_gateway_client',
        lambda: fake_gateway,
    )
    monkeypatch.setattr(
        'apps.payouts.services.bank_verification.get_gateway_client',
        lambda: fake_gateway,
    )
    return fake_gateway


@pytest.fixture
def payout_profile(agent_user):
    """Verified bank account without a cached recipient."""
    return PayoutProfile.objects.create(
        user=agent_user,
        account_number='0123456789',
        bank_code='044',
        bank_name='Access Bank',
        account_name='ADA AGENT',
        verified=True,
    )


@pytest.fixture
def funded_agent(agent):
    """Agent with 1000.00 in the earnings wallet."""
    fund(agent, '1000.00')
    return agent


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def agent_client(agent_user):
    return _client_for(agent_user)


@pytest.fixture
def other_client(other_user):
    return _client_for(other_user)


@pytest.fixture
def staff_client(staff_user):
    return _client_for(staff_user)
