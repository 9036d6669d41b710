import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, DeliveryAgent


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
    """Delivery agent owned by agent_user."""
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
        full_name='Staff Member',
        is_staff=True,
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def agent_client(agent_user):
    """API client authenticated as the agent's user."""
    return _client_for(agent_user)


@pytest.fixture
def other_client(other_user):
    return _client_for(other_user)


@pytest.fixture
def staff_client(staff_user):
    return _client_for(staff_user)
