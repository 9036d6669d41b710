import pytest
from decimal import Decimal
from uuid import uuid4
from django.urls import reverse
from rest_framework import status
from unittest.mock import patch

from apps.payouts.models import PayoutProfile, Withdrawal, WithdrawalStatus
from apps.wallets.models import Wallet, WalletType

from .factories import fund, make_withdrawal


def earnings(agent):
    return Wallet.objects.get(agent=agent, wallet_type=WalletType.EARNINGS).balance


# =============================================================================
# Withdraw
# =============================================================================

@pytest.mark.django_db
class TestWithdraw:
    """Tests for POST /api/payouts/withdraw/"""

    def test_successful_withdrawal(self, agent_client, funded_agent, payout_profile, use_fake_gateway):
        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(funded_agent.id),
            'amount': '400.00',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['transfer_code'] == 'TRF_fake123'
        assert response.data['status'] == WithdrawalStatus.PROCESSING
        assert response.data['reference'].startswith('withdraw_')
        assert earnings(funded_agent) == Decimal('600.00')

    def test_insufficient_balance(self, agent_client, agent, payout_profile, use_fake_gateway):
        fund(agent, '500.00')

        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(agent.id),
            'amount': '1000.00',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'Insufficient balance' in response.data['error']
        assert not Withdrawal.objects.exists()
        assert earnings(agent) == Decimal('500.00')

    def test_gateway_rejection(self, agent_client, funded_agent, payout_profile, use_fake_gateway):
        use_fake_gateway.transfer_response = {
            'status': False, 'message': 'Recipient account is invalid', 'data': {},
        }

        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(funded_agent.id),
            'amount': '100.00',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert response.data['error'] == 'Recipient account is invalid'
        assert response.data['status'] == WithdrawalStatus.FAILED
        assert earnings(funded_agent) == Decimal('1000.00')

    def test_wallet_type_alias(self, agent_client, agent, payout_profile, use_fake_gateway):
        fund(agent, '300.00', wallet_type=WalletType.FOOD)

        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(agent.id),
            'amount': '100.00',
            'type': 'customer_funds',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert Withdrawal.objects.get().type == WalletType.FOOD

    def test_unknown_wallet_type(self, agent_client, funded_agent, payout_profile, use_fake_gateway):
        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(funded_agent.id),
            'amount': '100.00',
            'type': 'savings',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_missing_profile(self, agent_client, funded_agent, use_fake_gateway):
        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(funded_agent.id),
            'amount': '100.00',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unverified_profile(self, agent_client, funded_agent, payout_profile, use_fake_gateway):
        payout_profile.verified = False
        payout_profile.save()

        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(funded_agent.id),
            'amount': '100.00',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_withdrawal_in_progress(self, agent_client, funded_agent, payout_profile, use_fake_gateway):
        make_withdrawal(funded_agent)

        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(funded_agent.id),
            'amount': '100.00',
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_unknown_agent(self, agent_client, use_fake_gateway):
        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(uuid4()),
            'amount': '100.00',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize('amount', ['0', '-10', 'abc'])
    def test_invalid_amount(self, agent_client, funded_agent, payout_profile, use_fake_gateway, amount):
        url = reverse('payouts:withdraw')
        response = agent_client.post(url, {
            'agent_id': str(funded_agent.id),
            'amount': amount,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_other_user_forbidden(self, other_client, funded_agent, payout_profile, use_fake_gateway):
        url = reverse('payouts:withdraw')
        response = other_client.post(url, {
            'agent_id': str(funded_agent.id),
            'amount': '100.00',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert use_fake_gateway.calls == []

    def test_unauthenticated(self, api_client, funded_agent):
        url = reverse('payouts:withdraw')
        response = api_client.post(url, {
            'agent_id': str(funded_agent.id),
            'amount': '100.00',
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_unexpected_error_is_generic_500(self, agent_client, funded_agent, payout_profile):
        with patch('apps.payouts.views.request_withdrawal', side_effect=RuntimeError('secret detail')):
            url = reverse('payouts:withdraw')
            response = agent_client.post(url, {
                'agent_id': str(funded_agent.id),
                'amount': '100.00',
            }, format='json')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert 'secret detail' not in str(response.data)


# =============================================================================
# Bank account verification
# =============================================================================

@pytest.mark.django_db
class TestVerifyBankAccount:
    """Tests for POST /api/payouts/bank-accounts/verify/"""

    def test_verifies_account(self, agent_client, agent, use_fake_gateway):
        url = reverse('payouts:verify-bank-account')
        response = agent_client.post(url, {
            'agent_id': str(agent.id),
            'account_number': '0123456789',
            'bank_code': '044',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['data']['account_name'] == 'ADA AGENT'
        assert response.data['data']['bank_name'] == 'Access Bank'
        assert PayoutProfile.objects.get(user=agent.user).verified is True

    def test_invalid_account_number(self, agent_client, agent, use_fake_gateway):
        url = reverse('payouts:verify-bank-account')
        response = agent_client.post(url, {
            'agent_id': str(agent.id),
            'account_number': '12345',
            'bank_code': '044',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert use_fake_gateway.calls == []

    def test_resolution_failure(self, agent_client, agent, use_fake_gateway):
        use_fake_gateway.resolve_response = {
            'status': False, 'message': 'Could not resolve account name', 'data': {},
        }

        url = reverse('payouts:verify-bank-account')
        response = agent_client.post(url, {
            'agent_id': str(agent.id),
            'account_number': '0123456789',
            'bank_code': '044',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Could not resolve account name'

    def test_other_user_forbidden(self, other_client, agent, use_fake_gateway):
        url = reverse('payouts:verify-bank-account')
        response = other_client.post(url, {
            'agent_id': str(agent.id),
            'account_number': '0123456789',
            'bank_code': '044',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Manual completion
# =============================================================================

@pytest.mark.django_db
class TestCompleteWithdrawal:
    """Tests for POST /api/payouts/withdrawals/{id}/complete/"""

    def test_staff_completes(self, staff_client, staff_user, funded_agent):
        withdrawal = make_withdrawal(funded_agent, '200.00', status=WithdrawalStatus.PROCESSING)

        url = reverse('payouts:complete-withdrawal', kwargs={'pk': withdrawal.id})
        response = staff_client.post(url, {
            'paystack_reference': 'MANUAL-1',
            'admin_notes': 'Paid manually',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['withdrawal']['status'] == WithdrawalStatus.COMPLETED
        assert response.data['withdrawal']['external_transfer_code'] == 'MANUAL-1'
        withdrawal.refresh_from_db()
        assert withdrawal.approved_by == staff_user

    def test_admin_id_attribution(self, staff_client, funded_agent):
        from apps.accounts.models import User
        other_admin = User.objects.create_user(
            email='second-admin@example.com', password='TestPass123!', is_staff=True
        )
        withdrawal = make_withdrawal(funded_agent, '200.00', status=WithdrawalStatus.PROCESSING)

        url = reverse('payouts:complete-withdrawal', kwargs={'pk': withdrawal.id})
        response = staff_client.post(url, {'admin_id': str(other_admin.id)}, format='json')

        assert response.status_code == status.HTTP_200_OK
        withdrawal.refresh_from_db()
        assert withdrawal.approved_by == other_admin

    def test_admin_id_must_be_staff(self, staff_client, agent_user, funded_agent):
        withdrawal = make_withdrawal(funded_agent, '200.00', status=WithdrawalStatus.PROCESSING)

        url = reverse('payouts:complete-withdrawal', kwargs={'pk': withdrawal.id})
        response = staff_client.post(url, {'admin_id': str(agent_user.id)}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_completed_withdrawal_conflict(self, staff_client, funded_agent):
        withdrawal = make_withdrawal(funded_agent, status=WithdrawalStatus.COMPLETED)

        url = reverse('payouts:complete-withdrawal', kwargs={'pk': withdrawal.id})
        response = staff_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_missing_withdrawal(self, staff_client):
        url = reverse('payouts:complete-withdrawal', kwargs={'pk': uuid4()})
        response = staff_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_non_staff_forbidden(self, agent_client, funded_agent):
        withdrawal = make_withdrawal(funded_agent, status=WithdrawalStatus.PROCESSING)

        url = reverse('payouts:complete-withdrawal', kwargs={'pk': withdrawal.id})
        response = agent_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        withdrawal.refresh_from_db()
        assert withdrawal.status == WithdrawalStatus.PROCESSING
