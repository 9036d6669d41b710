"""
Service layer tests for withdrawal orchestration.

Tests cover:
- Validation order and failure modes
- Recipient provisioning
- Gateway rejection vs acceptance
- Single debit per withdrawal
"""

import pytest
from decimal import Decimal
from uuid import uuid4
from unittest.mock import patch

from django.db import DatabaseError

from apps.payouts.models import PayoutProfile, Withdrawal, WithdrawalStatus
from apps.payouts.services import request_withdrawal
from apps.payouts.services.exceptions import (
    AgentNotFoundError,
    InsufficientBalanceError,
    InvalidWalletTypeError,
    InvalidWithdrawalAmountError,
    PayoutProfileMissingError,
    PayoutProfileUnverifiedError,
    RecipientCreationError,
    WithdrawalInProgressError,
)
from apps.wallets.models import Wallet, WalletTransaction, WalletType, TransactionType

from .factories import fund, make_withdrawal
from .fakes import gateway_down


def earnings(agent):
    return Wallet.objects.get(agent=agent, wallet_type=WalletType.EARNINGS).balance


# =============================================================================
# Validation
# =============================================================================

@pytest.mark.django_db
class TestWithdrawalValidation:
    """Each check fails before any withdrawal row or debit exists."""

    @pytest.mark.parametrize('amount', [0, -5, 'abc', 'NaN'])
    def test_invalid_amount(self, funded_agent, payout_profile, fake_gateway, amount):
        with pytest.raises(InvalidWithdrawalAmountError):
            request_withdrawal(agent_id=funded_agent.id, amount=amount, gateway=fake_gateway)
        assert not Withdrawal.objects.exists()

    def test_below_minimum(self, settings, funded_agent, payout_profile, fake_gateway):
        settings.WITHDRAWAL_MIN_AMOUNT = Decimal('500')

        with pytest.raises(InvalidWithdrawalAmountError):
            request_withdrawal(agent_id=funded_agent.id, amount='100', gateway=fake_gateway)

    def test_unknown_wallet_type(self, funded_agent, payout_profile, fake_gateway):
        with pytest.raises(InvalidWalletTypeError):
            request_withdrawal(
                agent_id=funded_agent.id, amount='10', wallet_type='savings', gateway=fake_gateway
            )

    def test_unknown_agent(self, db, fake_gateway):
        with pytest.raises(AgentNotFoundError):
            request_withdrawal(agent_id=uuid4(), amount='10', gateway=fake_gateway)

    def test_insufficient_balance(self, agent, payout_profile, fake_gateway):
        fund(agent, '500.00')

        with pytest.raises(InsufficientBalanceError):
            request_withdrawal(agent_id=agent.id, amount='1000', gateway=fake_gateway)

        assert earnings(agent) == Decimal('500.00')
        assert not Withdrawal.objects.exists()
        assert fake_gateway.calls == []

    def test_empty_wallet_is_created_lazily(self, agent, payout_profile, fake_gateway):
        with pytest.raises(InsufficientBalanceError):
            request_withdrawal(agent_id=agent.id, amount='1', gateway=fake_gateway)

        assert earnings(agent) == Decimal('0.00')

    def test_missing_payout_profile(self, funded_agent, fake_gateway):
        with pytest.raises(PayoutProfileMissingError):
            request_withdrawal(agent_id=funded_agent.id, amount='100', gateway=fake_gateway)

    def test_unverified_payout_profile(self, funded_agent, payout_profile, fake_gateway):
        payout_profile.verified = False
        payout_profile.save()

        with pytest.raises(PayoutProfileUnverifiedError):
            request_withdrawal(agent_id=funded_agent.id, amount='100', gateway=fake_gateway)
        assert fake_gateway.calls == []

    def test_pending_withdrawal_blocks_another(self, funded_agent, payout_profile, fake_gateway):
        make_withdrawal(funded_agent, '100.00')

        with pytest.raises(WithdrawalInProgressError):
            request_withdrawal(agent_id=funded_agent.id, amount='100', gateway=fake_gateway)

        assert Withdrawal.objects.count() == 1
        assert fake_gateway.called('initiate_transfer') == []


# =============================================================================
# Recipient provisioning
# =============================================================================

@pytest.mark.django_db
class TestRecipientProvisioning:

    def test_recipient_created_and_cached(self, funded_agent, payout_profile, fake_gateway):
        request_withdrawal(agent_id=funded_agent.id, amount='100', gateway=fake_gateway)

        recipient_call = fake_gateway.called('create_recipient')[0]
        assert recipient_call['type'] == 'nuban'
        assert recipient_call['account_number'] == '0123456789'
        assert recipient_call['bank_code'] == '044'
        assert recipient_call['currency'] == 'NGN'

        payout_profile.refresh_from_db()
        assert payout_profile.recipient_code == 'RCP_fake123'

    def test_cached_recipient_reused(self, funded_agent, payout_profile, fake_gateway):
        payout_profile.recipient_code = 'RCP_existing'
        payout_profile.save()

        request_withdrawal(agent_id=funded_agent.id, amount='100', gateway=fake_gateway)

        assert fake_gateway.called('create_recipient') == []
        assert fake_gateway.called('initiate_transfer')[0]['recipient_code'] == 'RCP_existing'

    def test_recipient_rejected(self, funded_agent, payout_profile, fake_gateway):
        fake_gateway.recipient_response = {
            'status': False, 'message': 'Invalid bank code', 'data': {},
        }

        with pytest.raises(RecipientCreationError, match='Invalid bank code'):
            request_withdrawal(agent_id=funded_agent.id, amount='100', gateway=fake_gateway)

        assert not Withdrawal.objects.exists()
        assert earnings(funded_agent) == Decimal('1000.00')

    def test_recipient_gateway_down(self, funded_agent, payout_profile, fake_gateway):
        fake_gateway.recipient_response = gateway_down()

        with pytest.raises(RecipientCreationError):
            request_withdrawal(agent_id=funded_agent.id, amount='100', gateway=fake_gateway)
        assert not Withdrawal.objects.exists()

    def test_recipient_cache_failure_does_not_block(self, funded_agent, payout_profile, fake_gateway):
        with patch(
            'apps.payouts.services.withdrawal.PayoutProfile.objects.filter',
            side_effect=DatabaseError('read-only'),
        ):
            result = request_withdrawal(agent_id=funded_agent.id, amount='100', gateway=fake_gateway)

        assert result['success'] is True
        assert PayoutProfile.objects.get(id=payout_profile.id).recipient_code is None


# =============================================================================
# Gateway outcome
# =============================================================================

@pytest.mark.django_db
class TestTransferDispatch:

    def test_accepted_transfer_debits_once(self, funded_agent, payout_profile, fake_gateway):
        result = request_withdrawal(agent_id=funded_agent.id, amount='400', gateway=fake_gateway)

        withdrawal = result['withdrawal']
        assert result['success'] is True
        assert result['transfer_code'] == 'TRF_fake123'
        assert withdrawal.status == WithdrawalStatus.PROCESSING
        assert withdrawal.external_transfer_code == 'TRF_fake123'
        assert withdrawal.reference.startswith('withdraw_')
        assert withdrawal.gateway_reference == withdrawal.reference
        assert earnings(funded_agent) == Decimal('600.00')

        debits = WalletTransaction.objects.filter(transaction_type=TransactionType.WITHDRAWAL)
        assert debits.count() == 1
        assert debits.get().reference_id == str(withdrawal.id)

    def test_transfer_sent_in_minor_units(self, funded_agent, payout_profile, fake_gateway):
        result = request_withdrawal(agent_id=funded_agent.id, amount='123.45', gateway=fake_gateway)

        call = fake_gateway.called('initiate_transfer')[0]
        assert call['amount_minor'] == 12345
        assert call['reference'] == result['withdrawal'].reference

    def test_gateway_rejection_leaves_balance(self, funded_agent, payout_profile, fake_gateway):
        fake_gateway.transfer_response = {
            'status': False, 'message': 'Insufficient gateway balance', 'data': {},
        }

        result = request_withdrawal(agent_id=funded_agent.id, amount='400', gateway=fake_gateway)

        withdrawal = Withdrawal.objects.get()
        assert result['success'] is False
        assert result['message'] == 'Insufficient gateway balance'
        assert withdrawal.status == WithdrawalStatus.FAILED
        assert withdrawal.error_message == 'Insufficient gateway balance'
        assert withdrawal.processed_at is not None
        assert earnings(funded_agent) == Decimal('1000.00')
        assert not WalletTransaction.objects.filter(
            transaction_type=TransactionType.WITHDRAWAL
        ).exists()

    def test_gateway_timeout_fails_without_debit(self, funded_agent, payout_profile, fake_gateway):
        fake_gateway.transfer_response = gateway_down('Payment gateway timed out')

        result = request_withdrawal(agent_id=funded_agent.id, amount='400', gateway=fake_gateway)

        assert result['success'] is False
        withdrawal = Withdrawal.objects.get()
        assert withdrawal.status == WithdrawalStatus.FAILED
        assert withdrawal.error_message == 'Payment gateway timed out'
        assert earnings(funded_agent) == Decimal('1000.00')

    def test_rejection_without_message_gets_default(self, funded_agent, payout_profile, fake_gateway):
        fake_gateway.transfer_response = {'status': False, 'message': '', 'data': {}}

        request_withdrawal(agent_id=funded_agent.id, amount='400', gateway=fake_gateway)

        assert Withdrawal.objects.get().error_message != ''

    def test_immediate_success_completes(self, funded_agent, payout_profile, fake_gateway):
        fake_gateway.transfer_response = {
            'status': True,
            'message': 'Transfer completed',
            'data': {'transfer_code': 'TRF_done', 'status': 'success'},
        }

        result = request_withdrawal(agent_id=funded_agent.id, amount='400', gateway=fake_gateway)

        assert result['withdrawal'].status == WithdrawalStatus.COMPLETED
        assert result['withdrawal'].processed_at is not None
        assert earnings(funded_agent) == Decimal('600.00')

    def test_immediate_failure_is_rejection(self, funded_agent, payout_profile, fake_gateway):
        fake_gateway.transfer_response = {
            'status': True,
            'message': 'Transfer failed',
            'data': {'transfer_code': 'TRF_bad', 'status': 'failed', 'reason': 'Account closed'},
        }

        result = request_withdrawal(agent_id=funded_agent.id, amount='400', gateway=fake_gateway)

        assert result['success'] is False
        assert Withdrawal.objects.get().error_message == 'Account closed'
        assert earnings(funded_agent) == Decimal('1000.00')

    def test_unexpected_error_marks_failed(self, funded_agent, payout_profile, fake_gateway):
        fake_gateway.transfer_response = RuntimeError('boom')

        with pytest.raises(RuntimeError):
            request_withdrawal(agent_id=funded_agent.id, amount='400', gateway=fake_gateway)

        withdrawal = Withdrawal.objects.get()
        assert withdrawal.status == WithdrawalStatus.FAILED
        assert withdrawal.error_message
        assert earnings(funded_agent) == Decimal('1000.00')

    def test_alias_wallet_type(self, agent, payout_profile, fake_gateway):
        fund(agent, '300.00', wallet_type=WalletType.FOOD)

        result = request_withdrawal(
            agent_id=agent.id, amount='100', wallet_type='customer_funds', gateway=fake_gateway
        )

        assert result['withdrawal'].type == WalletType.FOOD
        assert Wallet.objects.get(agent=agent, wallet_type=WalletType.FOOD).balance == Decimal('200.00')

    def test_sequential_withdrawals_cannot_overdraw(self, agent, payout_profile, fake_gateway):
        fund(agent, '500.00')
        request_withdrawal(agent_id=agent.id, amount='300', gateway=fake_gateway)

        fake_gateway.transfer_response = {
            'status': True,
            'message': 'Transfer has been queued',
            'data': {'transfer_code': 'TRF_second', 'status': 'pending'},
        }
        with pytest.raises(InsufficientBalanceError):
            request_withdrawal(agent_id=agent.id, amount='300', gateway=fake_gateway)

        assert earnings(agent) == Decimal('200.00')

    def test_uses_configured_gateway(self, funded_agent, payout_profile, use_fake_gateway):
        result = request_withdrawal(agent_id=funded_agent.id, amount='100')

        assert result['success'] is True
        assert use_fake_gateway.called('initiate_transfer')
