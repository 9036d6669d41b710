from decimal import Decimal
from rest_framework import serializers
from .models import Withdrawal


class WithdrawalSerializer(serializers.ModelSerializer):
    """Withdrawal as returned by the payout endpoints."""

    class Meta:
        model = Withdrawal
        fields = [
            'id',
            'agent',
            'amount',
            'type',
            'status',
            'reference',
            'external_transfer_code',
            'gateway_reference',
            'error_message',
            'approved_by',
            'approved_at',
            'admin_notes',
            'created_at',
            'processed_at',
        ]
        read_only_fields = fields


# =============================================================================
# Input serializers
# =============================================================================

class WithdrawInputSerializer(serializers.Serializer):
    """Input for a withdrawal request."""
    agent_id = serializers.UUIDField()
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.01')
    )
    # Wallet type or alias; validated by the service
    type = serializers.CharField(required=False, allow_blank=True, max_length=30)


class WithdrawResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    withdrawal_id = serializers.UUIDField()
    transfer_code = serializers.CharField(allow_null=True)
    reference = serializers.CharField()
    status = serializers.CharField()
    message = serializers.CharField()


class VerifyBankAccountInputSerializer(serializers.Serializer):
    """Input for bank account verification."""
    agent_id = serializers.UUIDField()
    account_number = serializers.RegexField(
        r'^\d{10}$',
        error_messages={'invalid': 'Account number must be 10 digits.'}
    )
    bank_code = serializers.CharField(max_length=20)


class CompleteWithdrawalInputSerializer(serializers.Serializer):
    """Input for manual withdrawal completion."""
    admin_id = serializers.UUIDField(required=False)
    paystack_reference = serializers.CharField(required=False, allow_blank=True, max_length=100)
    admin_notes = serializers.CharField(required=False, allow_blank=True)
