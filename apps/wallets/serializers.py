from rest_framework import serializers
from .models import Wallet, WalletTransaction


class WalletSerializer(serializers.ModelSerializer):

    class Meta:
        model = Wallet
        fields = ['id', 'agent', 'wallet_type', 'balance', 'created_at', 'updated_at']
        read_only_fields = fields


class WalletTransactionSerializer(serializers.ModelSerializer):

    class Meta:
        model = WalletTransaction
        fields = [
            'id',
            'wallet_type',
            'transaction_type',
            'amount',
            'balance_before',
            'balance_after',
            'reference_type',
            'reference_id',
            'description',
            'created_at',
        ]
        read_only_fields = fields


class InitWalletsInputSerializer(serializers.Serializer):
    """Input for wallet initialization."""
    agent_id = serializers.UUIDField()


class InitWalletsResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    created = serializers.BooleanField()
    wallets = WalletSerializer(many=True)
