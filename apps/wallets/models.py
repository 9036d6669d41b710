from django.db import models
from django.db.models import Q
from decimal import Decimal
import uuid


class WalletType(models.TextChoices):
    FOOD = 'food_wallet', 'Food wallet'
    EARNINGS = 'earnings_wallet', 'Earnings wallet'


# Names used by the customer-funds deployment variant
WALLET_TYPE_ALIASES = {
    'customer_funds': WalletType.FOOD,
    'delivery_earnings': WalletType.EARNINGS,
}


class TransactionType(models.TextChoices):
    CREDIT = 'credit', 'Credit'
    WITHDRAWAL = 'withdrawal', 'Withdrawal'


class ReferenceType(models.TextChoices):
    ORDER = 'order', 'Order'
    WITHDRAWAL = 'withdrawal', 'Withdrawal'


class Wallet(models.Model):
    """Internal balance of one type for one delivery agent."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    agent = models.ForeignKey(
        'accounts.DeliveryAgent',
        on_delete=models.PROTECT,
        related_name='wallets'
    )
    wallet_type = models.CharField(max_length=20, choices=WalletType.choices)
    balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'wallets'
        constraints = [
            models.UniqueConstraint(
                fields=['agent', 'wallet_type'],
                name='uniq_wallet_per_agent_type'
            ),
            models.CheckConstraint(
                condition=Q(balance__gte=0),
                name='wallet_balance_non_negative'
            ),
        ]
        ordering = ['agent', 'wallet_type']

    def __str__(self):
        return f"{self.agent_id} {self.wallet_type}: {self.balance}"


class WalletTransaction(models.Model):
    """
    Append-only ledger row.

    The unique constraint on (wallet, transaction_type, reference_type,
    reference_id) makes every order credit, withdrawal debit and withdrawal
    re-credit happen at most once per wallet.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    wallet = models.ForeignKey(
        Wallet,
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    agent = models.ForeignKey(
        'accounts.DeliveryAgent',
        on_delete=models.PROTECT,
        related_name='wallet_transactions'
    )
    wallet_type = models.CharField(max_length=20, choices=WalletType.choices)
    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    balance_before = models.DecimalField(max_digits=12, decimal_places=2)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2)

    reference_type = models.CharField(max_length=20, choices=ReferenceType.choices)
    reference_id = models.CharField(max_length=64)
    description = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'wallet_transactions'
        constraints = [
            models.UniqueConstraint(
                fields=['wallet', 'transaction_type', 'reference_type', 'reference_id'],
                name='uniq_wallet_txn_reference'
            ),
        ]
        indexes = [
            models.Index(fields=['reference_type', 'reference_id'], name='wallet_txn_reference_idx'),
            models.Index(fields=['agent', 'created_at'], name='wallet_txn_agent_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.transaction_type} {self.amount} ({self.reference_type} {self.reference_id})"

    @property
    def signed_amount(self):
        if self.transaction_type == TransactionType.WITHDRAWAL:
            return -self.amount
        return self.amount

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('Wallet transactions are immutable')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError('Wallet transactions cannot be deleted')
