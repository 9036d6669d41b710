from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid

from apps.wallets.models import WalletType


class WithdrawalStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PROCESSING = 'processing', 'Processing'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'


TERMINAL_STATUSES = (WithdrawalStatus.COMPLETED, WithdrawalStatus.FAILED)


class PayoutProfile(models.Model):
    """Verified bank account a user is paid out to."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='payout_profile'
    )

    account_number = models.CharField(max_length=10)
    bank_code = models.CharField(max_length=20)
    bank_name = models.CharField(max_length=100, blank=True)
    account_name = models.CharField(max_length=200, blank=True)
    verified = models.BooleanField(default=False)

    # Gateway transfer recipient, created on first withdrawal
    recipient_code = models.CharField(max_length=100, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payout_profiles'

    def __str__(self):
        return f"{self.account_name or self.user} ({self.bank_code} {self.account_number})"

    def set_account(self, *, account_number, bank_code):
        """Point the profile at a bank account; a new account needs a new recipient."""
        if account_number != self.account_number or bank_code != self.bank_code:
            self.recipient_code = None
        self.account_number = account_number
        self.bank_code = bank_code


class Withdrawal(models.Model):
    """
    A request to move money from an agent wallet to their bank account.

    Lifecycle:
        pending -> processing -> completed
        pending|processing -> failed
        pending|processing -> completed (manual admin completion)
        completed -> failed (transfer reversed)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    agent = models.ForeignKey(
        'accounts.DeliveryAgent',
        on_delete=models.PROTECT,
        related_name='withdrawals'
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    type = models.CharField(
        max_length=20,
        choices=WalletType.choices,
        default=WalletType.EARNINGS
    )
    status = models.CharField(
        max_length=20,
        choices=WithdrawalStatus.choices,
        default=WithdrawalStatus.PENDING
    )

    # Our reference, sent to the gateway with the transfer
    reference = models.CharField(max_length=100, unique=True)

    # Gateway identifiers
    external_transfer_code = models.CharField(max_length=100, null=True, blank=True)
    gateway_reference = models.CharField(max_length=100, blank=True)
    error_message = models.TextField(blank=True)

    # Manual completion
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_withdrawals'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    admin_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'withdrawals'
        constraints = [
            models.UniqueConstraint(
                fields=['external_transfer_code'],
                condition=Q(external_transfer_code__isnull=False),
                name='uniq_withdrawal_transfer_code'
            ),
        ]
        indexes = [
            models.Index(fields=['agent', 'status'], name='withdrawals_agent_status_idx'),
            models.Index(fields=['status', 'created_at'], name='withdrawals_status_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Withdrawal {self.reference} - {self.amount} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES
