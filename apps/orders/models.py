from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class SellerType(models.TextChoices):
    VENDOR = 'vendor', 'Vendor'
    LATE_NIGHT_VENDOR = 'late_night_vendor', 'Late-night vendor'
    CAFETERIA = 'cafeteria', 'Cafeteria'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'


class OrderQuerySet(models.QuerySet):

    def by_reference(self, reference):
        """
        Filter by a gateway reference.

        Matches payment_reference first, then order_number, then the
        primary key when the reference is a UUID.
        """
        if not reference:
            return self.none()

        matches = self.filter(payment_reference=reference)
        if matches.exists():
            return matches

        matches = self.filter(order_number=reference)
        if matches.exists():
            return matches

        try:
            order_id = uuid.UUID(str(reference))
        except ValueError:
            return self.none()
        return self.filter(id=order_id)


class Order(models.Model):
    """Customer order as far as payment settlement is concerned."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=64, unique=True)
    payment_reference = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True
    )

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # Seller
    seller_id = models.CharField(max_length=64, blank=True)
    seller_type = models.CharField(
        max_length=20,
        choices=SellerType.choices,
        default=SellerType.VENDOR
    )

    delivery_agent = models.ForeignKey(
        'accounts.DeliveryAgent',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )

    # Payment
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    split_details = models.JSONField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = 'orders'
        indexes = [
            models.Index(fields=['payment_status', 'created_at'], name='orders_status_idx'),
            models.Index(fields=['delivery_agent', 'created_at'], name='orders_agent_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Order {self.order_number} - {self.total} ({self.payment_status})"

    @property
    def is_paid(self):
        return self.payment_status == PaymentStatus.PAID
