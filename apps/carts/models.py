from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Sum
from django.utils import timezone

from apps.core.models import BaseModel
from apps.orders.models import CREDIT_PAYMENT_METHOD


class CartStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    CONVERTED = 'CONVERTED', 'Converted to order'
    EXPIRED = 'EXPIRED', 'Expired'
    ABANDONED = 'ABANDONED', 'Abandoned'


def default_cart_expiry():
    return timezone.now() + timedelta(hours=settings.KREDIKA['CART_TTL_HOURS'])


class Cart(BaseModel):
    """Shopping cart; a user has at most one ACTIVE cart at a time."""

    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='carts')
    status_code = models.CharField(max_length=20, choices=CartStatus.choices, default=CartStatus.ACTIVE)
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    expires_at = models.DateTimeField(default=default_cart_expiry)

    class Meta:
        db_table = 'carts'
        indexes = [
            models.Index(fields=['user', 'status_code']),
            models.Index(fields=['status_code', 'expires_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Cart {self.id} ({self.status_code})"

    def is_expired(self, now=None):
        now = now or timezone.now()
        return self.expires_at is not None and now > self.expires_at

    def is_active(self):
        return self.status_code == CartStatus.ACTIVE

    def total_items_count(self):
        return self.items.aggregate(total=Sum('quantity'))['total'] or 0

    def recalculate_total(self):
        self.total_amount = self.items.aggregate(total=Sum('total_amount'))['total'] or Decimal('0.00')
        return self.total_amount


class CartItem(BaseModel):
    """
    Cart line.

    Credit lines carry the quoted duration, frequency and commission; their
    total includes the commission.
    """

    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='cart_items')

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1), MaxValueValidator(999)])
    payment_method_code = models.CharField(max_length=20)

    # Credit terms
    credit_duration = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(36)]
    )
    credit_frequency_code = models.CharField(max_length=20, blank=True)
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('1'))]
    )
    installment_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    class Meta:
        db_table = 'cart_items'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.quantity} x {self.product_id} ({self.payment_method_code})"

    def is_credit_payment(self):
        return self.payment_method_code == CREDIT_PAYMENT_METHOD

    @property
    def subtotal(self):
        """Price before commission."""
        return self.unit_price * self.quantity
