from decimal import Decimal

from django.core.validators import (
    MaxLengthValidator,
    MaxValueValidator,
    MinValueValidator,
    RegexValidator,
)
from django.db import models
from django.db.models import Sum
from django.utils import timezone

from apps.core.models import BaseModel


CREDIT_PAYMENT_METHOD = 'CREDIT'
MAX_ITEM_QUANTITY = 999


class OrderStatus(models.TextChoices):
    CREATED = 'CREATED', 'Created'
    PROCESSING = 'PROCESSING', 'Processing'
    SHIPPED = 'SHIPPED', 'Shipped'
    DELIVERED = 'DELIVERED', 'Delivered'
    CANCELLED = 'CANCELLED', 'Cancelled'


class OrderPaymentStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    PARTIAL = 'PARTIAL', 'Partially paid'
    PAID = 'PAID', 'Paid'
    REFUNDED = 'REFUNDED', 'Refunded'


# Allowed forward transitions
ORDER_TRANSITIONS = {
    OrderStatus.CREATED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


class Order(BaseModel):
    """Customer order (reference CMD-YYYYMMDD-NNNNN)."""

    order_number = models.CharField(
        max_length=20,
        unique=True,
        validators=[RegexValidator(r'^CMD-\d{8}-\d{5}$', 'Invalid order number')]
    )
    user = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='orders')
    delivery_address = models.ForeignKey(
        'accounts.UserAddress',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )

    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    status_code = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.CREATED)
    payment_status_code = models.CharField(
        max_length=20,
        choices=OrderPaymentStatus.choices,
        default=OrderPaymentStatus.PENDING
    )
    amount_paid = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    notes = models.TextField(blank=True, validators=[MaxLengthValidator(2000)])

    delivery_date = models.DateField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'orders'
        indexes = [
            models.Index(fields=['user', 'status_code']),
            models.Index(fields=['payment_status_code']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.order_number} ({self.status_code})"

    def calculate_total_amount(self):
        """Sum of line totals."""
        return self.items.aggregate(total=Sum('total_price'))['total'] or Decimal('0.00')

    def is_paid(self):
        return self.payment_status_code == OrderPaymentStatus.PAID

    def is_cancellable(self):
        return self.status_code in (OrderStatus.CREATED, OrderStatus.PROCESSING)

    def can_transition_to(self, status):
        return status in ORDER_TRANSITIONS.get(self.status_code, set())

    def mark_as_completed(self):
        self.status_code = OrderStatus.DELIVERED
        self.completed_at = timezone.now()

    def has_credit_items(self):
        return self.items.filter(payment_method_code=CREDIT_PAYMENT_METHOD).exists()


class OrderItem(BaseModel):
    """Order line with the unit price captured at checkout."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.PROTECT, related_name='order_items')

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1), MaxValueValidator(MAX_ITEM_QUANTITY)])
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method_code = models.CharField(max_length=20, blank=True)

    class Meta:
        db_table = 'order_items'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.quantity} x {self.product_id} @ {self.unit_price}"

    def save(self, *args, **kwargs):
        """Keep total_price in sync with quantity and unit price."""
        self.total_price = self.calculate_total_price()
        super().save(*args, **kwargs)

    def calculate_total_price(self):
        if self.unit_price is None or self.quantity is None:
            return Decimal('0.00')
        return self.unit_price * self.quantity

    def is_credit_payment(self):
        return self.payment_method_code == CREDIT_PAYMENT_METHOD

    def is_price_consistent(self):
        return self.total_price == self.calculate_total_price()
