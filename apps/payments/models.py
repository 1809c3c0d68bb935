from decimal import Decimal

from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel


class TransactionStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    SUCCESS = 'SUCCESS', 'Successful'
    FAILED = 'FAILED', 'Failed'
    REFUNDED = 'REFUNDED', 'Refunded'


class PaymentTransaction(BaseModel):
    """
    A payment against an installment plan (reference TRX-YYYYMMDD-NNNNN).

    Lifecycle: PENDING -> SUCCESS | FAILED, then SUCCESS -> REFUNDED.
    """

    transaction_number = models.CharField(
        max_length=20,
        unique=True,
        validators=[RegexValidator(r'^TRX-\d{8}-\d{5}$', 'Invalid transaction number')]
    )
    user = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='payment_transactions')
    installment_plan = models.ForeignKey(
        'credit.InstallmentPlan',
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    payment_schedule = models.ForeignKey(
        'credit.PaymentSchedule',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions'
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_method_code = models.CharField(max_length=20)
    external_transaction_id = models.CharField(max_length=100, blank=True)
    # transaction_id, status, amount, currency, timestamp, error
    gateway_response = models.JSONField(default=dict, blank=True)

    status_code = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=TransactionStatus.PENDING
    )
    processed_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.CharField(max_length=500, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    refund_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    class Meta:
        db_table = 'payment_transactions'
        indexes = [
            models.Index(fields=['installment_plan', 'status_code']),
            models.Index(fields=['external_transaction_id']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.transaction_number} {self.amount} ({self.status_code})"

    def is_pending(self):
        return self.status_code == TransactionStatus.PENDING

    def is_successful(self):
        return self.status_code == TransactionStatus.SUCCESS

    def mark_as_successful(self, external_id, response):
        self.status_code = TransactionStatus.SUCCESS
        self.external_transaction_id = external_id or ''
        self.gateway_response = response or {}
        self.processed_at = timezone.now()
        self.failure_reason = ''

    def mark_as_failed(self, reason):
        self.status_code = TransactionStatus.FAILED
        self.failure_reason = reason or ''
        self.processed_at = timezone.now()

    def process_refund(self, amount):
        """
        Refund part or all of the payment.

        Raises:
            ValueError: Unless 0 < amount <= the transaction amount
        """
        if amount is None or amount <= 0 or amount > self.amount:
            raise ValueError(f"Invalid refund amount {amount} for transaction of {self.amount}")
        self.refund_amount = amount
        self.refunded_at = timezone.now()
        self.status_code = TransactionStatus.REFUNDED

    def is_refunded(self):
        return self.status_code == TransactionStatus.REFUNDED
