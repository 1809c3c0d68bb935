from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import (
    MaxValueValidator,
    MinValueValidator,
    RegexValidator,
)
from django.db import models
from django.db.models import Sum
from django.utils import timezone

from apps.core.models import BaseModel


CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def validate_not_future(value):
    if value > timezone.now():
        raise ValidationError('Date cannot be in the future')


class PlanStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    LATE = 'LATE', 'Late'
    COMPLETED = 'COMPLETED', 'Completed'
    DEFAULTED = 'DEFAULTED', 'Defaulted'
    CANCELLED = 'CANCELLED', 'Cancelled'


# Plans still owing money
OPEN_PLAN_STATUSES = (PlanStatus.ACTIVE, PlanStatus.LATE)


class Frequency(models.TextChoices):
    MONTHLY = 'MONTHLY', 'Monthly'
    BIWEEKLY = 'BIWEEKLY', 'Every two weeks'
    WEEKLY = 'WEEKLY', 'Weekly'


INSTALLMENTS_PER_MONTH = {
    Frequency.MONTHLY: 1,
    Frequency.BIWEEKLY: 2,
    Frequency.WEEKLY: 4,
}


class CreditProfile(BaseModel):
    """A user's credit limit, available credit and outstanding debt."""

    user = models.OneToOneField('accounts.User', on_delete=models.CASCADE, related_name='credit_profile')

    credit_score = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(300), MaxValueValidator(850)]
    )
    credit_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(ZERO)]
    )
    available_credit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(ZERO)]
    )
    total_debt = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=ZERO,
        validators=[MinValueValidator(ZERO)]
    )
    default_count = models.PositiveSmallIntegerField(default=0)
    last_credit_review = models.DateTimeField(null=True, blank=True, validators=[validate_not_future])

    class Meta:
        db_table = 'credit_profiles'
        ordering = ['-created_at']

    def __str__(self):
        return f"Credit profile of {self.user_id}: {self.available_credit}/{self.credit_limit}"

    @property
    def credit_utilization_ratio(self):
        """Debt over limit to 4 decimal places; None when the limit is zero."""
        if self.credit_limit == 0:
            return None
        return (self.total_debt / self.credit_limit).quantize(Decimal('0.0001'), rounding=ROUND_HALF_UP)

    def is_credit_exhausted(self):
        return self.available_credit <= 0

    def is_in_default(self):
        return self.default_count >= settings.KREDIKA['MAX_DEFAULTS']


class CreditSettings(BaseModel):
    """Commission and amount bounds offered for a given credit duration."""

    duration_months = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(36)]
    )
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        validators=[MinValueValidator(Decimal('0.0001')), MaxValueValidator(Decimal('1'))]
    )
    min_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(ZERO)]
    )
    max_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(ZERO)]
    )
    is_active = models.BooleanField(default=True)
    description = models.CharField(max_length=500, blank=True)

    class Meta:
        db_table = 'credit_settings'
        verbose_name_plural = 'credit settings'
        indexes = [
            models.Index(fields=['duration_months', 'is_active']),
        ]
        ordering = ['duration_months', 'min_amount']

    def __str__(self):
        return f"{self.duration_months} months @ {self.commission_rate:%}"

    def is_amount_valid(self, amount):
        """Amount within [min_amount, max_amount]; missing bounds are open."""
        if amount is None:
            return False
        if self.min_amount is not None and amount < self.min_amount:
            return False
        if self.max_amount is not None and amount > self.max_amount:
            return False
        return True

    def calculate_commission(self, principal):
        return (principal * self.commission_rate).quantize(CENT, rounding=ROUND_HALF_UP)

    def calculate_total_amount(self, principal):
        if principal is None:
            return None
        return principal + self.calculate_commission(principal)


class InstallmentPlan(BaseModel):
    """Repayment plan for a credit purchase (reference PLAN-YYYYMMDD-NNNNN)."""

    plan_number = models.CharField(
        max_length=20,
        unique=True,
        validators=[RegexValidator(r'^PLAN-\d{8}-\d{5}$', 'Invalid plan number')]
    )
    user = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='installment_plans')
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='installment_plans'
    )
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='installment_plans'
    )

    # Amounts
    principal_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(CENT)]
    )
    commission_rate = models.DecimalField(max_digits=5, decimal_places=4)
    commission_amount = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    installment_amount = models.DecimalField(max_digits=12, decimal_places=2)
    late_penalty = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=ZERO,
        validators=[MinValueValidator(ZERO)]
    )

    # Schedule
    duration_months = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(36)]
    )
    frequency_code = models.CharField(max_length=20, choices=Frequency.choices, default=Frequency.MONTHLY)
    total_installments = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    paid_installments = models.PositiveSmallIntegerField(default=0)
    start_date = models.DateField()
    end_date = models.DateField()

    status_code = models.CharField(max_length=20, choices=PlanStatus.choices, default=PlanStatus.ACTIVE)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'installment_plans'
        indexes = [
            models.Index(fields=['user', 'status_code']),
            models.Index(fields=['status_code', 'end_date']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.plan_number} ({self.status_code})"

    @property
    def amount_paid(self):
        return self.schedules.aggregate(total=Sum('paid_amount'))['total'] or ZERO

    @property
    def remaining_amount(self):
        """Total plus accrued penalties minus everything paid so far."""
        return max(ZERO, self.total_amount + self.late_penalty - self.amount_paid)

    def is_fully_paid(self):
        return self.paid_installments >= self.total_installments

    def is_late(self, today=None):
        today = today or timezone.localdate()
        return not self.is_fully_paid() and today > self.end_date

    def is_open(self):
        return self.status_code in OPEN_PLAN_STATUSES

    @property
    def installments_per_month(self):
        return INSTALLMENTS_PER_MONTH[self.frequency_code]


class PaymentSchedule(BaseModel):
    """One due installment of a plan."""

    installment_plan = models.ForeignKey(InstallmentPlan, on_delete=models.CASCADE, related_name='schedules')

    installment_number = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    due_date = models.DateField()
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(CENT)]
    )
    paid_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=ZERO,
        validators=[MinValueValidator(ZERO)]
    )
    penalty_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=ZERO,
        validators=[MinValueValidator(ZERO)]
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.CharField(max_length=500, blank=True)

    class Meta:
        db_table = 'payment_schedules'
        unique_together = [['installment_plan', 'installment_number']]
        indexes = [
            models.Index(fields=['due_date']),
        ]
        ordering = ['installment_plan', 'installment_number']

    def __str__(self):
        return f"#{self.installment_number} due {self.due_date}: {self.amount}"

    @property
    def amount_due(self):
        """Installment amount plus accrued penalty."""
        return self.amount + self.penalty_amount

    @property
    def remaining_amount(self):
        return max(ZERO, self.amount_due - self.paid_amount)

    def is_fully_paid(self):
        return self.paid_amount >= self.amount_due

    def is_overdue(self, today=None):
        today = today or timezone.localdate()
        return not self.is_fully_paid() and self.due_date < today

    def days_overdue(self, today=None):
        today = today or timezone.localdate()
        if not self.is_overdue(today):
            return 0
        return (today - self.due_date).days

    @property
    def status(self):
        if self.is_fully_paid():
            return 'PAID'
        if self.is_overdue():
            return 'OVERDUE'
        if self.paid_amount > 0:
            return 'PARTIAL'
        return 'PENDING'

    def mark_as_paid(self, amount):
        """Add a payment to this installment."""
        self.paid_amount += amount
        self.paid_at = timezone.now()
