"""Installment plan creation, payments and cancellation."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.catalog.services import get_product_by_id
from apps.core.services import PLAN_PREFIX, create_with_reference
from apps.notifications.models import NotificationPriority
from apps.notifications.services import notify_user
from apps.orders.models import Order

from ..models import (
    InstallmentPlan,
    PaymentSchedule,
    PlanStatus,
    Frequency,
    OPEN_PLAN_STATUSES,
    ZERO,
)
from .exceptions import (
    CreditNotAllowedError,
    InvalidAmountError,
    InvalidPlanStateError,
    OverpaymentError,
    PlanNotFoundError,
)
from .profile_management import release_credit, reserve_credit
from .schedule import build_schedule
from .settings_management import installments_per_month, quote_installments

logger = logging.getLogger(__name__)


def get_plan_by_id(*, plan_id: UUID, user: Optional[User] = None) -> InstallmentPlan:
    """
    Retrieve a plan, optionally scoped to its owner.

    Raises:
        PlanNotFoundError: If plan doesn't exist (or belongs to someone else)
    """
    plans = InstallmentPlan.objects.select_related('user', 'product', 'order')
    if user is not None:
        plans = plans.filter(user=user)
    try:
        return plans.get(id=plan_id)
    except InstallmentPlan.DoesNotExist:
        raise PlanNotFoundError(f"Installment plan {plan_id} not found")


def _lock_plan(plan_id: UUID) -> InstallmentPlan:
    try:
        return InstallmentPlan.objects.select_for_update().get(id=plan_id)
    except InstallmentPlan.DoesNotExist:
        raise PlanNotFoundError(f"Installment plan {plan_id} not found")


def get_user_plans(*, user: User, status: Optional[str] = None) -> QuerySet:
    plans = InstallmentPlan.objects.filter(user=user).select_related('product')
    if status:
        plans = plans.filter(status_code=status)
    return plans.order_by('-created_at')


@transaction.atomic
def create_installment_plan(
    *,
    user: User,
    product_id: UUID,
    principal_amount: Decimal,
    duration_months: int,
    frequency_code: str = Frequency.MONTHLY,
    order: Optional[Order] = None,
    start_date: Optional[date] = None
) -> InstallmentPlan:
    """
    Finance a purchase on installments.

    Business rules:
    - Product must be credit eligible, and the principal must reach its
      minimum credit amount
    - Duration cannot exceed the product's maximum credit duration
    - Commission comes from the active credit settings for the duration
    - Principal plus commission is reserved on the user's credit line
    - Installments are split to the cent, the last one takes the remainder

    Args:
        user: Borrower
        product_id: Financed product
        principal_amount: Amount financed
        duration_months: Repayment duration (1-36)
        frequency_code: MONTHLY, BIWEEKLY or WEEKLY
        order: Order the plan pays for
        start_date: Plan start, first installment is due one period later

    Returns:
        Created InstallmentPlan with its schedules

    Raises:
        ProductNotFoundError: If product doesn't exist or is inactive
        CreditNotAllowedError: If product, amount, duration or frequency is not eligible
        CreditSettingsNotFoundError: If no offer covers the duration and amount
        CreditProfileNotFoundError: If the user has no credit profile
        CreditDefaultError: If the user is in default
        InsufficientCreditError: If the credit line is too short
    """
    product = get_product_by_id(product_id=product_id)

    if not product.credit_eligible:
        raise CreditNotAllowedError(f"Product {product.sku} is not available on credit")
    if not product.is_credit_amount_allowed(principal_amount):
        raise CreditNotAllowedError(
            f"Minimum credit amount for {product.sku} is {product.min_credit_amount}"
        )
    if product.max_credit_duration and duration_months > product.max_credit_duration:
        raise CreditNotAllowedError(
            f"Maximum credit duration for {product.sku} is {product.max_credit_duration} months"
        )

    quote = quote_installments(
        principal=principal_amount,
        duration_months=duration_months,
        frequency_code=frequency_code,
    )
    reserve_credit(user_id=user.id, amount=quote.total_amount)

    start_date = start_date or timezone.localdate()
    installments = build_schedule(
        total=quote.total_amount,
        count=quote.total_installments,
        start_date=start_date,
        periods_per_month=installments_per_month(frequency_code),
    )

    def _create(plan_number: str) -> InstallmentPlan:
        plan = InstallmentPlan(
            plan_number=plan_number,
            user=user,
            order=order,
            product=product,
            principal_amount=principal_amount,
            commission_rate=quote.commission_rate,
            commission_amount=quote.commission_amount,
            total_amount=quote.total_amount,
            installment_amount=quote.installment_amount,
            duration_months=duration_months,
            frequency_code=frequency_code,
            total_installments=quote.total_installments,
            start_date=start_date,
            end_date=installments[-1].due_date,
        )
        plan.full_clean()
        plan.save()
        return plan

    plan = create_with_reference(_create, model=InstallmentPlan, field='plan_number', prefix=PLAN_PREFIX)

    PaymentSchedule.objects.bulk_create([
        PaymentSchedule(
            installment_plan=plan,
            installment_number=installment.number,
            due_date=installment.due_date,
            amount=installment.amount,
        )
        for installment in installments
    ])

    logger.info("Installment plan created", extra={
        'plan_id': str(plan.id),
        'plan_number': plan.plan_number,
        'user_id': str(user.id),
        'product_id': str(product.id),
        'total_amount': str(plan.total_amount),
        'installments': plan.total_installments,
    })

    notify_user(
        user=user,
        title="Installment plan created",
        message=(
            f"Your plan {plan.plan_number} for {product.name}: "
            f"{plan.total_installments} installments of {plan.installment_amount}."
        ),
        type='CREDIT',
        data={'reference': plan.plan_number, 'amount': plan.total_amount},
    )
    return plan


def _refresh_progress(plan: InstallmentPlan, schedules: List[PaymentSchedule], today: date) -> None:
    """Recount paid installments and settle the status that follows from them."""
    plan.paid_installments = sum(1 for schedule in schedules if schedule.is_fully_paid())

    if plan.paid_installments >= plan.total_installments:
        plan.status_code = PlanStatus.COMPLETED
        plan.completed_at = plan.completed_at or timezone.now()
        return

    if plan.status_code == PlanStatus.COMPLETED:
        plan.completed_at = None
        plan.status_code = PlanStatus.ACTIVE

    overdue = any(schedule.is_overdue(today) for schedule in schedules)
    if plan.status_code == PlanStatus.LATE and not overdue:
        plan.status_code = PlanStatus.ACTIVE
    elif plan.status_code == PlanStatus.ACTIVE and overdue and plan.late_penalty > 0:
        plan.status_code = PlanStatus.LATE


@transaction.atomic
def apply_payment_to_plan(
    *,
    plan_id: UUID,
    amount: Decimal,
    today: Optional[date] = None
) -> InstallmentPlan:
    """
    Spread a payment over the oldest unpaid installments.

    Each installment takes its accrued penalty first, then its amount,
    before the rest of the payment moves on to the next one. The paid
    amount is released from the user's debt.

    Raises:
        PlanNotFoundError: If plan doesn't exist
        InvalidPlanStateError: If plan is not ACTIVE or LATE
        InvalidAmountError: If amount is not positive
        OverpaymentError: If amount exceeds what the plan still owes
    """
    today = today or timezone.localdate()
    plan = _lock_plan(plan_id)

    if not plan.is_open():
        raise InvalidPlanStateError(f"Cannot pay plan {plan.plan_number} in status {plan.status_code}")
    if amount <= 0:
        raise InvalidAmountError("Payment amount must be positive")

    schedules = list(plan.schedules.select_for_update().order_by('installment_number'))
    owed = sum((schedule.remaining_amount for schedule in schedules), ZERO)
    if amount > owed:
        raise OverpaymentError(f"Payment {amount} exceeds remaining {owed} on {plan.plan_number}")

    left = amount
    for schedule in schedules:
        if left <= 0:
            break
        portion = min(left, schedule.remaining_amount)
        if portion <= 0:
            continue
        schedule.mark_as_paid(portion)
        schedule.save(update_fields=['paid_amount', 'paid_at', 'updated_at'])
        left -= portion

    previous_status = plan.status_code
    _refresh_progress(plan, schedules, today)
    plan.save(update_fields=['paid_installments', 'status_code', 'completed_at', 'updated_at'])

    release_credit(user_id=plan.user_id, amount=amount)

    logger.info("Payment applied to plan", extra={
        'plan_id': str(plan.id),
        'plan_number': plan.plan_number,
        'amount': str(amount),
        'paid_installments': plan.paid_installments,
        'previous_status': previous_status,
        'status': plan.status_code,
    })

    if plan.status_code == PlanStatus.COMPLETED and previous_status != PlanStatus.COMPLETED:
        notify_user(
            user=plan.user,
            title="Installment plan completed",
            message=f"Plan {plan.plan_number} is fully paid. Thank you!",
            type='CREDIT',
            data={'reference': plan.plan_number},
        )
    return plan


@transaction.atomic
def reverse_payment_on_plan(
    *,
    plan_id: UUID,
    amount: Decimal,
    today: Optional[date] = None
) -> InstallmentPlan:
    """
    Undo `amount` of payments, newest installments first.

    A completed plan reopens. The reversed amount goes back on the
    user's debt regardless of the available credit.

    Raises:
        PlanNotFoundError: If plan doesn't exist
        InvalidPlanStateError: If plan is cancelled or defaulted
        InvalidAmountError: If amount is not positive
        OverpaymentError: If amount exceeds what was paid
    """
    today = today or timezone.localdate()
    plan = _lock_plan(plan_id)

    if plan.status_code in (PlanStatus.CANCELLED, PlanStatus.DEFAULTED):
        raise InvalidPlanStateError(
            f"Cannot reverse a payment on plan {plan.plan_number} in status {plan.status_code}"
        )
    if amount <= 0:
        raise InvalidAmountError("Reversal amount must be positive")

    schedules = list(plan.schedules.select_for_update().order_by('installment_number'))
    paid = sum((schedule.paid_amount for schedule in schedules), ZERO)
    if amount > paid:
        raise OverpaymentError(f"Reversal {amount} exceeds paid {paid} on {plan.plan_number}")

    left = amount
    for schedule in reversed(schedules):
        if left <= 0:
            break
        portion = min(left, schedule.paid_amount)
        if portion <= 0:
            continue
        schedule.paid_amount -= portion
        if schedule.paid_amount == 0:
            schedule.paid_at = None
        schedule.save(update_fields=['paid_amount', 'paid_at', 'updated_at'])
        left -= portion

    _refresh_progress(plan, schedules, today)
    plan.save(update_fields=['paid_installments', 'status_code', 'completed_at', 'updated_at'])

    reserve_credit(user_id=plan.user_id, amount=amount, force=True)

    logger.info("Payment reversed on plan", extra={
        'plan_id': str(plan.id),
        'plan_number': plan.plan_number,
        'amount': str(amount),
        'status': plan.status_code,
    })
    return plan


@transaction.atomic
def cancel_installment_plan(*, plan_id: UUID, reason: str = '') -> InstallmentPlan:
    """
    Cancel a plan before any payment and give the credit back.

    Raises:
        PlanNotFoundError: If plan doesn't exist
        InvalidPlanStateError: If plan is closed or already has payments
    """
    plan = _lock_plan(plan_id)

    if not plan.is_open():
        raise InvalidPlanStateError(f"Cannot cancel plan {plan.plan_number} in status {plan.status_code}")
    if plan.amount_paid > 0:
        raise InvalidPlanStateError(f"Plan {plan.plan_number} already has payments")

    owed = plan.remaining_amount
    plan.status_code = PlanStatus.CANCELLED
    plan.save(update_fields=['status_code', 'updated_at'])

    release_credit(user_id=plan.user_id, amount=owed)

    logger.info("Installment plan cancelled", extra={
        'plan_id': str(plan.id),
        'plan_number': plan.plan_number,
        'released': str(owed),
        'reason': reason,
    })

    notify_user(
        user=plan.user,
        title="Installment plan cancelled",
        message=reason or f"Plan {plan.plan_number} has been cancelled.",
        type='CREDIT',
        priority=NotificationPriority.HIGH,
        data={'reference': plan.plan_number, 'amount': owed},
    )
    return plan


def get_plan_summary(*, plan_id: UUID, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Repayment position of a plan.

    Returns:
        {
            'plan_number': 'PLAN-20240115-00042',
            'status': 'ACTIVE',
            'total_amount': Decimal('1050.00'),
            'late_penalty': Decimal('0.00'),
            'amount_paid': Decimal('350.00'),
            'remaining_amount': Decimal('700.00'),
            'paid_installments': 1,
            'total_installments': 3,
            'next_due_date': date(2024, 3, 15),
            'next_due_amount': Decimal('350.00'),
            'overdue_installments': 0,
            'max_days_overdue': 0,
        }
    """
    today = today or timezone.localdate()
    plan = get_plan_by_id(plan_id=plan_id)
    schedules = list(plan.schedules.order_by('installment_number'))

    unpaid = [schedule for schedule in schedules if not schedule.is_fully_paid()]
    overdue = [schedule for schedule in unpaid if schedule.is_overdue(today)]
    next_due = unpaid[0] if unpaid else None
    amount_paid = sum((schedule.paid_amount for schedule in schedules), ZERO)

    return {
        'plan_number': plan.plan_number,
        'status': plan.status_code,
        'total_amount': plan.total_amount,
        'late_penalty': plan.late_penalty,
        'amount_paid': amount_paid,
        'remaining_amount': sum((schedule.remaining_amount for schedule in unpaid), ZERO),
        'paid_installments': plan.paid_installments,
        'total_installments': plan.total_installments,
        'next_due_date': next_due.due_date if next_due else None,
        'next_due_amount': next_due.remaining_amount if next_due else None,
        'overdue_installments': len(overdue),
        'max_days_overdue': max((schedule.days_overdue(today) for schedule in overdue), default=0),
    }


def get_open_plans_for_order(*, order_id: UUID) -> QuerySet:
    return InstallmentPlan.objects.filter(order_id=order_id, status_code__in=OPEN_PLAN_STATUSES)
