"""Daily late penalty accrual and default detection."""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.notifications.models import NotificationPriority
from apps.notifications.services import notify_user

from ..models import CENT, InstallmentPlan, PaymentSchedule, PlanStatus, OPEN_PLAN_STATUSES, ZERO
from .profile_management import add_debt, record_default

logger = logging.getLogger(__name__)


def compute_schedule_penalty(schedule: PaymentSchedule, today: date) -> Decimal:
    """
    Penalty an installment should carry on `today`.

    Nothing accrues within the grace period. After it, the unpaid part
    of the installment accrues the daily rate for every day overdue
    (payments settle the penalty first, so only the excess reduces it),
    capped at a share of the installment amount. A penalty never
    decreases, so re-running on the same day changes nothing.
    """
    kredika = settings.KREDIKA
    days = schedule.days_overdue(today)
    if days <= kredika['LATE_PENALTY_GRACE_DAYS']:
        return schedule.penalty_amount

    principal_paid = max(ZERO, schedule.paid_amount - schedule.penalty_amount)
    unpaid = max(ZERO, schedule.amount - principal_paid)
    accrued = (unpaid * kredika['LATE_PENALTY_DAILY_RATE'] * days).quantize(CENT, rounding=ROUND_HALF_UP)
    cap = (schedule.amount * kredika['LATE_PENALTY_CAP_RATE']).quantize(CENT, rounding=ROUND_HALF_UP)
    return max(schedule.penalty_amount, min(accrued, cap))


def _accrue_plan(plan: InstallmentPlan, today: date, summary: Dict[str, Any]) -> None:
    kredika = settings.KREDIKA
    schedules = list(plan.schedules.select_for_update().order_by('installment_number'))

    delta = ZERO
    late = False
    defaulted = False
    for schedule in schedules:
        days = schedule.days_overdue(today)
        if days <= kredika['LATE_PENALTY_GRACE_DAYS']:
            continue
        late = True
        if days > kredika['DEFAULT_THRESHOLD_DAYS']:
            defaulted = True

        penalty = compute_schedule_penalty(schedule, today)
        if penalty != schedule.penalty_amount:
            delta += penalty - schedule.penalty_amount
            schedule.penalty_amount = penalty
            schedule.save(update_fields=['penalty_amount', 'updated_at'])
            summary['schedules_penalized'] += 1

    if not late:
        return

    previous_status = plan.status_code
    plan.late_penalty = sum((schedule.penalty_amount for schedule in schedules), ZERO)
    if defaulted:
        plan.status_code = PlanStatus.DEFAULTED
    elif plan.status_code == PlanStatus.ACTIVE:
        plan.status_code = PlanStatus.LATE
    plan.save(update_fields=['late_penalty', 'status_code', 'updated_at'])

    if delta > 0:
        add_debt(user_id=plan.user_id, amount=delta)
        summary['penalty_added'] += delta

    if plan.status_code == PlanStatus.DEFAULTED:
        summary['plans_defaulted'] += 1
        record_default(user_id=plan.user_id)
        logger.warning("Installment plan defaulted", extra={
            'plan_id': str(plan.id),
            'plan_number': plan.plan_number,
            'late_penalty': str(plan.late_penalty),
        })
        notify_user(
            user=plan.user,
            title="Installment plan in default",
            message=f"Plan {plan.plan_number} is in default. Please contact us.",
            type='CREDIT',
            priority=NotificationPriority.URGENT,
            data={'reference': plan.plan_number, 'amount': plan.remaining_amount},
        )
        return

    summary['plans_late'] += 1
    if previous_status != PlanStatus.LATE:
        notify_user(
            user=plan.user,
            title="Payment overdue",
            message=f"An installment of plan {plan.plan_number} is overdue. Late penalties apply.",
            type='REMINDER',
            priority=NotificationPriority.HIGH,
            data={'reference': plan.plan_number, 'amount': plan.late_penalty},
        )


def accrue_late_penalties(*, today: Optional[date] = None, dry_run: bool = False) -> Dict[str, Any]:
    """
    Accrue penalties on every open plan as of `today`.

    Safe to run more than once a day: penalties are recomputed from the
    due dates, never added on top of themselves. Plans past the default
    threshold are DEFAULTED and count one default against the borrower;
    defaulted plans are no longer open so they are not counted twice.

    Args:
        today: Accrual date (default: today)
        dry_run: Compute everything, then roll back

    Returns:
        {
            'date': date(2024, 5, 1),
            'plans_checked': 12,
            'schedules_penalized': 3,
            'penalty_added': Decimal('4.20'),
            'plans_late': 2,
            'plans_defaulted': 1,
            'dry_run': False,
        }
    """
    today = today or timezone.localdate()
    summary = {
        'date': today,
        'plans_checked': 0,
        'schedules_penalized': 0,
        'penalty_added': ZERO,
        'plans_late': 0,
        'plans_defaulted': 0,
        'dry_run': dry_run,
    }

    with transaction.atomic():
        overdue_plan_ids = PaymentSchedule.objects.filter(
            due_date__lt=today,
            installment_plan__status_code__in=OPEN_PLAN_STATUSES,
        ).values('installment_plan_id')
        plans = (
            InstallmentPlan.objects
            .select_for_update()
            .filter(id__in=overdue_plan_ids)
            .order_by('created_at')
        )
        for plan in plans:
            summary['plans_checked'] += 1
            _accrue_plan(plan, today, summary)

        if dry_run:
            transaction.set_rollback(True)

    logger.info("Late penalties accrued", extra={
        'date': today.isoformat(),
        'plans_checked': summary['plans_checked'],
        'schedules_penalized': summary['schedules_penalized'],
        'penalty_added': str(summary['penalty_added']),
        'plans_late': summary['plans_late'],
        'plans_defaulted': summary['plans_defaulted'],
        'dry_run': dry_run,
    })
    return summary
