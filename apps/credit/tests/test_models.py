import pytest
from datetime import date, timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.credit.models import CreditProfile, CreditSettings, PaymentSchedule, PlanStatus


class TestCreditProfileModel:

    def test_utilization_ratio(self):
        profile = CreditProfile(credit_limit=Decimal('3000.00'), total_debt=Decimal('1000.00'))
        assert profile.credit_utilization_ratio == Decimal('0.3333')

    def test_utilization_ratio_without_limit(self):
        profile = CreditProfile(credit_limit=Decimal('0.00'), total_debt=Decimal('0.00'))
        assert profile.credit_utilization_ratio is None

    def test_exhausted_and_default(self):
        profile = CreditProfile(available_credit=Decimal('0.00'), default_count=3)
        assert profile.is_credit_exhausted() is True
        assert profile.is_in_default() is True

        profile = CreditProfile(available_credit=Decimal('10.00'), default_count=2)
        assert profile.is_credit_exhausted() is False
        assert profile.is_in_default() is False

    @pytest.mark.django_db
    def test_future_review_rejected(self, customer):
        profile = CreditProfile(
            user=customer,
            credit_score=700,
            credit_limit=Decimal('100.00'),
            available_credit=Decimal('100.00'),
            last_credit_review=timezone.now() + timedelta(days=1),
        )
        with pytest.raises(ValidationError) as exc:
            profile.full_clean()
        assert 'last_credit_review' in exc.value.message_dict

    @pytest.mark.django_db
    def test_score_range(self, customer):
        profile = CreditProfile(
            user=customer,
            credit_score=900,
            credit_limit=Decimal('100.00'),
            available_credit=Decimal('100.00'),
        )
        with pytest.raises(ValidationError) as exc:
            profile.full_clean()
        assert 'credit_score' in exc.value.message_dict


class TestCreditSettingsModel:

    def test_amount_bounds(self):
        offer = CreditSettings(
            duration_months=6,
            commission_rate=Decimal('0.0800'),
            min_amount=Decimal('100.00'),
            max_amount=Decimal('1000.00'),
        )
        assert offer.is_amount_valid(Decimal('100.00')) is True
        assert offer.is_amount_valid(Decimal('1000.00')) is True
        assert offer.is_amount_valid(Decimal('99.99')) is False
        assert offer.is_amount_valid(Decimal('1000.01')) is False
        assert offer.is_amount_valid(None) is False

    def test_open_bounds(self):
        offer = CreditSettings(duration_months=6, commission_rate=Decimal('0.0800'))
        assert offer.is_amount_valid(Decimal('1000000.00')) is True

    def test_total_amount(self):
        offer = CreditSettings(duration_months=3, commission_rate=Decimal('0.0525'))
        assert offer.calculate_commission(Decimal('333.33')) == Decimal('17.50')
        assert offer.calculate_total_amount(Decimal('333.33')) == Decimal('350.83')
        assert offer.calculate_total_amount(None) is None

    @pytest.mark.django_db
    def test_commission_rate_range(self):
        offer = CreditSettings(duration_months=3, commission_rate=Decimal('0'))
        with pytest.raises(ValidationError) as exc:
            offer.full_clean()
        assert 'commission_rate' in exc.value.message_dict


class TestPaymentScheduleModel:

    def _schedule(self, **kwargs):
        values = {
            'installment_number': 1,
            'due_date': date(2024, 2, 15),
            'amount': Decimal('350.00'),
            'paid_amount': Decimal('0.00'),
            'penalty_amount': Decimal('0.00'),
        }
        values.update(kwargs)
        return PaymentSchedule(**values)

    def test_amount_due_includes_penalty(self):
        schedule = self._schedule(penalty_amount=Decimal('3.50'), paid_amount=Decimal('350.00'))
        assert schedule.amount_due == Decimal('353.50')
        assert schedule.remaining_amount == Decimal('3.50')
        assert schedule.is_fully_paid() is False

    def test_overdue(self):
        schedule = self._schedule()
        assert schedule.is_overdue(date(2024, 2, 15)) is False
        assert schedule.is_overdue(date(2024, 2, 16)) is True
        assert schedule.days_overdue(date(2024, 2, 25)) == 10
        assert schedule.days_overdue(date(2024, 2, 1)) == 0

    def test_paid_schedule_is_never_overdue(self):
        schedule = self._schedule(paid_amount=Decimal('350.00'))
        assert schedule.is_overdue(date(2025, 1, 1)) is False
        assert schedule.days_overdue(date(2025, 1, 1)) == 0
        assert schedule.status == 'PAID'

    def test_mark_as_paid(self):
        schedule = self._schedule()
        schedule.mark_as_paid(Decimal('100.00'))
        assert schedule.paid_amount == Decimal('100.00')
        assert schedule.paid_at is not None
        assert schedule.status == 'OVERDUE'

    def test_partial_status(self):
        schedule = self._schedule(due_date=date(2100, 1, 1), paid_amount=Decimal('1.00'))
        assert schedule.status == 'PARTIAL'
        assert self._schedule(due_date=date(2100, 1, 1)).status == 'PENDING'


@pytest.mark.django_db
class TestInstallmentPlanModel:

    def test_amounts(self, plan):
        assert plan.commission_amount == Decimal('50.00')
        assert plan.total_amount == Decimal('1050.00')
        assert plan.amount_paid == Decimal('0.00')
        assert plan.remaining_amount == Decimal('1050.00')
        assert plan.installments_per_month == 1

    def test_is_late(self, plan):
        assert plan.is_late(date(2024, 4, 15)) is False
        assert plan.is_late(date(2024, 4, 16)) is True
        assert plan.is_open() is True

    def test_fully_paid(self, plan):
        plan.paid_installments = 3
        assert plan.is_fully_paid() is True
        assert plan.is_late(date(2030, 1, 1)) is False

    def test_plan_number_format(self, plan):
        plan.plan_number = 'PLAN-2024-1'
        with pytest.raises(ValidationError) as exc:
            plan.full_clean()
        assert 'plan_number' in exc.value.message_dict

    def test_closed_statuses(self, plan):
        plan.status_code = PlanStatus.COMPLETED
        assert plan.is_open() is False
