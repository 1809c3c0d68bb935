"""
Service layer unit tests for payments app.

Tests cover:
- Initiating payments against a plan
- Gateway confirmation (success, failure, amount mismatch)
- Refunds flowing back to the plan and the credit line
"""

import pytest
from decimal import Decimal

from rest_framework.exceptions import ValidationError

from apps.credit.models import CreditProfile, PlanStatus
from apps.credit.services import PlanNotFoundError, cancel_installment_plan, create_installment_plan
from apps.notifications.models import Notification
from apps.orders.models import OrderPaymentStatus
from apps.orders.services import create_order
from apps.payments.models import TransactionStatus
from apps.payments.services import (
    initiate_payment,
    confirm_payment,
    fail_payment,
    refund_payment,
    get_transaction_by_number,
    get_plan_transactions,
)
from apps.payments.services.exceptions import (
    InvalidPaymentAmountError,
    InvalidTransactionStateError,
    PlanNotPayableError,
    TransactionNotFoundError,
)


def _success(payment, **overrides):
    response = {
        'transaction_id': 'GW-0001',
        'status': 'success',
        'amount': str(payment.amount),
        'currency': 'XOF',
    }
    response.update(overrides)
    return response


# =============================================================================
# Initiation Tests
# =============================================================================

@pytest.mark.django_db
class TestInitiatePayment:

    def test_initiate(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('350.00'))

        assert payment.transaction_number.startswith('TRX-')
        assert payment.status_code == TransactionStatus.PENDING
        assert payment.payment_method_code == 'MOBILE_MONEY'
        assert payment.payment_schedule.installment_number == 1

        plan.refresh_from_db()
        assert plan.amount_paid == Decimal('0.00')

    def test_other_users_plan(self, other_customer, plan):
        with pytest.raises(PlanNotFoundError):
            initiate_payment(user=other_customer, plan_id=plan.id, amount=Decimal('10.00'))

    @pytest.mark.parametrize('amount', [Decimal('0.00'), Decimal('-5.00'), Decimal('1050.01')])
    def test_invalid_amount(self, customer, plan, amount):
        with pytest.raises(InvalidPaymentAmountError):
            initiate_payment(user=customer, plan_id=plan.id, amount=amount)

    def test_cancelled_plan(self, customer, plan):
        cancel_installment_plan(plan_id=plan.id)

        with pytest.raises(PlanNotPayableError):
            initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('10.00'))

    def test_lookups(self, customer, other_customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('100.00'))

        assert get_transaction_by_number(transaction_number=payment.transaction_number) == payment
        assert list(get_plan_transactions(plan_id=plan.id, user=customer)) == [payment]
        with pytest.raises(TransactionNotFoundError):
            get_transaction_by_number(transaction_number=payment.transaction_number, user=other_customer)


# =============================================================================
# Confirmation Tests
# =============================================================================

@pytest.mark.django_db
class TestConfirmPayment:

    def test_success_applies_to_plan(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('350.00'))

        result = confirm_payment(transaction_number=payment.transaction_number, gateway_response=_success(payment))

        assert result.status_code == TransactionStatus.SUCCESS
        assert result.external_transaction_id == 'GW-0001'
        assert result.processed_at is not None
        assert result.gateway_response['currency'] == 'XOF'

        plan.refresh_from_db()
        assert plan.paid_installments == 1
        assert plan.amount_paid == Decimal('350.00')
        profile = CreditProfile.objects.get(user=customer)
        assert profile.total_debt == Decimal('700.00')
        assert Notification.objects.filter(user=customer, type='PAYMENT').exists()

    def test_full_payment_completes_plan(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('1050.00'))

        confirm_payment(transaction_number=payment.transaction_number, gateway_response=_success(payment))

        plan.refresh_from_db()
        assert plan.status_code == PlanStatus.COMPLETED

    def test_failed_response(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('350.00'))

        result = confirm_payment(
            transaction_number=payment.transaction_number,
            gateway_response={
                'transaction_id': 'GW-0002',
                'status': 'failed',
                'error': {'code': 'INSUFFICIENT_FUNDS', 'message': 'Wallet balance too low'},
            },
        )

        assert result.status_code == TransactionStatus.FAILED
        assert result.failure_reason == 'Wallet balance too low'
        plan.refresh_from_db()
        assert plan.amount_paid == Decimal('0.00')

    def test_failed_response_without_error(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('350.00'))

        with pytest.raises(ValidationError):
            confirm_payment(
                transaction_number=payment.transaction_number,
                gateway_response={'transaction_id': 'GW-0002', 'status': 'failed'},
            )

    def test_amount_mismatch(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('350.00'))

        with pytest.raises(InvalidPaymentAmountError):
            confirm_payment(
                transaction_number=payment.transaction_number,
                gateway_response=_success(payment, amount='35.00'),
            )

    def test_confirm_twice(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('350.00'))
        confirm_payment(transaction_number=payment.transaction_number, gateway_response=_success(payment))

        with pytest.raises(InvalidTransactionStateError):
            confirm_payment(transaction_number=payment.transaction_number, gateway_response=_success(payment))

    def test_fail_payment(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('350.00'))

        result = fail_payment(transaction_number=payment.transaction_number, reason='Timed out')

        assert result.status_code == TransactionStatus.FAILED
        with pytest.raises(InvalidTransactionStateError):
            fail_payment(transaction_number=payment.transaction_number, reason='Again')

    def test_order_payment_status_follows_plan(self, customer, credit_product, credit_settings, credit_profile):
        order = create_order(
            user=customer,
            items=[{'product_id': credit_product.id, 'quantity': 1, 'payment_method_code': 'CREDIT'}],
        )
        plan = create_installment_plan(
            user=customer,
            product_id=credit_product.id,
            principal_amount=Decimal('1000.00'),
            duration_months=3,
            order=order,
        )

        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('1050.00'))
        confirm_payment(transaction_number=payment.transaction_number, gateway_response=_success(payment))

        order.refresh_from_db()
        assert order.payment_status_code == OrderPaymentStatus.PAID
        assert order.amount_paid == Decimal('1050.00')


# =============================================================================
# Refund Tests
# =============================================================================

@pytest.mark.django_db
class TestRefundPayment:

    @pytest.fixture
    def paid(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('500.00'))
        return confirm_payment(transaction_number=payment.transaction_number, gateway_response=_success(payment))

    def test_full_refund(self, paid, plan, customer):
        result = refund_payment(transaction_number=paid.transaction_number)

        assert result.status_code == TransactionStatus.REFUNDED
        assert result.refund_amount == Decimal('500.00')
        assert result.refunded_at is not None

        plan.refresh_from_db()
        assert plan.amount_paid == Decimal('0.00')
        assert plan.paid_installments == 0
        profile = CreditProfile.objects.get(user=customer)
        assert profile.total_debt == Decimal('1050.00')

    def test_partial_refund_unwinds_newest_installment(self, paid, plan):
        refund_payment(transaction_number=paid.transaction_number, amount=Decimal('100.00'))

        schedules = list(plan.schedules.order_by('installment_number'))
        assert [s.paid_amount for s in schedules] == [Decimal('350.00'), Decimal('50.00'), Decimal('0.00')]

    def test_refund_more_than_paid(self, paid):
        with pytest.raises(InvalidPaymentAmountError):
            refund_payment(transaction_number=paid.transaction_number, amount=Decimal('500.01'))

    def test_refund_pending(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('100.00'))

        with pytest.raises(InvalidTransactionStateError):
            refund_payment(transaction_number=payment.transaction_number)
