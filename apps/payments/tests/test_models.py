"""Tests for the PaymentTransaction model and its serializers."""

import pytest
from decimal import Decimal

from apps.payments.models import PaymentTransaction, TransactionStatus
from apps.payments.serializers import (
    PaymentTransactionRequestSerializer,
    PaymentTransactionResponseSerializer,
)
from apps.payments.services import initiate_payment


class TestPaymentTransactionModel:

    @pytest.fixture
    def payment(self):
        return PaymentTransaction(amount=Decimal('350.00'), payment_method_code='MOBILE_MONEY')

    def test_starts_pending(self, payment):
        assert payment.is_pending()
        assert not payment.is_successful()

    def test_mark_as_successful(self, payment):
        payment.failure_reason = 'previous attempt'
        payment.mark_as_successful('GW-1', {'status': 'success'})

        assert payment.is_successful()
        assert payment.external_transaction_id == 'GW-1'
        assert payment.failure_reason == ''
        assert payment.processed_at is not None

    def test_mark_as_failed(self, payment):
        payment.mark_as_failed('Declined')

        assert payment.status_code == TransactionStatus.FAILED
        assert payment.failure_reason == 'Declined'

    def test_partial_refund(self, payment):
        payment.process_refund(Decimal('100.00'))

        assert payment.is_refunded()
        assert payment.refund_amount == Decimal('100.00')

    @pytest.mark.parametrize('amount', [None, Decimal('0'), Decimal('350.01')])
    def test_invalid_refund(self, payment, amount):
        with pytest.raises(ValueError):
            payment.process_refund(amount)
        assert payment.refund_amount is None


class TestPaymentTransactionRequestSerializer:

    def test_amount_must_be_positive(self):
        serializer = PaymentTransactionRequestSerializer(data={
            'installment_plan_id': 'b3c1d2e4-0000-4000-8000-000000000001',
            'amount': '0.00',
        })
        assert not serializer.is_valid()
        assert 'amount' in serializer.errors

    def test_default_method(self):
        serializer = PaymentTransactionRequestSerializer(data={
            'installment_plan_id': 'b3c1d2e4-0000-4000-8000-000000000001',
            'amount': '10.00',
        })
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['payment_method_code'] == 'MOBILE_MONEY'


@pytest.mark.django_db
class TestPaymentTransactionResponseSerializer:

    def test_response(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('350.00'))

        data = PaymentTransactionResponseSerializer(payment).data

        assert data['transaction_number'] == payment.transaction_number
        assert data['installment_number'] == 1
        assert data['installment_plan']['plan_number'] == plan.plan_number
        assert data['status_code'] == 'PENDING'
