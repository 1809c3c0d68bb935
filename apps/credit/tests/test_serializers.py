"""Tests for credit serializers."""

import uuid

import pytest
from decimal import Decimal

from apps.credit.serializers import (
    CreditProfileRequestSerializer,
    CreditProfileResponseSerializer,
    InstallmentPlanRequestSerializer,
    InstallmentPlanResponseSerializer,
)
from apps.payments.services import initiate_payment


class TestRequestSerializers:

    @pytest.mark.parametrize('score,valid', [(299, False), (300, True), (850, True), (851, False)])
    def test_credit_score_range(self, score, valid):
        serializer = CreditProfileRequestSerializer(data={'credit_score': score})
        assert serializer.is_valid() is valid

    def test_plan_defaults_to_monthly(self):
        serializer = InstallmentPlanRequestSerializer(data={
            'product_id': str(uuid.uuid4()),
            'principal_amount': '1000.00',
            'duration_months': 3,
        })
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['frequency_code'] == 'MONTHLY'

    def test_plan_rejects_bad_terms(self):
        serializer = InstallmentPlanRequestSerializer(data={
            'product_id': str(uuid.uuid4()),
            'principal_amount': '0.00',
            'duration_months': 48,
            'frequency_code': 'DAILY',
        })
        assert not serializer.is_valid()
        assert set(serializer.errors) == {'principal_amount', 'duration_months', 'frequency_code'}


@pytest.mark.django_db
class TestResponseSerializers:

    def test_profile_response(self, plan, credit_profile):
        credit_profile.refresh_from_db()

        data = CreditProfileResponseSerializer(credit_profile).data

        assert data['total_debt'] == '1050.00'
        assert data['available_credit'] == '3950.00'
        assert data['credit_utilization_ratio'] == '0.2100'
        assert data['is_in_default'] is False

    def test_plan_response(self, customer, plan):
        payment = initiate_payment(user=customer, plan_id=plan.id, amount=Decimal('100.00'))

        data = InstallmentPlanResponseSerializer(plan).data

        assert data['plan_number'] == plan.plan_number
        assert data['order_number'] is None
        assert data['remaining_amount'] == '1050.00'
        assert data['product']['sku'] == 'PHN-X'
        assert [s['installment_number'] for s in data['schedules']] == [1, 2, 3]
        assert data['schedules'][0]['transactions'] == [payment.transaction_number]
        assert data['schedules'][1]['transactions'] == []
