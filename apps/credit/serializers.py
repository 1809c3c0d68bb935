from rest_framework import serializers

from apps.accounts.serializers import UserSimpleSerializer
from apps.catalog.serializers import ProductSimpleSerializer

from .models import CreditProfile, Frequency, InstallmentPlan, PaymentSchedule


# =============================================================================
# Input Serializers
# =============================================================================

class CreditProfileRequestSerializer(serializers.Serializer):
    """Validate input for opening or reviewing a credit profile."""

    credit_score = serializers.IntegerField(min_value=300, max_value=850)
    monthly_income = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class InstallmentPlanRequestSerializer(serializers.Serializer):
    """
    Validate input for financing a product.

    Fields:
        product_id (UUID): Financed product
        principal_amount (Decimal): Amount financed (> 0)
        duration_months (int): 1-36
        frequency_code (str): MONTHLY, BIWEEKLY or WEEKLY
        start_date (date): Optional, defaults to today
    """

    product_id = serializers.UUIDField()
    order_id = serializers.UUIDField(required=False, allow_null=True)
    principal_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    duration_months = serializers.IntegerField(min_value=1, max_value=36)
    frequency_code = serializers.ChoiceField(choices=Frequency.choices, default=Frequency.MONTHLY)
    start_date = serializers.DateField(required=False, allow_null=True)

    def validate_principal_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Principal amount must be positive')
        return value


# =============================================================================
# Output Serializers
# =============================================================================

class CreditProfileResponseSerializer(serializers.ModelSerializer):
    credit_utilization_ratio = serializers.DecimalField(
        max_digits=8, decimal_places=4, read_only=True, allow_null=True
    )
    is_in_default = serializers.BooleanField(read_only=True)

    class Meta:
        model = CreditProfile
        fields = [
            'id',
            'credit_score',
            'credit_limit',
            'available_credit',
            'total_debt',
            'default_count',
            'credit_utilization_ratio',
            'is_in_default',
            'last_credit_review',
        ]
        read_only_fields = fields


class PaymentScheduleResponseSerializer(serializers.ModelSerializer):
    """One installment with its derived status and the payments made on it."""

    amount_due = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    remaining_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    status = serializers.CharField(read_only=True)
    days_overdue = serializers.SerializerMethodField()
    transactions = serializers.SerializerMethodField()

    class Meta:
        model = PaymentSchedule
        fields = [
            'id',
            'installment_number',
            'due_date',
            'amount',
            'penalty_amount',
            'amount_due',
            'paid_amount',
            'remaining_amount',
            'paid_at',
            'status',
            'days_overdue',
            'transactions',
        ]
        read_only_fields = fields

    def get_days_overdue(self, obj):
        return obj.days_overdue()

    def get_transactions(self, obj):
        return list(
            obj.transactions.order_by('created_at').values_list('transaction_number', flat=True)
        )


class InstallmentPlanSimpleSerializer(serializers.ModelSerializer):
    """Minimal plan info for nested serialization."""

    class Meta:
        model = InstallmentPlan
        fields = ['id', 'plan_number', 'total_amount', 'installment_amount', 'status_code']
        read_only_fields = fields


class InstallmentPlanResponseSerializer(serializers.ModelSerializer):
    user = UserSimpleSerializer(read_only=True)
    product = ProductSimpleSerializer(read_only=True)
    order_number = serializers.CharField(source='order.order_number', read_only=True, allow_null=True)
    remaining_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    schedules = PaymentScheduleResponseSerializer(many=True, read_only=True)

    class Meta:
        model = InstallmentPlan
        fields = [
            'id',
            'plan_number',
            'user',
            'product',
            'order_number',
            'principal_amount',
            'commission_rate',
            'commission_amount',
            'total_amount',
            'installment_amount',
            'late_penalty',
            'remaining_amount',
            'duration_months',
            'frequency_code',
            'total_installments',
            'paid_installments',
            'start_date',
            'end_date',
            'status_code',
            'completed_at',
            'schedules',
        ]
        read_only_fields = fields
