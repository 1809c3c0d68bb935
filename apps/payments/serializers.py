from rest_framework import serializers

from apps.credit.serializers import InstallmentPlanSimpleSerializer

from .models import PaymentTransaction


# =============================================================================
# Input Serializers
# =============================================================================

class PaymentTransactionRequestSerializer(serializers.Serializer):
    """
    Validate input for paying an installment plan.

    Fields:
        installment_plan_id (UUID): Plan being paid
        amount (Decimal): Amount (> 0), at most the plan remainder
        payment_method_code (str): PAYMENT_METHOD code, e.g. MOBILE_MONEY
    """

    installment_plan_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method_code = serializers.CharField(max_length=20, default='MOBILE_MONEY')

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be positive')
        return value


# =============================================================================
# Output Serializers
# =============================================================================

class PaymentTransactionSimpleSerializer(serializers.ModelSerializer):
    """Minimal transaction info for nested serialization."""

    class Meta:
        model = PaymentTransaction
        fields = ['id', 'transaction_number', 'amount', 'status_code', 'processed_at']
        read_only_fields = fields


class PaymentTransactionResponseSerializer(serializers.ModelSerializer):
    installment_plan = InstallmentPlanSimpleSerializer(read_only=True)
    installment_number = serializers.IntegerField(
        source='payment_schedule.installment_number', read_only=True, allow_null=True
    )

    class Meta:
        model = PaymentTransaction
        fields = [
            'id',
            'transaction_number',
            'installment_plan',
            'installment_number',
            'amount',
            'payment_method_code',
            'external_transaction_id',
            'status_code',
            'processed_at',
            'failure_reason',
            'refund_amount',
            'refunded_at',
            'created_at',
        ]
        read_only_fields = fields
