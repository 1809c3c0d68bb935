from rest_framework import serializers

from apps.catalog.serializers import ProductSimpleSerializer
from apps.credit.models import Frequency

from .models import Cart, CartItem


# =============================================================================
# Input Serializers
# =============================================================================

class CartItemRequestSerializer(serializers.Serializer):
    """
    Validate input for adding a product to the cart.

    Credit lines (payment_method_code CREDIT) require credit_duration.
    """

    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=999, default=1)
    payment_method_code = serializers.CharField(max_length=20, default='CASH')
    credit_duration = serializers.IntegerField(min_value=1, max_value=36, required=False, allow_null=True)
    credit_frequency_code = serializers.ChoiceField(choices=Frequency.choices, required=False)

    def validate(self, attrs):
        if attrs.get('payment_method_code') == 'CREDIT' and not attrs.get('credit_duration'):
            raise serializers.ValidationError({
                'credit_duration': 'Credit items need a credit duration'
            })
        return attrs


# =============================================================================
# Output Serializers
# =============================================================================

class CartItemResponseSerializer(serializers.ModelSerializer):
    product = ProductSimpleSerializer(read_only=True)
    is_credit_payment = serializers.BooleanField(read_only=True)

    class Meta:
        model = CartItem
        fields = [
            'id',
            'product',
            'quantity',
            'payment_method_code',
            'is_credit_payment',
            'credit_duration',
            'credit_frequency_code',
            'unit_price',
            'commission_rate',
            'installment_amount',
            'total_amount',
        ]
        read_only_fields = fields


class CartResponseSerializer(serializers.ModelSerializer):
    items = CartItemResponseSerializer(many=True, read_only=True)
    total_items = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = ['id', 'status_code', 'total_amount', 'total_items', 'expires_at', 'items']
        read_only_fields = fields

    def get_total_items(self, obj):
        return obj.total_items_count()
