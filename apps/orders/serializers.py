from rest_framework import serializers

from apps.accounts.serializers import UserAddressResponseSerializer, UserSimpleSerializer
from apps.catalog.serializers import ProductSimpleSerializer

from .models import Order, OrderItem


# =============================================================================
# Input Serializers
# =============================================================================

class OrderItemRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=999)
    payment_method_code = serializers.CharField(max_length=20, required=False, allow_blank=True)


class OrderRequestSerializer(serializers.Serializer):
    """
    Validate input for placing an order.

    Fields:
        items (list): At least one OrderItemRequest
        delivery_address_id (UUID): Optional address from the user's address book
        notes (str): 2000 characters max
    """

    items = OrderItemRequestSerializer(many=True)
    delivery_address_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('Order must contain at least one item')
        return value


# =============================================================================
# Output Serializers
# =============================================================================

class OrderItemResponseSerializer(serializers.ModelSerializer):
    product = ProductSimpleSerializer(read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'quantity', 'unit_price', 'total_price', 'payment_method_code']
        read_only_fields = fields


class OrderSimpleSerializer(serializers.ModelSerializer):
    """Minimal order info for nested serialization."""

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'total_amount', 'status_code', 'payment_status_code', 'created_at']
        read_only_fields = fields


class OrderResponseSerializer(serializers.ModelSerializer):
    user = UserSimpleSerializer(read_only=True)
    delivery_address = UserAddressResponseSerializer(read_only=True)
    items = OrderItemResponseSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'order_number',
            'user',
            'delivery_address',
            'total_amount',
            'amount_paid',
            'status_code',
            'payment_status_code',
            'notes',
            'delivery_date',
            'completed_at',
            'items',
            'created_at',
        ]
        read_only_fields = fields
