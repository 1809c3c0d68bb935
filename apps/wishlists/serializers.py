from rest_framework import serializers

from .models import Wishlist


# =============================================================================
# Input Serializers
# =============================================================================

class AddToWishlistRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True)
    priority = serializers.IntegerField(min_value=1, max_value=5, default=1)


class UpdateWishlistItemRequestSerializer(serializers.Serializer):
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    priority = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True)


# =============================================================================
# Output Serializers
# =============================================================================

class WishlistItemResponseSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_image_url = serializers.CharField(source='product.main_image_url', read_only=True, allow_null=True)
    product_price = serializers.DecimalField(
        source='product.price', max_digits=12, decimal_places=2, read_only=True
    )
    added_at = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Wishlist
        fields = [
            'id',
            'product_id',
            'product_name',
            'product_image_url',
            'product_price',
            'notes',
            'priority',
            'added_at',
        ]
        read_only_fields = fields


class WishlistResponseSerializer(serializers.Serializer):
    """Serializes the summary returned by get_wishlist."""

    user_id = serializers.UUIDField()
    user_name = serializers.CharField()
    items = WishlistItemResponseSerializer(many=True)
    total_items = serializers.IntegerField()
