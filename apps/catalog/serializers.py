from rest_framework import serializers

from apps.accounts.serializers import UserSimpleSerializer
from apps.core.serializers import DimensionsSerializer

from .models import Category, Product, ProductImage, ProductReview


# =============================================================================
# Input Serializers
# =============================================================================

class CategoryRequestSerializer(serializers.Serializer):
    """Validate input for creating or updating a category."""

    name = serializers.CharField(min_length=2, max_length=100)
    description = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    parent_id = serializers.UUIDField(required=False, allow_null=True)
    position = serializers.IntegerField(min_value=0, default=0)
    is_active = serializers.BooleanField(default=True)


class ProductRequestSerializer(serializers.Serializer):
    """
    Validate input for creating or updating a product.

    Fields:
        name (str): 2-255 characters
        price (Decimal): Selling price
        compare_price (Decimal): Optional reference price, must exceed price
        sku (str): Stock keeping unit
        stock (int): Units on hand
        category_id (UUID): Owning category
        credit_eligible (bool): Offer installment credit
        min_credit_amount (Decimal): Smallest financed amount
        max_credit_duration (int): Longest credit duration in months
    """

    name = serializers.CharField(min_length=2, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    short_description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    compare_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    sku = serializers.CharField(max_length=100)
    stock = serializers.IntegerField(min_value=0, default=0)
    category_id = serializers.UUIDField()
    credit_eligible = serializers.BooleanField(default=False)
    min_credit_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    max_credit_duration = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    dimensions = DimensionsSerializer(required=False, allow_null=True)

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError('Price must be positive')
        return value

    def validate(self, attrs):
        """Compare price must exceed price; credit fields only for eligible products."""
        compare_price = attrs.get('compare_price')
        if compare_price is not None and compare_price <= attrs['price']:
            raise serializers.ValidationError({
                'compare_price': 'Compare price must be greater than price'
            })

        if not attrs.get('credit_eligible'):
            for field in ('min_credit_amount', 'max_credit_duration'):
                if attrs.get(field) is not None:
                    raise serializers.ValidationError({
                        field: 'Only credit eligible products accept credit terms'
                    })
        return attrs


class ProductImageRequestSerializer(serializers.Serializer):
    image_url = serializers.URLField(max_length=512)
    alt_text = serializers.CharField(max_length=100, required=False, allow_blank=True)
    position = serializers.IntegerField(min_value=0, required=False)
    is_primary = serializers.BooleanField(default=False)


class ProductReviewRequestSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    title = serializers.CharField(max_length=100, required=False, allow_blank=True)
    comment = serializers.CharField(max_length=5000, required=False, allow_blank=True)


# =============================================================================
# Output Serializers
# =============================================================================

class CategorySimpleSerializer(serializers.ModelSerializer):
    """Minimal category info for nested serialization."""

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'image_url']
        read_only_fields = fields


class CategoryResponseSerializer(serializers.ModelSerializer):
    """Category with its parent, direct children and active product count."""

    parent = CategorySimpleSerializer(read_only=True)
    children = serializers.SerializerMethodField()
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'image_url', 'parent', 'children', 'product_count']
        read_only_fields = fields

    def get_children(self, obj):
        children = obj.children.filter(is_active=True).order_by('position', 'name')
        return CategorySimpleSerializer(children, many=True).data

    def get_product_count(self, obj):
        return obj.count_active_products()


class ProductImageResponseSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductImage
        fields = ['id', 'image_url', 'alt_text', 'position', 'is_primary']
        read_only_fields = fields


class ProductSimpleSerializer(serializers.ModelSerializer):
    """Minimal product info for carts, orders and wishlists."""

    main_image_url = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'price', 'main_image_url']
        read_only_fields = fields


class ProductResponseSerializer(serializers.ModelSerializer):
    """Full product view."""

    category = CategorySimpleSerializer(read_only=True)
    images = ProductImageResponseSerializer(many=True, read_only=True)
    main_image_url = serializers.CharField(read_only=True)
    discount_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, read_only=True)
    stock_status = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id',
            'name',
            'description',
            'price',
            'compare_price',
            'discount_percentage',
            'sku',
            'stock',
            'stock_status',
            'main_image_url',
            'rating',
            'review_count',
            'credit_eligible',
            'category',
            'images',
        ]
        read_only_fields = fields


class ProductReviewResponseSerializer(serializers.ModelSerializer):
    user = UserSimpleSerializer(read_only=True)

    class Meta:
        model = ProductReview
        fields = [
            'id',
            'user',
            'rating',
            'title',
            'comment',
            'is_verified_purchase',
            'helpful_count',
            'created_at',
        ]
        read_only_fields = fields
