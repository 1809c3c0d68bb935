from django.contrib import admin
from django.utils.html import format_html

from .models import Category, Product, ProductImage, ProductReview, StockStatus
from .services import approve_review


class ProductImageInline(admin.TabularInline):
    """Inline admin for a product's gallery."""
    model = ProductImage
    extra = 0
    fields = ['image_url', 'alt_text', 'position', 'is_primary']


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'parent', 'position', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'slug']
    readonly_fields = ['slug', 'created_at', 'updated_at']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """
    Admin interface for the catalog.

    Shows stock status badges and credit eligibility at a glance.
    """

    list_display = [
        'name',
        'sku',
        'category',
        'price',
        'stock',
        'stock_badge',
        'credit_eligible',
        'rating',
        'is_active',
    ]
    list_filter = ['is_active', 'is_featured', 'credit_eligible', 'category']
    search_fields = ['name', 'sku', 'brand']
    readonly_fields = [
        'slug', 'rating', 'review_count', 'view_count', 'purchase_count',
        'created_at', 'updated_at', 'version',
    ]
    inlines = [ProductImageInline]

    def stock_badge(self, obj):
        """Display stock status as colored badge."""
        colors = {
            StockStatus.IN_STOCK: '#6B8E5E',
            StockStatus.LOW_STOCK: '#E5A04A',
            StockStatus.OUT_OF_STOCK: '#B85C5C',
        }
        status = obj.stock_status
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors[status], status.label
        )
    stock_badge.short_description = 'Stock'


@admin.register(ProductReview)
class ProductReviewAdmin(admin.ModelAdmin):
    list_display = ['product', 'user', 'rating', 'is_verified_purchase', 'is_approved', 'helpful_count']
    list_filter = ['is_approved', 'is_verified_purchase', 'rating']
    search_fields = ['product__name', 'user__email', 'title']
    actions = ['approve_selected']

    @admin.action(description='Approve selected reviews')
    def approve_selected(self, request, queryset):
        for review in queryset.filter(is_approved=False):
            approve_review(review_id=review.id)
