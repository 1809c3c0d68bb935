from django.contrib import admin

from .models import Cart, CartItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    fields = ['product', 'quantity', 'payment_method_code', 'credit_duration', 'unit_price', 'total_amount']
    readonly_fields = fields


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'status_code', 'total_amount', 'expires_at', 'updated_at']
    list_filter = ['status_code']
    search_fields = ['user__email']
    readonly_fields = ['total_amount', 'created_at', 'updated_at', 'version']
    inlines = [CartItemInline]
