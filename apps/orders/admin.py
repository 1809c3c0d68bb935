from django.contrib import admin
from django.utils.html import format_html

from .models import Order, OrderItem, OrderStatus


class OrderItemInline(admin.TabularInline):
    """Inline admin for order lines."""
    model = OrderItem
    extra = 0
    fields = ['product', 'quantity', 'unit_price', 'total_price', 'payment_method_code']
    readonly_fields = ['total_price']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        'order_number',
        'user',
        'total_amount',
        'amount_paid',
        'status_badge',
        'payment_status_code',
        'created_at',
    ]
    list_filter = ['status_code', 'payment_status_code']
    search_fields = ['order_number', 'user__email', 'user__full_name']
    readonly_fields = ['order_number', 'amount_paid', 'completed_at', 'created_at', 'updated_at', 'version']
    inlines = [OrderItemInline]

    def status_badge(self, obj):
        """Display order status as colored badge."""
        colors = {
            OrderStatus.CREATED: '#8A8A8A',
            OrderStatus.PROCESSING: '#4A7BA7',
            OrderStatus.SHIPPED: '#E5A04A',
            OrderStatus.DELIVERED: '#6B8E5E',
            OrderStatus.CANCELLED: '#B85C5C',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.status_code, '#8A8A8A'), obj.get_status_code_display()
        )
    status_badge.short_description = 'Status'
