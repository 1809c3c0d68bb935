from django.contrib import admin
from django.utils.html import format_html

from .models import PaymentTransaction, TransactionStatus


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    """Read-mostly view of gateway payments."""

    list_display = [
        'transaction_number',
        'user',
        'installment_plan',
        'amount',
        'payment_method_code',
        'status_badge',
        'processed_at',
    ]
    list_filter = ['status_code', 'payment_method_code']
    search_fields = ['transaction_number', 'external_transaction_id', 'user__email']
    readonly_fields = [
        'transaction_number', 'amount', 'external_transaction_id', 'gateway_response',
        'processed_at', 'refund_amount', 'refunded_at', 'created_at', 'updated_at', 'version',
    ]

    def status_badge(self, obj):
        """Display transaction status as colored badge."""
        colors = {
            TransactionStatus.PENDING: '#8A8A8A',
            TransactionStatus.SUCCESS: '#6B8E5E',
            TransactionStatus.FAILED: '#B85C5C',
            TransactionStatus.REFUNDED: '#4A7BA7',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.status_code, '#8A8A8A'), obj.get_status_code_display()
        )
    status_badge.short_description = 'Status'
