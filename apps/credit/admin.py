from django.contrib import admin
from django.utils.html import format_html

from .models import CreditProfile, CreditSettings, InstallmentPlan, PaymentSchedule, PlanStatus


class PaymentScheduleInline(admin.TabularInline):
    """Inline admin for a plan's installments."""
    model = PaymentSchedule
    extra = 0
    fields = ['installment_number', 'due_date', 'amount', 'penalty_amount', 'paid_amount', 'paid_at']
    readonly_fields = fields
    can_delete = False


@admin.register(CreditProfile)
class CreditProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'credit_score', 'credit_limit', 'available_credit', 'total_debt', 'default_count']
    list_filter = ['default_count']
    search_fields = ['user__email', 'user__full_name']
    readonly_fields = ['available_credit', 'total_debt', 'created_at', 'updated_at', 'version']


@admin.register(CreditSettings)
class CreditSettingsAdmin(admin.ModelAdmin):
    list_display = ['duration_months', 'commission_rate', 'min_amount', 'max_amount', 'is_active']
    list_filter = ['is_active', 'duration_months']


@admin.register(InstallmentPlan)
class InstallmentPlanAdmin(admin.ModelAdmin):
    """
    Admin interface for installment plans.

    Amounts and schedules are read-only; they only change through
    payments and the penalty job.
    """

    list_display = [
        'plan_number',
        'user',
        'product',
        'total_amount',
        'late_penalty',
        'paid_installments',
        'total_installments',
        'status_badge',
        'end_date',
    ]
    list_filter = ['status_code', 'frequency_code']
    search_fields = ['plan_number', 'user__email', 'product__sku']
    readonly_fields = [
        'plan_number', 'principal_amount', 'commission_rate', 'commission_amount',
        'total_amount', 'installment_amount', 'late_penalty', 'paid_installments',
        'completed_at', 'created_at', 'updated_at', 'version',
    ]
    inlines = [PaymentScheduleInline]

    def status_badge(self, obj):
        """Display plan status as colored badge."""
        colors = {
            PlanStatus.ACTIVE: '#6B8E5E',
            PlanStatus.LATE: '#E5A04A',
            PlanStatus.COMPLETED: '#4A7BA7',
            PlanStatus.DEFAULTED: '#B85C5C',
            PlanStatus.CANCELLED: '#8A8A8A',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.status_code, '#8A8A8A'), obj.get_status_code_display()
        )
    status_badge.short_description = 'Status'
