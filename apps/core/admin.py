from django.contrib import admin
from django.utils.html import format_html

from .models import CodeList


@admin.register(CodeList)
class CodeListAdmin(admin.ModelAdmin):
    """Admin interface for reference data."""

    list_display = ['type', 'code', 'label', 'position', 'active_badge', 'updated_at']
    list_filter = ['type', 'is_active']
    search_fields = ['type', 'code', 'label']
    ordering = ['type', 'position', 'code']
    readonly_fields = ['id', 'created_at', 'updated_at', 'created_by', 'version']

    def active_badge(self, obj):
        """Display active flag as colored badge."""
        bg, label = ('#6B8E5E', 'Active') if obj.is_active else ('#B85C5C', 'Inactive')
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, label
        )
    active_badge.short_description = 'Status'
