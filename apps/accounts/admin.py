from django.contrib import admin
from django.utils.html import format_html

from .models import User, UserAddress, UserSession, UserStatus


class UserAddressInline(admin.TabularInline):
    """Inline admin for a user's address book."""
    model = UserAddress
    extra = 0
    fields = ['type_code', 'street', 'city', 'postal_code', 'country', 'is_default']


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin interface for customer profiles."""

    list_display = [
        'full_name',
        'email',
        'phone_number',
        'status_badge',
        'email_verified',
        'phone_verified',
        'last_login_at',
        'created_at',
    ]
    list_filter = ['status_code', 'role_code', 'email_verified', 'phone_verified']
    search_fields = ['full_name', 'email', 'phone_number', 'national_id', 'keycloak_id']
    readonly_fields = ['id', 'keycloak_id', 'last_login_at', 'created_at', 'updated_at', 'version']
    inlines = [UserAddressInline]

    def status_badge(self, obj):
        """Display account status as colored badge."""
        colors = {
            UserStatus.ACTIVE: '#6B8E5E',
            UserStatus.SUSPENDED: '#E5A04A',
            UserStatus.INACTIVE: '#B85C5C',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.status_code, '#999'), obj.get_status_code_display()
        )
    status_badge.short_description = 'Status'


@admin.register(UserSession)
class UserSessionAdmin(admin.ModelAdmin):
    list_display = ['user', 'ip_address', 'device_type', 'is_active', 'expires_at', 'last_activity']
    list_filter = ['is_active']
    search_fields = ['user__email', 'ip_address']
    readonly_fields = ['session_token', 'created_at']
