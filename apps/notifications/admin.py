from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'type', 'priority', 'channel', 'is_read', 'sent_at']
    list_filter = ['type', 'priority', 'channel', 'is_read']
    search_fields = ['title', 'user__email']
    readonly_fields = ['read_at', 'sent_at', 'created_at', 'updated_at', 'version']
