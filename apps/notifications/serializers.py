from rest_framework import serializers

from apps.core.serializers import NotificationDataSerializer

from .models import Notification, NotificationChannel, NotificationPriority


# =============================================================================
# Input Serializers
# =============================================================================

class NotificationRequestSerializer(serializers.Serializer):
    """Validate input for sending a notification to a user."""

    user_id = serializers.UUIDField()
    title = serializers.CharField(min_length=2, max_length=100)
    message = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    type = serializers.CharField(max_length=30, default='SYSTEM')
    priority = serializers.ChoiceField(choices=NotificationPriority.choices, default=NotificationPriority.NORMAL)
    channel = serializers.ChoiceField(choices=NotificationChannel.choices, default=NotificationChannel.APP)
    action_url = serializers.CharField(max_length=500, required=False, allow_blank=True)
    data = NotificationDataSerializer(required=False, allow_null=True)


# =============================================================================
# Output Serializers
# =============================================================================

class NotificationResponseSerializer(serializers.ModelSerializer):
    is_high_priority = serializers.BooleanField(read_only=True)

    class Meta:
        model = Notification
        fields = [
            'id',
            'title',
            'message',
            'type',
            'priority',
            'is_high_priority',
            'channel',
            'is_read',
            'read_at',
            'sent_at',
            'action_url',
            'data',
            'created_at',
        ]
        read_only_fields = fields
