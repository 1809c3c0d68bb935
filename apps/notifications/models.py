from datetime import timedelta

from django.conf import settings
from django.core.validators import MaxLengthValidator, MinLengthValidator
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel


class NotificationPriority(models.TextChoices):
    LOW = 'LOW', 'Low'
    NORMAL = 'NORMAL', 'Normal'
    HIGH = 'HIGH', 'High'
    URGENT = 'URGENT', 'Urgent'


class NotificationChannel(models.TextChoices):
    APP = 'APP', 'In-app'
    EMAIL = 'EMAIL', 'Email'
    SMS = 'SMS', 'SMS'
    PUSH = 'PUSH', 'Push'


class Notification(BaseModel):
    """Message addressed to a user through one channel."""

    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='notifications')

    title = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    message = models.TextField(blank=True, validators=[MaxLengthValidator(2000)])
    type = models.CharField(max_length=30, blank=True)
    priority = models.CharField(
        max_length=10,
        choices=NotificationPriority.choices,
        default=NotificationPriority.NORMAL
    )
    channel = models.CharField(
        max_length=10,
        choices=NotificationChannel.choices,
        default=NotificationChannel.APP
    )

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    action_url = models.CharField(max_length=500, blank=True)
    # order_id, amount, reference, deep_link, expiry_date
    data = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'is_read']),
            models.Index(fields=['sent_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"[{self.priority}] {self.title}"

    def mark_as_read(self):
        self.is_read = True
        self.read_at = timezone.now()

    def is_high_priority(self):
        return self.priority in (NotificationPriority.HIGH, NotificationPriority.URGENT)

    def is_sent(self):
        return self.sent_at is not None

    def is_expired(self, now=None):
        """Unread and sent longer ago than the notification expiry window."""
        if self.is_read or self.sent_at is None:
            return False
        now = now or timezone.now()
        return self.sent_at + timedelta(days=settings.KREDIKA['NOTIFICATION_EXPIRY_DAYS']) < now
