"""Notification creation and inbox operations."""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.core.serializers import NotificationDataSerializer, clean_document
from apps.core.services import code_lists, validate_code

from ..models import Notification, NotificationChannel, NotificationPriority
from .exceptions import NotificationNotFoundError

logger = logging.getLogger(__name__)


@transaction.atomic
def notify_user(
    *,
    user: User,
    title: str,
    message: str = '',
    type: str = 'SYSTEM',
    priority: str = NotificationPriority.NORMAL,
    channel: str = NotificationChannel.APP,
    action_url: str = '',
    data: Optional[Dict[str, Any]] = None
) -> Notification:
    """
    Create and dispatch a notification.

    In-app notifications are delivered by being stored, so they are
    stamped as sent immediately. Other channels are logged for the
    delivery worker to pick up and stay unsent until it confirms.

    Args:
        user: Recipient
        title: 2-100 characters
        message: Body, 2000 characters max
        type: NOTIFICATION_TYPE code (ORDER, PAYMENT, CREDIT, ...)
        priority: LOW, NORMAL, HIGH or URGENT
        channel: APP, EMAIL, SMS or PUSH
        action_url: Link opened from the notification
        data: Business context document (order_id, amount, reference, ...)

    Returns:
        Created Notification

    Raises:
        InvalidCodeError: If type is not a known notification type
        django.core.exceptions.ValidationError: If a field is invalid
    """
    validate_code(type=code_lists.NOTIFICATION_TYPE, code=type)

    notification = Notification(
        user=user,
        title=title,
        message=message,
        type=type,
        priority=priority,
        channel=channel,
        action_url=action_url,
        data=clean_document(NotificationDataSerializer, data) or {},
    )
    if channel == NotificationChannel.APP:
        notification.sent_at = timezone.now()

    notification.full_clean()
    notification.save()

    logger.info("Notification queued", extra={
        'notification_id': str(notification.id),
        'user_id': str(user.id),
        'type': type,
        'channel': channel,
        'priority': priority,
    })
    return notification


@transaction.atomic
def mark_notification_sent(*, notification_id: UUID) -> Notification:
    """Confirm delivery of a queued notification."""
    try:
        notification = Notification.objects.select_for_update().get(id=notification_id)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification {notification_id} not found")

    if not notification.is_sent():
        notification.sent_at = timezone.now()
        notification.save(update_fields=['sent_at', 'updated_at'])
    return notification


@transaction.atomic
def mark_notification_read(*, user: User, notification_id: UUID) -> Notification:
    """
    Mark one of the user's notifications as read.

    Raises:
        NotificationNotFoundError: If notification doesn't belong to user
    """
    try:
        notification = Notification.objects.select_for_update().get(id=notification_id, user=user)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification {notification_id} not found")

    if not notification.is_read:
        notification.mark_as_read()
        notification.save(update_fields=['is_read', 'read_at', 'updated_at'])
    return notification


@transaction.atomic
def mark_all_read(*, user: User) -> int:
    """Mark every unread notification as read. Returns the number updated."""
    now = timezone.now()
    return Notification.objects.filter(user=user, is_read=False).update(
        is_read=True,
        read_at=now,
        updated_at=now,
    )


def get_unread_notifications(*, user: User, high_priority_only: bool = False) -> QuerySet:
    notifications = Notification.objects.filter(user=user, is_read=False)
    if high_priority_only:
        notifications = notifications.filter(
            priority__in=[NotificationPriority.HIGH, NotificationPriority.URGENT]
        )
    return notifications.order_by('-created_at')


def unread_count(*, user: User) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


@transaction.atomic
def purge_expired_notifications(*, now=None) -> int:
    """Soft delete unread notifications older than the expiry window."""
    now = now or timezone.now()
    cutoff = now - timedelta(days=settings.KREDIKA['NOTIFICATION_EXPIRY_DAYS'])
    expired = Notification.objects.filter(is_read=False, sent_at__lt=cutoff)
    count = expired.count()
    expired.delete()
    logger.info("Purged expired notifications", extra={'count': count})
    return count
