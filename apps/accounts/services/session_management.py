"""Client session lifecycle."""

import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.serializers import DeviceInfoSerializer, clean_document

from ..models import User, UserSession
from .exceptions import InactiveUserError, InvalidSessionError, SessionNotFoundError

logger = logging.getLogger(__name__)


def _get_session(*, session_token: str, lock: bool = False) -> UserSession:
    sessions = UserSession.objects
    if lock:
        sessions = sessions.select_for_update()
    try:
        return sessions.get(session_token=session_token)
    except UserSession.DoesNotExist:
        raise SessionNotFoundError("Session not found")


@transaction.atomic
def open_session(
    *,
    user: User,
    ip_address: str = '',
    user_agent: str = '',
    device_info: Optional[Dict[str, Any]] = None,
    ttl_minutes: Optional[int] = None
) -> UserSession:
    """
    Open a session for an active user and record the login.

    Args:
        user: Session owner
        ip_address: Client IPv4/IPv6 address
        user_agent: Client User-Agent header
        device_info: Device description document (os, version, model)
        ttl_minutes: Lifetime (default from settings)

    Returns:
        Created UserSession with a fresh 64-character hex token

    Raises:
        InactiveUserError: If the account is not active
    """
    if not user.is_active_account():
        raise InactiveUserError(f"User {user.id} is not active")

    ttl_minutes = ttl_minutes or settings.KREDIKA['SESSION_TTL_MINUTES']
    now = timezone.now()

    session = UserSession(
        user=user,
        session_token=secrets.token_hex(32),
        ip_address=ip_address,
        user_agent=user_agent,
        device_info=clean_document(DeviceInfoSerializer, device_info) or {},
        expires_at=now + timedelta(minutes=ttl_minutes),
        last_activity=now,
    )
    session.full_clean(validate_unique=False)
    session.save()

    user.update_last_login()
    user.save(update_fields=['last_login_at', 'updated_at'])

    known_agents = set(
        UserSession.all_objects
        .filter(user=user)
        .exclude(id=session.id)
        .values_list('user_agent', flat=True)
    )
    if known_agents and session.is_new_device(known_agents):
        logger.info("Session opened from new device", extra={
            'user_id': str(user.id),
            'device_type': session.device_type,
        })

    return session


def touch_session(*, session_token: str) -> UserSession:
    """
    Record activity on a session.

    Sessions idle for longer than SESSION_MAX_INACTIVE_MINUTES are
    invalidated instead, and stay invalidated after the error is raised.

    Raises:
        SessionNotFoundError: If token is unknown
        InvalidSessionError: If session is expired, closed or idle too long
    """
    with transaction.atomic():
        session = _get_session(session_token=session_token, lock=True)

        if not session.is_valid():
            raise InvalidSessionError("Session is no longer valid")

        timed_out = session.is_inactive_too_long(settings.KREDIKA['SESSION_MAX_INACTIVE_MINUTES'])
        if timed_out:
            session.invalidate()
            session.save(update_fields=['is_active', 'updated_at'])
        else:
            session.touch()
            session.save(update_fields=['last_activity', 'updated_at'])

    if timed_out:
        logger.info("Session timed out", extra={'session_id': str(session.id), 'user_id': str(session.user_id)})
        raise InvalidSessionError("Session timed out after inactivity")
    return session


@transaction.atomic
def extend_session(*, session_token: str, minutes: int) -> UserSession:
    """
    Push back a valid session's expiry.

    Raises:
        SessionNotFoundError: If token is unknown
        InvalidSessionError: If session is no longer valid
    """
    session = _get_session(session_token=session_token, lock=True)
    if not session.is_valid():
        raise InvalidSessionError("Session is no longer valid")

    session.extend(minutes)
    session.save(update_fields=['expires_at', 'updated_at'])
    return session


@transaction.atomic
def close_session(*, session_token: str) -> UserSession:
    """Invalidate a session (logout)."""
    session = _get_session(session_token=session_token, lock=True)
    session.invalidate()
    session.save(update_fields=['is_active', 'updated_at'])
    return session


@transaction.atomic
def close_all_sessions(*, user_id: UUID) -> int:
    """Invalidate every open session of a user. Returns the number closed."""
    return UserSession.objects.filter(user_id=user_id, is_active=True).update(
        is_active=False,
        updated_at=timezone.now(),
    )


@transaction.atomic
def purge_expired_sessions(*, now=None) -> int:
    """Soft delete sessions that expired or were closed. Returns the count."""
    now = now or timezone.now()
    stale = UserSession.objects.filter(Q(expires_at__lt=now) | Q(is_active=False))
    count = stale.count()
    stale.delete()
    logger.info("Purged sessions", extra={'count': count})
    return count
