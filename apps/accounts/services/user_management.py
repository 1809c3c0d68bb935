"""User profile management service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from django.db import IntegrityError, transaction

from apps.core.serializers import UserPreferencesSerializer, clean_document

from ..models import User, UserStatus
from .exceptions import DuplicateUserError, UserNotFoundError

logger = logging.getLogger(__name__)


@transaction.atomic
def create_user(
    *,
    full_name: str,
    email: str,
    phone_number: Optional[str] = None,
    date_of_birth: Optional[date] = None,
    national_id: Optional[str] = None,
    profession: str = '',
    monthly_income: Optional[Decimal] = None,
    keycloak_id: Optional[str] = None,
    profile_image_url: str = '',
    preferred_language: str = 'fr',
    preferences: Optional[Dict[str, Any]] = None
) -> User:
    """
    Create a customer profile.

    Args:
        full_name: Customer's full name
        email: Unique email address
        phone_number: International phone number (unique)
        date_of_birth: Birth date, must be in the past
        national_id: National identity number (unique)
        profession: Occupation
        monthly_income: Declared monthly income, used for credit underwriting
        keycloak_id: Identity provider subject
        profile_image_url: Avatar URL
        preferred_language: ISO 639-1 language code
        preferences: User preferences document

    Returns:
        Created User instance

    Raises:
        DuplicateUserError: If email, phone, national id or keycloak id is taken
        django.core.exceptions.ValidationError: If a field is invalid
    """
    email = email.strip().lower()
    if User.all_objects.filter(email=email).exists():
        raise DuplicateUserError(f"User with email '{email}' already exists")

    user = User(
        full_name=full_name.strip(),
        email=email,
        phone_number=phone_number or None,
        date_of_birth=date_of_birth,
        national_id=national_id or None,
        profession=profession,
        monthly_income=monthly_income,
        keycloak_id=keycloak_id or None,
        profile_image_url=profile_image_url,
        preferred_language=preferred_language,
        preferences=clean_document(UserPreferencesSerializer, preferences) or {},
    )
    user.add_role('CUSTOMER')
    user.full_clean(validate_unique=False)

    try:
        with transaction.atomic():
            user.save()
    except IntegrityError:
        raise DuplicateUserError("Phone number, national id or identity subject already registered")

    logger.info("User created", extra={'user_id': str(user.id)})
    return user


def get_user_by_id(*, user_id: UUID) -> User:
    """
    Retrieve user by ID.

    Raises:
        UserNotFoundError: If user doesn't exist
    """
    try:
        return User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User {user_id} not found")


def get_user_by_keycloak_id(*, keycloak_id: str) -> User:
    """
    Retrieve user by identity provider subject.

    Raises:
        UserNotFoundError: If no profile is linked to the subject
    """
    try:
        return User.objects.get(keycloak_id=keycloak_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"No user linked to identity {keycloak_id}")


@transaction.atomic
def update_user(*, user_id: UUID, data: Dict[str, Any]) -> User:
    """
    Update profile fields.

    Args:
        user_id: User UUID
        data: Fields to update (unknown keys are ignored)

    Returns:
        Updated User instance

    Raises:
        UserNotFoundError: If user doesn't exist
        DuplicateUserError: If the new phone or national id is taken
    """
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User {user_id} not found")

    allowed_fields = [
        'full_name', 'phone_number', 'date_of_birth', 'national_id',
        'profession', 'monthly_income', 'profile_image_url', 'preferred_language',
    ]

    for field, value in data.items():
        if field in allowed_fields:
            setattr(user, field, value)

    if 'preferences' in data:
        user.preferences = clean_document(UserPreferencesSerializer, data['preferences']) or {}

    user.full_clean(validate_unique=False)
    try:
        with transaction.atomic():
            user.save()
    except IntegrityError:
        raise DuplicateUserError("Phone number or national id already registered")
    return user


@transaction.atomic
def record_login(*, user_id: UUID) -> User:
    """Stamp the last login time."""
    user = get_user_by_id(user_id=user_id)
    user.update_last_login()
    user.save(update_fields=['last_login_at', 'updated_at'])
    return user


@transaction.atomic
def deactivate_user(*, user_id: UUID, reason: str = '') -> User:
    """
    Set the account to INACTIVE and close its sessions.

    Raises:
        UserNotFoundError: If user doesn't exist
    """
    user = get_user_by_id(user_id=user_id)
    user.status_code = UserStatus.INACTIVE
    user.save(update_fields=['status_code', 'updated_at'])

    user.sessions.filter(is_active=True).update(is_active=False)

    logger.info("User deactivated", extra={'user_id': str(user.id), 'reason': reason})
    return user
