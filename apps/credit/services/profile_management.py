"""Credit profile lifecycle and credit line bookkeeping."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User

from ..models import CreditProfile, ZERO
from .exceptions import (
    CreditDefaultError,
    CreditProfileNotFoundError,
    DuplicateCreditProfileError,
    InsufficientCreditError,
)
from .underwriting import compute_credit_limit

logger = logging.getLogger(__name__)


def _rebalance(profile: CreditProfile) -> None:
    """Available credit is whatever the limit leaves after debt, never negative."""
    profile.available_credit = max(ZERO, profile.credit_limit - profile.total_debt)


def _lock_profile(user_id: UUID) -> CreditProfile:
    try:
        return CreditProfile.objects.select_for_update().get(user_id=user_id)
    except CreditProfile.DoesNotExist:
        raise CreditProfileNotFoundError(f"User {user_id} has no credit profile")


def get_credit_profile(*, user_id: UUID) -> CreditProfile:
    """
    Retrieve a user's credit profile.

    Raises:
        CreditProfileNotFoundError: If the user has none
    """
    try:
        return CreditProfile.objects.select_related('user').get(user_id=user_id)
    except CreditProfile.DoesNotExist:
        raise CreditProfileNotFoundError(f"User {user_id} has no credit profile")


@transaction.atomic
def open_credit_profile(
    *,
    user: User,
    credit_score: int,
    monthly_income: Optional[Decimal] = None
) -> CreditProfile:
    """
    Underwrite a user and open their credit line.

    Args:
        user: Borrower
        credit_score: Bureau score (300-850)
        monthly_income: Declared income, defaults to the user's profile value

    Returns:
        Created CreditProfile with available credit equal to the limit

    Raises:
        DuplicateCreditProfileError: If the user already has a profile
        django.core.exceptions.ValidationError: If the score is out of range
    """
    if CreditProfile.all_objects.filter(user=user).exists():
        raise DuplicateCreditProfileError(f"User {user.id} already has a credit profile")

    if monthly_income is None:
        monthly_income = user.monthly_income

    limit = compute_credit_limit(credit_score=credit_score, monthly_income=monthly_income)
    profile = CreditProfile(
        user=user,
        credit_score=credit_score,
        credit_limit=limit,
        available_credit=limit,
        total_debt=ZERO,
        last_credit_review=timezone.now(),
    )
    profile.full_clean()
    profile.save()

    logger.info("Credit profile opened", extra={
        'user_id': str(user.id),
        'credit_score': credit_score,
        'credit_limit': str(limit),
    })
    return profile


@transaction.atomic
def review_credit_profile(
    *,
    user_id: UUID,
    credit_score: Optional[int] = None,
    monthly_income: Optional[Decimal] = None
) -> CreditProfile:
    """
    Re-underwrite a profile.

    The limit is recomputed from the (new) score, income and default
    history. Outstanding debt is kept as is.
    """
    profile = _lock_profile(user_id)

    if credit_score is not None:
        profile.credit_score = credit_score
    if monthly_income is None:
        monthly_income = profile.user.monthly_income

    previous_limit = profile.credit_limit
    profile.credit_limit = compute_credit_limit(
        credit_score=profile.credit_score,
        monthly_income=monthly_income,
        default_count=profile.default_count,
    )
    profile.last_credit_review = timezone.now()
    _rebalance(profile)

    profile.full_clean()
    profile.save()

    logger.info("Credit profile reviewed", extra={
        'user_id': str(user_id),
        'credit_score': profile.credit_score,
        'previous_limit': str(previous_limit),
        'credit_limit': str(profile.credit_limit),
    })
    return profile


@transaction.atomic
def reserve_credit(*, user_id: UUID, amount: Decimal, force: bool = False) -> CreditProfile:
    """
    Take `amount` out of the available credit and add it to the debt.

    `force` skips the eligibility checks; it is used when a refunded
    payment puts debt back on the books.

    Raises:
        CreditProfileNotFoundError: If the user has no profile
        CreditDefaultError: If the user is in default
        InsufficientCreditError: If available credit is too low
    """
    profile = _lock_profile(user_id)

    if not force:
        if profile.is_in_default():
            raise CreditDefaultError(
                f"User {user_id} has {profile.default_count} defaults and cannot take new credit"
            )
        if amount > profile.available_credit:
            raise InsufficientCreditError(
                f"Requested {amount} exceeds available credit {profile.available_credit}"
            )

    profile.total_debt += amount
    _rebalance(profile)
    profile.save(update_fields=['total_debt', 'available_credit', 'updated_at'])

    logger.info("Credit reserved", extra={
        'user_id': str(user_id),
        'amount': str(amount),
        'available_credit': str(profile.available_credit),
    })
    return profile


@transaction.atomic
def release_credit(*, user_id: UUID, amount: Decimal) -> CreditProfile:
    """Pay down debt by `amount` (floored at zero) and free the credit."""
    profile = _lock_profile(user_id)

    profile.total_debt = max(ZERO, profile.total_debt - amount)
    _rebalance(profile)
    profile.save(update_fields=['total_debt', 'available_credit', 'updated_at'])

    logger.info("Credit released", extra={
        'user_id': str(user_id),
        'amount': str(amount),
        'available_credit': str(profile.available_credit),
    })
    return profile


@transaction.atomic
def add_debt(*, user_id: UUID, amount: Decimal) -> CreditProfile:
    """Add accrued penalties to the debt."""
    return reserve_credit(user_id=user_id, amount=amount, force=True)


@transaction.atomic
def record_default(*, user_id: UUID) -> CreditProfile:
    """Count one more defaulted plan against the user."""
    profile = _lock_profile(user_id)
    profile.default_count += 1
    profile.save(update_fields=['default_count', 'updated_at'])

    logger.warning("Credit default recorded", extra={
        'user_id': str(user_id),
        'default_count': profile.default_count,
        'in_default': profile.is_in_default(),
    })
    return profile
