"""
Human-readable reference numbers.

Orders, installment plans and payment transactions carry references
shaped PREFIX-YYYYMMDD-NNNNN (e.g. CMD-20240115-04217).
"""

import logging
import secrets
from datetime import date
from typing import Callable, Optional, Type, TypeVar

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

ORDER_PREFIX = 'CMD'
PLAN_PREFIX = 'PLAN'
TRANSACTION_PREFIX = 'TRX'

T = TypeVar('T')


def generate_reference(prefix: str, day: Optional[date] = None) -> str:
    """Build a reference with a random 5-digit sequence for `day` (default today)."""
    day = day or timezone.localdate()
    return f"{prefix}-{day:%Y%m%d}-{secrets.randbelow(100000):05d}"


def create_with_reference(
    create: Callable[[str], T],
    *,
    model: Type[models.Model],
    field: str,
    prefix: str,
    max_retries: Optional[int] = None
) -> T:
    """
    Call `create(reference)` until it succeeds with a unique reference.

    Each attempt runs in its own savepoint so a collision on the unique
    reference column can be retried inside an outer transaction. Any
    other integrity failure is raised as is.

    Args:
        create: Callable persisting the object with the given reference
        model: Model holding the reference column
        field: Name of the unique reference column
        prefix: Reference prefix (CMD, PLAN, TRX)
        max_retries: Attempts before giving up (default from settings)

    Returns:
        Whatever `create` returns

    Raises:
        RuntimeError: If no unique reference was found after retries
        IntegrityError: If `create` fails for a reason other than a taken reference
    """
    if max_retries is None:
        max_retries = settings.KREDIKA['REFERENCE_MAX_RETRIES']

    for attempt in range(max_retries):
        reference = generate_reference(prefix)
        try:
            with transaction.atomic():
                return create(reference)
        except IntegrityError:
            if not model._base_manager.filter(**{field: reference}).exists():
                raise
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique {prefix} reference after {max_retries} attempts"
                )
            logger.debug("Reference collision", extra={'reference': reference, 'attempt': attempt + 1})

    raise RuntimeError(f"Unexpected error generating {prefix} reference")
