"""Code list (reference data) lookups."""

import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import QuerySet

from ..models import CodeList
from .exceptions import CodeNotFoundError, InvalidCodeError

logger = logging.getLogger(__name__)


# Well-known code list types
ORDER_STATUS = 'ORDER_STATUS'
PAYMENT_STATUS = 'PAYMENT_STATUS'
PAYMENT_METHOD = 'PAYMENT_METHOD'
CREDIT_FREQUENCY = 'CREDIT_FREQUENCY'
PLAN_STATUS = 'PLAN_STATUS'
TRANSACTION_STATUS = 'TRANSACTION_STATUS'
ADDRESS_TYPE = 'ADDRESS_TYPE'
CART_STATUS = 'CART_STATUS'
NOTIFICATION_TYPE = 'NOTIFICATION_TYPE'
USER_ROLE = 'USER_ROLE'


def get_codes(*, type: str, include_inactive: bool = False) -> QuerySet:
    """
    List the entries of a code list ordered by position.

    Args:
        type: Code list type (e.g. PAYMENT_METHOD)
        include_inactive: Also return disabled entries

    Returns:
        QuerySet of CodeList entries
    """
    codes = CodeList.objects.filter(type=type)
    if not include_inactive:
        codes = codes.filter(is_active=True)
    return codes.order_by('position', 'code')


def get_code(*, type: str, code: str) -> CodeList:
    """
    Retrieve a single code list entry.

    Raises:
        CodeNotFoundError: If the entry doesn't exist
    """
    try:
        return CodeList.objects.get(type=type, code=code)
    except CodeList.DoesNotExist:
        raise CodeNotFoundError(f"Code {type}:{code} not found")


def is_valid_code(*, type: str, code: str) -> bool:
    """
    Check a code against its list.

    A type with no entries at all is treated as an open list and
    accepts any non-empty code, so deployments that have not seeded
    reference data keep working.
    """
    if not code:
        return False
    entries = CodeList.objects.filter(type=type)
    if not entries.exists():
        return True
    return entries.filter(code=code, is_active=True).exists()


def validate_code(*, type: str, code: str) -> str:
    """
    Return `code` unchanged if valid.

    Raises:
        InvalidCodeError: If the code is not an active entry of `type`
    """
    if not is_valid_code(type=type, code=code):
        raise InvalidCodeError(f"'{code}' is not a valid {type} code")
    return code


@transaction.atomic
def upsert_code(
    *,
    type: str,
    code: str,
    label: str = '',
    value: str = '',
    description: str = '',
    position: int = 0,
    is_active: bool = True,
    metadata: Optional[Dict[str, Any]] = None
) -> CodeList:
    """Create or update a code list entry, validating the type and code format."""
    entry = CodeList.all_objects.filter(type=type, code=code).first()
    if entry is None:
        entry = CodeList(type=type, code=code)

    entry.label = label
    entry.value = value or code
    entry.description = description
    entry.position = position
    entry.is_active = is_active
    entry.is_deleted = False
    entry.metadata = metadata or {}
    entry.full_clean(validate_unique=False)
    entry.save()

    logger.debug("Code list entry saved", extra={'code': entry.composite_key})
    return entry
