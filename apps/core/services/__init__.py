"""Services for shared reference data and identifiers."""

from .exceptions import (
    CoreServiceError,
    CodeNotFoundError,
    InvalidCodeError,
)
from .code_lists import (
    get_codes,
    get_code,
    is_valid_code,
    validate_code,
    upsert_code,
)
from .references import (
    generate_reference,
    create_with_reference,
    ORDER_PREFIX,
    PLAN_PREFIX,
    TRANSACTION_PREFIX,
)

__all__ = [
    # Exceptions
    'CoreServiceError',
    'CodeNotFoundError',
    'InvalidCodeError',
    # Code Lists
    'get_codes',
    'get_code',
    'is_valid_code',
    'validate_code',
    'upsert_code',
    # References
    'generate_reference',
    'create_with_reference',
    'ORDER_PREFIX',
    'PLAN_PREFIX',
    'TRANSACTION_PREFIX',
]
