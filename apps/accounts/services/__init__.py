"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserNotFoundError,
    DuplicateUserError,
    InactiveUserError,
    AddressNotFoundError,
    GeocodingError,
    SessionNotFoundError,
    InvalidSessionError,
)
from .user_management import (
    create_user,
    get_user_by_id,
    get_user_by_keycloak_id,
    update_user,
    record_login,
    deactivate_user,
)
from .address_management import (
    add_address,
    set_default_address,
    update_address,
    remove_address,
    geocode_address,
)
from .geocoding import GeocodingClient
from .session_management import (
    open_session,
    touch_session,
    extend_session,
    close_session,
    close_all_sessions,
    purge_expired_sessions,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserNotFoundError',
    'DuplicateUserError',
    'InactiveUserError',
    'AddressNotFoundError',
    'GeocodingError',
    'SessionNotFoundError',
    'InvalidSessionError',
    # User Management
    'create_user',
    'get_user_by_id',
    'get_user_by_keycloak_id',
    'update_user',
    'record_login',
    'deactivate_user',
    # Addresses
    'add_address',
    'set_default_address',
    'update_address',
    'remove_address',
    'geocode_address',
    'GeocodingClient',
    # Sessions
    'open_session',
    'touch_session',
    'extend_session',
    'close_session',
    'close_all_sessions',
    'purge_expired_sessions',
]
