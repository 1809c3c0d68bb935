"""Address book management with optional geocoding."""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from django.db import transaction

from apps.core.services import code_lists, validate_code

from ..models import User, UserAddress
from .exceptions import AddressNotFoundError
from .geocoding import GeocodingClient

logger = logging.getLogger(__name__)


def _get_owned_address(*, user: User, address_id: UUID, lock: bool = False) -> UserAddress:
    addresses = UserAddress.objects
    if lock:
        addresses = addresses.select_for_update()
    try:
        return addresses.get(id=address_id, user=user)
    except UserAddress.DoesNotExist:
        raise AddressNotFoundError(f"Address {address_id} not found")


@transaction.atomic
def add_address(
    *,
    user: User,
    type_code: str,
    street: str,
    city: str,
    postal_code: str,
    country: str,
    region: str = '',
    is_default: bool = False,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None
) -> UserAddress:
    """
    Add an address to the user's address book.

    The first address a user adds becomes the default one.

    Raises:
        InvalidCodeError: If type_code is not a known address type
        django.core.exceptions.ValidationError: If a field is invalid
    """
    validate_code(type=code_lists.ADDRESS_TYPE, code=type_code)

    if not UserAddress.objects.filter(user=user).exists():
        is_default = True

    address = UserAddress(
        user=user,
        type_code=type_code,
        street=street,
        city=city,
        region=region,
        postal_code=postal_code,
        country=country.upper(),
        latitude=latitude,
        longitude=longitude,
    )
    address.full_clean()
    address.save()

    if is_default:
        set_default_address(user=user, address_id=address.id)
        address.refresh_from_db()

    return address


@transaction.atomic
def set_default_address(*, user: User, address_id: UUID) -> UserAddress:
    """
    Make an address the user's only default address.

    Raises:
        AddressNotFoundError: If address doesn't belong to user
    """
    address = _get_owned_address(user=user, address_id=address_id, lock=True)

    UserAddress.objects.filter(user=user, is_default=True).exclude(id=address.id).update(is_default=False)

    if not address.is_default:
        address.is_default = True
        address.save(update_fields=['is_default', 'updated_at'])
    return address


@transaction.atomic
def update_address(*, user: User, address_id: UUID, data: Dict[str, Any]) -> UserAddress:
    """
    Update address fields. Changing the postal fields clears stale coordinates.

    Raises:
        AddressNotFoundError: If address doesn't belong to user
    """
    address = _get_owned_address(user=user, address_id=address_id, lock=True)

    postal_fields = ['street', 'city', 'region', 'postal_code', 'country']
    allowed_fields = postal_fields + ['type_code', 'latitude', 'longitude']

    if 'type_code' in data:
        validate_code(type=code_lists.ADDRESS_TYPE, code=data['type_code'])

    moved = any(field in data and data[field] != getattr(address, field) for field in postal_fields)

    for field, value in data.items():
        if field in allowed_fields:
            setattr(address, field, value)
    address.country = address.country.upper()

    if moved and 'latitude' not in data:
        address.latitude = None
        address.longitude = None

    address.full_clean()
    address.save()

    if data.get('is_default'):
        address = set_default_address(user=user, address_id=address.id)
    return address


@transaction.atomic
def remove_address(*, user: User, address_id: UUID) -> None:
    """
    Soft delete an address. If it was the default, the oldest remaining
    address takes over.

    Raises:
        AddressNotFoundError: If address doesn't belong to user
    """
    address = _get_owned_address(user=user, address_id=address_id, lock=True)
    was_default = address.is_default
    address.delete()

    if was_default:
        successor = UserAddress.objects.filter(user=user).order_by('created_at').first()
        if successor:
            set_default_address(user=user, address_id=successor.id)


def geocode_address(
    *,
    user: User,
    address_id: UUID,
    client: Optional[GeocodingClient] = None
) -> UserAddress:
    """
    Resolve and store the coordinates of an address.

    The provider is called before the row is locked. Coordinates are
    left untouched when the provider finds no match, or when the address
    was edited while the lookup was in flight.

    Raises:
        AddressNotFoundError: If address doesn't belong to user
        GeocodingError: If the provider call fails
    """
    address = _get_owned_address(user=user, address_id=address_id)
    query = address.geocoding_query
    client = client or GeocodingClient()

    coordinates = client.geocode(query)
    if coordinates is None:
        return address

    with transaction.atomic():
        address = _get_owned_address(user=user, address_id=address_id, lock=True)
        if address.geocoding_query != query:
            logger.info("Address changed during geocoding", extra={'address_id': str(address.id)})
            return address

        address.latitude, address.longitude = coordinates
        address.save(update_fields=['latitude', 'longitude', 'updated_at'])

    logger.info("Address geocoded", extra={'address_id': str(address.id)})
    return address
