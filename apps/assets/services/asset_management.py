"""Land and vehicle registries."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User

from ..models import Land, LandDocument, Vehicle, VehicleDocument
from .exceptions import DuplicateVehicleError, LandNotFoundError, VehicleNotFoundError

logger = logging.getLogger(__name__)


@transaction.atomic
def register_land(
    *,
    owner: User,
    location: str,
    land_type: str,
    area: float,
    reference: str = '',
    acquisition_date: Optional[date] = None,
    latitude: Optional[Decimal] = None,
    longitude: Optional[Decimal] = None
) -> Land:
    """
    Declare a plot of land.

    Raises:
        django.core.exceptions.ValidationError: If area or coordinates are out of range
    """
    land = Land(
        owner=owner,
        location=location.strip(),
        land_type=land_type,
        area=area,
        reference=reference,
        acquisition_date=acquisition_date,
        latitude=latitude,
        longitude=longitude,
    )
    land.full_clean()
    land.save()

    logger.info("Land registered", extra={'land_id': str(land.id), 'owner_id': str(owner.id)})
    return land


@transaction.atomic
def register_vehicle(
    *,
    owner: User,
    registration_number: str,
    type: str,
    brand: str = '',
    model: str = '',
    chassis_number: str = '',
    color: str = '',
    acquisition_date: Optional[date] = None
) -> Vehicle:
    """
    Declare a vehicle. Registration numbers are stored uppercase without spaces.

    Raises:
        DuplicateVehicleError: If the registration number is already registered
    """
    registration_number = registration_number.replace(' ', '').upper()
    if Vehicle.all_objects.filter(registration_number=registration_number).exists():
        raise DuplicateVehicleError(f"Vehicle {registration_number} is already registered")

    vehicle = Vehicle(
        owner=owner,
        registration_number=registration_number,
        type=type,
        brand=brand,
        model=model,
        chassis_number=chassis_number,
        color=color,
        acquisition_date=acquisition_date,
    )
    vehicle.full_clean()
    vehicle.save()

    logger.info("Vehicle registered", extra={
        'vehicle_id': str(vehicle.id),
        'owner_id': str(owner.id),
        'registration_number': registration_number,
    })
    return vehicle


@transaction.atomic
def attach_land_document(
    *,
    owner: User,
    land_id: UUID,
    document_type: str,
    file_url: str,
    valid_until: Optional[date] = None
) -> LandDocument:
    """
    Raises:
        LandNotFoundError: If the land doesn't belong to owner
    """
    try:
        land = Land.objects.get(id=land_id, owner=owner)
    except Land.DoesNotExist:
        raise LandNotFoundError(f"Land {land_id} not found")

    document = LandDocument(land=land, document_type=document_type, file_url=file_url, valid_until=valid_until)
    document.full_clean()
    document.save()
    return document


@transaction.atomic
def attach_vehicle_document(
    *,
    owner: User,
    vehicle_id: UUID,
    document_type: str,
    file_url: str,
    valid_until: Optional[date] = None
) -> VehicleDocument:
    """
    Raises:
        VehicleNotFoundError: If the vehicle doesn't belong to owner
    """
    try:
        vehicle = Vehicle.objects.get(id=vehicle_id, owner=owner)
    except Vehicle.DoesNotExist:
        raise VehicleNotFoundError(f"Vehicle {vehicle_id} not found")

    document = VehicleDocument(
        vehicle=vehicle,
        document_type=document_type,
        file_url=file_url,
        valid_until=valid_until,
    )
    document.full_clean()
    document.save()
    return document


def get_owner_assets(*, owner: User) -> Dict[str, Any]:
    """
    Everything a user has declared.

    Returns:
        {
            'lands': [Land, ...],
            'vehicles': [Vehicle, ...],
            'total_land_area': 1250.0,
        }
    """
    lands = list(Land.objects.filter(owner=owner).prefetch_related('documents'))
    vehicles = list(Vehicle.objects.filter(owner=owner).prefetch_related('documents'))
    return {
        'lands': lands,
        'vehicles': vehicles,
        'total_land_area': sum(land.area for land in lands),
    }


def get_expired_documents(*, owner: Optional[User] = None, today: Optional[date] = None) -> Dict[str, Any]:
    """Land and vehicle documents whose validity ended before `today`."""
    today = today or timezone.localdate()
    land_documents = LandDocument.objects.filter(valid_until__lt=today).select_related('land')
    vehicle_documents = VehicleDocument.objects.filter(valid_until__lt=today).select_related('vehicle')
    if owner is not None:
        land_documents = land_documents.filter(land__owner=owner)
        vehicle_documents = vehicle_documents.filter(vehicle__owner=owner)
    return {
        'land_documents': list(land_documents),
        'vehicle_documents': list(vehicle_documents),
    }
