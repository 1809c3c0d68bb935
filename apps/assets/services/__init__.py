"""Services for land and vehicle registries."""

from .exceptions import (
    AssetsServiceError,
    LandNotFoundError,
    VehicleNotFoundError,
    DuplicateVehicleError,
)
from .asset_management import (
    register_land,
    register_vehicle,
    attach_land_document,
    attach_vehicle_document,
    get_owner_assets,
    get_expired_documents,
)

__all__ = [
    # Exceptions
    'AssetsServiceError',
    'LandNotFoundError',
    'VehicleNotFoundError',
    'DuplicateVehicleError',
    # Assets
    'register_land',
    'register_vehicle',
    'attach_land_document',
    'attach_vehicle_document',
    'get_owner_assets',
    'get_expired_documents',
]
