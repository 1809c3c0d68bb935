"""
Service layer unit tests for assets app.

Tests cover:
- Land and vehicle registration
- Document attachment and expiry
- Owner asset summary
"""

import pytest
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError

from apps.assets.models import LandDocument
from apps.assets.services import (
    register_land,
    register_vehicle,
    attach_land_document,
    attach_vehicle_document,
    get_owner_assets,
    get_expired_documents,
)
from apps.assets.services.exceptions import (
    DuplicateVehicleError,
    LandNotFoundError,
    VehicleNotFoundError,
)


@pytest.fixture
def land(customer):
    return register_land(
        owner=customer,
        location='  Thies, Keur Mbaye  ',
        land_type='AGRICULTURAL',
        area=1250.0,
        latitude=Decimal('14.79100000'),
        longitude=Decimal('-16.92600000'),
    )


@pytest.fixture
def vehicle(customer):
    return register_vehicle(owner=customer, registration_number='dk 1234 ab', type='CAR', brand='Toyota')


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:

    def test_register_land(self, land):
        assert land.location == 'Thies, Keur Mbaye'
        assert land.has_coordinates()

    def test_negative_area(self, customer):
        with pytest.raises(ValidationError):
            register_land(owner=customer, location='Dakar', land_type='URBAN', area=-1.0)

    def test_latitude_out_of_range(self, customer):
        with pytest.raises(ValidationError):
            register_land(
                owner=customer,
                location='Dakar',
                land_type='URBAN',
                area=300.0,
                latitude=Decimal('91.00000000'),
                longitude=Decimal('0'),
            )

    def test_registration_number_normalised(self, vehicle):
        assert vehicle.registration_number == 'DK1234AB'

    def test_duplicate_vehicle(self, vehicle, other_customer):
        with pytest.raises(DuplicateVehicleError):
            register_vehicle(owner=other_customer, registration_number='DK 1234 AB', type='CAR')


# =============================================================================
# Document Tests
# =============================================================================

@pytest.mark.django_db
class TestDocuments:

    def test_attach_land_document(self, customer, land):
        document = attach_land_document(
            owner=customer,
            land_id=land.id,
            document_type='TITLE_DEED',
            file_url='https://files.example.com/deed.pdf',
        )

        assert document.land_id == land.id
        assert not document.is_expired()

    def test_attach_to_other_owners_land(self, other_customer, land):
        with pytest.raises(LandNotFoundError):
            attach_land_document(
                owner=other_customer,
                land_id=land.id,
                document_type='TITLE_DEED',
                file_url='https://files.example.com/deed.pdf',
            )

    def test_attach_to_other_owners_vehicle(self, other_customer, vehicle):
        with pytest.raises(VehicleNotFoundError):
            attach_vehicle_document(
                owner=other_customer,
                vehicle_id=vehicle.id,
                document_type='INSURANCE',
                file_url='https://files.example.com/insurance.pdf',
            )

    def test_expired_documents(self, customer, other_customer, land, vehicle):
        attach_land_document(
            owner=customer, land_id=land.id, document_type='SURVEY',
            file_url='https://files.example.com/survey.pdf', valid_until=date(2024, 1, 31),
        )
        attach_land_document(
            owner=customer, land_id=land.id, document_type='TITLE_DEED',
            file_url='https://files.example.com/deed.pdf',
        )
        insurance = attach_vehicle_document(
            owner=customer, vehicle_id=vehicle.id, document_type='INSURANCE',
            file_url='https://files.example.com/insurance.pdf', valid_until=date(2024, 6, 30),
        )

        expired = get_expired_documents(owner=customer, today=date(2024, 3, 1))

        assert [d.document_type for d in expired['land_documents']] == ['SURVEY']
        assert expired['vehicle_documents'] == []

        expired = get_expired_documents(today=date(2024, 7, 1))
        assert expired['vehicle_documents'] == [insurance]
        assert get_expired_documents(owner=other_customer, today=date(2024, 7, 1))['land_documents'] == []

    def test_document_expiry_boundary(self):
        document = LandDocument(valid_until=date(2024, 1, 31))

        assert not document.is_expired(date(2024, 1, 31))
        assert document.is_expired(date(2024, 2, 1))


# =============================================================================
# Summary Tests
# =============================================================================

@pytest.mark.django_db
class TestOwnerAssets:

    def test_summary(self, customer, land, vehicle):
        register_land(owner=customer, location='Dakar', land_type='URBAN', area=250.0)

        assets = get_owner_assets(owner=customer)

        assert len(assets['lands']) == 2
        assert assets['vehicles'] == [vehicle]
        assert assets['total_land_area'] == 1500.0

    def test_empty(self, other_customer):
        assets = get_owner_assets(owner=other_customer)

        assert assets == {'lands': [], 'vehicles': [], 'total_land_area': 0}
