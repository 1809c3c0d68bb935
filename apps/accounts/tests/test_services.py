"""
Service layer unit tests for accounts app.

Tests cover:
- Profile creation and uniqueness
- Address book defaults
- Geocoding through a mocked HTTP transport
- Session lifecycle
"""

import pytest
import httpx
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4
from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.accounts.models import UserAddress, UserSession, UserStatus
from apps.accounts.services import (
    create_user,
    get_user_by_id,
    get_user_by_keycloak_id,
    update_user,
    record_login,
    deactivate_user,
    add_address,
    set_default_address,
    update_address,
    remove_address,
    geocode_address,
    GeocodingClient,
    open_session,
    touch_session,
    extend_session,
    close_session,
    close_all_sessions,
    purge_expired_sessions,
)
from apps.accounts.services.exceptions import (
    AddressNotFoundError,
    DuplicateUserError,
    GeocodingError,
    InactiveUserError,
    InvalidSessionError,
    SessionNotFoundError,
    UserNotFoundError,
)


# =============================================================================
# User Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestUserManagement:

    def test_create_user(self):
        user = create_user(
            full_name=' Fatou Diop ',
            email='Fatou@Example.com',
            phone_number='+221 77 123 45 67',
            monthly_income=Decimal('450000.00'),
            keycloak_id='kc-123',
            preferences={'language': 'fr', 'dark_mode': True},
        )

        assert user.full_name == 'Fatou Diop'
        assert user.email == 'fatou@example.com'
        assert user.roles == ['CUSTOMER']
        assert user.preferences == {'language': 'fr', 'dark_mode': True}
        assert user.status_code == UserStatus.ACTIVE

    def test_create_user_duplicate_email(self, customer):
        with pytest.raises(DuplicateUserError):
            create_user(full_name='Other', email=customer.email.upper())

    def test_create_user_duplicate_phone(self, customer):
        with pytest.raises(DuplicateUserError):
            create_user(full_name='Other', email='other@x.com', phone_number=customer.phone_number)

    def test_create_user_invalid_phone(self):
        with pytest.raises(ValidationError):
            create_user(full_name='Other', email='other@x.com', phone_number='77 123')

    def test_lookup(self, customer):
        assert get_user_by_id(user_id=customer.id) == customer
        assert get_user_by_keycloak_id(keycloak_id=customer.keycloak_id) == customer

        with pytest.raises(UserNotFoundError):
            get_user_by_id(user_id=uuid4())
        with pytest.raises(UserNotFoundError):
            get_user_by_keycloak_id(keycloak_id='missing')

    def test_update_user_ignores_unknown_fields(self, customer):
        updated = update_user(user_id=customer.id, data={
            'profession': 'Engineer',
            'email': 'hijack@x.com',
            'status_code': 'SUSPENDED',
        })

        assert updated.profession == 'Engineer'
        assert updated.email == customer.email
        assert updated.status_code == UserStatus.ACTIVE

    def test_record_login(self, customer):
        assert customer.last_login_at is None
        assert record_login(user_id=customer.id).last_login_at is not None

    def test_deactivate_closes_sessions(self, customer, session):
        deactivate_user(user_id=customer.id, reason='fraud')

        customer.refresh_from_db()
        session.refresh_from_db()
        assert customer.status_code == UserStatus.INACTIVE
        assert session.is_active is False


# =============================================================================
# Address Service Tests
# =============================================================================

@pytest.mark.django_db
class TestAddressManagement:

    def _add(self, user, **overrides):
        fields = dict(
            user=user, type_code='HOME', street='1 Rue A', city='Dakar',
            postal_code='10000', country='sn',
        )
        fields.update(overrides)
        return add_address(**fields)

    def test_first_address_becomes_default(self, customer):
        address = self._add(customer)
        assert address.is_default is True
        assert address.country == 'SN'

    def test_only_one_default(self, customer):
        first = self._add(customer)
        second = self._add(customer, type_code='WORK', is_default=True)

        first.refresh_from_db()
        assert second.is_default is True
        assert first.is_default is False
        assert UserAddress.objects.filter(user=customer, is_default=True).count() == 1

    def test_set_default_other_users_address(self, customer, other_customer):
        address = self._add(other_customer)
        with pytest.raises(AddressNotFoundError):
            set_default_address(user=customer, address_id=address.id)

    def test_update_moving_clears_coordinates(self, customer, home_address):
        updated = update_address(user=customer, address_id=home_address.id, data={'city': 'Lyon'})
        assert updated.city == 'Lyon'
        assert updated.latitude is None

    def test_remove_default_promotes_successor(self, customer, home_address, work_address):
        remove_address(user=customer, address_id=home_address.id)

        work_address.refresh_from_db()
        assert work_address.is_default is True
        assert not UserAddress.objects.filter(id=home_address.id).exists()

    def test_geocode_address(self, customer, home_address, nominatim_transport):
        client = GeocodingClient(
            base_url='https://geo.test/search',
            user_agent='KredikaApp/1.0',
            transport=nominatim_transport,
        )

        address = geocode_address(user=customer, address_id=home_address.id, client=client)

        assert address.latitude == pytest.approx(14.6928)
        assert address.longitude == pytest.approx(-17.4467)
        request = nominatim_transport.requests[0]
        assert request.headers['User-Agent'] == 'KredikaApp/1.0'
        assert request.url.params['format'] == 'json'
        assert request.url.params['q'] == '10 Rue de Rivoli, Paris, FR'

    def test_geocode_skips_address_edited_during_lookup(self, customer, home_address):
        def handler(request):
            UserAddress.objects.filter(id=home_address.id).update(street='5 Avenue Foch')
            return httpx.Response(200, json=[{'lat': '14.6928', 'lon': '-17.4467'}])

        client = GeocodingClient(base_url='https://geo.test/search', transport=httpx.MockTransport(handler))

        geocode_address(user=customer, address_id=home_address.id, client=client)

        home_address.refresh_from_db()
        assert home_address.street == '5 Avenue Foch'
        assert home_address.latitude == pytest.approx(48.8566)

    def test_geocode_no_match_keeps_coordinates(self, customer, home_address):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
        client = GeocodingClient(base_url='https://geo.test/search', transport=transport)

        address = geocode_address(user=customer, address_id=home_address.id, client=client)

        assert address.latitude == pytest.approx(48.8566)

    def test_geocode_http_error(self, customer, home_address):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        client = GeocodingClient(base_url='https://geo.test/search', transport=transport)

        with pytest.raises(GeocodingError, match='503'):
            geocode_address(user=customer, address_id=home_address.id, client=client)

    def test_geocode_timeout(self, customer, home_address):
        def handler(request):
            raise httpx.ConnectTimeout('timed out', request=request)

        client = GeocodingClient(base_url='https://geo.test/search', transport=httpx.MockTransport(handler))

        with pytest.raises(GeocodingError, match='timeout'):
            geocode_address(user=customer, address_id=home_address.id, client=client)


# =============================================================================
# Session Service Tests
# =============================================================================

@pytest.mark.django_db
class TestSessionManagement:

    def test_open_session(self, customer):
        session = open_session(
            user=customer,
            ip_address='10.0.0.1',
            user_agent='KredikaMobile/2.0 Mobile',
            device_info={'os': 'Android', 'version': '14'},
        )

        customer.refresh_from_db()
        assert len(session.session_token) == 64
        assert session.device_info == {'os': 'Android', 'version': '14'}
        assert session.is_valid()
        assert customer.last_login_at is not None

    def test_open_session_inactive_user(self, customer):
        deactivate_user(user_id=customer.id)
        customer.refresh_from_db()

        with pytest.raises(InactiveUserError):
            open_session(user=customer)

    def test_touch_session(self, session):
        touched = touch_session(session_token=session.session_token)
        assert touched.last_activity >= session.last_activity

    def test_touch_idle_session_invalidates(self, session):
        UserSession.objects.filter(id=session.id).update(
            last_activity=timezone.now() - timedelta(hours=3)
        )

        with pytest.raises(InvalidSessionError):
            touch_session(session_token=session.session_token)

        session.refresh_from_db()
        assert session.is_active is False

    def test_touch_unknown_session(self):
        with pytest.raises(SessionNotFoundError):
            touch_session(session_token='b' * 64)

    def test_extend_and_close(self, session):
        extended = extend_session(session_token=session.session_token, minutes=30)
        assert extended.expires_at == session.expires_at + timedelta(minutes=30)

        close_session(session_token=session.session_token)
        with pytest.raises(InvalidSessionError):
            extend_session(session_token=session.session_token, minutes=30)

    def test_close_all_sessions(self, customer, session):
        assert close_all_sessions(user_id=customer.id) == 1
        session.refresh_from_db()
        assert session.is_active is False

    def test_purge_expired_sessions(self, session):
        later = session.expires_at + timedelta(minutes=1)
        assert purge_expired_sessions(now=later) == 1
        assert not UserSession.objects.filter(id=session.id).exists()
