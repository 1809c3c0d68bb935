import pytest
import httpx
from datetime import timedelta
from django.utils import timezone

from apps.accounts.models import UserAddress, UserSession


@pytest.fixture
def home_address(customer):
    """Create and return the customer's default address in Paris."""
    return UserAddress.objects.create(
        user=customer,
        type_code='HOME',
        street='10 Rue de Rivoli',
        city='Paris',
        postal_code='75001',
        country='FR',
        is_default=True,
        latitude=48.8566,
        longitude=2.3522,
    )


@pytest.fixture
def work_address(customer):
    """Create and return a non-default address in Dakar."""
    return UserAddress.objects.create(
        user=customer,
        type_code='WORK',
        street='Avenue Cheikh Anta Diop',
        city='Dakar',
        postal_code='10700',
        country='SN',
        latitude=14.6928,
        longitude=-17.4467,
    )


@pytest.fixture
def session(customer):
    """Create and return an active session expiring in one hour."""
    now = timezone.now()
    return UserSession.objects.create(
        user=customer,
        session_token='a' * 64,
        ip_address='192.168.1.10',
        user_agent='Mozilla/5.0 (Windows NT 10.0; Win64; x64)',
        expires_at=now + timedelta(hours=1),
        last_activity=now,
    )


@pytest.fixture
def nominatim_transport():
    """Mock transport answering like Nominatim with a single hit."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[{'lat': '14.6928', 'lon': '-17.4467'}])

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport
