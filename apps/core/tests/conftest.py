import pytest

from apps.core.models import CodeList


@pytest.fixture
def payment_methods(db):
    """Create a PAYMENT_METHOD code list with one inactive entry."""
    return [
        CodeList.objects.create(type='PAYMENT_METHOD', code='CARD', label='Bank card', position=0),
        CodeList.objects.create(type='PAYMENT_METHOD', code='CREDIT', label='Credit', position=1),
        CodeList.objects.create(
            type='PAYMENT_METHOD', code='CHEQUE', label='Cheque', position=2, is_active=False
        ),
    ]
