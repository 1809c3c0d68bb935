import pytest

from apps.orders.services import create_order


@pytest.fixture
def order(customer, product):
    """Create and return an order for 2 x product (total 200.00)."""
    return create_order(
        user=customer,
        items=[{'product_id': product.id, 'quantity': 2, 'payment_method_code': 'CASH'}],
    )
