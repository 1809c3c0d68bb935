"""Services for orders."""

from .exceptions import (
    OrdersServiceError,
    OrderNotFoundError,
    EmptyOrderError,
    ProductUnavailableError,
    InvalidOrderStateError,
    InvalidQuantityError,
)
from .order_management import (
    get_order_by_id,
    get_order_by_number,
    get_user_orders,
    create_order,
    cancel_order,
    advance_order_status,
    mark_order_delivered,
    record_order_payment,
    record_order_refund,
)

__all__ = [
    # Exceptions
    'OrdersServiceError',
    'OrderNotFoundError',
    'EmptyOrderError',
    'ProductUnavailableError',
    'InvalidOrderStateError',
    'InvalidQuantityError',
    # Orders
    'get_order_by_id',
    'get_order_by_number',
    'get_user_orders',
    'create_order',
    'cancel_order',
    'advance_order_status',
    'mark_order_delivered',
    'record_order_payment',
    'record_order_refund',
]
