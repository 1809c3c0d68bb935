"""Order creation, fulfilment and payment status."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User, UserAddress
from apps.accounts.services import AddressNotFoundError, InactiveUserError
from apps.catalog.services import adjust_stock, get_product_by_id, record_product_purchase
from apps.core.services import ORDER_PREFIX, code_lists, create_with_reference, validate_code
from apps.credit.models import OPEN_PLAN_STATUSES
from apps.credit.services import cancel_installment_plan, get_open_plans_for_order
from apps.notifications.services import notify_user

from ..models import MAX_ITEM_QUANTITY, Order, OrderItem, OrderPaymentStatus, OrderStatus
from .exceptions import (
    EmptyOrderError,
    InvalidOrderStateError,
    InvalidQuantityError,
    OrderNotFoundError,
    ProductUnavailableError,
)

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = 'CASH'


def get_order_by_id(*, order_id: UUID, user: Optional[User] = None) -> Order:
    """
    Retrieve an order, optionally scoped to its owner.

    Raises:
        OrderNotFoundError: If order doesn't exist (or belongs to someone else)
    """
    orders = Order.objects.select_related('user', 'delivery_address').prefetch_related('items__product')
    if user is not None:
        orders = orders.filter(user=user)
    try:
        return orders.get(id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFoundError(f"Order {order_id} not found")


def get_order_by_number(*, order_number: str, user: Optional[User] = None) -> Order:
    orders = Order.objects.select_related('user').prefetch_related('items__product')
    if user is not None:
        orders = orders.filter(user=user)
    try:
        return orders.get(order_number=order_number)
    except Order.DoesNotExist:
        raise OrderNotFoundError(f"Order {order_number} not found")


def _lock_order(order_id: UUID) -> Order:
    try:
        return Order.objects.select_for_update().get(id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFoundError(f"Order {order_id} not found")


def get_user_orders(*, user: User, status: Optional[str] = None) -> QuerySet:
    orders = Order.objects.filter(user=user).prefetch_related('items__product')
    if status:
        orders = orders.filter(status_code=status)
    return orders.order_by('-created_at')


@transaction.atomic
def create_order(
    *,
    user: User,
    items: List[Dict[str, Any]],
    delivery_address_id: Optional[UUID] = None,
    notes: str = ''
) -> Order:
    """
    Place an order.

    Business rules:
    - User account must be active
    - Every product must be active and in stock for the requested quantity
    - Unit prices are captured from the catalog at order time
    - Stock is taken out and purchase counters are bumped

    Args:
        user: Customer
        items: [{'product_id': UUID, 'quantity': int, 'payment_method_code': 'CASH'}, ...]
        delivery_address_id: One of the user's addresses
        notes: Free text for the delivery

    Returns:
        Created Order with its items

    Raises:
        InactiveUserError: If the account is suspended or inactive
        EmptyOrderError: If no items are given
        AddressNotFoundError: If the address doesn't belong to the user
        ProductNotFoundError: If a product doesn't exist
        ProductUnavailableError: If a product is inactive
        InsufficientStockError: If stock doesn't cover a quantity
        InvalidCodeError: If a payment method is unknown
        InvalidQuantityError: If a quantity is outside 1..MAX_ITEM_QUANTITY
    """
    if not user.is_active_account():
        raise InactiveUserError(f"User {user.id} cannot place orders ({user.status_code})")
    if not items:
        raise EmptyOrderError("Order must contain at least one item")

    address = None
    if delivery_address_id:
        try:
            address = UserAddress.objects.get(id=delivery_address_id, user=user)
        except UserAddress.DoesNotExist:
            raise AddressNotFoundError(f"Address {delivery_address_id} not found")

    lines = []
    for item in items:
        product = get_product_by_id(product_id=item['product_id'], active_only=False)
        if not product.is_active:
            raise ProductUnavailableError(f"Product {product.sku} is no longer available")

        payment_method = item.get('payment_method_code') or DEFAULT_PAYMENT_METHOD
        validate_code(type=code_lists.PAYMENT_METHOD, code=payment_method)

        quantity = item['quantity']
        if not 1 <= quantity <= MAX_ITEM_QUANTITY:
            raise InvalidQuantityError(
                f"Quantity for {product.sku} must be between 1 and {MAX_ITEM_QUANTITY}, got {quantity}"
            )
        adjust_stock(product_id=product.id, delta=-quantity)
        record_product_purchase(product_id=product.id, quantity=quantity)
        lines.append((product, quantity, product.price, payment_method))

    total = sum((price * quantity for _, quantity, price, _ in lines), Decimal('0.00'))

    def _create(order_number: str) -> Order:
        order = Order(
            order_number=order_number,
            user=user,
            delivery_address=address,
            total_amount=total,
            notes=notes,
        )
        order.full_clean()
        order.save()
        return order

    order = create_with_reference(_create, model=Order, field='order_number', prefix=ORDER_PREFIX)

    for product, quantity, price, payment_method in lines:
        order_item = OrderItem(
            order=order,
            product=product,
            quantity=quantity,
            unit_price=price,
            payment_method_code=payment_method,
        )
        order_item.total_price = order_item.calculate_total_price()
        order_item.full_clean()
        order_item.save()

    logger.info("Order created", extra={
        'order_id': str(order.id),
        'order_number': order.order_number,
        'user_id': str(user.id),
        'total_amount': str(order.total_amount),
        'items': len(lines),
    })

    notify_user(
        user=user,
        title="Order received",
        message=f"Your order {order.order_number} of {order.total_amount} has been received.",
        type='ORDER',
        data={'order_id': str(order.id), 'reference': order.order_number, 'amount': order.total_amount},
    )
    return order


@transaction.atomic
def cancel_order(*, order_id: UUID, reason: str = '') -> Order:
    """
    Cancel an order that has not shipped.

    Stock goes back to the catalog and unpaid installment plans on the
    order are cancelled, which releases their credit.

    Raises:
        OrderNotFoundError: If order doesn't exist
        InvalidOrderStateError: If order is shipped, delivered or cancelled
        InvalidPlanStateError: If a linked plan already has payments
    """
    order = _lock_order(order_id)

    if not order.is_cancellable():
        raise InvalidOrderStateError(f"Cannot cancel order {order.order_number} in status {order.status_code}")

    for item in order.items.all():
        adjust_stock(product_id=item.product_id, delta=item.quantity)

    for plan in get_open_plans_for_order(order_id=order.id):
        cancel_installment_plan(plan_id=plan.id, reason=f"Order {order.order_number} cancelled")

    previous_status = order.status_code
    order.status_code = OrderStatus.CANCELLED
    order.save(update_fields=['status_code', 'updated_at'])

    logger.info("Order cancelled", extra={
        'order_id': str(order.id),
        'order_number': order.order_number,
        'previous_status': previous_status,
        'reason': reason,
    })

    notify_user(
        user=order.user,
        title="Order cancelled",
        message=reason or f"Your order {order.order_number} has been cancelled.",
        type='ORDER',
        data={'order_id': str(order.id), 'reference': order.order_number},
    )
    return order


@transaction.atomic
def advance_order_status(
    *,
    order_id: UUID,
    status: str,
    delivery_date: Optional[date] = None
) -> Order:
    """
    Move an order along CREATED -> PROCESSING -> SHIPPED -> DELIVERED.

    Cancellation goes through cancel_order so stock and credit are
    restored.

    Raises:
        OrderNotFoundError: If order doesn't exist
        InvalidOrderStateError: If the transition is not allowed
    """
    if status == OrderStatus.CANCELLED:
        return cancel_order(order_id=order_id)

    order = _lock_order(order_id)

    if not order.can_transition_to(status):
        raise InvalidOrderStateError(
            f"Order {order.order_number} cannot go from {order.status_code} to {status}"
        )

    previous_status = order.status_code
    if status == OrderStatus.DELIVERED:
        order.mark_as_completed()
        order.delivery_date = delivery_date or order.completed_at.date()
    else:
        order.status_code = status
    order.save(update_fields=['status_code', 'completed_at', 'delivery_date', 'updated_at'])

    logger.info("Order status changed", extra={
        'order_id': str(order.id),
        'order_number': order.order_number,
        'previous_status': previous_status,
        'status': order.status_code,
    })

    if status in (OrderStatus.SHIPPED, OrderStatus.DELIVERED):
        notify_user(
            user=order.user,
            title=f"Order {order.get_status_code_display().lower()}",
            message=f"Your order {order.order_number} is {order.get_status_code_display().lower()}.",
            type='ORDER',
            data={'order_id': str(order.id), 'reference': order.order_number},
        )
    return order


def mark_order_delivered(*, order_id: UUID, delivery_date: Optional[date] = None) -> Order:
    return advance_order_status(order_id=order_id, status=OrderStatus.DELIVERED, delivery_date=delivery_date)


@transaction.atomic
def record_order_payment(*, order_id: UUID, amount: Decimal) -> Order:
    """
    Add a payment to the order's paid amount.

    The order is PAID once the paid amount covers the total and no
    installment plan on it is still open; otherwise it is PARTIAL.
    """
    order = _lock_order(order_id)

    order.amount_paid += amount
    open_plans = order.installment_plans.filter(status_code__in=OPEN_PLAN_STATUSES).exists()
    if order.amount_paid >= order.total_amount and not open_plans:
        order.payment_status_code = OrderPaymentStatus.PAID
    else:
        order.payment_status_code = OrderPaymentStatus.PARTIAL
    order.save(update_fields=['amount_paid', 'payment_status_code', 'updated_at'])

    logger.info("Order payment recorded", extra={
        'order_id': str(order.id),
        'amount': str(amount),
        'amount_paid': str(order.amount_paid),
        'payment_status': order.payment_status_code,
    })
    return order


@transaction.atomic
def record_order_refund(*, order_id: UUID, amount: Decimal) -> Order:
    """Take a refund off the paid amount; fully refunded orders become REFUNDED."""
    order = _lock_order(order_id)

    order.amount_paid = max(Decimal('0.00'), order.amount_paid - amount)
    if order.amount_paid == 0:
        order.payment_status_code = OrderPaymentStatus.REFUNDED
    else:
        order.payment_status_code = OrderPaymentStatus.PARTIAL
    order.save(update_fields=['amount_paid', 'payment_status_code', 'updated_at'])

    logger.info("Order refund recorded", extra={
        'order_id': str(order.id),
        'amount': str(amount),
        'amount_paid': str(order.amount_paid),
    })
    return order
