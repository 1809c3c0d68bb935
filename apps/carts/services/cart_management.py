"""Cart lifecycle, line pricing and checkout."""

import logging
from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.catalog.models import Product
from apps.catalog.services import InsufficientStockError, get_product_by_id
from apps.core.services import code_lists, validate_code
from apps.credit.models import Frequency
from apps.credit.services import create_installment_plan, quote_installments
from apps.orders.models import Order, CREDIT_PAYMENT_METHOD
from apps.orders.services import create_order

from ..models import Cart, CartItem, CartStatus
from .exceptions import (
    CartItemNotFoundError,
    CartNotFoundError,
    EmptyCartError,
    InvalidCartItemError,
)

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = 'CASH'


def _expiry_from(now):
    return now + timedelta(hours=settings.KREDIKA['CART_TTL_HOURS'])


@transaction.atomic
def get_or_create_active_cart(*, user: User, now=None) -> Cart:
    """
    Return the user's active cart, opening a new one if needed.

    An active cart past its expiry is closed as EXPIRED first.
    """
    now = now or timezone.now()
    cart = (
        Cart.objects
        .select_for_update()
        .filter(user=user, status_code=CartStatus.ACTIVE)
        .order_by('-created_at')
        .first()
    )
    if cart is not None and not cart.is_expired(now):
        return cart

    if cart is not None:
        cart.status_code = CartStatus.EXPIRED
        cart.save(update_fields=['status_code', 'updated_at'])
        logger.info("Cart expired", extra={'cart_id': str(cart.id), 'user_id': str(user.id)})

    cart = Cart.objects.create(user=user, expires_at=_expiry_from(now))
    logger.info("Cart opened", extra={'cart_id': str(cart.id), 'user_id': str(user.id)})
    return cart


def _lock_active_cart(user: User) -> Cart:
    cart = (
        Cart.objects
        .select_for_update()
        .filter(user=user, status_code=CartStatus.ACTIVE)
        .order_by('-created_at')
        .first()
    )
    if cart is None:
        raise CartNotFoundError(f"User {user.id} has no active cart")
    return cart


def _lock_item(cart: Cart, item_id: UUID) -> CartItem:
    try:
        return CartItem.objects.select_for_update().select_related('product').get(id=item_id, cart=cart)
    except CartItem.DoesNotExist:
        raise CartItemNotFoundError(f"Cart item {item_id} not found")


def _price_item(item: CartItem, product: Product) -> None:
    """
    Snapshot the product price and quote credit lines.

    Raises:
        InvalidCartItemError: If credit terms are missing or not allowed
        InsufficientStockError: If stock doesn't cover the quantity
        CreditSettingsNotFoundError: If no offer covers the credit terms
    """
    if item.quantity > product.stock:
        raise InsufficientStockError(
            f"Only {product.stock} unit(s) of {product.sku} in stock, cannot add {item.quantity}"
        )

    item.unit_price = product.price
    subtotal = item.subtotal

    if not item.is_credit_payment():
        item.credit_duration = None
        item.credit_frequency_code = ''
        item.commission_rate = None
        item.installment_amount = None
        item.total_amount = subtotal
        return

    if not item.credit_duration:
        raise InvalidCartItemError("Credit items need a credit duration")
    if not product.is_credit_amount_allowed(subtotal):
        raise InvalidCartItemError(f"{product.sku} cannot be bought on credit for {subtotal}")
    if product.max_credit_duration and item.credit_duration > product.max_credit_duration:
        raise InvalidCartItemError(
            f"Maximum credit duration for {product.sku} is {product.max_credit_duration} months"
        )

    item.credit_frequency_code = item.credit_frequency_code or Frequency.MONTHLY
    quote = quote_installments(
        principal=subtotal,
        duration_months=item.credit_duration,
        frequency_code=item.credit_frequency_code,
    )
    item.commission_rate = quote.commission_rate
    item.installment_amount = quote.installment_amount
    item.total_amount = quote.total_amount


def _refresh_cart(cart: Cart, now) -> None:
    cart.recalculate_total()
    cart.expires_at = _expiry_from(now)
    cart.save(update_fields=['total_amount', 'expires_at', 'updated_at'])


@transaction.atomic
def add_to_cart(
    *,
    user: User,
    product_id: UUID,
    quantity: int = 1,
    payment_method_code: str = DEFAULT_PAYMENT_METHOD,
    credit_duration: Optional[int] = None,
    credit_frequency_code: str = ''
) -> CartItem:
    """
    Add a product to the user's active cart.

    A line for the same product and payment method is merged: quantities
    add up and the latest credit terms win. Credit lines are quoted from
    the active credit settings, so their total includes the commission.
    Every change pushes the cart expiry back.

    Raises:
        ProductNotFoundError: If product doesn't exist or is inactive
        InvalidCodeError: If the payment method is unknown
        InsufficientStockError: If stock doesn't cover the merged quantity
        InvalidCartItemError: If credit terms are missing or not allowed
        CreditSettingsNotFoundError: If no offer covers the credit terms
    """
    now = timezone.now()
    validate_code(type=code_lists.PAYMENT_METHOD, code=payment_method_code)
    product = get_product_by_id(product_id=product_id)

    get_or_create_active_cart(user=user, now=now)
    cart = _lock_active_cart(user)

    item = (
        cart.items
        .select_for_update()
        .filter(product=product, payment_method_code=payment_method_code)
        .first()
    )
    if item is None:
        item = CartItem(cart=cart, product=product, payment_method_code=payment_method_code, quantity=0)

    item.quantity += quantity
    if credit_duration is not None:
        item.credit_duration = credit_duration
    if credit_frequency_code:
        item.credit_frequency_code = credit_frequency_code

    _price_item(item, product)
    item.full_clean()
    item.save()
    _refresh_cart(cart, now)

    logger.info("Cart item added", extra={
        'cart_id': str(cart.id),
        'product_id': str(product.id),
        'quantity': item.quantity,
        'payment_method': payment_method_code,
    })
    return item


@transaction.atomic
def update_cart_item(*, user: User, item_id: UUID, quantity: int) -> Optional[CartItem]:
    """
    Change a line's quantity; zero or less removes the line.

    Returns:
        Updated CartItem, or None when it was removed
    """
    if quantity <= 0:
        remove_cart_item(user=user, item_id=item_id)
        return None

    now = timezone.now()
    cart = _lock_active_cart(user)
    item = _lock_item(cart, item_id)

    item.quantity = quantity
    _price_item(item, item.product)
    item.full_clean()
    item.save()
    _refresh_cart(cart, now)
    return item


@transaction.atomic
def remove_cart_item(*, user: User, item_id: UUID) -> None:
    now = timezone.now()
    cart = _lock_active_cart(user)
    item = _lock_item(cart, item_id)
    item.delete()
    _refresh_cart(cart, now)

    logger.info("Cart item removed", extra={'cart_id': str(cart.id), 'item_id': str(item_id)})


@transaction.atomic
def clear_cart(*, user: User) -> Cart:
    now = timezone.now()
    cart = _lock_active_cart(user)
    cart.items.all().delete()
    _refresh_cart(cart, now)
    return cart


@transaction.atomic
def expire_stale_carts(*, now=None) -> int:
    """Close every active cart past its expiry. Returns the number expired."""
    now = now or timezone.now()
    count = Cart.objects.filter(status_code=CartStatus.ACTIVE, expires_at__lt=now).update(
        status_code=CartStatus.EXPIRED,
        updated_at=now,
    )
    logger.info("Expired stale carts", extra={'count': count})
    return count


def checkout_cart(
    *,
    user: User,
    delivery_address_id: Optional[UUID] = None,
    notes: str = '',
    start_date: Optional[date] = None
) -> Order:
    """
    Turn the active cart into an order.

    Every credit line becomes an installment plan linked to the order,
    financing that line's order total. The cart ends CONVERTED.

    An expired cart is stored as EXPIRED before the error is raised.

    Raises:
        CartNotFoundError: If there is no active cart, or it has expired
        EmptyCartError: If the cart has no items
        (plus any order or credit error; nothing is saved in that case)
    """
    now = timezone.now()

    with transaction.atomic():
        cart = _lock_active_cart(user)
        expired = cart.is_expired(now)
        if expired:
            cart.status_code = CartStatus.EXPIRED
            cart.save(update_fields=['status_code', 'updated_at'])
            logger.info("Cart expired", extra={'cart_id': str(cart.id), 'user_id': str(user.id)})
        else:
            order = _convert_cart(
                cart,
                delivery_address_id=delivery_address_id,
                notes=notes,
                start_date=start_date,
            )

    if expired:
        raise CartNotFoundError(f"Cart {cart.id} has expired")
    return order


def _convert_cart(
    cart: Cart,
    *,
    delivery_address_id: Optional[UUID],
    notes: str,
    start_date: Optional[date]
) -> Order:
    items = list(cart.items.select_related('product'))
    if not items:
        raise EmptyCartError("Cannot check out an empty cart")

    order = create_order(
        user=cart.user,
        items=[
            {
                'product_id': item.product_id,
                'quantity': item.quantity,
                'payment_method_code': item.payment_method_code,
            }
            for item in items
        ],
        delivery_address_id=delivery_address_id,
        notes=notes,
    )

    for item in items:
        if not item.is_credit_payment():
            continue
        order_item = order.items.get(product_id=item.product_id, payment_method_code=CREDIT_PAYMENT_METHOD)
        create_installment_plan(
            user=cart.user,
            product_id=item.product_id,
            principal_amount=order_item.total_price,
            duration_months=item.credit_duration,
            frequency_code=item.credit_frequency_code or Frequency.MONTHLY,
            order=order,
            start_date=start_date,
        )

    cart.status_code = CartStatus.CONVERTED
    cart.save(update_fields=['status_code', 'updated_at'])

    logger.info("Cart checked out", extra={
        'cart_id': str(cart.id),
        'order_id': str(order.id),
        'order_number': order.order_number,
    })
    return order
