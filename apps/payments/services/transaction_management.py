"""Payment transactions against installment plans."""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.core.serializers import GatewayResponseSerializer, clean_document
from apps.core.services import TRANSACTION_PREFIX, code_lists, create_with_reference, validate_code
from apps.credit.services import apply_payment_to_plan, get_plan_by_id, reverse_payment_on_plan
from apps.notifications.models import NotificationPriority
from apps.notifications.services import notify_user
from apps.orders.services import record_order_payment, record_order_refund

from ..models import PaymentTransaction, TransactionStatus
from .exceptions import (
    InvalidPaymentAmountError,
    InvalidTransactionStateError,
    PlanNotPayableError,
    TransactionNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = 'MOBILE_MONEY'


def get_transaction_by_number(*, transaction_number: str, user: Optional[User] = None) -> PaymentTransaction:
    """
    Raises:
        TransactionNotFoundError: If transaction doesn't exist (or belongs to someone else)
    """
    transactions = PaymentTransaction.objects.select_related('installment_plan', 'payment_schedule')
    if user is not None:
        transactions = transactions.filter(user=user)
    try:
        return transactions.get(transaction_number=transaction_number)
    except PaymentTransaction.DoesNotExist:
        raise TransactionNotFoundError(f"Transaction {transaction_number} not found")


def _lock_transaction(transaction_number: str) -> PaymentTransaction:
    try:
        return PaymentTransaction.objects.select_for_update().get(transaction_number=transaction_number)
    except PaymentTransaction.DoesNotExist:
        raise TransactionNotFoundError(f"Transaction {transaction_number} not found")


def get_plan_transactions(*, plan_id: UUID, user: Optional[User] = None) -> QuerySet:
    """
    Raises:
        PlanNotFoundError: If plan doesn't exist (or belongs to someone else)
    """
    plan = get_plan_by_id(plan_id=plan_id, user=user)
    return PaymentTransaction.objects.filter(installment_plan=plan).order_by('-created_at')


@transaction.atomic
def initiate_payment(
    *,
    user: User,
    plan_id: UUID,
    amount: Decimal,
    payment_method_code: str = DEFAULT_PAYMENT_METHOD
) -> PaymentTransaction:
    """
    Open a pending payment on one of the user's plans.

    The transaction is attached to the oldest installment still owing.
    Nothing is applied to the plan until the gateway confirms.

    Raises:
        PlanNotFoundError: If plan doesn't exist or isn't the user's
        PlanNotPayableError: If plan is not ACTIVE or LATE
        InvalidPaymentAmountError: If amount is not positive or exceeds the remainder
        InvalidCodeError: If the payment method is unknown
    """
    plan = get_plan_by_id(plan_id=plan_id, user=user)

    if not plan.is_open():
        raise PlanNotPayableError(f"Plan {plan.plan_number} is {plan.status_code} and cannot be paid")
    if amount <= 0:
        raise InvalidPaymentAmountError("Payment amount must be positive")
    remaining = plan.remaining_amount
    if amount > remaining:
        raise InvalidPaymentAmountError(
            f"Payment {amount} exceeds remaining {remaining} on {plan.plan_number}"
        )

    validate_code(type=code_lists.PAYMENT_METHOD, code=payment_method_code)

    schedule = next(
        (s for s in plan.schedules.order_by('installment_number') if not s.is_fully_paid()),
        None
    )

    def _create(transaction_number: str) -> PaymentTransaction:
        payment = PaymentTransaction(
            transaction_number=transaction_number,
            user=user,
            installment_plan=plan,
            payment_schedule=schedule,
            amount=amount,
            payment_method_code=payment_method_code,
        )
        payment.full_clean()
        payment.save()
        return payment

    payment = create_with_reference(
        _create, model=PaymentTransaction, field='transaction_number', prefix=TRANSACTION_PREFIX
    )

    logger.info("Payment initiated", extra={
        'transaction_number': payment.transaction_number,
        'plan_number': plan.plan_number,
        'amount': str(amount),
        'payment_method': payment_method_code,
    })
    return payment


@transaction.atomic
def confirm_payment(*, transaction_number: str, gateway_response: Dict[str, Any]) -> PaymentTransaction:
    """
    Settle a pending payment from the gateway callback.

    A 'failed' response fails the transaction. A 'success' response
    applies the amount to the plan (which releases the credit), records
    the payment on the plan's order and notifies the user.

    Raises:
        TransactionNotFoundError: If transaction doesn't exist
        InvalidTransactionStateError: If transaction is not PENDING
        InvalidPaymentAmountError: If the gateway amount differs from the transaction
        rest_framework.exceptions.ValidationError: If the gateway response is malformed
    """
    payment = _lock_transaction(transaction_number)

    if not payment.is_pending():
        raise InvalidTransactionStateError(
            f"Cannot confirm transaction {transaction_number} in status {payment.status_code}"
        )

    response = clean_document(GatewayResponseSerializer, gateway_response)

    if response['status'] == 'failed':
        error = response['error']
        reason = error.get('message') or error['code']
        return _fail(payment, reason, response)

    if 'amount' in response and Decimal(response['amount']) != payment.amount:
        raise InvalidPaymentAmountError(
            f"Gateway amount {response['amount']} does not match {payment.amount} on {transaction_number}"
        )

    plan = apply_payment_to_plan(plan_id=payment.installment_plan_id, amount=payment.amount)

    payment.mark_as_successful(response['transaction_id'], response)
    payment.save()

    if plan.order_id:
        record_order_payment(order_id=plan.order_id, amount=payment.amount)

    logger.info("Payment confirmed", extra={
        'transaction_number': payment.transaction_number,
        'external_transaction_id': payment.external_transaction_id,
        'plan_number': plan.plan_number,
        'amount': str(payment.amount),
    })

    notify_user(
        user=payment.user,
        title="Payment received",
        message=f"We received your payment of {payment.amount} for plan {plan.plan_number}.",
        type='PAYMENT',
        data={'reference': payment.transaction_number, 'amount': payment.amount},
    )
    return payment


def _fail(payment: PaymentTransaction, reason: str, response: Optional[Dict[str, Any]] = None) -> PaymentTransaction:
    payment.mark_as_failed(reason)
    if response is not None:
        payment.gateway_response = response
    payment.save()

    logger.warning("Payment failed", extra={
        'transaction_number': payment.transaction_number,
        'reason': reason,
    })

    notify_user(
        user=payment.user,
        title="Payment failed",
        message=f"Your payment {payment.transaction_number} failed: {reason}",
        type='PAYMENT',
        priority=NotificationPriority.HIGH,
        data={'reference': payment.transaction_number, 'amount': payment.amount},
    )
    return payment


@transaction.atomic
def fail_payment(*, transaction_number: str, reason: str) -> PaymentTransaction:
    """
    Raises:
        TransactionNotFoundError: If transaction doesn't exist
        InvalidTransactionStateError: If transaction is not PENDING
    """
    payment = _lock_transaction(transaction_number)
    if not payment.is_pending():
        raise InvalidTransactionStateError(
            f"Cannot fail transaction {transaction_number} in status {payment.status_code}"
        )
    return _fail(payment, reason)


@transaction.atomic
def refund_payment(*, transaction_number: str, amount: Optional[Decimal] = None) -> PaymentTransaction:
    """
    Refund a successful payment, fully by default.

    The refunded amount is taken back off the plan (newest installments
    first) and put back on the user's debt.

    Raises:
        TransactionNotFoundError: If transaction doesn't exist
        InvalidTransactionStateError: If transaction is not SUCCESS
        InvalidPaymentAmountError: Unless 0 < amount <= the transaction amount
    """
    payment = _lock_transaction(transaction_number)

    if payment.status_code != TransactionStatus.SUCCESS:
        raise InvalidTransactionStateError(
            f"Cannot refund transaction {transaction_number} in status {payment.status_code}"
        )

    amount = payment.amount if amount is None else amount
    try:
        payment.process_refund(amount)
    except ValueError as e:
        raise InvalidPaymentAmountError(str(e))

    plan = reverse_payment_on_plan(plan_id=payment.installment_plan_id, amount=amount)
    payment.save()

    if plan.order_id:
        record_order_refund(order_id=plan.order_id, amount=amount)

    logger.info("Payment refunded", extra={
        'transaction_number': payment.transaction_number,
        'plan_number': plan.plan_number,
        'refund_amount': str(amount),
    })

    notify_user(
        user=payment.user,
        title="Payment refunded",
        message=f"{amount} from payment {payment.transaction_number} has been refunded.",
        type='PAYMENT',
        data={'reference': payment.transaction_number, 'amount': amount},
    )
    return payment
