"""
The payment coordinator: captures, confirms and refunds order payments.

The order row stays locked while the gateway is called, so two captures of the
same order are serialized and the second one sees the first payment. Gateway
failures are stored on the transaction row and never change the order status.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Sum
from django.db.models.functions import TruncMonth
from rest_framework.exceptions import PermissionDenied, ValidationError

from core import authorization
from core.exceptions import AlreadyPaid, DuplicateResource, PaymentGatewayError
from notifications_app.models import Notification
from notifications_app.services import notify
from orders_app.models import Order, OrderStatus
from orders_app.services import transition_order

from .gateway import get_gateway
from .models import Transaction

logger = logging.getLogger(__name__)

PAYABLE_STATES = frozenset({OrderStatus.PENDING, OrderStatus.ACCEPTED})


def _has_completed_payment(order):
    return Transaction.objects.filter(
        order=order,
        type=Transaction.TransactionType.PAYMENT,
        status=Transaction.TransactionStatus.COMPLETED,
    ).exists()


def _parse_amount(amount):
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError({'amount': "A valid amount is required."})
    if amount <= 0:
        raise ValidationError({'amount': "The amount must be greater than zero."})
    return amount


def _complete_payment(payment, order, actor):
    """Marks `payment` COMPLETED and accepts the still pending order."""
    payment.status = Transaction.TransactionStatus.COMPLETED
    payment.save(update_fields=['status', 'gateway_reference', 'updated_at'])
    if order.status == OrderStatus.PENDING:
        transition_order(order, OrderStatus.ACCEPTED, actor)


def _log_reconciliation(operation, order_id, actor, reference):
    logger.error(
        "Gateway %s succeeded but the local commit failed: order %s, user %s, reference %s",
        operation, order_id, getattr(actor, 'pk', None), reference
    )


def capture(order, amount, payment_method, actor, gateway=None):
    """
    Charges the client of `order` through the payment gateway.

    A PENDING transaction is written before the gateway is called. A confirmed
    charge completes it and moves a PENDING order to ACCEPTED; a charge that still
    needs confirmation leaves it PENDING (see `confirm`). A gateway error marks it
    FAILED and is re-raised.

    Raises:
        PermissionDenied: `actor` is not the order's client.
        ValidationError: the amount is not positive, exceeds the order total, or the
            order is not PENDING or ACCEPTED.
        AlreadyPaid: the order already has a completed payment.
        PaymentGatewayError: the gateway rejected the charge or could not be reached.
    """
    authorization.ensure_order_client(actor, order, "Only the client of this order can pay for it.")
    amount = _parse_amount(amount)
    gateway = gateway or get_gateway()

    result = None
    failure = None
    try:
        with transaction.atomic():
            locked = Order.objects.select_for_update().get(pk=order.pk)
            if locked.status not in PAYABLE_STATES:
                raise ValidationError(
                    f"Order must be in PENDING or ACCEPTED status to be paid, not {locked.status}."
                )
            if amount > locked.total_price:
                raise ValidationError({'amount': f"The amount cannot exceed the order total of {locked.total_price}."})
            if _has_completed_payment(locked):
                raise AlreadyPaid()

            payment = Transaction.objects.create(
                order=locked,
                user=actor,
                amount=amount,
                type=Transaction.TransactionType.PAYMENT,
                status=Transaction.TransactionStatus.PENDING,
                payment_method=payment_method,
            )

            try:
                result = gateway.charge(
                    amount,
                    payment_method,
                    metadata={'order_id': str(locked.id), 'user_id': str(actor.pk)},
                )
            except PaymentGatewayError as exc:
                failure = exc
                payment.status = Transaction.TransactionStatus.FAILED
                payment.failure_reason = str(exc.detail)
                payment.save(update_fields=['status', 'failure_reason', 'updated_at'])
            else:
                payment.gateway_reference = result.reference
                if result.succeeded:
                    _complete_payment(payment, locked, actor)
                elif result.failed:
                    payment.status = Transaction.TransactionStatus.FAILED
                    payment.failure_reason = f"Payment {result.status}."
                    payment.save(update_fields=['status', 'gateway_reference', 'failure_reason', 'updated_at'])
                else:
                    payment.save(update_fields=['gateway_reference', 'updated_at'])
    except DatabaseError:
        if result is not None and result.succeeded:
            _log_reconciliation('charge', order.pk, actor, result.reference)
        raise

    if failure is not None:
        logger.warning("Payment %s for order %s failed: %s", payment.id, locked.id, failure.detail)
        raise failure

    logger.info(
        "Payment %s of %s for order %s is %s (reference %s)",
        payment.id, amount, locked.id, payment.status, payment.gateway_reference
    )
    if payment.status == Transaction.TransactionStatus.COMPLETED:
        notify(
            locked.freelancer.user,
            Notification.NotificationType.PAYMENT,
            f"Order {locked.order_number} has been paid.",
            entity_type=Notification.EntityType.TRANSACTION,
            entity_id=payment.id,
        )
    return payment


def confirm(payment, actor, gateway=None):
    """
    Confirms a PENDING payment with the gateway.

    On success the payment is completed and a PENDING order is accepted. A payment
    the gateway declines is marked FAILED and reported as a validation error.
    """
    if payment.user_id != getattr(actor, 'pk', None):
        raise PermissionDenied("Only the owner of this transaction can process it.")
    if payment.type != Transaction.TransactionType.PAYMENT or payment.status != Transaction.TransactionStatus.PENDING:
        raise ValidationError("Transaction is not in PENDING status.")
    if not payment.gateway_reference:
        raise ValidationError("Transaction has no gateway reference to confirm.")
    gateway = gateway or get_gateway()

    result = None
    failure = None
    try:
        with transaction.atomic():
            locked_order = Order.objects.select_for_update().get(pk=payment.order_id)
            locked = Transaction.objects.select_for_update().get(pk=payment.pk)
            if locked.status != Transaction.TransactionStatus.PENDING:
                raise ValidationError("Transaction is not in PENDING status.")
            if _has_completed_payment(locked_order):
                raise AlreadyPaid()
            if locked_order.status not in PAYABLE_STATES:
                raise ValidationError(
                    f"Order must be in PENDING or ACCEPTED status to be paid, not {locked_order.status}."
                )

            failure_reason = ''
            try:
                result = gateway.confirm(locked.gateway_reference)
            except PaymentGatewayError as exc:
                failure = exc
                failure_reason = str(exc.detail)
            else:
                if result.succeeded:
                    _complete_payment(locked, locked_order, actor)
                elif result.failed:
                    failure_reason = f"Payment {result.status}."
                    failure = ValidationError("Payment failed to process.")

            if failure is not None:
                locked.status = Transaction.TransactionStatus.FAILED
                locked.failure_reason = failure_reason
                locked.save(update_fields=['status', 'failure_reason', 'updated_at'])
    except DatabaseError:
        if result is not None and result.succeeded:
            _log_reconciliation('confirm', payment.order_id, actor, result.reference)
        raise

    payment.refresh_from_db()
    if failure is not None:
        logger.warning("Confirming payment %s failed: %s", payment.id, payment.failure_reason)
        raise failure

    logger.info("Payment %s confirmed with status %s", payment.id, payment.status)
    return payment


def refund(payment, reason, actor, gateway=None):
    """
    Refunds a completed payment in full.

    The refund is recorded as a COMPLETED REFUND transaction with the negated
    amount of the payment. The order status is not changed.

    Raises:
        PermissionDenied: `actor` neither owns the payment nor is an admin.
        ValidationError: the transaction is not a completed payment with a gateway reference.
        DuplicateResource: the payment has already been refunded.
        PaymentGatewayError: the gateway refused the refund.
    """
    if payment.user_id != getattr(actor, 'pk', None) and not authorization.is_admin(actor):
        raise PermissionDenied("Only the owner of this transaction or an admin can refund it.")
    if payment.type != Transaction.TransactionType.PAYMENT:
        raise ValidationError("Only payments can be refunded.")
    if payment.status != Transaction.TransactionStatus.COMPLETED:
        raise ValidationError("Only completed transactions can be refunded.")
    if not payment.gateway_reference:
        raise ValidationError("Transaction has no gateway reference to refund.")
    gateway = gateway or get_gateway()

    result = None
    try:
        with transaction.atomic():
            locked = Transaction.objects.select_for_update().get(pk=payment.pk)
            if Transaction.objects.filter(refund_of=locked).exists():
                raise DuplicateResource("This transaction has already been refunded.")

            result = gateway.refund(locked.gateway_reference, reason or '')
            try:
                with transaction.atomic():
                    refund_row = Transaction.objects.create(
                        order_id=locked.order_id,
                        user=actor,
                        amount=-locked.amount,
                        type=Transaction.TransactionType.REFUND,
                        status=Transaction.TransactionStatus.COMPLETED,
                        payment_method=locked.payment_method,
                        gateway_reference=result.reference,
                        refund_of=locked,
                        reason=reason or '',
                    )
            except IntegrityError:
                _log_reconciliation('refund', locked.order_id, actor, result.reference)
                raise DuplicateResource("This transaction has already been refunded.")
    except DatabaseError:
        if result is not None:
            _log_reconciliation('refund', payment.order_id, actor, result.reference)
        raise

    logger.info(
        "Payment %s refunded by user %s (refund %s, reference %s)",
        payment.id, actor.pk, refund_row.id, result.reference
    )
    order = refund_row.order
    for recipient in (order.client, order.freelancer.user):
        if recipient.pk == actor.pk:
            continue
        notify(
            recipient,
            Notification.NotificationType.PAYMENT,
            f"A payment of {payment.amount} on order {order.order_number} was refunded.",
            entity_type=Notification.EntityType.TRANSACTION,
            entity_id=refund_row.id,
        )
    return refund_row


def freelancer_earnings(freelancer):
    """
    Sums the completed payments and refunds on the orders of `freelancer` per
    calendar month, oldest month first.

    Returns:
        A list of dicts with `month` (YYYY-MM) and `amount` (Decimal).
    """
    rows = (
        Transaction.objects
        .filter(
            order__freelancer=freelancer,
            status=Transaction.TransactionStatus.COMPLETED,
            type__in=[Transaction.TransactionType.PAYMENT, Transaction.TransactionType.REFUND],
        )
        .annotate(month=TruncMonth('created_at'))
        .values('month')
        .annotate(amount=Sum('amount'))
        .order_by('month')
    )
    return [
        {'month': row['month'].strftime('%Y-%m'), 'amount': row['amount']}
        for row in rows
    ]
