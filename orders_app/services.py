"""
Order creation and the transition validator.

Every status change of an order goes through `transition_order`, which checks the
state machine while holding a row lock on the order and writes the new status and
its history entry in one database transaction. Payments and disputes reuse it for
their automatic status changes.
"""
import logging
import secrets
import string
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from core import authorization
from core.exceptions import GigUnavailable
from gigs_app.models import Gig
from gigs_app.pricing import resolve_price
from notifications_app.models import Notification
from notifications_app.services import notify

from .models import Order, OrderStatus, OrderStatusHistory
from .state_machine import EXTENDABLE_STATES, ensure_transition

logger = logging.getLogger(__name__)

ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_ATTEMPTS = 5
DELIVERY_EXTENSION = timedelta(days=7)
DEFAULT_CANCELLATION_REASON = "Not specified"


def generate_order_number(now=None):
    """Returns a candidate order number such as `ORD-20240131-7QKD`."""
    now = now or timezone.now()
    suffix = ''.join(secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(4))
    return f"ORD-{now:%Y%m%d}-{suffix}"


def create_order(client, gig, package_key, requirements='', is_urgent=False, custom_details=None):
    """
    Places an order for one package of `gig` on behalf of `client`.

    The price comes from the pricing resolver, the deadline from the package's
    delivery time. The order and its initial PENDING history entry are written in
    one transaction; the order number is regenerated if it collides with an
    existing one.

    Raises:
        PermissionDenied: `client` is not a client, or orders their own gig.
        GigUnavailable, InvalidPackage: from the pricing resolver.
    """
    authorization.ensure_client(client, "Only clients can place orders.")
    if gig.freelancer.user_id == client.pk:
        raise PermissionDenied("You cannot order your own gig.")

    quote = resolve_price(gig, package_key, is_urgent=is_urgent)
    now = timezone.now()

    for attempt in range(ORDER_NUMBER_ATTEMPTS):
        try:
            with transaction.atomic():
                # Re-read the gig under lock so it cannot be paused or archived mid-order.
                locked_gig = Gig.objects.select_for_update().get(pk=gig.pk)
                if locked_gig.status != Gig.GigStatus.ACTIVE:
                    raise GigUnavailable()

                order = Order.objects.create(
                    order_number=generate_order_number(now),
                    client=client,
                    freelancer=gig.freelancer,
                    gig=gig,
                    package=quote.package.package_type,
                    title=quote.package.title,
                    total_price=quote.total_price,
                    is_urgent=is_urgent,
                    priority_fee=quote.priority_fee,
                    requirements=requirements or '',
                    custom_details=custom_details or {},
                    delivery_deadline=now + timedelta(days=quote.delivery_time_in_days),
                    status=OrderStatus.PENDING,
                )
                OrderStatusHistory.objects.create(
                    order=order, status=OrderStatus.PENDING, changed_by=client
                )
            break
        except IntegrityError:
            if attempt == ORDER_NUMBER_ATTEMPTS - 1:
                raise
            logger.warning("Order number collision for client %s, retrying", client.pk)

    logger.info(
        "Order %s (%s) created by client %s for gig %s, total %s",
        order.id, order.order_number, client.pk, gig.pk, order.total_price
    )
    notify(
        gig.freelancer.user,
        Notification.NotificationType.ORDER_UPDATE,
        f"New order {order.order_number} for '{order.title}'.",
        entity_type=Notification.EntityType.ORDER,
        entity_id=order.id,
        priority=Notification.Priority.HIGH if is_urgent else Notification.Priority.NORMAL,
    )
    return order


def transition_order(order, requested_status, actor, cancellation_reason=None, forced=False):
    """
    Moves `order` to `requested_status` and records the change.

    Args:
        order: The order to change; its fields are refreshed from the locked row.
        requested_status: The target OrderStatus.
        actor: The user requesting the change, or None for system transitions.
        cancellation_reason: Stored when cancelling; defaults to "Not specified".
        forced: Allows the dispute-only transitions. Admins may perform forced
            transitions on orders they are not a party of.

    Returns:
        The updated order.

    Raises:
        PermissionDenied: `actor` is neither a party nor, for forced transitions, an admin.
        IllegalTransition: `requested_status` is not reachable from the current status.
    """
    if actor is not None:
        authorization.ensure_order_party(actor, order, allow_admin=forced)

    with transaction.atomic():
        locked = Order.objects.select_for_update().get(pk=order.pk)
        previous_status = locked.status
        ensure_transition(previous_status, requested_status, forced=forced)

        now = timezone.now()
        update_fields = ['status', 'updated_at']
        locked.status = requested_status

        if requested_status == OrderStatus.CANCELLED:
            locked.cancellation_reason = cancellation_reason or DEFAULT_CANCELLATION_REASON
            locked.cancellation_date = now
            update_fields += ['cancellation_reason', 'cancellation_date']
        elif requested_status == OrderStatus.COMPLETED:
            locked.completed_at = now
            update_fields.append('completed_at')

        locked.save(update_fields=update_fields)
        OrderStatusHistory.objects.create(order=locked, status=requested_status, changed_by=actor)

    logger.info(
        "Order %s moved %s -> %s by %s%s",
        locked.id, previous_status, requested_status,
        f"user {actor.pk}" if actor is not None else "system",
        " (forced)" if forced else ""
    )

    recipients = [locked.client, locked.freelancer.user]
    for recipient in recipients:
        if actor is not None and recipient.pk == actor.pk:
            continue
        notify(
            recipient,
            Notification.NotificationType.ORDER_UPDATE,
            f"Order {locked.order_number} is now {OrderStatus(requested_status).label}.",
            entity_type=Notification.EntityType.ORDER,
            entity_id=locked.id,
            metadata={'from': str(previous_status), 'to': str(requested_status)},
        )

    _copy_state(source=locked, target=order)
    return order


def cancel_order(order, actor, reason=None):
    """Cancels `order`; the usual transition rules apply."""
    return transition_order(order, OrderStatus.CANCELLED, actor, cancellation_reason=reason)


def extend_delivery(order, actor, reason):
    """
    Pushes the delivery deadline of `order` back by seven days.

    Allowed for either party while the order is PENDING, ACCEPTED or IN_PROGRESS.
    The status does not change, so no history entry is written.
    """
    authorization.ensure_order_party(actor, order)
    if not reason:
        raise ValidationError({'extension_reason': "A reason is required to extend the delivery."})

    with transaction.atomic():
        locked = Order.objects.select_for_update().get(pk=order.pk)
        if locked.status not in EXTENDABLE_STATES:
            raise ValidationError(
                f"The delivery of an order in status {locked.status} cannot be extended."
            )
        locked.delivery_extensions += 1
        locked.extension_reason = reason
        locked.delivery_deadline = locked.delivery_deadline + DELIVERY_EXTENSION
        locked.save(update_fields=[
            'delivery_extensions', 'extension_reason', 'delivery_deadline', 'updated_at'
        ])

    logger.info("Order %s delivery extended to %s by user %s", locked.id, locked.delivery_deadline, actor.pk)
    notify(
        authorization.counterparty(locked, actor),
        Notification.NotificationType.ORDER_UPDATE,
        f"The delivery of order {locked.order_number} was extended: {reason}",
        entity_type=Notification.EntityType.ORDER,
        entity_id=locked.id,
    )

    _copy_state(source=locked, target=order)
    return order


def _copy_state(source, target):
    """Copies the mutable lifecycle fields of a freshly locked row onto the caller's instance."""
    if source is target:
        return
    for field in (
        'status', 'cancellation_reason', 'cancellation_date', 'completed_at',
        'delivery_deadline', 'delivery_extensions', 'extension_reason', 'updated_at',
    ):
        setattr(target, field, getattr(source, field))
