"""
The dispute gate: opening, settling and discussing disputes.

Opening a dispute forces the order into DISPUTED and settling it forces the order
back to COMPLETED; both go through the order transition validator so the status
history stays complete.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from core import authorization
from core.exceptions import DuplicateResource, IllegalTransition
from notifications_app.models import Notification
from notifications_app.services import notify, notify_admins, notify_many
from orders_app.models import Order, OrderStatus
from orders_app.services import transition_order

from .models import Dispute, DisputeComment

logger = logging.getLogger(__name__)

# Orders in these states cannot be disputed.
NON_DISPUTABLE_STATES = frozenset({OrderStatus.PENDING, OrderStatus.CANCELLED})
SETTLED_STATES = frozenset({Dispute.DisputeStatus.RESOLVED, Dispute.DisputeStatus.CLOSED})


def raise_dispute(order, actor, reason, description=''):
    """
    Opens a dispute on `order` and moves the order to DISPUTED unless it already is.

    Raises:
        PermissionDenied: `actor` is not a party of the order.
        DuplicateResource: the order already has a dispute.
        IllegalTransition: the order is PENDING or CANCELLED.
    """
    authorization.ensure_order_party(actor, order)
    if not reason:
        raise ValidationError({'reason': "A reason is required to raise a dispute."})

    with transaction.atomic():
        locked = Order.objects.select_for_update().get(pk=order.pk)
        if Dispute.objects.filter(order=locked).exists():
            raise DuplicateResource("A dispute already exists for this order.")
        if locked.status in NON_DISPUTABLE_STATES:
            raise IllegalTransition(locked.status, OrderStatus.DISPUTED)

        try:
            with transaction.atomic():
                dispute = Dispute.objects.create(
                    order=locked,
                    raised_by=actor,
                    reason=reason,
                    description=description or '',
                )
        except IntegrityError:
            raise DuplicateResource("A dispute already exists for this order.")

        # An order moved to DISPUTED through the status endpoint keeps its status.
        if locked.status != OrderStatus.DISPUTED:
            transition_order(locked, OrderStatus.DISPUTED, actor, forced=True)

    logger.info("Dispute %s raised on order %s by user %s", dispute.id, locked.id, actor.pk)
    notify(
        authorization.counterparty(locked, actor),
        Notification.NotificationType.DISPUTE,
        f"A dispute has been raised for order {locked.order_number}.",
        entity_type=Notification.EntityType.DISPUTE,
        entity_id=dispute.id,
        priority=Notification.Priority.HIGH,
    )
    notify_admins(
        Notification.NotificationType.DISPUTE,
        f"New dispute #{dispute.id} raised for order {locked.order_number}.",
        entity_type=Notification.EntityType.DISPUTE,
        entity_id=dispute.id,
        priority=Notification.Priority.HIGH,
    )
    return dispute


def resolve_dispute(dispute, actor, new_status, resolution=None):
    """
    Sets the status of `dispute`; only admins may do this.

    RESOLVED and CLOSED need a resolution text, record who settled the dispute and
    complete the order if it is still DISPUTED. An order that already left DISPUTED
    is not touched.
    """
    authorization.ensure_admin(actor, "Only admins can update the status of a dispute.")
    if new_status not in Dispute.DisputeStatus.values:
        raise ValidationError({'status': f"Invalid status. Allowed: {', '.join(Dispute.DisputeStatus.values)}"})
    settling = new_status in SETTLED_STATES
    if settling and not resolution:
        raise ValidationError({'resolution': "A resolution is required for RESOLVED or CLOSED status."})

    with transaction.atomic():
        locked = Dispute.objects.select_for_update().select_related('order').get(pk=dispute.pk)
        previous_status = locked.status
        locked.status = new_status
        if resolution:
            locked.resolution = resolution
        if settling:
            locked.resolved_at = timezone.now()
            locked.resolved_by = actor
        locked.save()

        order = locked.order
        if settling:
            if order.status == OrderStatus.DISPUTED:
                transition_order(order, OrderStatus.COMPLETED, actor, forced=True)
            else:
                logger.warning(
                    "Dispute %s settled while order %s is %s; order status left unchanged",
                    locked.id, order.id, order.status
                )

    logger.info("Dispute %s moved %s -> %s by admin %s", locked.id, previous_status, new_status, actor.pk)
    notify_many(
        [order.client, order.freelancer.user],
        Notification.NotificationType.DISPUTE,
        f"Dispute #{locked.id} updated to {new_status}.",
        entity_type=Notification.EntityType.DISPUTE,
        entity_id=locked.id,
    )
    return locked


def add_dispute_comment(dispute, actor, content):
    """Adds a comment to the discussion of `dispute`; parties and admins only."""
    order = dispute.order
    authorization.ensure_order_party(
        actor, order, allow_admin=True, message="You do not have access to this dispute."
    )
    if not content or not content.strip():
        raise ValidationError({'content': "Comment content is required."})

    comment = DisputeComment.objects.create(dispute=dispute, user=actor, content=content)
    logger.info("User %s commented on dispute %s", actor.pk, dispute.id)

    recipients = [
        user for user in (order.client, order.freelancer.user)
        if user.pk != actor.pk
    ]
    notify_many(
        recipients,
        Notification.NotificationType.DISPUTE,
        f"New comment on the dispute for order {order.order_number}.",
        entity_type=Notification.EntityType.DISPUTE,
        entity_id=dispute.id,
    )
    return comment
