"""
Creates notifications for the order, payment, dispute and review workflows.

Notifications are fire-and-forget: a failure to store one is logged and never
undoes the business operation that triggered it. Each write runs in its own
savepoint, so a failed insert leaves the caller's transaction usable.
"""
import logging

from django.contrib.auth.models import User
from django.db import DatabaseError, transaction

from .models import Notification

logger = logging.getLogger(__name__)


def notify(user, type, content, entity_type=None, entity_id=None,
           priority=Notification.Priority.NORMAL, metadata=None, expires_at=None):
    """Stores one notification for `user` and returns it, or None if it could not be saved."""
    try:
        with transaction.atomic():
            return Notification.objects.create(
                user=user,
                type=type,
                content=content,
                entity_type=entity_type,
                entity_id=entity_id,
                priority=priority,
                metadata=metadata or {},
                expires_at=expires_at,
            )
    except DatabaseError:
        logger.exception(
            "Could not store %s notification for user %s (%s %s)",
            type, getattr(user, 'pk', None), entity_type, entity_id
        )
        return None


def notify_many(users, type, content, **kwargs):
    """Notifies every user in `users` once, skipping duplicates."""
    notifications = []
    seen = set()
    for user in users:
        if user is None or user.pk in seen:
            continue
        seen.add(user.pk)
        notification = notify(user, type, content, **kwargs)
        if notification is not None:
            notifications.append(notification)
    return notifications


def notify_admins(type, content, **kwargs):
    """
    Notifies all active staff users.

    The recipients are resolved at call time, so newly appointed admins receive
    notifications without any configuration.
    """
    admins = User.objects.filter(is_staff=True, is_active=True).order_by('pk')
    notifications = notify_many(admins, type, content, **kwargs)
    if not notifications:
        logger.warning("No admin received the %s notification: %s", type, content)
    return notifications
