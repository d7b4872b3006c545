"""
Shared authorization predicates.

Service functions call the `ensure_*` helpers directly and the DRF permission
classes of each app wrap the boolean predicates, so a rule such as "only a party
of the order" is written exactly once.
"""
from rest_framework.exceptions import PermissionDenied


def is_admin(user):
    """Admins are staff users."""
    return bool(user and user.is_authenticated and user.is_staff)


def user_type(user):
    """
    Returns the profile type ('client' or 'freelancer') of a user, or None.

    Users created without the post_save signal (e.g. raw fixtures) may have no
    profile, which simply means they hold no role.
    """
    if not user or not user.is_authenticated:
        return None
    profile = getattr(user, 'profile', None)
    return profile.type if profile is not None else None


def is_client(user):
    return user_type(user) == 'client'


def is_freelancer(user):
    return user_type(user) == 'freelancer'


def is_order_client(user, order):
    return bool(user and user.is_authenticated and order.client_id == user.pk)


def is_order_freelancer(user, order):
    if not user or not user.is_authenticated:
        return False
    return order.freelancer.user_id == user.pk


def is_order_party(user, order):
    """True when `user` is the client or the freelancer of `order`."""
    return is_order_client(user, order) or is_order_freelancer(user, order)


def counterparty(order, user):
    """Returns the other party of the order, seen from `user`."""
    if is_order_client(user, order):
        return order.freelancer.user
    return order.client


# --- Raising variants used by the service layer ---

def ensure_admin(user, message="Only administrators can perform this action."):
    if not is_admin(user):
        raise PermissionDenied(message)


def ensure_client(user, message="Only clients can perform this action."):
    if not is_client(user):
        raise PermissionDenied(message)


def ensure_order_client(user, order, message="Only the client of this order can perform this action."):
    if not is_order_client(user, order):
        raise PermissionDenied(message)


def ensure_order_party(user, order, allow_admin=False,
                       message="You are not a party to this order."):
    if is_order_party(user, order):
        return
    if allow_admin and is_admin(user):
        return
    raise PermissionDenied(message)
