from rest_framework.permissions import BasePermission

from core.authorization import is_admin, is_client, is_order_party


class IsClientUser(BasePermission):
    """
    Allows the action only to users whose profile type is 'client'.

    Freelancers and users without a profile are rejected with 403 before the
    request body is looked at.
    """
    message = "Only clients can place orders."

    def has_permission(self, request, view):
        return is_client(request.user)


class IsOrderPartyOrAdmin(BasePermission):
    """
    Object-level check for a single order.

    Grants access when the requesting user is the order's client, the freelancer
    selling the gig, or an admin. Everybody else receives 403.
    """
    message = "You are not a party to this order."

    def has_object_permission(self, request, view, obj):
        return is_order_party(request.user, obj) or is_admin(request.user)
