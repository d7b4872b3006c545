from rest_framework.permissions import BasePermission

from core.authorization import is_admin, is_order_party


class IsDisputePartyOrAdmin(BasePermission):
    """
    Grants access to a dispute to the client and the freelancer of the disputed
    order and to admins.
    """
    message = "You can only view your own disputes."

    def has_object_permission(self, request, view, obj):
        return is_order_party(request.user, obj.order) or is_admin(request.user)
