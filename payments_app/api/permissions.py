from rest_framework.permissions import BasePermission

from core.authorization import is_admin, is_order_party


class CanViewTransaction(BasePermission):
    """
    A transaction is visible to the user who made it, to both parties of its order
    and to admins.
    """
    message = "You do not have access to this transaction."

    def has_object_permission(self, request, view, obj):
        user = request.user
        return obj.user_id == user.pk or is_order_party(user, obj.order) or is_admin(user)
