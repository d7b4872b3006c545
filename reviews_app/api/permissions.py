from rest_framework import permissions

from core.authorization import is_admin, is_client


class IsClientUser(permissions.BasePermission):
    """
    Allows the action only to users whose profile type is 'client'.

    Only clients leave reviews; whether the client actually owns the reviewed
    order is decided by the review service.
    """
    message = "Only users with a client profile can create reviews."

    def has_permission(self, request, view):
        return is_client(request.user)


class IsAuthorOrAdminOrReadOnly(permissions.BasePermission):
    """
    Object-level check for a single review.

    Reading is open to everyone who may see the review at all. Editing is limited
    to the author; deleting is also allowed for admins.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        if obj.client_id == request.user.pk:
            return True
        return request.method == 'DELETE' and is_admin(request.user)
