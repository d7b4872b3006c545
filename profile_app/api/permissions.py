from rest_framework import permissions


class IsOwnerOrReadOnly(permissions.BasePermission):
    """
    Allows read-only access to any authenticated user and write access only to the user the
    profile belongs to.

    Works for both `Profile` and `FreelancerProfile`, since each has a `user` attribute.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.user == request.user
