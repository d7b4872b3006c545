from rest_framework import permissions

from core.authorization import is_freelancer


class IsGigOwnerOrReadOnly(permissions.BasePermission):
    """
    Read access for everybody who passed the view-level checks, write access only for
    the freelancer who owns the gig.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.freelancer.user_id == request.user.pk


class IsFreelancerUser(permissions.BasePermission):
    """
    Allows the action only to users whose profile type is 'freelancer'.
    """
    message = "Only freelancers can create gigs."

    def has_permission(self, request, view):
        return is_freelancer(request.user)
