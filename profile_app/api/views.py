from rest_framework import generics, permissions
from rest_framework.filters import OrderingFilter, SearchFilter

from profile_app.models import Profile, FreelancerProfile
from .permissions import IsOwnerOrReadOnly
from .serializers import (
    ProfileSerializer,
    ClientProfileListSerializer,
    FreelancerProfileSerializer
)


class ClientProfileListView(generics.ListAPIView):
    """
    Provides a GET-only endpoint that returns a list of all profiles
    marked with the 'client' user type.
    """
    serializer_class = ClientProfileListSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        # `select_related('user')` avoids one query per profile for the user fields.
        return Profile.objects.select_related('user').filter(type=Profile.UserType.CLIENT)


class FreelancerProfileListView(generics.ListAPIView):
    """
    Lists all freelancer profiles with their current rating.

    Supports `?search=` on username and headline, and `?ordering=rating` or
    `?ordering=-rating` to rank freelancers.
    """
    serializer_class = FreelancerProfileSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ['user__username', 'headline']
    ordering_fields = ['rating', 'review_count', 'created_at']

    def get_queryset(self):
        return FreelancerProfile.objects.select_related('user', 'user__profile').order_by('-rating', 'id')


class ProfileDetailView(generics.RetrieveUpdateAPIView):
    """
    Handles the detail endpoint for a user's profile.

    - GET: Retrieve the complete profile for a single user.
    - PATCH/PUT: Update the profile; only the owner may do so.

    The profile is looked up using the associated User's primary key from the URL,
    not the Profile's own primary key.
    """
    queryset = Profile.objects.select_related('user').all()
    serializer_class = ProfileSerializer

    # 1. `IsAuthenticated` rejects anonymous requests with 401.
    # 2. `IsOwnerOrReadOnly` restricts PATCH/PUT to the owner of the profile.
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrReadOnly]

    # Find the Profile whose related user has the primary key given in the URL.
    lookup_field = 'user__pk'
    lookup_url_kwarg = 'pk'


class FreelancerProfileDetailView(generics.RetrieveUpdateAPIView):
    """
    Retrieves or updates a single FreelancerProfile by its own primary key.

    The owner may change `headline`, `skills` and `hourly_rate`; the rating fields are
    read-only.
    """
    queryset = FreelancerProfile.objects.select_related('user', 'user__profile').all()
    serializer_class = FreelancerProfileSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrReadOnly]
