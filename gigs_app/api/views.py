import logging

from rest_framework import viewsets, status
from rest_framework.filters import SearchFilter, OrderingFilter
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from django.db.models import Min, Q
from django_filters.rest_framework import DjangoFilterBackend

from core.authorization import is_admin
from gigs_app.models import Gig, GigPackage
from .serializers import (
    GigListSerializer,
    GigCreateUpdateSerializer,
    GigDetailSerializer,
    GigPackageReadSerializer,
)
from .filters import GigFilter
from .permissions import IsFreelancerUser, IsGigOwnerOrReadOnly
from .pagination import StandardResultsSetPagination

logger = logging.getLogger(__name__)


class GigViewSet(viewsets.ModelViewSet):
    """
    Manages all CRUD operations for the Gig model.

    - `GET /api/gigs/`: Public, paginated list with filtering, searching and ordering.
    - `POST /api/gigs/`: A freelancer creates a gig with its nested packages.
    - `GET /api/gigs/{id}/`: Detailed gig with all packages.
    - `PATCH /api/gigs/{id}/`: The owner updates the gig and its packages.
    - `DELETE /api/gigs/{id}/`: The owner archives the gig.

    Everyone sees ACTIVE gigs; owners additionally see their own drafts, paused and
    archived gigs, and admins see everything.
    """
    # --- ViewSet Configuration ---
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = GigFilter
    search_fields = ['title', 'description', 'category']
    ordering_fields = ['updated_at', 'min_price']

    def get_permissions(self):
        """
        Assigns permission classes per action:

        - `update`, `partial_update`, `destroy`: authenticated owner of the gig.
        - `create`: users with a freelancer profile.
        - `retrieve`: any authenticated user.
        - `list`: public.
        """
        if self.action in ['update', 'partial_update', 'destroy']:
            self.permission_classes = [IsAuthenticated, IsGigOwnerOrReadOnly]
        elif self.action == 'create':
            self.permission_classes = [IsAuthenticated, IsFreelancerUser]
        elif self.action == 'retrieve':
            self.permission_classes = [IsAuthenticated]
        else:
            self.permission_classes = [AllowAny]
        return super().get_permissions()

    def get_queryset(self):
        """
        Builds the base queryset with the cheapest package price and the fastest delivery
        time annotated, so both can be filtered and ordered in the database.
        """
        queryset = Gig.objects.annotate(
            min_price=Min('packages__price'),
            min_delivery_time_days=Min('packages__delivery_time_in_days')
        ).select_related('freelancer__user').prefetch_related('packages').order_by('-updated_at')

        user = self.request.user
        if is_admin(user):
            return queryset
        if user.is_authenticated:
            return queryset.filter(Q(status=Gig.GigStatus.ACTIVE) | Q(freelancer__user=user))
        return queryset.filter(status=Gig.GigStatus.ACTIVE)

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return GigCreateUpdateSerializer
        if self.action == 'retrieve':
            return GigDetailSerializer
        return GigListSerializer

    def perform_create(self, serializer):
        """The gig always belongs to the requesting freelancer."""
        serializer.save(freelancer=self.request.user.freelancer_profile)

    def create(self, request, *args, **kwargs):
        """
        Creates the gig and answers with the full detail representation, including the
        server-generated package ids.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        instance = serializer.instance
        logger.info("Gig %s created by freelancer %s", instance.id, instance.freelancer_id)

        read_serializer = GigDetailSerializer(instance, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)

        # Reload so the prefetched packages reflect the update.
        instance = self.get_object()
        read_serializer = GigDetailSerializer(instance, context=self.get_serializer_context())
        return Response(read_serializer.data)

    def destroy(self, request, *args, **kwargs):
        """
        Archives the gig instead of deleting it.

        Orders keep a PROTECT reference to their gig, so a gig is never removed from the
        database. An archived gig no longer appears in public listings and can no longer
        be ordered.
        """
        instance = self.get_object()
        instance.status = Gig.GigStatus.ARCHIVED
        instance.save(update_fields=['status', 'updated_at'])
        logger.info("Gig %s archived by user %s", instance.id, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class GigPackageViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only access to single packages, referenced by URL from the gig list.

    - `GET /api/gig-packages/`
    - `GET /api/gig-packages/{id}/`
    """
    queryset = GigPackage.objects.select_related('gig').all()
    serializer_class = GigPackageReadSerializer
    permission_classes = [IsAuthenticated]
