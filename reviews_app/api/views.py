from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, status, generics
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from core.authorization import is_admin
from orders_app.models import Order
from .. import services
from ..models import Review
from .serializers import (
    ReviewReadSerializer,
    ReviewCreateSerializer,
    ReviewUpdateSerializer,
    ReviewResponseSerializer,
    ReviewModerationSerializer,
)
from .filters import ReviewFilter
from .permissions import IsClientUser, IsAuthorOrAdminOrReadOnly


class ReviewViewSet(viewsets.ModelViewSet):
    """
    Reviews of completed orders.

    This ViewSet provides the following endpoints:
    - `GET /api/reviews/`: Lists approved reviews (filters `freelancer_id`, `order_id`).
    - `POST /api/reviews/`: The client of a completed order reviews it.
    - `GET /api/reviews/{id}/`: Retrieves a single review.
    - `PATCH /api/reviews/{id}/`: The author edits the review.
    - `DELETE /api/reviews/{id}/`: The author or an admin deletes the review.
    - `POST /api/reviews/{id}/respond/`: The reviewed freelancer answers once.
    - `PATCH /api/reviews/{id}/moderate/`: An admin approves or rejects the review.

    Every write goes through `reviews_app.services`, which keeps the freelancer's
    rating in step with the reviews.
    """
    serializer_class = ReviewReadSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    # All matching reviews are returned in a single response.
    pagination_class = None

    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = ReviewFilter
    ordering_fields = ['updated_at', 'rating']

    def get_permissions(self):
        """
        - `list`, `retrieve`: public.
        - `create`: users with a client profile.
        - `partial_update`, `destroy`: the author (delete: admins too).
        - `moderate`: admins.
        - `respond`: authenticated users; the service checks for the reviewed freelancer.
        """
        if self.action in ['list', 'retrieve']:
            self.permission_classes = [AllowAny]
        elif self.action == 'create':
            self.permission_classes = [IsAuthenticated, IsClientUser]
        elif self.action in ['partial_update', 'destroy']:
            self.permission_classes = [IsAuthenticated, IsAuthorOrAdminOrReadOnly]
        elif self.action == 'moderate':
            self.permission_classes = [IsAuthenticated, IsAdminUser]
        else:
            self.permission_classes = [IsAuthenticated]
        return super().get_permissions()

    def get_queryset(self):
        """
        Readers see approved reviews plus their own; admins see every review.
        Write actions look up any review so that a foreign one yields 403.
        """
        queryset = Review.objects.select_related('order', 'client', 'freelancer__user')
        user = self.request.user
        if self.action not in ['list', 'retrieve'] or is_admin(user):
            return queryset
        visible = Q(moderation_status=Review.ModerationStatus.APPROVED)
        if user.is_authenticated:
            visible |= Q(client=user)
        return queryset.filter(visible)

    def get_serializer_class(self):
        if self.action == 'create':
            return ReviewCreateSerializer
        if self.action == 'partial_update':
            return ReviewUpdateSerializer
        if self.action == 'respond':
            return ReviewResponseSerializer
        if self.action == 'moderate':
            return ReviewModerationSerializer
        return ReviewReadSerializer

    def _render(self, review, status_code=status.HTTP_200_OK):
        data = ReviewReadSerializer(review, context=self.get_serializer_context()).data
        return Response(data, status=status_code)

    def create(self, request, *args, **kwargs):
        """
        Creates the review of a completed order.

        A second review of the same order is answered with 409.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = generics.get_object_or_404(
            Order.objects.select_related('client', 'freelancer__user'), pk=data['order_id']
        )
        review = services.create_review(
            order,
            request.user,
            data['rating'],
            comment=data['comment'],
            title=data['title'],
            is_anonymous=data['is_anonymous'],
        )
        return self._render(review, status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        review = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = services.update_review(review, request.user, **serializer.validated_data)
        return self._render(review)

    def destroy(self, request, *args, **kwargs):
        review = self.get_object()
        services.delete_review(review, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def respond(self, request, pk=None):
        review = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = services.respond_to_review(review, request.user, serializer.validated_data['response'])
        return self._render(review)

    @action(detail=True, methods=['patch'])
    def moderate(self, request, pk=None):
        review = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = services.moderate_review(
            review,
            request.user,
            serializer.validated_data['moderation_status'],
            serializer.validated_data['reason'],
        )
        return self._render(review)
