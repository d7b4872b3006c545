from django.db.models import Q
from rest_framework import mixins, viewsets, status, generics
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.authorization import is_admin
from gigs_app.api.pagination import StandardResultsSetPagination
from orders_app.models import Order
from .. import services
from ..models import Dispute
from .filters import DisputeFilter
from .permissions import IsDisputePartyOrAdmin
from .serializers import (
    DisputeSerializer,
    DisputeDetailSerializer,
    CreateDisputeSerializer,
    DisputeStatusSerializer,
    DisputeCommentSerializer,
)


class DisputeViewSet(mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.CreateModelMixin,
                     viewsets.GenericViewSet):
    """
    Disputes on orders.

    - `GET /api/disputes/`: disputes on the user's orders; admins see all (filters `status`, `order_id`).
    - `POST /api/disputes/`: a party of an order raises a dispute.
    - `GET /api/disputes/{id}/`: a dispute with its comments.
    - `PUT /api/disputes/{id}/status/`: an admin moves the dispute to a new status.
    - `GET|POST /api/disputes/{id}/comments/`: the discussion of a dispute.
    """
    pagination_class = StandardResultsSetPagination
    filterset_class = DisputeFilter

    def get_permissions(self):
        """
        - `retrieve`, `comments`: parties of the disputed order and admins.
        - everything else: authenticated users; the dispute services check roles.
        """
        if self.action in ['retrieve', 'comments']:
            self.permission_classes = [IsAuthenticated, IsDisputePartyOrAdmin]
        else:
            self.permission_classes = [IsAuthenticated]
        return super().get_permissions()

    def get_queryset(self):
        queryset = Dispute.objects.select_related('order__freelancer__user', 'order__client')
        user = self.request.user
        if self.action != 'list' or is_admin(user):
            return queryset
        return queryset.filter(Q(order__client=user) | Q(order__freelancer__user=user))

    def get_serializer_class(self):
        if self.action == 'create':
            return CreateDisputeSerializer
        if self.action == 'update_status':
            return DisputeStatusSerializer
        if self.action == 'comments':
            return DisputeCommentSerializer
        if self.action == 'retrieve':
            return DisputeDetailSerializer
        return DisputeSerializer

    def create(self, request, *args, **kwargs):
        """
        Raises a dispute on an order; the order is moved to DISPUTED.

        A second dispute on the same order is answered with 409.
        """
        input_serializer = self.get_serializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        order = generics.get_object_or_404(
            Order.objects.select_related('client', 'freelancer__user'), pk=data['order_id']
        )
        dispute = services.raise_dispute(order, request.user, data['reason'], data.get('description', ''))

        return Response(DisputeSerializer(dispute).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['put'], url_path='status', url_name='status')
    def update_status(self, request, pk=None):
        dispute = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        dispute = services.resolve_dispute(
            dispute,
            request.user,
            serializer.validated_data['status'],
            serializer.validated_data.get('resolution'),
        )
        return Response(DisputeSerializer(dispute).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['get', 'post'])
    def comments(self, request, pk=None):
        dispute = self.get_object()

        if request.method == 'GET':
            serializer = self.get_serializer(dispute.comments.select_related('user'), many=True)
            return Response(serializer.data)

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = services.add_dispute_comment(dispute, request.user, serializer.validated_data['content'])
        return Response(self.get_serializer(comment).data, status=status.HTTP_201_CREATED)
