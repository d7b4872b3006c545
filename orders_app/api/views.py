from django.db import transaction
from django.db.models import Q
from rest_framework import mixins, viewsets, status, generics
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from gigs_app.models import Gig
from profile_app.models import FreelancerProfile
from ..models import Order, OrderStatus
from .. import services
from .filters import OrderFilter
from .permissions import IsClientUser, IsOrderPartyOrAdmin
from .serializers import (
    OrderSerializer,
    OrderDetailSerializer,
    CreateOrderSerializer,
    OrderStatusUpdateSerializer,
    CancelOrderSerializer,
)

ACTIVE_ORDER_STATUSES = (OrderStatus.ACCEPTED, OrderStatus.IN_PROGRESS)


class OrderViewSet(mixins.ListModelMixin,
                   mixins.RetrieveModelMixin,
                   mixins.CreateModelMixin,
                   viewsets.GenericViewSet):
    """
    Orders of the requesting user.

    - `GET /api/orders/`: orders the user is a party of (filters `status`, `role`).
    - `POST /api/orders/`: a client orders a package of a gig.
    - `GET /api/orders/{id}/`: an order with its status history (parties and admins).
    - `PATCH /api/orders/{id}/status/`: request a status transition or a delivery extension.
    - `PATCH /api/orders/{id}/cancel/`: cancel the order.

    Orders cannot be edited or deleted through the API; every change goes through
    the order services so that the state machine and the status history stay intact.
    """
    # Pagination is disabled; a user's orders are returned in a single response.
    pagination_class = None
    filterset_class = OrderFilter

    def get_permissions(self):
        """
        - `create`: authenticated clients only.
        - `retrieve`: parties of the order and admins (checked per object).
        - `update_status`, `cancel`: authenticated users; the order service checks that the
          requester is a party and answers with 403 otherwise.
        - `list`: any authenticated user, restricted to their own orders.
        """
        if self.action == 'create':
            self.permission_classes = [IsAuthenticated, IsClientUser]
        elif self.action == 'retrieve':
            self.permission_classes = [IsAuthenticated, IsOrderPartyOrAdmin]
        else:
            self.permission_classes = [IsAuthenticated]
        return super().get_permissions()

    def get_queryset(self):
        """
        The list contains only orders the user takes part in. Detail lookups search all
        orders, so that a foreign order is answered with 403 instead of 404.
        """
        queryset = Order.objects.select_related('client', 'freelancer__user', 'gig')
        if self.action == 'list':
            user = self.request.user
            return queryset.filter(Q(client=user) | Q(freelancer__user=user))
        if self.action == 'retrieve':
            return queryset.prefetch_related('status_history')
        return queryset

    def get_serializer_class(self):
        if self.action == 'create':
            return CreateOrderSerializer
        if self.action == 'update_status':
            return OrderStatusUpdateSerializer
        if self.action == 'cancel':
            return CancelOrderSerializer
        if self.action == 'retrieve':
            return OrderDetailSerializer
        return OrderSerializer

    def create(self, request, *args, **kwargs):
        """
        Creates an order from a gig id and a package type.

        The gig must exist (404) and be orderable; price and deadline are computed by
        the pricing resolver inside `services.create_order`.
        """
        input_serializer = self.get_serializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        gig = generics.get_object_or_404(
            Gig.objects.select_related('freelancer__user').prefetch_related('packages'),
            pk=data['gig_id']
        )
        order = services.create_order(
            client=request.user,
            gig=gig,
            package_key=data['selected_package'],
            requirements=data.get('requirements', ''),
            is_urgent=data.get('is_urgent', False),
            custom_details=data.get('custom_details') or {},
        )

        output_serializer = OrderDetailSerializer(order, context=self.get_serializer_context())
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch'], url_path='status', url_name='status')
    def update_status(self, request, pk=None):
        """
        Applies a status transition and/or a delivery extension.

        The transition is validated against the state machine; an unreachable status
        is answered with 400 `illegal_transition`. Both changes commit together or
        not at all.
        """
        order = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            if 'status' in data:
                services.transition_order(
                    order,
                    data['status'],
                    request.user,
                    cancellation_reason=data.get('cancellation_reason'),
                )
            if 'extension_reason' in data:
                services.extend_delivery(order, request.user, data['extension_reason'])

        return Response(OrderDetailSerializer(self._reload(order)).data)

    @action(detail=True, methods=['patch'])
    def cancel(self, request, pk=None):
        order = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        services.cancel_order(order, request.user, serializer.validated_data.get('cancellation_reason'))
        return Response(OrderDetailSerializer(self._reload(order)).data)

    def _reload(self, order):
        return Order.objects.select_related('freelancer').prefetch_related('status_history').get(pk=order.pk)


class OrderCountView(APIView):
    """
    Returns the number of active (ACCEPTED or IN_PROGRESS) orders of a freelancer.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, freelancer_id, format=None):
        freelancer = generics.get_object_or_404(FreelancerProfile, pk=freelancer_id)
        count = Order.objects.filter(
            freelancer=freelancer,
            status__in=ACTIVE_ORDER_STATUSES
        ).count()

        return Response({'order_count': count}, status=status.HTTP_200_OK)


class CompletedOrderCountView(APIView):
    """
    Returns the number of completed orders of a freelancer.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, freelancer_id, format=None):
        freelancer = generics.get_object_or_404(FreelancerProfile, pk=freelancer_id)
        count = Order.objects.filter(
            freelancer=freelancer,
            status=OrderStatus.COMPLETED
        ).count()

        return Response({'completed_order_count': count}, status=status.HTTP_200_OK)
