from django.db.models import Q
from rest_framework import mixins, viewsets, status, generics
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.authorization import is_admin
from gigs_app.api.pagination import StandardResultsSetPagination
from orders_app.models import Order
from .. import services
from ..models import Transaction
from .filters import TransactionFilter
from .permissions import CanViewTransaction
from .serializers import (
    TransactionSerializer,
    CreatePaymentSerializer,
    RefundSerializer,
    EarningsSerializer,
)


class TransactionViewSet(mixins.ListModelMixin,
                         mixins.RetrieveModelMixin,
                         mixins.CreateModelMixin,
                         viewsets.GenericViewSet):
    """
    Payments and refunds.

    - `GET /api/transactions/`: paginated transactions of the user's orders (filters `type`, `status`, `order_id`).
    - `POST /api/transactions/`: the client pays for an order.
    - `GET /api/transactions/{id}/`: a single transaction.
    - `POST /api/transactions/{id}/process/`: confirm a payment that awaits confirmation.
    - `POST /api/transactions/{id}/refund/`: refund a completed payment.
    - `GET /api/transactions/earnings/`: monthly earnings of the requesting freelancer.

    Transactions are never updated or deleted through the API.
    """
    permission_classes = [IsAuthenticated]
    pagination_class = StandardResultsSetPagination
    filterset_class = TransactionFilter

    def get_permissions(self):
        if self.action == 'retrieve':
            self.permission_classes = [IsAuthenticated, CanViewTransaction]
        else:
            self.permission_classes = [IsAuthenticated]
        return super().get_permissions()

    def get_queryset(self):
        """
        Lists the transactions the user made or that belong to orders they take part
        in; admins see all of them. Detail lookups search every transaction so that
        foreign ones are answered with 403.
        """
        queryset = Transaction.objects.select_related('order__freelancer', 'user')
        user = self.request.user
        if self.action != 'list' or is_admin(user):
            return queryset
        return queryset.filter(
            Q(user=user) | Q(order__client=user) | Q(order__freelancer__user=user)
        ).distinct()

    def get_serializer_class(self):
        if self.action == 'create':
            return CreatePaymentSerializer
        if self.action == 'refund':
            return RefundSerializer
        if self.action == 'earnings':
            return EarningsSerializer
        return TransactionSerializer

    def create(self, request, *args, **kwargs):
        """
        Captures a payment for an order of the requesting client.

        Answers 201 with the transaction, which is COMPLETED when the gateway
        confirmed the charge right away and PENDING when it needs confirmation.
        """
        input_serializer = self.get_serializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        order = generics.get_object_or_404(
            Order.objects.select_related('freelancer__user'), pk=data['order_id']
        )
        payment = services.capture(order, data['amount'], data['payment_method_id'], request.user)

        return Response(TransactionSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def process(self, request, pk=None):
        payment = generics.get_object_or_404(Transaction, pk=pk)
        payment = services.confirm(payment, request.user)
        return Response(TransactionSerializer(payment).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'])
    def refund(self, request, pk=None):
        """Refunds the whole payment; answers with the new REFUND transaction."""
        payment = generics.get_object_or_404(Transaction, pk=pk)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        refund = services.refund(payment, serializer.validated_data.get('reason', ''), request.user)
        return Response(TransactionSerializer(refund).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'])
    def earnings(self, request):
        """
        Completed payments minus refunds on the requesting freelancer's orders, per
        month. Users without a freelancer profile get an empty list.
        """
        freelancer = getattr(request.user, 'freelancer_profile', None)
        if freelancer is None:
            return Response([], status=status.HTTP_200_OK)

        serializer = self.get_serializer(services.freelancer_earnings(freelancer), many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)
