from decimal import Decimal

from rest_framework import serializers

from ..models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    """
    Read-only representation of a payment, refund or payout.
    """
    order_number = serializers.CharField(source='order.order_number', read_only=True)
    created_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)
    updated_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id',
            'order',
            'order_number',
            'user',
            'amount',
            'type',
            'status',
            'payment_method',
            'gateway_reference',
            'refund_of',
            'reason',
            'failure_reason',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class CreatePaymentSerializer(serializers.Serializer):
    """The payload of `POST /api/transactions/`."""
    order_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    payment_method_id = serializers.CharField(max_length=255)


class RefundSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000, default='')


class EarningsSerializer(serializers.Serializer):
    month = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
