import math

from django.utils import timezone
from rest_framework import serializers

from gigs_app.models import GigPackage
from ..models import Order, OrderStatus, OrderStatusHistory

CUSTOM_DETAILS_MAX_KEYS = 20
SCALAR_TYPES = (str, int, float, bool)
SECONDS_PER_DAY = 24 * 60 * 60


class StrictFieldsMixin:
    """
    Rejects request payloads containing fields this serializer does not declare.

    DRF ignores unknown fields by default; for the order endpoints a typo such as
    `stauts` must fail loudly instead of silently doing nothing.
    """

    def validate(self, data):
        input_keys = set(self.initial_data.keys())
        allowed_keys = set(self.fields.keys())

        extra_fields = input_keys - allowed_keys
        if extra_fields:
            raise serializers.ValidationError(
                f"Unrecognized fields provided: {', '.join(sorted(extra_fields))}"
            )
        return super().validate(data)


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    created_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)

    class Meta:
        model = OrderStatusHistory
        fields = ['status', 'changed_by', 'created_at']


class OrderSerializer(serializers.ModelSerializer):
    """
    The representation of an order in list responses and after status changes.

    All fields are read-only: orders are only changed through the dedicated status
    and cancel endpoints. `days_left` counts the whole days until the delivery
    deadline and is 0 once the deadline has passed.
    """
    created_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)
    updated_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)
    freelancer_user = serializers.IntegerField(source='freelancer.user_id', read_only=True)
    days_left = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id',
            'order_number',
            'client',
            'freelancer',
            'freelancer_user',
            'gig',
            'package',
            'title',
            'total_price',
            'is_urgent',
            'priority_fee',
            'requirements',
            'custom_details',
            'status',
            'delivery_deadline',
            'delivery_extensions',
            'extension_reason',
            'days_left',
            'cancellation_reason',
            'cancellation_date',
            'completed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_days_left(self, obj):
        if obj.status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED):
            return None
        remaining = (obj.delivery_deadline - timezone.now()).total_seconds()
        return max(0, math.ceil(remaining / SECONDS_PER_DAY))


class OrderDetailSerializer(OrderSerializer):
    """An order together with its complete status history, oldest entry first."""
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ['status_history']
        read_only_fields = fields


class CreateOrderSerializer(StrictFieldsMixin, serializers.Serializer):
    """
    The payload of `POST /api/orders/`.

    Only the gig and the package are chosen by the client; price, title and
    deadline are derived from the gig by the order service.
    """
    gig_id = serializers.IntegerField()
    selected_package = serializers.ChoiceField(choices=GigPackage.PackageType.choices)
    requirements = serializers.CharField(required=False, allow_blank=True, default='')
    is_urgent = serializers.BooleanField(required=False, default=False)
    custom_details = serializers.DictField(required=False, default=dict)

    def validate_custom_details(self, value):
        """
        `custom_details` is a flat mapping of names to scalar values (text, numbers,
        booleans or null) with at most 20 entries.
        """
        if len(value) > CUSTOM_DETAILS_MAX_KEYS:
            raise serializers.ValidationError(
                f"At most {CUSTOM_DETAILS_MAX_KEYS} custom details are allowed."
            )
        for key, item in value.items():
            if not isinstance(key, str) or not key.strip():
                raise serializers.ValidationError("Custom detail names must be non-empty strings.")
            if item is not None and not isinstance(item, SCALAR_TYPES):
                raise serializers.ValidationError(
                    f"Custom detail '{key}' must be a text, number, boolean or null value."
                )
        return value


class OrderStatusUpdateSerializer(StrictFieldsMixin, serializers.Serializer):
    """
    The payload of `PATCH /api/orders/{id}/status/`.

    Either `status` requests a transition (with an optional `cancellation_reason`
    when cancelling), or `extension_reason` extends the delivery deadline. Sending
    both performs the transition and then the extension in one transaction.
    """
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    extension_reason = serializers.CharField(required=False, allow_blank=False, max_length=1000)
    cancellation_reason = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate(self, data):
        data = super().validate(data)
        if 'status' not in data and 'extension_reason' not in data:
            raise serializers.ValidationError("Provide a 'status' or an 'extension_reason'.")
        return data


class CancelOrderSerializer(StrictFieldsMixin, serializers.Serializer):
    """The payload of `PATCH /api/orders/{id}/cancel/`."""
    cancellation_reason = serializers.CharField(required=False, allow_blank=True, max_length=1000)
