from rest_framework import serializers

from ..models import Dispute, DisputeComment


class DisputeCommentSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True)
    created_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)

    class Meta:
        model = DisputeComment
        fields = ['id', 'user', 'username', 'content', 'created_at']
        read_only_fields = ['id', 'user', 'username', 'created_at']


class DisputeSerializer(serializers.ModelSerializer):
    """
    Read-only representation of a dispute, used for lists and as the response of
    every write endpoint.
    """
    order_number = serializers.CharField(source='order.order_number', read_only=True)
    order_status = serializers.CharField(source='order.status', read_only=True)
    created_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)
    updated_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)

    class Meta:
        model = Dispute
        fields = [
            'id',
            'order',
            'order_number',
            'order_status',
            'raised_by',
            'reason',
            'description',
            'status',
            'resolution',
            'resolved_at',
            'resolved_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class DisputeDetailSerializer(DisputeSerializer):
    """A dispute together with its comments."""
    comments = DisputeCommentSerializer(many=True, read_only=True)

    class Meta(DisputeSerializer.Meta):
        fields = DisputeSerializer.Meta.fields + ['comments']
        read_only_fields = fields


class CreateDisputeSerializer(serializers.Serializer):
    """The payload of `POST /api/disputes/`."""
    order_id = serializers.IntegerField()
    reason = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')


class DisputeStatusSerializer(serializers.Serializer):
    """
    The payload of `PUT /api/disputes/{id}/status/`.

    A resolution text is mandatory when the dispute is RESOLVED or CLOSED.
    """
    status = serializers.ChoiceField(choices=Dispute.DisputeStatus.choices)
    resolution = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        if data['status'] in (Dispute.DisputeStatus.RESOLVED, Dispute.DisputeStatus.CLOSED) \
                and not data.get('resolution'):
            raise serializers.ValidationError(
                {'resolution': "A resolution is required for RESOLVED or CLOSED status."}
            )
        return data
