from django.contrib.auth.models import User
from rest_framework import serializers

from ..models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Read representation of a notification."""
    created_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)

    class Meta:
        model = Notification
        fields = [
            'id',
            'type',
            'content',
            'entity_type',
            'entity_id',
            'priority',
            'is_read',
            'read_at',
            'expires_at',
            'metadata',
            'created_at',
        ]
        read_only_fields = fields


class NotificationCreateSerializer(serializers.ModelSerializer):
    """
    Used by administrators to send a notification to any user.

    `entity_type` and `entity_id` must be given together.
    """
    user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    metadata = serializers.DictField(required=False, default=dict)

    class Meta:
        model = Notification
        fields = [
            'user',
            'type',
            'content',
            'entity_type',
            'entity_id',
            'priority',
            'expires_at',
            'metadata',
        ]

    def validate(self, data):
        has_type = bool(data.get('entity_type'))
        has_id = data.get('entity_id') is not None
        if has_type != has_id:
            raise serializers.ValidationError(
                "'entity_type' and 'entity_id' must be provided together."
            )
        return data
