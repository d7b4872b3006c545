from rest_framework import serializers

from ..models import Review


class ReviewReadSerializer(serializers.ModelSerializer):
    """
    Serializer for the `Review` model, used in list and detail responses.

    When the author chose to stay anonymous, `client` is rendered as null and
    `client_username` is omitted for everyone but the author and admins.
    """
    order_number = serializers.CharField(source='order.order_number', read_only=True)
    client_username = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            'id',
            'order',
            'order_number',
            'client',
            'client_username',
            'freelancer',
            'rating',
            'title',
            'comment',
            'is_anonymous',
            'moderation_status',
            'response',
            'responded_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def _author_is_hidden(self, obj):
        if not obj.is_anonymous:
            return False
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        if user is None or not user.is_authenticated:
            return True
        return not (user.pk == obj.client_id or user.is_staff)

    def get_client_username(self, obj):
        if self._author_is_hidden(obj):
            return None
        return obj.client.username

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if self._author_is_hidden(instance):
            data['client'] = None
        return data


class ReviewCreateSerializer(serializers.Serializer):
    """
    Input of `POST /reviews/`.

    The rating bounds are checked here for a readable 400; ownership, the order
    status and uniqueness are checked by the review service.
    """
    order_id = serializers.IntegerField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, default='')
    title = serializers.CharField(required=False, allow_blank=True, max_length=255, default='')
    is_anonymous = serializers.BooleanField(required=False, default=False)


class ReviewUpdateSerializer(serializers.Serializer):
    """Only these fields can be changed with PATCH; everything else is ignored."""
    rating = serializers.IntegerField(min_value=1, max_value=5, required=False)
    comment = serializers.CharField(required=False, allow_blank=True)
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    is_anonymous = serializers.BooleanField(required=False)


class ReviewResponseSerializer(serializers.Serializer):
    response = serializers.CharField()


class ReviewModerationSerializer(serializers.Serializer):
    moderation_status = serializers.ChoiceField(
        choices=[Review.ModerationStatus.APPROVED, Review.ModerationStatus.REJECTED]
    )
    reason = serializers.CharField(required=False, allow_blank=True, default='')
