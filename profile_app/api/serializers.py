from rest_framework import serializers
from django.contrib.auth.models import User
from profile_app.models import Profile, FreelancerProfile


class ProfileSerializer(serializers.ModelSerializer):
    """
    Serializes Profile model instances for the API.

    This serializer combines fields from both the Profile model and its related User model to
    present a flat structure for a user's profile. It handles both retrieving (GET) and
    updating (PATCH) data. The `type` is read-only: the role is chosen at registration.
    """

    # --- Fields from the related User model ---
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.EmailField(source='user.email')
    first_name = serializers.CharField(source='user.first_name', allow_blank=True)
    last_name = serializers.CharField(source='user.last_name', allow_blank=True)

    # --- Fields from the Profile model (with special handling) ---
    file = serializers.CharField(source='file_url', read_only=True)
    user = serializers.IntegerField(source='user.id', read_only=True)
    created_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%S", read_only=True)

    # The id of the FreelancerProfile, used by gigs and orders. `None` for clients.
    freelancer_profile = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = [
            'user',
            'username',
            'first_name',
            'last_name',
            'file',
            'location',
            'tel',
            'description',
            'working_hours',
            'type',
            'email',
            'freelancer_profile',
            'created_at'
        ]
        read_only_fields = ['type', 'created_at']

    def validate_email(self, value):
        """Another account must not already use the new address."""
        others = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            others = others.exclude(pk=self.instance.user_id)
        if others.exists():
            raise serializers.ValidationError("Email is already in use.")
        return value

    def get_freelancer_profile(self, obj):
        freelancer = getattr(obj.user, 'freelancer_profile', None)
        return freelancer.id if freelancer is not None else None

    def update(self, instance, validated_data):
        """
        Saves data to both the Profile and its related User model.

        Args:
            instance (Profile): The Profile instance being updated.
            validated_data (dict): A dictionary of validated data from the request.

        Returns:
            Profile: The updated Profile instance.
        """
        # `pop` removes the nested user data so `super().update` only sees Profile fields.
        user_data = validated_data.pop('user', {})
        user = instance.user

        # Only fields present in the PATCH request are changed.
        user.email = user_data.get('email', user.email)
        user.first_name = user_data.get('first_name', user.first_name)
        user.last_name = user_data.get('last_name', user.last_name)
        user.save()

        return super().update(instance, validated_data)


class ClientProfileListSerializer(serializers.ModelSerializer):
    """A lean representation of client profiles for the list endpoint."""
    username = serializers.CharField(source='user.username', read_only=True)
    first_name = serializers.CharField(source='user.first_name', read_only=True)
    last_name = serializers.CharField(source='user.last_name', read_only=True)
    file = serializers.CharField(source='file_url', read_only=True)
    user = serializers.IntegerField(source='user.id', read_only=True)

    class Meta:
        model = Profile
        fields = ['user', 'username', 'first_name', 'last_name', 'file', 'type']


class FreelancerProfileSerializer(serializers.ModelSerializer):
    """
    Serializes the selling side of a freelancer account.

    `rating` and `review_count` are aggregates maintained by the review services and are
    therefore always read-only.
    """
    user = serializers.IntegerField(source='user.id', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    first_name = serializers.CharField(source='user.first_name', read_only=True)
    last_name = serializers.CharField(source='user.last_name', read_only=True)
    location = serializers.CharField(source='user.profile.location', read_only=True)
    file = serializers.CharField(source='user.profile.file_url', read_only=True)
    skills = serializers.ListField(child=serializers.CharField(max_length=100), required=False)

    class Meta:
        model = FreelancerProfile
        fields = [
            'id',
            'user',
            'username',
            'first_name',
            'last_name',
            'location',
            'file',
            'headline',
            'skills',
            'hourly_rate',
            'rating',
            'review_count',
            'created_at'
        ]
        read_only_fields = ['rating', 'review_count', 'created_at']
