from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.db import transaction
from rest_framework import serializers

from profile_app.models import Profile


class RegistrationSerializer(serializers.ModelSerializer):
    """
    Input of `POST /api/registration/`.

    Fields: username, email, password, repeated_password and type ('client' or
    'freelancer'). The password pair must match and the email must be unused.
    The `Profile` row comes from the `post_save` signal on User; only its role is
    set here.
    """
    repeated_password = serializers.CharField(
        style={'input_type': 'password'},
        write_only=True
    )
    type = serializers.ChoiceField(choices=Profile.UserType.choices, write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'repeated_password', 'type']
        extra_kwargs = {
            'password': {'write_only': True},
            'email': {'required': True, 'allow_blank': False},
        }

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('This email address already exists.')
        return value

    def validate(self, data):
        if data['password'] != data['repeated_password']:
            raise serializers.ValidationError({'password': 'Passwords must match.'})
        return data

    def create(self, validated_data):
        # A freelancer role also creates the FreelancerProfile through a signal.
        with transaction.atomic():
            user = User.objects.create_user(
                username=validated_data['username'],
                email=validated_data['email'],
                password=validated_data['password']
            )
            profile = user.profile
            profile.type = validated_data['type']
            profile.save()

        return user


class LoginSerializer(serializers.Serializer):
    """
    Validates login credentials.

    Accounts are identified either by `username` or by `email`; exactly one of the
    two has to be given. The authenticated user is returned as `user` in the
    validated data so that the view can issue a token for it.
    """
    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(
        label="Password",
        style={'input_type': 'password'},
        trim_whitespace=False
    )

    def _resolve_username(self, attrs):
        if attrs.get('username'):
            return attrs['username']
        if attrs.get('email'):
            account = User.objects.filter(email__iexact=attrs['email']).only('username').first()
            return account.username if account is not None else None
        raise serializers.ValidationError(
            {'username': 'Provide a username or an email address.'}, code='authorization'
        )

    def validate(self, attrs):
        username = self._resolve_username(attrs)

        user = None
        if username is not None:
            user = authenticate(
                request=self.context.get('request'),
                username=username,
                password=attrs['password']
            )

        if not user:
            # Unknown account, inactive account and wrong password look the same.
            raise serializers.ValidationError(
                'Unable to log in with provided credentials.', code='authorization'
            )

        attrs['user'] = user
        return attrs
