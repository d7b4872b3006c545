import logging

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.authtoken.models import Token
from rest_framework.authtoken.views import ObtainAuthToken

from .serializers import RegistrationSerializer, LoginSerializer

logger = logging.getLogger(__name__)


def token_response_data(user, token):
    """The payload shared by registration and login."""
    return {
        'token': token.key,
        'username': user.username,
        'email': user.email,
        'user_id': user.id,
        'type': user.profile.type,
    }


class RegistrationView(APIView):
    """
    Handles new user registration.

    This endpoint allows any unauthenticated user to create a new account as a client or
    a freelancer. On success it returns an authentication token for immediate use as
    `Authorization: Bearer <token>`.

    Endpoint:
        POST /api/registration/

    Responses:
        - 201 Created: {"token", "username", "email", "user_id", "type"}
        - 400 Bad Request: validation errors (e.g. passwords don't match, email taken).
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        saved_account = serializer.save()

        token, created = Token.objects.get_or_create(user=saved_account)
        logger.info("Registered user %s as %s", saved_account.id, saved_account.profile.type)

        return Response(token_response_data(saved_account, token), status=status.HTTP_201_CREATED)


class LoginView(ObtainAuthToken):
    """
    Handles user authentication and token generation.

    Endpoint:
        POST /api/login/

    Responses:
        - 200 OK: {"token", "username", "email", "user_id", "type"}
        - 400 Bad Request: invalid credentials or missing fields.
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = LoginSerializer

    def post(self, request):
        serializer = self.serializer_class(
            data=request.data,
            context={'request': request}
        )
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']
        token, created = Token.objects.get_or_create(user=user)
        return Response(token_response_data(user, token), status=status.HTTP_200_OK)
