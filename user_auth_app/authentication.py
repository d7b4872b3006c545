from rest_framework.authentication import TokenAuthentication


class BearerTokenAuthentication(TokenAuthentication):
    """
    DRF token authentication using the `Authorization: Bearer <token>` header.

    The tokens themselves are the regular `rest_framework.authtoken` tokens issued by
    the registration and login endpoints.
    """
    keyword = 'Bearer'
