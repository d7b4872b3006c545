from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from django.contrib.auth.models import User

from profile_app.models import Profile


class LoginTests(APITestCase):
    """
    Test suite for the user login functionality.

    Covers successful authentication, failed attempts with bad credentials, requests with
    missing data, and the use of the issued token as a bearer token.
    """

    def setUp(self):
        """Creates a freelancer account that is used to test the login process."""
        self.user = User.objects.create_user(
            username='exampleUsername',
            email='example@mail.de',
            password='examplePassword'
        )
        self.user.profile.type = Profile.UserType.FREELANCER
        self.user.profile.save()

    def test_login_success(self):
        """
        Ensure a registered user can log in with correct credentials and receives a token
        together with their role.
        """
        url = reverse('login')
        data = {
            "username": "exampleUsername",
            "password": "examplePassword"
        }
        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data)
        self.assertEqual(response.data['username'], 'exampleUsername')
        self.assertEqual(response.data['email'], 'example@mail.de')
        self.assertEqual(response.data['user_id'], self.user.id)
        self.assertEqual(response.data['type'], 'freelancer')

    def test_login_bad_credentials(self):
        """
        A wrong password yields 400 with a `validation_error` body naming the failure.
        """
        url = reverse('login')
        data = {
            "username": "exampleUsername",
            "password": "wrongPassword"
        }
        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['kind'], 'validation_error')
        expected_error = 'Unable to log in with provided credentials.'
        self.assertEqual(response.data['detail']['non_field_errors'][0], expected_error)

    def test_login_with_email(self):
        """Accounts can also be identified by their email address, case-insensitively."""
        response = self.client.post(
            reverse('login'),
            {"email": "Example@Mail.de", "password": "examplePassword"},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user_id'], self.user.id)

    def test_login_with_unknown_email(self):
        response = self.client.post(
            reverse('login'),
            {"email": "nobody@mail.de", "password": "examplePassword"},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('non_field_errors', response.data['detail'])

    def test_login_without_username_or_email(self):
        response = self.client.post(reverse('login'), {"password": "examplePassword"}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('username', response.data['detail'])

    def test_login_missing_password(self):
        response = self.client.post(
            reverse('login'), {"username": "exampleUsername", "password": ""}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data['detail'])

    def test_inactive_account_cannot_log_in(self):
        self.user.is_active = False
        self.user.save()

        response = self.client.post(
            reverse('login'),
            {"username": "exampleUsername", "password": "examplePassword"},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_token_is_accepted_as_bearer_token(self):
        """
        The token returned by the login endpoint authenticates later requests through the
        `Authorization: Bearer <token>` header.
        """
        response = self.client.post(
            reverse('login'),
            {"username": "exampleUsername", "password": "examplePassword"},
            format='json'
        )
        token = response.data['token']

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        profile_response = self.client.get(reverse('profile-detail', kwargs={'pk': self.user.pk}))

        self.assertEqual(profile_response.status_code, status.HTTP_200_OK)

    def test_invalid_bearer_token_is_unauthorized(self):
        """An unknown token is answered with 401 and the `unauthorized` kind."""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-real-token')
        response = self.client.get(reverse('profile-detail', kwargs={'pk': self.user.pk}))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['kind'], 'unauthorized')
