from rest_framework.test import APITestCase
from rest_framework import status
from django.urls import reverse

from django.contrib.auth.models import User
from profile_app.models import Profile, FreelancerProfile


class RegistrationTests(APITestCase):
    """
    Test suite for the user registration functionality.

    Covers account creation for both roles and the common failure scenarios like password
    mismatches, duplicate email addresses and unknown roles.
    """

    def registration_payload(self, **overrides):
        data = {
            "username": "exampleUsername",
            "email": "example@mail.de",
            "password": "examplePassword",
            "repeated_password": "examplePassword",
            "type": "client"
        }
        data.update(overrides)
        return data

    def test_registration_success(self):
        """
        Ensure a new client can be registered with valid data.

        Verifies the response (token and user details) and that both a `User` and its
        `Profile` exist afterwards, without a FreelancerProfile.
        """
        url = reverse('registration')
        data = self.registration_payload()

        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('token', response.data)
        self.assertEqual(response.data['username'], data['username'])
        self.assertEqual(response.data['email'], data['email'])
        self.assertEqual(response.data['type'], 'client')
        self.assertIn('user_id', response.data)

        user = User.objects.get(username=data['username'])
        self.assertEqual(user.profile.type, Profile.UserType.CLIENT)
        self.assertFalse(FreelancerProfile.objects.filter(user=user).exists())

    def test_registration_as_freelancer_creates_freelancer_profile(self):
        """Registering as a freelancer also creates the FreelancerProfile with a zero rating."""
        url = reverse('registration')
        response = self.client.post(url, self.registration_payload(type='freelancer'), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(pk=response.data['user_id'])
        self.assertEqual(user.profile.type, Profile.UserType.FREELANCER)
        self.assertEqual(user.freelancer_profile.rating, 0)
        self.assertEqual(user.freelancer_profile.review_count, 0)

    def test_registration_password_mismatch(self):
        """
        Registration fails with 400 and a password error if the passwords do not match.
        """
        url = reverse('registration')
        data = self.registration_payload(repeated_password="differentPassword")
        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['kind'], 'validation_error')
        self.assertEqual(response.data['detail']['password'][0], 'Passwords must match.')
        self.assertFalse(User.objects.filter(username=data['username']).exists())

    def test_registration_duplicate_email(self):
        """An email address can only be registered once."""
        User.objects.create_user(username='existing', email='example@mail.de', password='pw123456')

        url = reverse('registration')
        response = self.client.post(url, self.registration_payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['detail'])

    def test_registration_rejects_unknown_role(self):
        """Only 'client' and 'freelancer' are valid roles; admin rights cannot be self-assigned."""
        url = reverse('registration')
        response = self.client.post(url, self.registration_payload(type='admin'), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('type', response.data['detail'])
