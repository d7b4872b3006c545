from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.test_utils import create_client_user, create_freelancer_user, create_gig
from gigs_app.models import Gig, GigPackage


# ====================================================================
# CLASS 1: Tests on an empty database
# ====================================================================
class GigAPINoDataTests(APITestCase):
    """
    Verifies the gig list behaves correctly when no gigs exist.
    """

    def test_list_gigs_is_public_and_paginated(self):
        """
        The list endpoint is public and always returns the paginated structure, even when
        it is empty.
        """
        response = self.client.get(reverse('gig-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 0)
        self.assertEqual(response.data['results'], [])


# ====================================================================
# CLASS 2: Listing, filtering and visibility
# ====================================================================
class GigAPIWithDataTests(APITestCase):
    """
    Filtering, searching and visibility rules of the gig list.
    """

    @classmethod
    def setUpTestData(cls):
        cls.freelancer1 = create_freelancer_user('freelancer1')
        cls.freelancer2 = create_freelancer_user('freelancer2')

        # Cheapest package 100.00, fastest delivery 5 days.
        cls.gig1 = create_gig(cls.freelancer1, title='Fast Website')
        # Cheapest package 500.00, fastest delivery 20 days.
        cls.gig2 = create_gig(
            cls.freelancer2,
            title='Complex Web App',
            packages=(('basic', Decimal('500.00'), 20), ('premium', Decimal('900.00'), 30)),
        )
        cls.draft = create_gig(cls.freelancer1, title='Unfinished idea', status=Gig.GigStatus.DRAFT)

    def result_ids(self, response):
        return {gig['id'] for gig in response.data['results']}

    def test_anonymous_list_shows_only_active_gigs(self):
        response = self.client.get(reverse('gig-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.result_ids(response), {self.gig1.id, self.gig2.id})

    def test_owner_also_sees_own_drafts(self):
        self.client.force_authenticate(user=self.freelancer1)
        response = self.client.get(reverse('gig-list'))

        self.assertEqual(self.result_ids(response), {self.gig1.id, self.gig2.id, self.draft.id})

    def test_list_contains_annotated_minimums(self):
        response = self.client.get(reverse('gig-list'), {'freelancer_id': self.freelancer1.freelancer_profile.id})

        self.assertEqual(response.data['count'], 1)
        gig = response.data['results'][0]
        self.assertEqual(Decimal(gig['min_price']), Decimal('100.00'))
        self.assertEqual(gig['min_delivery_time'], 5)
        self.assertEqual(gig['user_details']['username'], 'freelancer1')

    def test_filter_by_min_price(self):
        response = self.client.get(reverse('gig-list'), {'min_price': 300})
        self.assertEqual(self.result_ids(response), {self.gig2.id})

    def test_filter_by_max_delivery_time(self):
        response = self.client.get(reverse('gig-list'), {'max_delivery_time': 10})
        self.assertEqual(self.result_ids(response), {self.gig1.id})

    def test_search_by_title(self):
        response = self.client.get(reverse('gig-list'), {'search': 'Complex'})
        self.assertEqual(self.result_ids(response), {self.gig2.id})

    def test_retrieve_requires_authentication(self):
        response = self.client.get(reverse('gig-detail', kwargs={'pk': self.gig1.pk}))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_retrieve_contains_nested_packages(self):
        self.client.force_authenticate(user=self.freelancer2)
        response = self.client.get(reverse('gig-detail', kwargs={'pk': self.gig1.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [package['package_type'] for package in response.data['packages']],
            ['basic', 'standard', 'premium']
        )


# ====================================================================
# CLASS 3: Creating, updating and archiving gigs
# ====================================================================
class GigWriteAPITests(APITestCase):
    """
    Write operations on gigs and their permission rules.
    """

    def setUp(self):
        self.freelancer = create_freelancer_user('freelancer')
        self.other_freelancer = create_freelancer_user('other')
        self.client_user = create_client_user('client')
        self.payload = {
            'title': 'Logo design',
            'description': 'A memorable logo.',
            'category': 'design',
            'packages': [
                {'package_type': 'basic', 'title': 'Basic', 'price': '50.00', 'delivery_time_in_days': 3},
                {'package_type': 'premium', 'title': 'Premium', 'price': '150.00',
                 'delivery_time_in_days': 7, 'revisions': 5, 'features': ['Vector file']},
            ],
        }

    def test_freelancer_creates_gig_with_packages(self):
        self.client.force_authenticate(user=self.freelancer)
        response = self.client.post(reverse('gig-list'), self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        gig = Gig.objects.get(pk=response.data['id'])
        self.assertEqual(gig.freelancer, self.freelancer.freelancer_profile)
        self.assertEqual(gig.status, Gig.GigStatus.ACTIVE)
        self.assertEqual(gig.packages.count(), 2)

    def test_client_cannot_create_gig(self):
        self.client.force_authenticate(user=self.client_user)
        response = self.client.post(reverse('gig-list'), self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Gig.objects.count(), 0)

    def test_gig_without_packages_is_rejected(self):
        self.client.force_authenticate(user=self.freelancer)
        self.payload['packages'] = []
        response = self.client.post(reverse('gig-list'), self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('packages', response.data['detail'])

    def test_duplicate_package_types_are_rejected(self):
        self.client.force_authenticate(user=self.freelancer)
        self.payload['packages'][1]['package_type'] = 'basic'
        response = self.client.post(reverse('gig-list'), self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_positive_price_is_rejected(self):
        self.client.force_authenticate(user=self.freelancer)
        self.payload['packages'][0]['price'] = '0.00'
        response = self.client.post(reverse('gig-list'), self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_owner_updates_package_by_type(self):
        gig = create_gig(self.freelancer)
        self.client.force_authenticate(user=self.freelancer)

        response = self.client.patch(
            reverse('gig-detail', kwargs={'pk': gig.pk}),
            {'title': 'Better logo design', 'packages': [{'package_type': 'basic', 'price': '120.00'}]},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], 'Better logo design')
        basic = GigPackage.objects.get(gig=gig, package_type='basic')
        self.assertEqual(basic.price, Decimal('120.00'))

    def test_other_freelancer_cannot_update_gig(self):
        gig = create_gig(self.freelancer)
        self.client.force_authenticate(user=self.other_freelancer)

        response = self.client.patch(
            reverse('gig-detail', kwargs={'pk': gig.pk}), {'title': 'Stolen'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_archives_the_gig(self):
        """DELETE keeps the row but archives it, hiding it from the public list."""
        gig = create_gig(self.freelancer)
        self.client.force_authenticate(user=self.freelancer)

        response = self.client.delete(reverse('gig-detail', kwargs={'pk': gig.pk}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        gig.refresh_from_db()
        self.assertEqual(gig.status, Gig.GigStatus.ARCHIVED)

        self.client.force_authenticate(user=None)
        list_response = self.client.get(reverse('gig-list'))
        self.assertEqual(list_response.data['count'], 0)
