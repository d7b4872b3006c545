from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from core.test_utils import (
    create_admin_user,
    create_client_user,
    create_freelancer_user,
    create_gig,
    create_order,
)
from notifications_app.models import Notification
from orders_app.models import OrderStatus
from ..models import Review


def create_review(order, rating=4, **kwargs):
    """Creates a review row directly, bypassing the service layer."""
    return Review.objects.create(
        order=order,
        client=order.client,
        freelancer=order.freelancer,
        rating=rating,
        **kwargs
    )


# ====================================================================
# CLASS 1: Creating reviews (POST /reviews/)
# ====================================================================
class ReviewCreateAPITests(APITestCase):
    """
    Tests for reviewing a completed order and the resulting freelancer rating.
    """

    def setUp(self):
        self.client_user = create_client_user()
        self.freelancer = create_freelancer_user()
        self.gig = create_gig(self.freelancer)
        self.order = create_order(self.client_user, self.gig, status=OrderStatus.COMPLETED)
        self.url = reverse('review-list')
        self.payload = {'order_id': self.order.id, 'rating': 5, 'comment': 'Great work'}

    def test_client_reviews_completed_order_and_rating_is_updated(self):
        self.client.force_authenticate(user=self.client_user)
        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['rating'], 5)
        self.assertEqual(response.data['client'], self.client_user.id)
        self.assertEqual(response.data['moderation_status'], 'APPROVED')

        profile = self.freelancer.freelancer_profile
        profile.refresh_from_db()
        self.assertEqual(profile.rating, Decimal('5.00'))
        self.assertEqual(profile.review_count, 1)

    def test_second_review_of_same_order_is_a_conflict(self):
        self.client.force_authenticate(user=self.client_user)
        self.client.post(self.url, self.payload, format='json')
        response = self.client.post(self.url, {'order_id': self.order.id, 'rating': 1}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'duplicate_resource')
        self.assertEqual(Review.objects.count(), 1)

        profile = self.freelancer.freelancer_profile
        profile.refresh_from_db()
        self.assertEqual(profile.rating, Decimal('5.00'))

    def test_concurrent_duplicate_is_caught_by_the_database(self):
        """
        A review inserted by a competing request after the existence check still
        yields 409 and leaves the freelancer's rating untouched.
        """
        create_review(self.order, 2)

        self.client.force_authenticate(user=self.client_user)
        with mock.patch.object(Review.objects, 'filter') as review_filter:
            review_filter.return_value.exists.return_value = False
            response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'duplicate_resource')
        self.assertEqual(Review.objects.filter(order=self.order).count(), 1)
        self.assertEqual(Review.objects.get(order=self.order).rating, 2)

        profile = self.freelancer.freelancer_profile
        profile.refresh_from_db()
        self.assertEqual(profile.review_count, 0)
        self.assertFalse(
            Notification.objects.filter(user=self.freelancer, type=Notification.NotificationType.REVIEW).exists()
        )

    def test_rating_is_the_average_of_all_reviews(self):
        other_order = create_order(self.client_user, self.gig, status=OrderStatus.COMPLETED)
        self.client.force_authenticate(user=self.client_user)
        self.client.post(self.url, self.payload, format='json')
        self.client.post(self.url, {'order_id': other_order.id, 'rating': 2}, format='json')

        profile = self.freelancer.freelancer_profile
        profile.refresh_from_db()
        self.assertEqual(profile.rating, Decimal('3.50'))
        self.assertEqual(profile.review_count, 2)

    def test_freelancer_is_notified(self):
        self.client.force_authenticate(user=self.client_user)
        response = self.client.post(self.url, self.payload, format='json')

        self.assertTrue(
            Notification.objects.filter(
                user=self.freelancer,
                type=Notification.NotificationType.REVIEW,
                entity_id=response.data['id']
            ).exists()
        )

    def test_order_that_is_not_completed_cannot_be_reviewed(self):
        order = create_order(self.client_user, self.gig, status=OrderStatus.DELIVERED)
        self.client.force_authenticate(user=self.client_user)
        response = self.client.post(self.url, {'order_id': order.id, 'rating': 4}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['kind'], 'validation_error')
        self.assertFalse(Review.objects.exists())

    def test_rating_out_of_range_is_rejected(self):
        self.client.force_authenticate(user=self.client_user)
        for rating in (0, 6):
            response = self.client.post(self.url, {'order_id': self.order.id, 'rating': rating}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('rating', response.data['detail'])

    def test_other_client_cannot_review_the_order(self):
        self.client.force_authenticate(user=create_client_user('stranger'))
        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_freelancer_cannot_create_reviews(self):
        self.client.force_authenticate(user=self.freelancer)
        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_order_returns_404(self):
        self.client.force_authenticate(user=self.client_user)
        response = self.client.post(self.url, {'order_id': 9999, 'rating': 5}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unauthenticated_user_cannot_create(self):
        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


# ====================================================================
# CLASS 2: Listing reviews (GET /reviews/)
# ====================================================================
class ReviewListAPITests(APITestCase):
    """
    Tests for the public review list, its filters and the anonymity flag.
    """

    def setUp(self):
        self.client_user = create_client_user()
        self.freelancer = create_freelancer_user()
        self.other_freelancer = create_freelancer_user('other_freelancer')
        self.admin_user = create_admin_user()

        gig = create_gig(self.freelancer)
        other_gig = create_gig(self.other_freelancer, title='Website')
        self.review = create_review(create_order(self.client_user, gig, status=OrderStatus.COMPLETED), 5)
        self.other_review = create_review(
            create_order(self.client_user, other_gig, status=OrderStatus.COMPLETED), 3
        )
        self.rejected = create_review(
            create_order(self.client_user, gig, status=OrderStatus.COMPLETED), 1,
            moderation_status=Review.ModerationStatus.REJECTED
        )
        self.url = reverse('review-list')

    def test_anonymous_visitors_see_approved_reviews(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({r['id'] for r in response.data}, {self.review.id, self.other_review.id})

    def test_author_also_sees_own_rejected_review(self):
        self.client.force_authenticate(user=self.client_user)
        response = self.client.get(self.url)

        self.assertEqual(len(response.data), 3)

    def test_admin_sees_every_review(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get(self.url)

        self.assertEqual(len(response.data), 3)

    def test_filter_by_freelancer(self):
        freelancer_id = self.freelancer.freelancer_profile.id
        response = self.client.get(self.url, {'freelancer_id': freelancer_id})

        self.assertEqual([r['id'] for r in response.data], [self.review.id])

    def test_filter_by_order(self):
        response = self.client.get(self.url, {'order_id': self.other_review.order_id})

        self.assertEqual([r['id'] for r in response.data], [self.other_review.id])

    def test_rejected_review_detail_is_hidden_from_others(self):
        response = self.client.get(reverse('review-detail', kwargs={'pk': self.rejected.id}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_anonymous_review_hides_its_author(self):
        self.review.is_anonymous = True
        self.review.save()

        response = self.client.get(reverse('review-detail', kwargs={'pk': self.review.id}))
        self.assertIsNone(response.data['client'])
        self.assertIsNone(response.data['client_username'])

        self.client.force_authenticate(user=self.client_user)
        response = self.client.get(reverse('review-detail', kwargs={'pk': self.review.id}))
        self.assertEqual(response.data['client'], self.client_user.id)


# ====================================================================
# CLASS 3: Editing and deleting reviews
# ====================================================================
class ReviewUpdateDeleteAPITests(APITestCase):
    """
    Tests for PATCH and DELETE on a single review.
    """

    def setUp(self):
        self.client_user = create_client_user()
        self.freelancer = create_freelancer_user()
        self.admin_user = create_admin_user()
        self.gig = create_gig(self.freelancer)
        order = create_order(self.client_user, self.gig, status=OrderStatus.COMPLETED)

        self.client.force_authenticate(user=self.client_user)
        response = self.client.post(reverse('review-list'), {'order_id': order.id, 'rating': 5}, format='json')
        self.review = Review.objects.get(pk=response.data['id'])
        self.url = reverse('review-detail', kwargs={'pk': self.review.id})
        self.profile = self.freelancer.freelancer_profile

    def test_author_can_edit_rating_and_rating_is_recomputed(self):
        response = self.client.patch(self.url, {'rating': 3, 'comment': 'Okay'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['rating'], 3)
        self.assertEqual(response.data['comment'], 'Okay')
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.rating, Decimal('3.00'))

    def test_edit_after_seven_days_is_rejected(self):
        Review.objects.filter(pk=self.review.pk).update(created_at=timezone.now() - timedelta(days=8))

        response = self.client.patch(self.url, {'rating': 1}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.review.refresh_from_db()
        self.assertEqual(self.review.rating, 5)

    def test_rejected_review_cannot_be_edited(self):
        Review.objects.filter(pk=self.review.pk).update(moderation_status=Review.ModerationStatus.REJECTED)

        response = self.client.patch(self.url, {'rating': 1}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_put_is_not_allowed(self):
        response = self.client.put(self.url, {'rating': 1}, format='json')

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_other_user_cannot_edit(self):
        self.client.force_authenticate(user=create_client_user('stranger'))
        response = self.client.patch(self.url, {'rating': 1}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_edit_but_can_delete(self):
        self.client.force_authenticate(user=self.admin_user)

        response = self.client.patch(self.url, {'rating': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_deleting_last_review_resets_rating(self):
        response = self.client.delete(self.url)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Review.objects.exists())
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.rating, Decimal('0.00'))
        self.assertEqual(self.profile.review_count, 0)

    def test_freelancer_cannot_delete(self):
        self.client.force_authenticate(user=self.freelancer)
        response = self.client.delete(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Review.objects.filter(pk=self.review.pk).exists())


# ====================================================================
# CLASS 4: Freelancer responses and moderation
# ====================================================================
class ReviewRespondAndModerateAPITests(APITestCase):
    """
    Tests for the `respond` and `moderate` actions.
    """

    def setUp(self):
        self.client_user = create_client_user()
        self.freelancer = create_freelancer_user()
        self.admin_user = create_admin_user()
        gig = create_gig(self.freelancer)
        self.review = create_review(create_order(self.client_user, gig, status=OrderStatus.COMPLETED), 4)
        self.respond_url = reverse('review-respond', kwargs={'pk': self.review.id})
        self.moderate_url = reverse('review-moderate', kwargs={'pk': self.review.id})

    def test_freelancer_responds_once(self):
        self.client.force_authenticate(user=self.freelancer)
        response = self.client.post(self.respond_url, {'response': 'Thank you!'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['response'], 'Thank you!')
        self.assertIsNotNone(response.data['responded_at'])

        response = self.client.post(self.respond_url, {'response': 'Again'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_client_cannot_respond(self):
        self.client.force_authenticate(user=self.client_user)
        response = self.client.post(self.respond_url, {'response': 'Me too'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_rejects_review_and_author_is_notified(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.patch(
            self.moderate_url, {'moderation_status': 'REJECTED', 'reason': 'Offensive'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.review.refresh_from_db()
        self.assertEqual(self.review.moderation_status, Review.ModerationStatus.REJECTED)
        self.assertEqual(self.review.moderated_by, self.admin_user)
        self.assertTrue(
            Notification.objects.filter(
                user=self.client_user, type=Notification.NotificationType.REVIEW, entity_id=self.review.id
            ).exists()
        )

    def test_moderation_rejects_pending_as_target(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.patch(self.moderate_url, {'moderation_status': 'PENDING'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_admin_cannot_moderate(self):
        self.client.force_authenticate(user=self.freelancer)
        response = self.client.patch(self.moderate_url, {'moderation_status': 'REJECTED'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
