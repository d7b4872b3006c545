from datetime import timedelta
from unittest import mock

from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from core.test_utils import create_admin_user, create_client_user, create_freelancer_user
from ..models import Notification
from .. import services


# ====================================================================
# CLASS 1: The notification service
# ====================================================================
class NotificationServiceTests(APITestCase):
    """
    Tests for `notify`, `notify_many` and `notify_admins`.
    """

    def setUp(self):
        self.user = create_client_user()

    def test_notify_stores_notification(self):
        notification = services.notify(
            self.user,
            Notification.NotificationType.ORDER_UPDATE,
            "Your order was accepted.",
            entity_type=Notification.EntityType.ORDER,
            entity_id=7,
        )

        self.assertEqual(notification.user, self.user)
        self.assertEqual(notification.priority, Notification.Priority.NORMAL)
        self.assertEqual(notification.metadata, {})
        self.assertFalse(notification.is_read)

    def test_storage_failure_is_logged_not_raised(self):
        with mock.patch.object(Notification.objects, 'create', side_effect=DatabaseError):
            with self.assertLogs('notifications_app.services', level='ERROR'):
                result = services.notify(self.user, Notification.NotificationType.SYSTEM, "Hello")

        self.assertIsNone(result)

    def test_notify_many_skips_duplicates_and_none(self):
        other = create_freelancer_user()

        notifications = services.notify_many(
            [self.user, other, self.user, None], Notification.NotificationType.SYSTEM, "Maintenance"
        )

        self.assertEqual(len(notifications), 2)
        self.assertEqual(Notification.objects.count(), 2)

    def test_notify_admins_reaches_active_staff_only(self):
        admin = create_admin_user()
        inactive = create_admin_user('retired_admin')
        inactive.is_active = False
        inactive.save()

        services.notify_admins(Notification.NotificationType.DISPUTE, "New dispute")

        self.assertEqual(list(Notification.objects.values_list('user_id', flat=True)), [admin.id])

    def test_notify_admins_without_admins_logs_warning(self):
        with self.assertLogs('notifications_app.services', level='WARNING'):
            result = services.notify_admins(Notification.NotificationType.DISPUTE, "New dispute")

        self.assertEqual(result, [])


# ====================================================================
# CLASS 2: The notification inbox API
# ====================================================================
class NotificationAPITests(APITestCase):
    """
    Tests for listing, reading and deleting own notifications.
    """

    def setUp(self):
        self.user = create_client_user()
        self.other_user = create_freelancer_user()
        self.order_note = services.notify(self.user, Notification.NotificationType.ORDER_UPDATE, "Order accepted")
        self.payment_note = services.notify(self.user, Notification.NotificationType.PAYMENT, "Payment received")
        self.expired_note = services.notify(
            self.user,
            Notification.NotificationType.SYSTEM,
            "Old announcement",
            expires_at=timezone.now() - timedelta(days=1),
        )
        self.foreign_note = services.notify(self.other_user, Notification.NotificationType.SYSTEM, "Not yours")
        self.list_url = reverse('notification-list')

    def test_unauthenticated_user_gets_401(self):
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_contains_only_own_unexpired_notifications(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n['id'] for n in response.data], [self.payment_note.id, self.order_note.id])

    def test_filter_by_type(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(self.list_url, {'type': 'PAYMENT'})

        self.assertEqual([n['id'] for n in response.data], [self.payment_note.id])

    def test_foreign_notification_is_not_found(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(reverse('notification-detail', kwargs={'pk': self.foreign_note.id}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_read_sets_timestamp(self):
        self.client.force_authenticate(user=self.user)
        url = reverse('notification-read', kwargs={'pk': self.order_note.id})
        response = self.client.patch(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])
        self.assertIsNotNone(response.data['read_at'])

        response = self.client.patch(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_read_all_marks_own_unread_notifications(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.patch(reverse('notification-read-all'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'marked_read': 2})
        self.foreign_note.refresh_from_db()
        self.assertFalse(self.foreign_note.is_read)

    def test_user_can_delete_own_notification(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.delete(reverse('notification-detail', kwargs={'pk': self.order_note.id}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Notification.objects.filter(pk=self.order_note.id).exists())


# ====================================================================
# CLASS 3: Admin broadcast (POST /notifications/)
# ====================================================================
class NotificationCreateAPITests(APITestCase):

    def setUp(self):
        self.admin_user = create_admin_user()
        self.user = create_client_user()
        self.url = reverse('notification-list')
        self.payload = {'user': self.user.id, 'type': 'SYSTEM', 'content': 'Scheduled maintenance tonight'}

    def test_admin_sends_notification(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Notification.objects.filter(user=self.user, type='SYSTEM').exists())

    def test_entity_fields_must_come_together(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(self.url, {**self.payload, 'entity_type': 'ORDER'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_regular_user_cannot_send(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
