from django.db import models
from django.conf import settings


class Notification(models.Model):
    """
    A message shown to a single user about something that happened on the platform.

    Notifications optionally point at the entity they are about (`entity_type` and
    `entity_id`) so clients can link to it. Expired notifications (`expires_at` in the
    past) are hidden from the API but kept in the database.
    """
    class NotificationType(models.TextChoices):
        ORDER_UPDATE = 'ORDER_UPDATE', 'Order update'
        MESSAGE = 'MESSAGE', 'Message'
        PAYMENT = 'PAYMENT', 'Payment'
        REVIEW = 'REVIEW', 'Review'
        DISPUTE = 'DISPUTE', 'Dispute'
        SYSTEM = 'SYSTEM', 'System'

    class EntityType(models.TextChoices):
        ORDER = 'ORDER', 'Order'
        REVIEW = 'REVIEW', 'Review'
        TRANSACTION = 'TRANSACTION', 'Transaction'
        DISPUTE = 'DISPUTE', 'Dispute'
        MESSAGE = 'MESSAGE', 'Message'

    class Priority(models.TextChoices):
        LOW = 'LOW', 'Low'
        NORMAL = 'NORMAL', 'Normal'
        HIGH = 'HIGH', 'High'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    type = models.CharField(max_length=20, choices=NotificationType.choices)
    content = models.TextField()
    entity_type = models.CharField(max_length=20, choices=EntityType.choices, null=True, blank=True)
    entity_id = models.PositiveBigIntegerField(null=True, blank=True)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notification_user_read_idx'),
        ]

    def __str__(self):
        return f"{self.type} for {self.user_id}: {self.content[:40]}"
