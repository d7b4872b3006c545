from django.db import models
from django.conf import settings

from orders_app.models import Order


class Dispute(models.Model):
    """
    A disagreement about an order, raised by one of its parties and settled by an admin.

    Each order can have at most one dispute, which the OneToOne relation enforces in
    the database. Raising a dispute moves the order to DISPUTED; resolving or closing
    it completes the order again. Disputes are kept for the record and never deleted.

    Attributes:
        order (OneToOneField): The disputed order.
        raised_by (ForeignKey): The party who opened the dispute.
        reason (CharField): Short summary of the problem.
        description (TextField): Optional details.
        status (CharField): OPEN, IN_REVIEW, RESOLVED or CLOSED.
        resolution (TextField): The admin's decision; required once RESOLVED or CLOSED.
        resolved_at (DateTimeField): When the dispute was resolved or closed.
        resolved_by (ForeignKey): The admin who resolved or closed it.
    """

    class DisputeStatus(models.TextChoices):
        OPEN = 'OPEN', 'Open'
        IN_REVIEW = 'IN_REVIEW', 'In Review'
        RESOLVED = 'RESOLVED', 'Resolved'
        CLOSED = 'CLOSED', 'Closed'

    order = models.OneToOneField(
        Order,
        related_name='dispute',
        on_delete=models.PROTECT
    )
    raised_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='raised_disputes',
        on_delete=models.PROTECT
    )
    reason = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    status = models.CharField(max_length=20, choices=DisputeStatus.choices, default=DisputeStatus.OPEN)
    resolution = models.TextField(blank=True, default='')
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='resolved_disputes',
        on_delete=models.SET_NULL,
        null=True,
        blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Dispute"
        verbose_name_plural = "Disputes"

    def __str__(self):
        return f"Dispute #{self.pk} on order {self.order_id} ({self.status})"

    @property
    def is_settled(self):
        return self.status in (self.DisputeStatus.RESOLVED, self.DisputeStatus.CLOSED)


class DisputeComment(models.Model):
    """A message in the discussion of a dispute, written by a party or an admin."""
    dispute = models.ForeignKey(
        Dispute,
        related_name='comments',
        on_delete=models.CASCADE
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='dispute_comments',
        on_delete=models.CASCADE
    )
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"Comment by {self.user_id} on dispute {self.dispute_id}"
