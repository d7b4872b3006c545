from django.db import models
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator

from orders_app.models import Order
from profile_app.models import FreelancerProfile


class Review(models.Model):
    """
    Represents the review a client leaves for a freelancer after a completed order.

    Every order can be reviewed at most once, which the OneToOne relation to the
    order enforces on the database level. The freelancer's average rating on
    `FreelancerProfile` is recomputed whenever a review is created, edited or
    deleted.

    Attributes:
        order (OneToOneField): The completed order being reviewed.
        client (ForeignKey): The user who wrote the review (the order's client).
        freelancer (ForeignKey): The FreelancerProfile being reviewed.
        rating (PositiveSmallIntegerField): A star rating from 1 to 5.
        title (CharField): An optional headline.
        comment (TextField): The optional review text.
        is_anonymous (BooleanField): Hides the author in public listings.
        moderation_status (CharField): PENDING, APPROVED or REJECTED; only approved
            reviews are listed publicly.
        response (TextField): The freelancer's single public answer.
    """

    class ModerationStatus(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        APPROVED = 'APPROVED', 'Approved'
        REJECTED = 'REJECTED', 'Rejected'

    # --- Relationships ---
    order = models.OneToOneField(
        Order,
        related_name='review',
        on_delete=models.PROTECT
    )
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='reviews_given',
        on_delete=models.CASCADE,
        help_text="The user who wrote the review."
    )
    freelancer = models.ForeignKey(
        FreelancerProfile,
        related_name='reviews',
        on_delete=models.CASCADE,
        help_text="The freelancer who is being reviewed."
    )

    # --- Content ---
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text="The rating given, from 1 to 5."
    )
    title = models.CharField(max_length=255, blank=True, default='')
    comment = models.TextField(blank=True, default='')
    is_anonymous = models.BooleanField(default=False)

    # --- Moderation ---
    moderation_status = models.CharField(
        max_length=10,
        choices=ModerationStatus.choices,
        default=ModerationStatus.APPROVED
    )
    moderation_reason = models.TextField(blank=True, default='')
    moderated_at = models.DateTimeField(null=True, blank=True)
    moderated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='moderated_reviews',
        on_delete=models.SET_NULL,
        null=True,
        blank=True
    )

    # --- Freelancer response ---
    response = models.TextField(null=True, blank=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']
        verbose_name = "Review"
        verbose_name_plural = "Reviews"

    def __str__(self):
        return f"Review of order {self.order_id} ({self.rating} stars)"
