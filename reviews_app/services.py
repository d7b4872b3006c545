"""
The review gate: who may review which order, and the freelancer rating that
follows from the reviews.

Every mutation locks the reviewed freelancer's profile row first and recomputes
the average inside the same transaction, so concurrent reviews of one freelancer
cannot overwrite each other's result.
"""
import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from core import authorization
from core.exceptions import DuplicateResource
from notifications_app.models import Notification
from notifications_app.services import notify
from orders_app.models import OrderStatus
from profile_app.models import FreelancerProfile

from .models import Review

logger = logging.getLogger(__name__)

EDIT_WINDOW = timedelta(days=7)
EDITABLE_FIELDS = ('rating', 'comment', 'title', 'is_anonymous')


def _validate_rating(rating):
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError({'rating': "Rating must be an integer between 1 and 5."})


def _lock_freelancer(freelancer_id):
    return FreelancerProfile.objects.select_for_update().get(pk=freelancer_id)


def recompute_freelancer_rating(profile):
    """
    Stores the average rating and the number of reviews on a locked FreelancerProfile.

    Must run inside the transaction that holds the lock on `profile`. The average
    is rounded to two decimals and is 0 when the freelancer has no reviews.
    """
    stats = Review.objects.filter(freelancer_id=profile.pk).aggregate(
        average=Avg('rating'), count=Count('id')
    )
    if stats['average'] is None:
        profile.rating = Decimal('0.00')
    else:
        profile.rating = Decimal(str(stats['average'])).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    profile.review_count = stats['count']
    profile.save(update_fields=['rating', 'review_count', 'updated_at'])
    return profile


def create_review(order, client, rating, comment='', title='', is_anonymous=False):
    """
    Creates the review of a completed order and updates the freelancer's rating.

    Raises:
        PermissionDenied: `client` is not the order's client.
        ValidationError: the order is not COMPLETED or the rating is out of range.
        DuplicateResource: the order has already been reviewed.
    """
    authorization.ensure_order_client(client, order, "Only the client of this order can review it.")
    if order.status != OrderStatus.COMPLETED:
        raise ValidationError("Reviews can only be left for completed orders.")
    _validate_rating(rating)
    if Review.objects.filter(order=order).exists():
        raise DuplicateResource("This order has already been reviewed.")

    with transaction.atomic():
        profile = _lock_freelancer(order.freelancer_id)
        try:
            with transaction.atomic():
                review = Review.objects.create(
                    order=order,
                    client=client,
                    freelancer=profile,
                    rating=rating,
                    comment=comment or '',
                    title=title or '',
                    is_anonymous=is_anonymous,
                )
        except IntegrityError:
            raise DuplicateResource("This order has already been reviewed.")
        recompute_freelancer_rating(profile)

    logger.info(
        "Review %s (%s stars) for freelancer %s created by user %s; rating now %s",
        review.id, rating, profile.pk, client.pk, profile.rating
    )
    notify(
        profile.user,
        Notification.NotificationType.REVIEW,
        f"You received a {rating}-star review for order {order.order_number}.",
        entity_type=Notification.EntityType.REVIEW,
        entity_id=review.id,
    )
    return review


def update_review(review, actor, **changes):
    """
    Edits a review; allowed for its author while it is approved and at most seven
    days old. Only rating, comment, title and is_anonymous can change.
    """
    if review.client_id != getattr(actor, 'pk', None):
        raise PermissionDenied("Only the author can edit this review.")
    if review.moderation_status != Review.ModerationStatus.APPROVED:
        raise ValidationError("Only approved reviews can be edited.")
    if timezone.now() - review.created_at > EDIT_WINDOW:
        raise ValidationError("Reviews can only be updated within 7 days of creation.")
    if 'rating' in changes:
        _validate_rating(changes['rating'])

    with transaction.atomic():
        profile = _lock_freelancer(review.freelancer_id)
        update_fields = ['updated_at']
        for field in EDITABLE_FIELDS:
            if field in changes:
                setattr(review, field, changes[field])
                update_fields.append(field)
        review.save(update_fields=update_fields)
        recompute_freelancer_rating(profile)

    logger.info("Review %s updated by user %s", review.id, actor.pk)
    return review


def delete_review(review, actor):
    """Deletes a review (author or admin) and recomputes the freelancer's rating."""
    if review.client_id != getattr(actor, 'pk', None) and not authorization.is_admin(actor):
        raise PermissionDenied("Only the author or an admin can delete this review.")

    review_id = review.id
    with transaction.atomic():
        profile = _lock_freelancer(review.freelancer_id)
        review.delete()
        recompute_freelancer_rating(profile)

    logger.info("Review %s deleted by user %s; rating of freelancer %s now %s",
                review_id, actor.pk, profile.pk, profile.rating)


def respond_to_review(review, actor, response):
    """Stores the reviewed freelancer's single public response to a review."""
    if review.freelancer.user_id != getattr(actor, 'pk', None):
        raise PermissionDenied("Only the reviewed freelancer can respond to this review.")
    if not response or not response.strip():
        raise ValidationError({'response': "A response text is required."})

    with transaction.atomic():
        locked = Review.objects.select_for_update().get(pk=review.pk)
        if locked.response:
            raise DuplicateResource("A response already exists for this review.")
        locked.response = response
        locked.responded_at = timezone.now()
        locked.save(update_fields=['response', 'responded_at', 'updated_at'])

    logger.info("Freelancer user %s responded to review %s", actor.pk, locked.id)
    notify(
        locked.client,
        Notification.NotificationType.REVIEW,
        "The freelancer responded to your review.",
        entity_type=Notification.EntityType.REVIEW,
        entity_id=locked.id,
    )
    return locked


def moderate_review(review, actor, moderation_status, reason=''):
    """Sets the moderation status of a review (admins only) and tells its author."""
    authorization.ensure_admin(actor, "Only admins can moderate reviews.")
    allowed = (Review.ModerationStatus.APPROVED, Review.ModerationStatus.REJECTED)
    if moderation_status not in allowed:
        raise ValidationError({'moderation_status': "Moderation status must be APPROVED or REJECTED."})

    review.moderation_status = moderation_status
    review.moderation_reason = reason or ''
    review.moderated_at = timezone.now()
    review.moderated_by = actor
    review.save(update_fields=[
        'moderation_status', 'moderation_reason', 'moderated_at', 'moderated_by', 'updated_at'
    ])

    logger.info("Review %s moderated to %s by admin %s", review.id, moderation_status, actor.pk)
    notify(
        review.client,
        Notification.NotificationType.REVIEW,
        f"Your review was {Review.ModerationStatus(moderation_status).label.lower()} by a moderator.",
        entity_type=Notification.EntityType.REVIEW,
        entity_id=review.id,
        metadata={'reason': reason} if reason else None,
    )
    return review
