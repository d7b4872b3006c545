from django.db import models
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from decimal import Decimal

from gigs_app.models import Gig
from profile_app.models import FreelancerProfile


class OrderStatus(models.TextChoices):
    """
    The states of the order lifecycle.

    The allowed moves between them are defined in `orders_app.state_machine`.
    """
    PENDING = 'PENDING', 'Pending'
    ACCEPTED = 'ACCEPTED', 'Accepted'
    IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
    DELIVERED = 'DELIVERED', 'Delivered'
    COMPLETED = 'COMPLETED', 'Completed'
    DISPUTED = 'DISPUTED', 'Disputed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class Order(models.Model):
    """
    A purchase of one package of a gig by a client.

    The order is a snapshot of the agreement at the time of purchase: the package
    title and the total price are copied from the gig when the order is created and
    never change afterwards. The `status` is only ever changed through
    `orders_app.services.transition_order`, which also writes the matching
    `OrderStatusHistory` entry.

    Orders are never deleted. All foreign keys pointing to and from an order use
    PROTECT, and the API has no delete endpoint.

    Attributes:
        order_number (CharField): Human-readable unique reference, `ORD-YYYYMMDD-XXXX`.
        client (ForeignKey): The user who buys the service.
        freelancer (ForeignKey): The FreelancerProfile that sells the service.
        gig (ForeignKey): The gig the order was placed on.
        package (CharField): The package type that was ordered.
        title (CharField): The package title at the time of purchase.
        total_price (DecimalField): The price including any urgency surcharge.
        is_urgent (BooleanField): Whether the client paid for priority delivery.
        priority_fee (DecimalField): The urgency surcharge, or None.
        requirements (TextField): The client's instructions.
        custom_details (JSONField): Additional flat key/value details.
        delivery_deadline (DateTimeField): When the work is due.
        delivery_extensions (PositiveIntegerField): How often the deadline was extended.
        extension_reason (TextField): Reason given for the latest extension.
        cancellation_reason (TextField): Set when the order is cancelled.
        cancellation_date (DateTimeField): Set when the order is cancelled.
        completed_at (DateTimeField): Set when the order is completed.
        status (CharField): The current lifecycle state.
    """
    # --- Identity ---
    order_number = models.CharField(max_length=20, unique=True, editable=False)

    # --- Relationships ---
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='client_orders',
        on_delete=models.PROTECT,
        help_text="The user who is buying the service (the client)."
    )
    freelancer = models.ForeignKey(
        FreelancerProfile,
        related_name='orders',
        on_delete=models.PROTECT,
        help_text="The freelancer who is selling the service."
    )
    gig = models.ForeignKey(
        Gig,
        related_name='orders',
        on_delete=models.PROTECT
    )

    # --- Order Details (snapshot of the package) ---
    package = models.CharField(max_length=20, help_text="The ordered package type, e.g. 'basic'.")
    title = models.CharField(max_length=255)
    total_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Total price including the urgency surcharge."
    )
    is_urgent = models.BooleanField(default=False)
    priority_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    requirements = models.TextField(blank=True, default='')
    custom_details = models.JSONField(default=dict, blank=True)

    # --- Delivery ---
    delivery_deadline = models.DateTimeField()
    delivery_extensions = models.PositiveIntegerField(default=0)
    extension_reason = models.TextField(blank=True, default='')

    # --- Lifecycle ---
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True
    )
    cancellation_reason = models.TextField(null=True, blank=True)
    cancellation_date = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    # --- Timestamps ---
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Order"
        verbose_name_plural = "Orders"

    def __str__(self):
        return f"{self.order_number}: {self.title}"


class OrderStatusHistory(models.Model):
    """
    One entry of the append-only audit trail of an order's status.

    An entry is written for the initial PENDING state and for every accepted
    transition, always inside the same database transaction as the status change.
    `changed_by` is None for system-initiated changes. Entries can neither be
    modified nor deleted once written.
    """
    order = models.ForeignKey(
        Order,
        related_name='status_history',
        on_delete=models.PROTECT
    )
    status = models.CharField(max_length=20, choices=OrderStatus.choices)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='order_status_changes',
        on_delete=models.SET_NULL,
        null=True,
        blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']
        verbose_name = "Order status history entry"
        verbose_name_plural = "Order status history"

    def __str__(self):
        return f"{self.order_id} -> {self.status}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValidationError("Order status history entries cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Order status history entries cannot be deleted.")
