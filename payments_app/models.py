from django.db import models
from django.conf import settings
from django.db.models import Q

from orders_app.models import Order


class Transaction(models.Model):
    """
    A money movement on an order: a payment by the client, a refund of such a
    payment, or a payout to the freelancer.

    Payments are stored with a positive amount and refunds with the negated amount
    of the payment they reverse, so summing the completed rows of an order yields
    the net amount captured. Transactions are financial records and are never
    deleted.

    Attributes:
        order (ForeignKey): The order the money belongs to.
        user (ForeignKey): The user who triggered the transaction.
        amount (DecimalField): Signed amount; negative for refunds.
        type (CharField): PAYMENT, REFUND or PAYOUT.
        status (CharField): PENDING until the gateway confirms, then COMPLETED or FAILED.
        payment_method (CharField): The gateway payment method id used for the charge.
        gateway_reference (CharField): The gateway's id of the charge or refund.
        refund_of (OneToOneField): For refunds, the payment being reversed.
        reason (TextField): The reason given for a refund.
        failure_reason (TextField): The gateway's message when the transaction failed.
    """

    class TransactionType(models.TextChoices):
        PAYMENT = 'PAYMENT', 'Payment'
        REFUND = 'REFUND', 'Refund'
        PAYOUT = 'PAYOUT', 'Payout'

    class TransactionStatus(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        COMPLETED = 'COMPLETED', 'Completed'
        FAILED = 'FAILED', 'Failed'

    # --- Relationships ---
    order = models.ForeignKey(
        Order,
        related_name='transactions',
        on_delete=models.PROTECT
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name='transactions',
        on_delete=models.PROTECT
    )
    refund_of = models.OneToOneField(
        'self',
        related_name='refund',
        on_delete=models.PROTECT,
        null=True,
        blank=True
    )

    # --- Money ---
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    type = models.CharField(max_length=10, choices=TransactionType.choices, default=TransactionType.PAYMENT)
    status = models.CharField(
        max_length=10,
        choices=TransactionStatus.choices,
        default=TransactionStatus.PENDING,
        db_index=True
    )

    # --- Gateway ---
    payment_method = models.CharField(max_length=255, blank=True, default='')
    gateway_reference = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    reason = models.TextField(blank=True, default='')
    failure_reason = models.TextField(blank=True, default='')

    # --- Timestamps ---
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = "Transaction"
        verbose_name_plural = "Transactions"
        constraints = [
            # An order can be paid only once.
            models.UniqueConstraint(
                fields=['order'],
                condition=Q(type='PAYMENT', status='COMPLETED'),
                name='unique_completed_payment_per_order'
            ),
        ]

    def __str__(self):
        return f"{self.type} {self.amount} for order {self.order_id} ({self.status})"
