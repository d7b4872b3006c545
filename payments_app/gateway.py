"""
The contract between the payment coordinator and the external payment gateway.

`PaymentGateway` describes the three calls the marketplace needs (charge, confirm,
refund). `StripeGateway` implements them with the Stripe API; any other class can
be configured through the `PAYMENT_GATEWAY_CLASS` setting, which is how the test
suites plug in doubles. Every gateway-side failure, including timeouts and
connection errors, is raised as `PaymentGatewayError`.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

import stripe
from django.conf import settings
from django.utils.module_loading import import_string

from core.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

# Stripe statuses of a PaymentIntent that mean the charge will not go through.
FAILED_INTENT_STATUSES = frozenset({'canceled', 'requires_payment_method'})
FAILED_REFUND_STATUSES = frozenset({'failed', 'canceled'})


@dataclass(frozen=True)
class GatewayResult:
    """
    The outcome of a gateway call.

    Attributes:
        reference: The gateway's id of the charge or refund.
        status: The raw status reported by the gateway.
        succeeded: The money has moved.
        failed: The gateway has definitively declined the operation.
    """
    reference: str
    status: str
    succeeded: bool
    failed: bool = False


class PaymentGateway(ABC):

    @abstractmethod
    def charge(self, amount, payment_method, metadata=None):
        """Charges `amount` to `payment_method` and returns a GatewayResult."""

    @abstractmethod
    def confirm(self, reference):
        """Confirms a previously created charge that still awaits confirmation."""

    @abstractmethod
    def refund(self, reference, reason=''):
        """Refunds the whole charge identified by `reference`."""


def to_minor_units(amount):
    """Converts a decimal amount to the integer number of cents the gateway expects."""
    return int((Decimal(amount) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class StripeGateway(PaymentGateway):
    """
    Stripe implementation based on PaymentIntents with manual confirmation.

    The secret key and the currency come from the `STRIPE_SECRET_KEY` and
    `PAYMENT_CURRENCY` settings unless passed explicitly.
    """

    def __init__(self, api_key=None, currency=None):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.currency = currency or settings.PAYMENT_CURRENCY

    def charge(self, amount, payment_method, metadata=None):
        try:
            intent = stripe.PaymentIntent.create(
                amount=to_minor_units(amount),
                currency=self.currency,
                payment_method=payment_method,
                confirmation_method='manual',
                confirm=True,
                metadata=metadata or {},
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            raise self._gateway_error('charge', exc)
        return self._intent_result(intent)

    def confirm(self, reference):
        try:
            intent = stripe.PaymentIntent.confirm(reference, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise self._gateway_error('confirm', exc)
        return self._intent_result(intent)

    def refund(self, reference, reason=''):
        try:
            refund = stripe.Refund.create(
                payment_intent=reference,
                reason='requested_by_customer',
                metadata={'reason': reason} if reason else {},
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            raise self._gateway_error('refund', exc)

        if refund.status in FAILED_REFUND_STATUSES:
            raise PaymentGatewayError(f"The refund was {refund.status} by the payment gateway.")
        return GatewayResult(reference=refund.id, status=refund.status, succeeded=True)

    def _intent_result(self, intent):
        return GatewayResult(
            reference=intent.id,
            status=intent.status,
            succeeded=intent.status == 'succeeded',
            failed=intent.status in FAILED_INTENT_STATUSES,
        )

    def _gateway_error(self, operation, exc):
        logger.warning("Stripe %s failed: %s", operation, exc)
        message = getattr(exc, 'user_message', None) or str(exc) or PaymentGatewayError.default_detail
        return PaymentGatewayError(message)


def get_gateway():
    """Instantiates the gateway class named by the `PAYMENT_GATEWAY_CLASS` setting."""
    return import_string(settings.PAYMENT_GATEWAY_CLASS)()
