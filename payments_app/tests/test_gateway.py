from decimal import Decimal
from types import SimpleNamespace
from unittest import mock

import stripe
from django.test import SimpleTestCase, override_settings

from core.exceptions import PaymentGatewayError
from payments_app.gateway import StripeGateway, get_gateway, to_minor_units


@override_settings(STRIPE_SECRET_KEY='sk_test_123', PAYMENT_CURRENCY='usd')
class StripeGatewayTests(SimpleTestCase):
    """
    Tests for the Stripe adapter against patched Stripe API calls.
    """

    def setUp(self):
        self.gateway = StripeGateway()

    def test_amounts_are_sent_in_cents(self):
        self.assertEqual(to_minor_units(Decimal('150.00')), 15000)
        self.assertEqual(to_minor_units(Decimal('49.995')), 5000)

    @mock.patch('stripe.PaymentIntent.create')
    def test_charge_creates_confirmed_payment_intent(self, create):
        create.return_value = SimpleNamespace(id='pi_123', status='succeeded')

        result = self.gateway.charge(Decimal('150.00'), 'pm_card_visa', metadata={'order_id': '7'})

        self.assertTrue(result.succeeded)
        self.assertEqual(result.reference, 'pi_123')
        create.assert_called_once_with(
            amount=15000,
            currency='usd',
            payment_method='pm_card_visa',
            confirmation_method='manual',
            confirm=True,
            metadata={'order_id': '7'},
            api_key='sk_test_123',
        )

    @mock.patch('stripe.PaymentIntent.create')
    def test_charge_requiring_action_is_neither_success_nor_failure(self, create):
        create.return_value = SimpleNamespace(id='pi_123', status='requires_action')

        result = self.gateway.charge(Decimal('10.00'), 'pm_card_visa')

        self.assertFalse(result.succeeded)
        self.assertFalse(result.failed)

    @mock.patch('stripe.PaymentIntent.create')
    def test_connection_errors_become_gateway_errors(self, create):
        create.side_effect = stripe.APIConnectionError("Request timed out")

        with self.assertRaises(PaymentGatewayError) as ctx:
            self.gateway.charge(Decimal('10.00'), 'pm_card_visa')

        self.assertEqual(ctx.exception.status_code, 502)

    @mock.patch('stripe.PaymentIntent.confirm')
    def test_confirm_reports_declined_intent_as_failed(self, confirm):
        confirm.return_value = SimpleNamespace(id='pi_123', status='requires_payment_method')

        result = self.gateway.confirm('pi_123')

        self.assertTrue(result.failed)
        confirm.assert_called_once_with('pi_123', api_key='sk_test_123')

    @mock.patch('stripe.Refund.create')
    def test_refund_uses_the_original_payment_intent(self, create):
        create.return_value = SimpleNamespace(id='re_456', status='succeeded')

        result = self.gateway.refund('pi_123', 'Order cancelled')

        self.assertEqual(result.reference, 're_456')
        create.assert_called_once_with(
            payment_intent='pi_123',
            reason='requested_by_customer',
            metadata={'reason': 'Order cancelled'},
            api_key='sk_test_123',
        )

    @mock.patch('stripe.Refund.create')
    def test_failed_refund_raises(self, create):
        create.return_value = SimpleNamespace(id='re_456', status='failed')

        with self.assertRaises(PaymentGatewayError):
            self.gateway.refund('pi_123')

    @override_settings(PAYMENT_GATEWAY_CLASS='payments_app.gateway.StripeGateway')
    def test_gateway_class_comes_from_settings(self):
        self.assertIsInstance(get_gateway(), StripeGateway)
