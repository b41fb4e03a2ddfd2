"""
Unit tests for StripeGateway and the payment helpers.
Stripe resource calls are patched; nothing reaches the network.
"""
from types import SimpleNamespace
from unittest.mock import patch

import stripe

from payserver.services.payments import (
    FALLBACK_ERROR_MESSAGE,
    StripeGateway,
    build_payment_method_options,
    configure_stripe,
    upstream_error_message,
    upstream_error_status,
)
from tests.conftest import make_settings


class TestStripeGateway:
    """Every call carries the configured key and API version."""

    def test_create_customer(self):
        settings = make_settings()
        gateway = StripeGateway(settings)

        with patch("stripe.Customer.create") as mock_create:
            mock_create.return_value = SimpleNamespace(id="cus_1")
            customer = gateway.create_customer("Ada", "a@b.com")

        assert customer.id == "cus_1"
        call_args = mock_create.call_args[1]
        assert call_args["name"] == "Ada"
        assert call_args["email"] == "a@b.com"
        assert call_args["api_key"] == "sk_test_123"
        assert call_args["stripe_version"] == "2020-08-27"
        assert "idempotency_key" not in call_args

    def test_create_payment_intent(self):
        gateway = StripeGateway(make_settings())
        options = {"card": {"request_three_d_secure": "automatic"}}

        with patch("stripe.PaymentIntent.create") as mock_create:
            gateway.create_payment_intent(
                amount=1000,
                currency="usd",
                customer_id="cus_1",
                payment_method_types=["card"],
                payment_method_options=options,
                idempotency_key="order-1:payment_intent",
            )

        mock_create.assert_called_once_with(
            amount=1000,
            currency="usd",
            customer="cus_1",
            payment_method_types=["card"],
            payment_method_options=options,
            api_key="sk_test_123",
            stripe_version="2020-08-27",
            idempotency_key="order-1:payment_intent",
        )

    def test_configure_stripe_sets_timeout(self):
        settings = make_settings(stripe_timeout_seconds=7, stripe_max_network_retries=1)

        with patch.object(stripe, "default_http_client", None), \
                patch.object(stripe, "max_network_retries", 0):
            configure_stripe(settings)

            assert isinstance(stripe.default_http_client, stripe.RequestsClient)
            assert stripe.default_http_client._timeout == 7
            assert stripe.max_network_retries == 1


class TestPaymentMethodOptions:

    def test_card_default_policy(self):
        assert build_payment_method_options(["card"]) == {
            "card": {"request_three_d_secure": "automatic"}
        }

    def test_card_and_sofort(self):
        options = build_payment_method_options(["card", "sofort"], "challenge")

        assert options == {
            "card": {"request_three_d_secure": "challenge"},
            "sofort": {"preferred_language": "en"},
        }

    def test_unrecognised_types_get_no_entry(self):
        assert build_payment_method_options(["ideal", "sofort"]) == {
            "sofort": {"preferred_language": "en"}
        }


class TestUpstreamErrorMapping:

    def test_error_object_message(self):
        error = stripe.CardError(
            "Request req_1: Your card was declined.",
            None,
            "card_declined",
            http_status=402,
            json_body={"error": {"message": "Your card was declined.", "code": "card_declined"}},
        )

        assert upstream_error_message(error) == "Your card was declined."
        assert upstream_error_status(error) == 402

    def test_server_side_status_becomes_bad_gateway(self):
        error = stripe.APIError("Something went wrong", http_status=500)

        assert upstream_error_message(error) == "Something went wrong"
        assert upstream_error_status(error) == 502

    def test_server_key_problem_becomes_bad_gateway(self):
        error = stripe.AuthenticationError("Invalid API Key provided", http_status=401)

        assert upstream_error_status(error) == 502

    def test_not_found_becomes_bad_gateway(self):
        error = stripe.InvalidRequestError("No such customer", "customer", http_status=404)

        assert upstream_error_status(error) == 502

    def test_fallback(self):
        assert upstream_error_message(stripe.StripeError()) == FALLBACK_ERROR_MESSAGE
