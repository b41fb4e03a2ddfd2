"""
Payment Intent Server - Payments Service
Stripe customer and PaymentIntent creation
"""
import logging
from typing import Any, Dict, List, Optional

import stripe

from payserver.config import Settings
from payserver.errors import UpstreamError
from payserver.schemas.payment import PaymentIntentCreated, PaymentRequest

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "Unable to create payment intent"
DEFAULT_THREE_D_SECURE = "automatic"
# Stripe statuses caused by the checkout request itself
CLIENT_ERROR_STATUSES = (400, 402)


def configure_stripe(settings: Settings) -> None:
    """
    Configure the Stripe HTTP transport.

    Keys are passed per request by StripeGateway; only the transport
    (timeout, retries) is process-wide.
    """
    stripe.default_http_client = stripe.RequestsClient(timeout=settings.stripe_timeout_seconds)
    stripe.max_network_retries = settings.stripe_max_network_retries


def build_payment_method_options(
    payment_method_types: List[str],
    request_three_d_secure: Optional[str] = None
) -> Dict[str, Dict[str, Any]]:
    """
    Build per-method options for each recognised method type.

    Args:
        payment_method_types: Effective method types for the intent
        request_three_d_secure: Card 3-D Secure policy requested by the client

    Returns:
        Options keyed by method type
    """
    options: Dict[str, Dict[str, Any]] = {}

    if "card" in payment_method_types:
        options["card"] = {
            "request_three_d_secure": request_three_d_secure or DEFAULT_THREE_D_SECURE
        }

    if "sofort" in payment_method_types:
        options["sofort"] = {"preferred_language": "en"}

    return options


def upstream_error_message(error: Exception) -> str:
    """
    Pick the most useful human-readable message from a processor error.

    The processor's own error object wins, then the exception's message,
    then a fixed fallback.
    """
    error_object = getattr(error, "error", None)
    message = getattr(error_object, "message", None)
    if message:
        return message

    message = getattr(error, "user_message", None)
    if message:
        return message

    return FALLBACK_ERROR_MESSAGE


def upstream_error_status(error: Exception) -> int:
    """Invalid-request and card-declined statuses pass through; anything else is a bad gateway."""
    http_status = getattr(error, "http_status", None)
    if http_status in CLIENT_ERROR_STATUSES:
        return http_status
    return UpstreamError.status_code


def _request_options(settings: Settings, idempotency_key: Optional[str]) -> Dict[str, Any]:
    options = {
        "api_key": settings.stripe_secret_key,
        "stripe_version": settings.stripe_api_version,
    }
    if idempotency_key:
        options["idempotency_key"] = idempotency_key
    return options


class StripeGateway:
    """Thin wrapper over the Stripe API calls this server makes."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def create_customer(
        self,
        name: str,
        email: str,
        idempotency_key: Optional[str] = None
    ) -> Any:
        """
        Create a Stripe customer.

        Args:
            name: Customer display name
            email: Customer email address
            idempotency_key: Optional Stripe idempotency key

        Returns:
            Customer object
        """
        return stripe.Customer.create(
            name=name,
            email=email,
            **_request_options(self.settings, idempotency_key)
        )

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        customer_id: str,
        payment_method_types: List[str],
        payment_method_options: Dict[str, Dict[str, Any]],
        idempotency_key: Optional[str] = None
    ) -> Any:
        """
        Create a Stripe PaymentIntent for a customer.

        Args:
            amount: Amount in minor currency units
            currency: Lower-case ISO currency code
            customer_id: Stripe customer ID
            payment_method_types: Method types the client may confirm with
            payment_method_options: Per-method options
            idempotency_key: Optional Stripe idempotency key

        Returns:
            PaymentIntent object
        """
        return stripe.PaymentIntent.create(
            amount=amount,
            currency=currency,
            customer=customer_id,
            payment_method_types=payment_method_types,
            payment_method_options=payment_method_options,
            **_request_options(self.settings, idempotency_key)
        )


class PaymentIntentService:
    """Creates a customer and a PaymentIntent for one checkout request."""

    def __init__(self, gateway: StripeGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    def create_payment_intent(
        self,
        request: PaymentRequest,
        idempotency_key: Optional[str] = None
    ) -> PaymentIntentCreated:
        """
        Create a customer, then a PaymentIntent, for a validated request.

        Without an idempotency key every call creates new Stripe objects.

        Args:
            request: Validated payment request
            idempotency_key: Client-supplied key; derived keys are sent to Stripe

        Returns:
            Client secret and intent ID

        Raises:
            UpstreamError: A Stripe call failed
        """
        try:
            customer = self.gateway.create_customer(
                name=request.name or self.settings.default_customer_name,
                email=request.email,
                idempotency_key=f"{idempotency_key}:customer" if idempotency_key else None
            )
        except stripe.StripeError as e:
            logger.warning("Customer creation failed: %s", upstream_error_message(e))
            raise UpstreamError(upstream_error_message(e), upstream_error_status(e)) from e

        payment_method_types = request.effective_payment_method_types()
        payment_method_options = build_payment_method_options(
            payment_method_types,
            request.request_three_d_secure
        )

        try:
            intent = self.gateway.create_payment_intent(
                amount=request.amount,
                currency=request.currency,
                customer_id=customer.id,
                payment_method_types=payment_method_types,
                payment_method_options=payment_method_options,
                idempotency_key=f"{idempotency_key}:payment_intent" if idempotency_key else None
            )
        except stripe.StripeError as e:
            logger.warning(
                "PaymentIntent creation failed for customer %s: %s",
                customer.id,
                upstream_error_message(e)
            )
            raise UpstreamError(upstream_error_message(e), upstream_error_status(e)) from e

        logger.info(
            "Created PaymentIntent %s for customer %s (%s %s, methods=%s)",
            intent.id,
            customer.id,
            request.amount,
            request.currency,
            ",".join(payment_method_types)
        )

        return PaymentIntentCreated(client_secret=intent.client_secret, id=intent.id)
