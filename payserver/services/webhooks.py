"""
Payment Intent Server - Webhook Service
Stripe webhook signature verification and event dispatch
"""
import json
import logging
from typing import Any, Callable, Dict, Optional

import stripe

from payserver.errors import SignatureVerificationError

logger = logging.getLogger(__name__)


def verify_webhook_event(
    payload: bytes,
    signature: Optional[str],
    secret: str,
    tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE
) -> Dict[str, Any]:
    """
    Verify a Stripe webhook and parse its event.

    The signature is checked over the raw request bytes before anything in
    the payload is trusted.

    Args:
        payload: Raw request body, exactly as received
        signature: Stripe-Signature header
        secret: Endpoint signing secret (whsec_...)
        tolerance: Maximum age of the signed timestamp, in seconds

    Returns:
        Parsed event as a plain dict

    Raises:
        SignatureVerificationError: Missing header, bad signature or unreadable payload
    """
    if not signature:
        raise SignatureVerificationError("Missing Stripe signature")

    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SignatureVerificationError("Webhook payload is not valid UTF-8") from e

    try:
        stripe.WebhookSignature.verify_header(body, signature, secret, tolerance)
    except stripe.SignatureVerificationError as e:
        raise SignatureVerificationError("Webhook signature verification failed") from e

    try:
        event = json.loads(body)
    except ValueError as e:
        raise SignatureVerificationError("Webhook payload is not valid JSON") from e

    if not isinstance(event, dict):
        raise SignatureVerificationError("Webhook payload is not an event object")

    return event


class WebhookEventHandler:
    """
    Dispatches verified Stripe events by type.

    Supported Events:
    - payment_intent.succeeded: funds captured
    - payment_intent.payment_failed: payment attempt failed

    Every other event type is logged and ignored.
    """

    def __init__(self):
        self.handlers: Dict[str, Callable[[Dict[str, Any]], None]] = {
            "payment_intent.succeeded": self.handle_payment_intent_succeeded,
            "payment_intent.payment_failed": self.handle_payment_intent_failed,
        }

    def handle_event(self, event: Dict[str, Any]) -> bool:
        """
        Route an event to its handler.

        Returns:
            True if a handler ran, False for unhandled types
        """
        event_type = event.get("type")
        handler = self.handlers.get(event_type)

        if handler is None:
            logger.info("Unhandled webhook event type: %s (%s)", event_type, event.get("id"))
            return False

        handler(event)
        return True

    def handle_payment_intent_succeeded(self, event: Dict[str, Any]) -> None:
        # Fulfilment and receipts belong here once there is a system to call
        intent = _event_object(event)
        logger.info(
            "Webhook received: %s %s! Payment captured: %s %s %s",
            intent.get("object", "payment_intent"),
            intent.get("status"),
            intent.get("id"),
            intent.get("amount"),
            intent.get("currency")
        )

    def handle_payment_intent_failed(self, event: Dict[str, Any]) -> None:
        intent = _event_object(event)
        last_error = intent.get("last_payment_error")
        reason = last_error.get("message") if isinstance(last_error, dict) else None
        reason = reason or "unknown reason"
        logger.warning(
            "Webhook received: %s %s! Payment failed for %s: %s",
            intent.get("object", "payment_intent"),
            intent.get("status"),
            intent.get("id"),
            reason
        )


def _event_object(event: Dict[str, Any]) -> Dict[str, Any]:
    data = event.get("data")
    if not isinstance(data, dict):
        return {}
    data_object = data.get("object")
    return data_object if isinstance(data_object, dict) else {}


webhook_event_handler = WebhookEventHandler()
