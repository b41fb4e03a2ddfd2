"""
Payment Intent Server - Webhooks Router
Webhook endpoint for Stripe events
"""
import logging

from fastapi import APIRouter, Depends, Request

from payserver.config import Settings
from payserver.deps.services import get_app_settings, get_webhook_event_handler
from payserver.errors import ConfigurationError, SignatureVerificationError
from payserver.schemas.webhook import WebhookAck
from payserver.services.webhooks import WebhookEventHandler, verify_webhook_event

router = APIRouter(tags=["webhooks"])
logger = logging.getLogger(__name__)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    handler: WebhookEventHandler = Depends(get_webhook_event_handler)
):
    """
    Handle Stripe webhook events.

    The body is read as raw bytes for signature verification. Every verified
    event is acknowledged, including types this server does not act on, so
    Stripe stops redelivering it.
    """
    if not settings.stripe_webhook_secret:
        raise ConfigurationError("Stripe webhook secret not configured")

    payload = await request.body()
    signature = request.headers.get("Stripe-Signature")

    try:
        event = verify_webhook_event(
            payload,
            signature,
            settings.stripe_webhook_secret,
            settings.stripe_webhook_tolerance_seconds
        )
    except SignatureVerificationError as e:
        logger.warning("Webhook rejected: %s", e.message)
        raise

    handler.handle_event(event)

    return WebhookAck()
