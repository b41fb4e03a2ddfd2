"""
Payment Intent Server - Payments Router
API endpoints for the publishable key and PaymentIntent creation
"""
import json
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool

from payserver.config import Settings
from payserver.deps.services import get_app_settings, get_payment_intent_service
from payserver.errors import ConfigurationError, ValidationError
from payserver.schemas.payment import (
    PaymentIntentCreated,
    PaymentRequest,
    PublishableKeyResponse,
)
from payserver.services.payments import PaymentIntentService

router = APIRouter(tags=["payments"])


@router.get("/stripe-key", response_model=PublishableKeyResponse)
async def get_stripe_key(settings: Settings = Depends(get_app_settings)):
    """
    Return the publishable key the client needs to initialise Stripe.
    """
    if not settings.stripe_publishable_key:
        raise ConfigurationError("Stripe publishable key not configured")

    return PublishableKeyResponse(publishable_key=settings.stripe_publishable_key)


@router.post("/create-payment-intent", response_model=PaymentIntentCreated)
async def create_payment_intent(
    request: Request,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    service: PaymentIntentService = Depends(get_payment_intent_service)
):
    """
    Create a Stripe customer and PaymentIntent for the order.

    Body: `{name?, email, amount, currency, items?, request_three_d_secure?,
    payment_method_types?}`. Returns the intent's client secret and ID.

    Send an `Idempotency-Key` header to make retries replay the original
    customer and intent instead of creating new ones.
    """
    raw_body = await request.body()
    try:
        payload = json.loads(raw_body) if raw_body else {}
    except ValueError:
        raise ValidationError("Request body must be valid JSON")

    payment_request = PaymentRequest.from_payload(payload)

    return await run_in_threadpool(
        service.create_payment_intent,
        payment_request,
        idempotency_key
    )
