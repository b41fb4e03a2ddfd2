"""
Payment Intent Server - Service Dependencies
FastAPI dependencies that hand each request its settings and services
"""
from fastapi import Depends, Request

from payserver.config import Settings
from payserver.services.payments import PaymentIntentService, StripeGateway
from payserver.services.webhooks import WebhookEventHandler, webhook_event_handler


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_stripe_gateway(settings: Settings = Depends(get_app_settings)) -> StripeGateway:
    return StripeGateway(settings)


def get_payment_intent_service(
    gateway: StripeGateway = Depends(get_stripe_gateway),
    settings: Settings = Depends(get_app_settings)
) -> PaymentIntentService:
    return PaymentIntentService(gateway, settings)


def get_webhook_event_handler() -> WebhookEventHandler:
    return webhook_event_handler
