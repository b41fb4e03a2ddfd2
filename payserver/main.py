"""
Payment Intent Server - FastAPI Application
Application factory with routers, middleware and error handlers
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from payserver.config import Settings, get_settings
from payserver.errors import register_error_handlers
from payserver.logging_setup import configure_logging
from payserver.routers import payments, webhooks
from payserver.services.payments import configure_stripe

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization", "Stripe-Signature", "Idempotency-Key"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info(
        "Starting %s (Stripe API %s, publishable key %s, webhook secret %s)",
        settings.app_name,
        settings.stripe_api_version,
        "set" if settings.stripe_publishable_key else "missing",
        "set" if settings.stripe_webhook_secret else "missing"
    )
    yield
    logger.info("Shutting down...")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Settings to serve with; read from the environment when omitted

    Raises:
        ConfigurationError: The environment holds no valid secret key
    """
    if settings is None:
        settings = get_settings()

    configure_logging(settings.log_level)
    configure_stripe(settings)

    app = FastAPI(
        title=settings.app_name,
        description="""
    ## Payment Intent Server

    Brokers Stripe PaymentIntent creation for checkout clients and receives
    Stripe webhook events.
    """,
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    register_error_handlers(app)

    # Include routers
    app.include_router(payments.router)
    app.include_router(webhooks.router)

    @app.get("/")
    async def root(request: Request):
        """Greeting/status endpoint."""
        return {"Welcome to": request.app.state.settings.app_name}

    @app.get("/healthz")
    async def health():
        """Health check endpoint."""
        return {"ok": True, "status": "healthy"}

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "payserver.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
