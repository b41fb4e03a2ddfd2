"""
Payment Intent Server - Errors
Domain exceptions and their mapping to JSON error responses
"""
import logging
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PaymentServerError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(PaymentServerError):
    """Request body is missing required fields or holds invalid values."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = list(missing or [])

    @classmethod
    def for_missing(cls, fields: List[str]) -> "ValidationError":
        return cls(f"Missing required fields: {', '.join(fields)}", missing=fields)

    def to_dict(self) -> dict:
        return {"error": self.message, "missing": self.missing}


class ConfigurationError(PaymentServerError):
    """A required setting is absent or malformed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class SignatureVerificationError(PaymentServerError):
    """Webhook payload could not be authenticated."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(PaymentServerError):
    """A call to the payment processor failed."""

    status_code = status.HTTP_502_BAD_GATEWAY


async def payment_server_error_handler(request: Request, exc: PaymentServerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to the application."""
    app.add_exception_handler(PaymentServerError, payment_server_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
