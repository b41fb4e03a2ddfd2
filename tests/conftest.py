"""
Shared fixtures: settings built without the environment, a recording
Stripe gateway double and a TestClient wired to it.
"""
import hashlib
import hmac
import json
import time
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from payserver.config import load_settings
from payserver.deps.services import get_stripe_gateway
from payserver.main import create_app

WEBHOOK_SECRET = "whsec_test_secret"


class FakeStripeGateway:
    """Records calls and hands out fresh customer/intent IDs."""

    def __init__(self):
        self.customer_calls = []
        self.intent_calls = []
        self.customer_error = None
        self.intent_error = None
        self.next_intent_id = None
        self.next_client_secret = None

    def create_customer(self, name, email, idempotency_key=None):
        self.customer_calls.append(
            {"name": name, "email": email, "idempotency_key": idempotency_key}
        )
        if self.customer_error is not None:
            raise self.customer_error
        return SimpleNamespace(id=f"cus_{len(self.customer_calls)}")

    def create_payment_intent(
        self,
        amount,
        currency,
        customer_id,
        payment_method_types,
        payment_method_options,
        idempotency_key=None
    ):
        self.intent_calls.append({
            "amount": amount,
            "currency": currency,
            "customer_id": customer_id,
            "payment_method_types": payment_method_types,
            "payment_method_options": payment_method_options,
            "idempotency_key": idempotency_key,
        })
        if self.intent_error is not None:
            raise self.intent_error
        number = len(self.intent_calls)
        return SimpleNamespace(
            id=self.next_intent_id or f"pi_{number}",
            client_secret=self.next_client_secret or f"pi_{number}_secret",
        )

    @property
    def call_count(self):
        return len(self.customer_calls) + len(self.intent_calls)


def make_settings(**overrides):
    values = {
        "_env_file": None,
        "stripe_secret_key": "sk_test_123",
        "stripe_publishable_key": "pk_test_123",
        "stripe_webhook_secret": WEBHOOK_SECRET,
        "cors_origins": ["http://localhost:19006"],
    }
    values.update(overrides)
    return load_settings(**values)


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp=None) -> str:
    """Build a Stripe-Signature header for a payload."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def event_payload(event_type: str, data_object=None) -> bytes:
    event = {
        "id": "evt_test_1",
        "object": "event",
        "type": event_type,
        "data": {"object": data_object or {"id": "pi_123", "object": "payment_intent"}},
    }
    return json.dumps(event).encode("utf-8")


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def gateway():
    return FakeStripeGateway()


@pytest.fixture
def app(settings, gateway):
    application = create_app(settings)
    application.dependency_overrides[get_stripe_gateway] = lambda: gateway
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
