# Schemas package
from payserver.schemas.payment import (
    PaymentRequest,
    PaymentIntentCreated,
    PublishableKeyResponse,
)
from payserver.schemas.webhook import WebhookAck
