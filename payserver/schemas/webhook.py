"""
Payment Intent Server - Webhook Schemas
"""
from pydantic import BaseModel


class WebhookAck(BaseModel):
    """Acknowledgement returned for every verified event."""
    received: bool = True
