"""
Payment Intent Server - Payment Schemas
Pydantic schemas for payment-intent request/response validation
"""
from typing import Any, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
)

from payserver.errors import ValidationError

REQUIRED_FIELDS = ("amount", "currency", "email")
DEFAULT_PAYMENT_METHOD_TYPES = ["card"]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class PaymentRequest(BaseModel):
    """Order details sent by the checkout client."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: Optional[str] = None
    email: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0, strict=True)  # minor currency units
    currency: str = Field(..., min_length=3, max_length=3)
    items: Optional[List[Any]] = None
    request_three_d_secure: Optional[Literal["automatic", "any", "challenge"]] = None
    payment_method_types: Optional[List[str]] = None

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, value: str) -> str:
        if not value.isalpha():
            raise ValueError("currency must be a three-letter ISO code")
        return value.lower()

    @field_validator("email", "name")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else value

    @classmethod
    def from_payload(cls, data: Any) -> "PaymentRequest":
        """
        Validate a decoded JSON body.

        Required fields that are absent, null or empty are reported together
        before any other validation runs.

        Raises:
            ValidationError: Body is not an object, fields are missing, or a
                value is invalid
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        missing = [field for field in REQUIRED_FIELDS if _is_blank(data.get(field))]
        if missing:
            raise ValidationError.for_missing(missing)

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            err = e.errors()[0]
            location = ".".join(str(part) for part in err["loc"])
            raise ValidationError(f"Invalid field {location}: {err['msg']}") from e

    def effective_payment_method_types(self) -> List[str]:
        """Supplied method types, or card only when none were sent."""
        if self.payment_method_types:
            return list(self.payment_method_types)
        return list(DEFAULT_PAYMENT_METHOD_TYPES)


class PaymentIntentCreated(BaseModel):
    """Schema for a created payment intent."""
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(..., alias="clientSecret")
    id: str


class PublishableKeyResponse(BaseModel):
    """Schema for the publishable key lookup."""
    model_config = ConfigDict(populate_by_name=True)

    publishable_key: str = Field(..., alias="publishableKey")
