"""
Domain models for stored payment methods.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from packages.billing.models.domain.enums import PaymentMethodType


class PaymentMethod(BaseModel):
    id: int
    user_id: int
    type: PaymentMethodType
    is_default: bool = False

    card_last4: Optional[str] = None
    card_brand: Optional[str] = None
    expiry_month: Optional[int] = None
    expiry_year: Optional[int] = None
    paypal_email: Optional[str] = None
    bank_account_last4: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaymentMethodDetails(BaseModel):
    """Display details shared by create and update inputs."""

    card_last4: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    card_brand: Optional[str] = Field(default=None, max_length=50)
    expiry_month: Optional[int] = Field(default=None, ge=1, le=12)
    expiry_year: Optional[int] = Field(default=None, ge=2024, le=2050)
    paypal_email: Optional[EmailStr] = None
    bank_account_last4: Optional[str] = Field(default=None, pattern=r"^\d{4}$")


class PaymentMethodCreateModel(PaymentMethodDetails):
    """Input for adding a payment method; ``user_id`` is set by the service."""

    model_config = ConfigDict(use_enum_values=True)

    user_id: Optional[int] = None
    type: PaymentMethodType
    is_default: bool = False

    def missing_details(self) -> list[str]:
        """Names of the details this payment type requires but were not given."""
        required = {
            PaymentMethodType.CREDIT_CARD.value: [
                "card_last4",
                "card_brand",
                "expiry_month",
                "expiry_year",
            ],
            PaymentMethodType.PAYPAL.value: ["paypal_email"],
            PaymentMethodType.BANK_TRANSFER.value: ["bank_account_last4"],
        }
        return [name for name in required[self.type] if getattr(self, name) is None]


class PaymentMethodUpdateModel(PaymentMethodDetails):
    """Model for updating a payment method. Only set fields are written."""

    is_default: Optional[bool] = None
