"""
Domain models for billing history records.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from common.core.config import settings
from packages.billing.models.domain.enums import (
    BillingStatus,
    BillingHistoryOrderBy,
    SortOrder,
)


class BillingRecord(BaseModel):
    id: int
    user_id: int
    subscription_id: int
    payment_method_id: Optional[int] = None

    amount: Decimal
    currency: str
    status: BillingStatus

    billing_period_start: datetime
    billing_period_end: datetime

    paid_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    invoice_url: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BillingRecordCreateRequest(BaseModel):
    """Input for recording a new charge against a subscription."""

    subscription_id: int
    payment_method_id: Optional[int] = None
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    currency: str = Field(
        default=settings.default_currency, min_length=3, max_length=3
    )
    billing_period_start: datetime
    billing_period_end: datetime

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        if not v.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return v.upper()

    @model_validator(mode="after")
    def check_period(self):
        if self.billing_period_end <= self.billing_period_start:
            raise ValueError("billing_period_end must be after billing_period_start")
        return self


class BillingRecordCreateModel(BaseModel):
    """Row written for a new billing record. Always starts pending."""

    model_config = ConfigDict(use_enum_values=True)

    user_id: int
    subscription_id: int
    payment_method_id: Optional[int] = None
    amount: Decimal
    currency: str
    status: BillingStatus = BillingStatus.PENDING
    billing_period_start: datetime
    billing_period_end: datetime


class BillingStatusUpdateRequest(BaseModel):
    """Terminal transition for a pending record."""

    status: BillingStatus
    failure_reason: Optional[str] = None
    invoice_url: Optional[str] = Field(default=None, max_length=2048)


class BillingStatusTransition(BaseModel):
    """Columns written by a status transition, stamped with the transition instant."""

    model_config = ConfigDict(use_enum_values=True)

    status: BillingStatus
    paid_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    invoice_url: Optional[str] = None

    @classmethod
    def build(
        cls, request: BillingStatusUpdateRequest, now: datetime
    ) -> "BillingStatusTransition":
        transition = cls(status=request.status, invoice_url=request.invoice_url)
        if request.status == BillingStatus.PAID:
            transition.paid_at = now
        elif request.status == BillingStatus.FAILED:
            transition.failed_at = now
            transition.failure_reason = request.failure_reason
        elif request.status == BillingStatus.REFUNDED:
            transition.refunded_at = now
        return transition


class BillingHistoryQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    order: SortOrder = SortOrder.DESC
    order_by: BillingHistoryOrderBy = BillingHistoryOrderBy.CREATED_AT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class BillingHistoryPage(BaseModel):
    items: list[BillingRecord]
    count: int
