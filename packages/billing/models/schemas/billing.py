"""
API schemas for billing operations.

Request and response bodies use camelCase on the wire; every schema also
accepts its snake_case field names.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from packages.billing.models.domain.billing import BillingRecordCreateRequest
from packages.billing.models.domain.enums import (
    BillingStatus,
    PaymentMethodType,
    SubscriptionPlan,
    SubscriptionStatus,
)
from packages.billing.models.domain.subscription import StoredSubscriptionStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ============================================================================
# Subscription Schemas
# ============================================================================


class CreateSubscriptionRequest(CamelModel):
    plan: SubscriptionPlan
    status: StoredSubscriptionStatus = SubscriptionStatus.TRIAL
    period_length_days: int = Field(default=30, ge=1, le=365)


class UpdateSubscriptionRequest(CamelModel):
    plan: Optional[SubscriptionPlan] = None
    status: Optional[StoredSubscriptionStatus] = None
    cancel_at_period_end: Optional[bool] = None
    extend_days: Optional[int] = Field(
        default=None,
        ge=1,
        le=365,
        description="Days added to the current period end",
    )


class CancelSubscriptionRequest(CamelModel):
    immediately: bool = Field(
        default=False,
        description="End access now instead of at the end of the current period",
    )


class RenewSubscriptionRequest(CamelModel):
    period_length_days: int = Field(default=30, ge=1, le=365)


class SubscriptionResponse(CamelModel):
    id: int
    user_id: int
    plan: SubscriptionPlan
    status: SubscriptionStatus
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool
    created_at: datetime
    updated_at: datetime


class SubscriptionStatusResponse(CamelModel):
    subscription: Optional[SubscriptionResponse] = None
    is_active: bool
    is_expired: bool
    is_cancelled: bool
    days_until_expiry: Optional[int] = None
    has_active_subscription: bool


class PermissionResponse(CamelModel):
    required_plan: SubscriptionPlan
    has_permission: bool


# ============================================================================
# Plan Schemas
# ============================================================================


class PlanLimitsResponse(CamelModel):
    regions_created: int
    places_created: int
    storage_used_mb: float
    api_calls_count: int


class PlanResponse(CamelModel):
    plan: SubscriptionPlan
    limits: PlanLimitsResponse


class PlansResponse(CamelModel):
    plans: list[PlanResponse]


# ============================================================================
# Usage Schemas
# ============================================================================


class RecordUsageRequest(CamelModel):
    regions_created: int = Field(default=0, ge=0)
    places_created: int = Field(default=0, ge=0)
    checkins_count: int = Field(default=0, ge=0)
    images_uploaded: int = Field(default=0, ge=0)
    storage_used_mb: float = Field(default=0.0, ge=0)
    api_calls_count: int = Field(default=0, ge=0)


class UsageSummaryResponse(CamelModel):
    month: int
    year: int
    regions_created: int
    places_created: int
    checkins_count: int
    images_uploaded: int
    storage_used_mb: float
    api_calls_count: int


class UsageMetricsResponse(UsageSummaryResponse):
    id: int
    user_id: int
    created_at: datetime
    updated_at: datetime


class PlanLimitReportResponse(CamelModel):
    plan: SubscriptionPlan
    within_limits: bool
    current_usage: UsageSummaryResponse
    limits: PlanLimitsResponse
    overages: PlanLimitsResponse


# ============================================================================
# Billing Record Schemas
# ============================================================================


class CreateBillingRecordRequest(CamelModel, BillingRecordCreateRequest):
    """Amount must be positive; the currency is stored upper-case."""


class UpdateBillingStatusRequest(CamelModel):
    status: BillingStatus
    failure_reason: Optional[str] = None
    invoice_url: Optional[str] = Field(default=None, max_length=2048)


class BillingRecordResponse(CamelModel):
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


class BillingHistoryResponse(CamelModel):
    items: list[BillingRecordResponse]
    count: int = Field(..., description="Total records for the user")


class ProcessPaymentRequest(CamelModel):
    success: bool
    failure_reason: Optional[str] = None


# ============================================================================
# Payment Method Schemas
# ============================================================================


class PaymentMethodDetailsSchema(CamelModel):
    card_last4: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    card_brand: Optional[str] = Field(default=None, max_length=50)
    expiry_month: Optional[int] = Field(default=None, ge=1, le=12)
    expiry_year: Optional[int] = Field(default=None, ge=2024, le=2050)
    paypal_email: Optional[EmailStr] = None
    bank_account_last4: Optional[str] = Field(default=None, pattern=r"^\d{4}$")


class AddPaymentMethodRequest(PaymentMethodDetailsSchema):
    type: PaymentMethodType
    is_default: bool = False


class UpdatePaymentMethodRequest(PaymentMethodDetailsSchema):
    is_default: Optional[bool] = None


class PaymentMethodResponse(CamelModel):
    id: int
    user_id: int
    type: PaymentMethodType
    is_default: bool
    card_last4: Optional[str] = None
    card_brand: Optional[str] = None
    expiry_month: Optional[int] = None
    expiry_year: Optional[int] = None
    paypal_email: Optional[str] = None
    bank_account_last4: Optional[str] = None
    created_at: datetime
    updated_at: datetime
