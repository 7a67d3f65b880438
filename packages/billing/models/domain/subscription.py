"""
Domain models for subscriptions.
"""

import math
from datetime import datetime
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from packages.billing.models.domain.enums import SubscriptionPlan, SubscriptionStatus


def _require_stored_status(status: SubscriptionStatus) -> SubscriptionStatus:
    if status == SubscriptionStatus.NONE:
        raise ValueError("'none' means no subscription and cannot be stored")
    return status


# Status a subscription row may hold; NONE only describes a missing row
StoredSubscriptionStatus = Annotated[SubscriptionStatus, AfterValidator(_require_stored_status)]


class Subscription(BaseModel):
    """
    User subscription domain model.

    Represents the single subscription slot a user owns:
    - Plan (free/standard/premium)
    - Status (trial/active/expired/cancelled)
    - Current billing period, end strictly after start while live
    - Deferred cancellation flag
    """

    id: int
    user_id: int

    plan: SubscriptionPlan
    status: SubscriptionStatus

    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool = False

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    def is_expired(self, now: datetime) -> bool:
        return self.current_period_end < now

    def is_cancelled(self) -> bool:
        return self.status == SubscriptionStatus.CANCELLED or self.cancel_at_period_end

    def has_access(self, now: datetime) -> bool:
        """Trial or active, and the current period has not lapsed."""
        return self.status.grants_access() and not self.is_expired(now)

    def days_until_expiry(self, now: datetime) -> int:
        """Whole days left in the period, rounded up. Negative once lapsed."""
        remaining = (self.current_period_end - now).total_seconds()
        return math.ceil(remaining / 86400)


class SubscriptionCreateRequest(BaseModel):
    """Input for opening a user's subscription."""

    user_id: int
    plan: SubscriptionPlan
    status: StoredSubscriptionStatus = SubscriptionStatus.TRIAL
    period_length_days: int = Field(default=30, ge=1, le=365)


class SubscriptionUpdateRequest(BaseModel):
    """
    Partial subscription update. Fields left unset are not touched.

    ``extend_days`` pushes the existing period end forward, not now.
    """

    plan: Optional[SubscriptionPlan] = None
    status: Optional[StoredSubscriptionStatus] = None
    cancel_at_period_end: Optional[bool] = None
    extend_days: Optional[int] = Field(default=None, ge=1, le=365)


class SubscriptionCreateModel(BaseModel):
    """Row written when a subscription is opened."""

    model_config = ConfigDict(use_enum_values=True)

    user_id: int
    plan: SubscriptionPlan
    status: StoredSubscriptionStatus
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool = False


class SubscriptionUpdateModel(BaseModel):
    """Model for updating a subscription row."""

    model_config = ConfigDict(use_enum_values=True)

    plan: Optional[SubscriptionPlan] = None
    status: Optional[StoredSubscriptionStatus] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: Optional[bool] = None


class SubscriptionStatusSummary(BaseModel):
    """Access flags for a user's subscription, evaluated at one instant."""

    subscription: Optional[Subscription] = None
    is_active: bool = False
    is_expired: bool = False
    is_cancelled: bool = False
    days_until_expiry: Optional[int] = None
    has_active_subscription: bool = False

    @classmethod
    def evaluate(
        cls, subscription: Optional[Subscription], now: datetime
    ) -> "SubscriptionStatusSummary":
        if subscription is None:
            return cls()

        expired = subscription.is_expired(now)
        return cls(
            subscription=subscription,
            is_active=subscription.status == SubscriptionStatus.ACTIVE and not expired,
            is_expired=expired,
            is_cancelled=subscription.is_cancelled(),
            days_until_expiry=subscription.days_until_expiry(now),
            has_active_subscription=subscription.has_access(now),
        )
