"""
Billing enums - closed enumerations for plans, subscription and billing states.
"""

from enum import Enum

UNLIMITED = -1


class SubscriptionPlan(str, Enum):
    """
    Subscription plans, ordered free < standard < premium.

    A cap of -1 (UNLIMITED) means the dimension is never over quota.
    """

    FREE = "free"
    STANDARD = "standard"
    PREMIUM = "premium"

    def rank(self) -> int:
        ranks = {
            SubscriptionPlan.FREE: 0,
            SubscriptionPlan.STANDARD: 1,
            SubscriptionPlan.PREMIUM: 2,
        }
        return ranks[self]

    def includes(self, required: "SubscriptionPlan") -> bool:
        """Whether this plan grants everything the required plan does."""
        return self.rank() >= required.rank()

    def get_quota_limits(self) -> dict[str, float]:
        """
        Monthly caps for this plan.

        Quotas:
        - regions_created: regions a user may create per month
        - places_created: places a user may create per month
        - storage_used_mb: megabytes uploaded per month
        - api_calls_count: API calls per month
        """
        limits = {
            SubscriptionPlan.FREE: {
                "regions_created": 3,
                "places_created": 10,
                "storage_used_mb": 100,
                "api_calls_count": 1_000,
            },
            SubscriptionPlan.STANDARD: {
                "regions_created": 20,
                "places_created": 100,
                "storage_used_mb": 1_000,
                "api_calls_count": 10_000,
            },
            SubscriptionPlan.PREMIUM: {
                "regions_created": UNLIMITED,
                "places_created": UNLIMITED,
                "storage_used_mb": 10_000,
                "api_calls_count": 100_000,
            },
        }
        return limits[self]


class SubscriptionStatus(str, Enum):
    """
    Subscription status lifecycle.

    Flow: (none) -> trial -> active -> expired | cancelled.
    Deferred cancellation is a flag (cancel_at_period_end), not a status.
    """

    NONE = "none"
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    def grants_access(self) -> bool:
        """Statuses that give product access while the period has not lapsed."""
        return self in (SubscriptionStatus.TRIAL, SubscriptionStatus.ACTIVE)


class BillingStatus(str, Enum):
    """Billing record status. pending is the only entry state; the rest are terminal."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        return self != BillingStatus.PENDING


class PaymentMethodType(str, Enum):
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"


class UsageAction(str, Enum):
    """Events other subsystems report to the usage ledger."""

    REGION_CREATED = "region_created"
    PLACE_CREATED = "place_created"
    CHECKIN_CREATED = "checkin_created"
    IMAGE_UPLOADED = "image_uploaded"
    API_CALL = "api_call"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class BillingHistoryOrderBy(str, Enum):
    CREATED_AT = "created_at"
    PAID_AT = "paid_at"
