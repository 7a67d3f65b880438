"""Domain models for billing."""

from packages.billing.models.domain.enums import (
    UNLIMITED,
    SubscriptionPlan,
    SubscriptionStatus,
    BillingStatus,
    PaymentMethodType,
    UsageAction,
    SortOrder,
    BillingHistoryOrderBy,
)
from packages.billing.models.domain.subscription import (
    Subscription,
    SubscriptionCreateRequest,
    SubscriptionUpdateRequest,
    SubscriptionCreateModel,
    SubscriptionUpdateModel,
    SubscriptionStatusSummary,
)
from packages.billing.models.domain.billing import (
    BillingRecord,
    BillingRecordCreateRequest,
    BillingRecordCreateModel,
    BillingStatusUpdateRequest,
    BillingStatusTransition,
    BillingHistoryQuery,
    BillingHistoryPage,
)
from packages.billing.models.domain.payment_method import (
    PaymentMethod,
    PaymentMethodCreateModel,
    PaymentMethodUpdateModel,
)
from packages.billing.models.domain.usage import (
    UsageMetrics,
    UsageMetricsSummary,
    UsageDelta,
)
from packages.billing.models.domain.plans import (
    PlanLimits,
    PlanInfo,
    PlanLimitEvaluation,
    PlanLimitReport,
)

__all__ = [
    # Enums
    "UNLIMITED",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "BillingStatus",
    "PaymentMethodType",
    "UsageAction",
    "SortOrder",
    "BillingHistoryOrderBy",
    # Subscription
    "Subscription",
    "SubscriptionCreateRequest",
    "SubscriptionUpdateRequest",
    "SubscriptionCreateModel",
    "SubscriptionUpdateModel",
    "SubscriptionStatusSummary",
    # Billing records
    "BillingRecord",
    "BillingRecordCreateRequest",
    "BillingRecordCreateModel",
    "BillingStatusUpdateRequest",
    "BillingStatusTransition",
    "BillingHistoryQuery",
    "BillingHistoryPage",
    # Payment methods
    "PaymentMethod",
    "PaymentMethodCreateModel",
    "PaymentMethodUpdateModel",
    # Usage
    "UsageMetrics",
    "UsageMetricsSummary",
    "UsageDelta",
    # Plans
    "PlanLimits",
    "PlanInfo",
    "PlanLimitEvaluation",
    "PlanLimitReport",
]
