"""Billing repositories."""

from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.billing.repositories.billing_record_repository import (
    BillingRecordRepository,
)
from packages.billing.repositories.payment_method_repository import (
    PaymentMethodRepository,
)
from packages.billing.repositories.usage_metrics_repository import (
    UsageMetricsRepository,
)

__all__ = [
    "SubscriptionRepository",
    "BillingRecordRepository",
    "PaymentMethodRepository",
    "UsageMetricsRepository",
]
