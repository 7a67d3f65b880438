"""Database models for billing."""

from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.database.payment_method import PaymentMethodEntity
from packages.billing.models.database.billing_record import BillingRecordEntity
from packages.billing.models.database.usage_metrics import UsageMetricsEntity

__all__ = [
    "SubscriptionEntity",
    "PaymentMethodEntity",
    "BillingRecordEntity",
    "UsageMetricsEntity",
]
