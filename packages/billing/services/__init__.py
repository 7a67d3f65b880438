"""Billing services."""

from packages.billing.services.plans_service import PlansService, evaluate_plan_limits
from packages.billing.services.subscription_service import SubscriptionService
from packages.billing.services.payment_method_service import PaymentMethodService
from packages.billing.services.billing_service import BillingService
from packages.billing.services.usage_service import UsageService

__all__ = [
    "PlansService",
    "evaluate_plan_limits",
    "SubscriptionService",
    "PaymentMethodService",
    "BillingService",
    "UsageService",
]
