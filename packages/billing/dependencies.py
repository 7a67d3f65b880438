"""Service providers for billing routes. Overridable through ``app.dependency_overrides``."""

from packages.billing.services.billing_service import BillingService
from packages.billing.services.payment_method_service import PaymentMethodService
from packages.billing.services.plans_service import PlansService
from packages.billing.services.subscription_service import SubscriptionService
from packages.billing.services.usage_service import UsageService


def get_subscription_service() -> SubscriptionService:
    return SubscriptionService()


def get_billing_service() -> BillingService:
    return BillingService()


def get_payment_method_service() -> PaymentMethodService:
    return PaymentMethodService()


def get_usage_service() -> UsageService:
    return UsageService()


def get_plans_service() -> PlansService:
    return PlansService()
