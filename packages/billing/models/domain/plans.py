"""Domain models for plan quotas and limit evaluation."""

from pydantic import BaseModel

from packages.billing.models.domain.enums import SubscriptionPlan
from packages.billing.models.domain.usage import UsageMetricsSummary


class PlanLimits(BaseModel):
    """
    Monthly caps for the four quota dimensions. -1 means unlimited.

    Also used for overages, where every value is >= 0.
    """

    regions_created: int
    places_created: int
    storage_used_mb: float
    api_calls_count: int


class PlanInfo(BaseModel):
    """Catalog entry for one plan."""

    plan: SubscriptionPlan
    limits: PlanLimits


class PlanLimitEvaluation(BaseModel):
    """Outcome of comparing one month's usage with a plan's caps."""

    limits: PlanLimits
    overages: PlanLimits
    within_limits: bool


class PlanLimitReport(PlanLimitEvaluation):
    """Limit evaluation for a user, with the usage it was computed from."""

    plan: SubscriptionPlan
    current_usage: UsageMetricsSummary
