"""Plan catalog and the plan limit evaluator."""

from typing import Optional

from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.result import Ok, Result, returns_result
from packages.billing.models.domain.enums import UNLIMITED, SubscriptionPlan
from packages.billing.models.domain.plans import (
    PlanInfo,
    PlanLimits,
    PlanLimitEvaluation,
)
from packages.billing.models.domain.usage import UsageMetricsSummary

logger = get_logger(__name__)

QUOTA_DIMENSIONS = (
    "regions_created",
    "places_created",
    "storage_used_mb",
    "api_calls_count",
)


def get_plan_limits(plan: Optional[SubscriptionPlan]) -> PlanLimits:
    """Caps for a plan. No plan (no subscription) behaves like the free tier."""
    return PlanLimits(**(plan or SubscriptionPlan.FREE).get_quota_limits())


def compute_overage(usage: float, cap: float) -> float:
    if cap == UNLIMITED:
        return 0
    return max(0, usage - cap)


def evaluate_plan_limits(
    plan: Optional[SubscriptionPlan], usage: UsageMetricsSummary
) -> PlanLimitEvaluation:
    """
    Compare one month of usage with a plan's caps.

    Pure: no I/O, no state. An unlimited cap never produces an overage, and
    usage is within limits only when every overage is zero.
    """
    limits = get_plan_limits(plan)
    overages = PlanLimits(
        **{
            name: compute_overage(getattr(usage, name), getattr(limits, name))
            for name in QUOTA_DIMENSIONS
        }
    )
    within_limits = all(getattr(overages, name) == 0 for name in QUOTA_DIMENSIONS)
    return PlanLimitEvaluation(
        limits=limits, overages=overages, within_limits=within_limits
    )


class PlansService:
    """Service for retrieving plan information."""

    @trace_span
    @returns_result("Failed to list plans")
    async def get_all_plans(self) -> Result:
        """All plans, cheapest first."""
        plans = [
            PlanInfo(plan=plan, limits=get_plan_limits(plan))
            for plan in sorted(SubscriptionPlan, key=lambda p: p.rank())
        ]
        return Ok(plans)
