import pytest
from unittest.mock import patch

from packages.billing.models.domain.enums import UNLIMITED, SubscriptionPlan
from packages.billing.models.domain.usage import UsageMetricsSummary
from packages.billing.services.plans_service import (
    PlansService,
    evaluate_plan_limits,
    get_plan_limits,
)


def usage(**counters) -> UsageMetricsSummary:
    return UsageMetricsSummary(month=3, year=2025, **counters)


class TestEvaluatePlanLimits:
    def test_empty_usage_is_within_every_plan(self):
        for plan in SubscriptionPlan:
            evaluation = evaluate_plan_limits(plan, usage())
            assert evaluation.within_limits is True

    def test_free_plan_over_every_cap(self):
        evaluation = evaluate_plan_limits(
            SubscriptionPlan.FREE,
            usage(
                regions_created=5,
                places_created=11,
                storage_used_mb=150.5,
                api_calls_count=1_200,
            ),
        )

        assert evaluation.overages.regions_created == 2
        assert evaluation.overages.places_created == 1
        assert evaluation.overages.storage_used_mb == 50.5
        assert evaluation.overages.api_calls_count == 200
        assert evaluation.within_limits is False

    def test_usage_at_cap_is_within_limits(self):
        evaluation = evaluate_plan_limits(
            SubscriptionPlan.STANDARD,
            usage(regions_created=20, places_created=100, api_calls_count=10_000),
        )

        assert evaluation.within_limits is True

    def test_unlimited_never_overflows(self):
        """Premium regions and places are unlimited, however high the usage."""
        evaluation = evaluate_plan_limits(
            SubscriptionPlan.PREMIUM,
            usage(regions_created=1_000_000, places_created=5_000_000),
        )

        assert evaluation.limits.regions_created == UNLIMITED
        assert evaluation.overages.regions_created == 0
        assert evaluation.overages.places_created == 0
        assert evaluation.within_limits is True

    def test_premium_storage_still_capped(self):
        evaluation = evaluate_plan_limits(
            SubscriptionPlan.PREMIUM, usage(storage_used_mb=10_001)
        )

        assert evaluation.overages.storage_used_mb == 1
        assert evaluation.within_limits is False

    def test_checkins_and_images_are_not_quotas(self):
        evaluation = evaluate_plan_limits(
            SubscriptionPlan.FREE, usage(checkins_count=10_000, images_uploaded=10_000)
        )

        assert evaluation.within_limits is True

    def test_missing_plan_is_free(self):
        assert get_plan_limits(None) == get_plan_limits(SubscriptionPlan.FREE)


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
class TestPlansService:
    @pytest.mark.asyncio
    async def test_lists_plans_cheapest_first(self, mock_start_span):
        plans = (await PlansService().get_all_plans()).value

        assert [p.plan for p in plans] == [
            SubscriptionPlan.FREE,
            SubscriptionPlan.STANDARD,
            SubscriptionPlan.PREMIUM,
        ]
        assert plans[1].limits.places_created == 100
        assert plans[2].limits.api_calls_count == 100_000
