"""
Unit tests for UsageService.

The clock is pinned to 2025-03-15, so "current month" is March 2025.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import patch

from common.core.exceptions import (
    AdminPermissionRequiredError,
    InternalError,
    InvalidMonthError,
    InvalidYearError,
    UserNotFoundError,
    ValidationError,
)
from packages.billing.models.database import SubscriptionEntity, UsageMetricsEntity
from packages.billing.models.domain.enums import (
    SubscriptionPlan,
    SubscriptionStatus,
    UsageAction,
)
from packages.billing.models.domain.usage import UsageDelta
from packages.billing.services.usage_service import delta_for_action


class TestDeltaForAction:
    def test_single_counter_actions(self):
        assert delta_for_action(UsageAction.REGION_CREATED).increments() == {
            "regions_created": 1
        }
        assert delta_for_action(UsageAction.CHECKIN_CREATED).increments() == {
            "checkins_count": 1
        }
        assert delta_for_action(UsageAction.API_CALL).increments() == {
            "api_calls_count": 1
        }

    def test_image_upload_converts_kilobytes(self):
        """Image size is reported in KB and stored in MB."""
        delta = delta_for_action(UsageAction.IMAGE_UPLOADED, size_kb=2048)

        assert delta.images_uploaded == 1
        assert delta.storage_used_mb == 2.0

    def test_image_upload_without_size(self):
        delta = delta_for_action(UsageAction.IMAGE_UPLOADED)

        assert delta.increments() == {"images_uploaded": 1}

    @pytest.mark.parametrize("size_kb", [float("nan"), float("inf"), "abc"])
    def test_image_upload_rejects_bad_size(self, size_kb):
        with pytest.raises(ValueError):
            delta_for_action(UsageAction.IMAGE_UPLOADED, size_kb=size_kb)


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
class TestRecordUsage:
    """Tests for record_usage and auto_record_usage."""

    @pytest.mark.asyncio
    async def test_first_record_creates_month(
        self, mock_start_span, usage_service, sample_user
    ):
        """The month's entry is created on first use, starting from zero."""
        result = await usage_service.record_usage(
            sample_user.id, UsageDelta(regions_created=1, storage_used_mb=1.5)
        )

        summary = result.value
        assert (summary.year, summary.month) == (2025, 3)
        assert summary.regions_created == 1
        assert summary.storage_used_mb == 1.5
        assert summary.places_created == 0

    @pytest.mark.asyncio
    async def test_accumulates_existing_month(
        self, mock_start_span, usage_service, sample_usage
    ):
        result = await usage_service.record_usage(
            sample_usage.user_id, UsageDelta(places_created=3, api_calls_count=50)
        )

        summary = result.value
        assert summary.places_created == 8
        assert summary.api_calls_count == 200
        assert summary.regions_created == 2

    @pytest.mark.asyncio
    async def test_new_month_starts_new_entry(
        self, mock_start_span, usage_service, sample_usage, clock
    ):
        """Counters never carry over into the next calendar month."""
        clock.set(datetime(2025, 4, 1, 0, 0, tzinfo=timezone.utc))

        result = await usage_service.record_usage(
            sample_usage.user_id, UsageDelta(regions_created=1)
        )

        assert (result.value.year, result.value.month) == (2025, 4)
        assert result.value.regions_created == 1

        march = await usage_service.get_monthly_usage(sample_usage.user_id, 3, 2025)
        assert march.value.regions_created == 2

    @pytest.mark.asyncio
    async def test_zero_delta_is_a_read(self, mock_start_span, usage_service, sample_user):
        result = await usage_service.record_usage(sample_user.id, UsageDelta())

        assert result.value.regions_created == 0
        history = await usage_service.get_usage_history(sample_user.id)
        assert history.value == []

    def test_negative_delta_rejected(self, mock_start_span):
        with pytest.raises(ValueError):
            UsageDelta(regions_created=-1)

    @pytest.mark.asyncio
    async def test_unknown_user(self, mock_start_span, usage_service):
        result = await usage_service.record_usage(9999, UsageDelta(api_calls_count=1))

        assert isinstance(result.error, UserNotFoundError)

    @pytest.mark.asyncio
    async def test_auto_record_adds_one(self, mock_start_span, usage_service, sample_user):
        await usage_service.auto_record_usage(sample_user.id, UsageAction.PLACE_CREATED)
        await usage_service.auto_record_usage(
            sample_user.id, UsageAction.IMAGE_UPLOADED, size_kb=512
        )

        summary = (await usage_service.get_current_month_usage(sample_user.id)).value
        assert summary.places_created == 1
        assert summary.images_uploaded == 1
        assert summary.storage_used_mb == 0.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size_kb", [float("nan"), "abc", object()])
    async def test_auto_record_ignores_malformed_size(
        self, mock_start_span, usage_service, sample_user, size_kb
    ):
        await usage_service.auto_record_usage(
            sample_user.id, UsageAction.IMAGE_UPLOADED, size_kb=size_kb
        )

        summary = (await usage_service.get_current_month_usage(sample_user.id)).value
        assert summary.images_uploaded == 0
        assert summary.storage_used_mb == 0

    @pytest.mark.asyncio
    async def test_auto_record_swallows_failures(
        self, mock_start_span, usage_service, sample_user
    ):
        """A ledger failure must not reach the operation that triggered it."""
        with patch.object(
            usage_service.usage_repo,
            "increment",
            side_effect=ConnectionError("database unavailable"),
        ):
            outcome = await usage_service.auto_record_usage(
                sample_user.id, UsageAction.REGION_CREATED
            )

        assert outcome is None

    @pytest.mark.asyncio
    async def test_record_failure_is_internal_error(
        self, mock_start_span, usage_service, sample_user
    ):
        with patch.object(
            usage_service.usage_repo,
            "increment",
            side_effect=ConnectionError("database unavailable"),
        ):
            result = await usage_service.record_usage(
                sample_user.id, UsageDelta(regions_created=1)
            )

        assert isinstance(result.error, InternalError)


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
class TestUsageQueries:
    """Tests for the monthly, yearly and history reads."""

    @pytest.mark.asyncio
    async def test_current_month(self, mock_start_span, usage_service, sample_usage):
        summary = (
            await usage_service.get_current_month_usage(sample_usage.user_id)
        ).value

        assert summary.checkins_count == 7
        assert summary.images_uploaded == 3

    @pytest.mark.asyncio
    async def test_month_without_activity_is_zero(
        self, mock_start_span, usage_service, sample_user
    ):
        summary = (await usage_service.get_monthly_usage(sample_user.id, 1, 2025)).value

        assert summary.month == 1
        assert summary.year == 2025
        assert summary.api_calls_count == 0
        assert summary.storage_used_mb == 0.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("month", [0, 13])
    async def test_invalid_month(self, mock_start_span, usage_service, sample_user, month):
        result = await usage_service.get_monthly_usage(sample_user.id, month, 2025)

        assert isinstance(result.error, InvalidMonthError)
        assert result.error.status_code == 422

    @pytest.mark.asyncio
    async def test_year_before_baseline(self, mock_start_span, usage_service, sample_user):
        result = await usage_service.get_monthly_usage(sample_user.id, 6, 2023)

        assert isinstance(result.error, InvalidYearError)

    @pytest.mark.asyncio
    async def test_yearly_lists_recorded_months_in_order(
        self, mock_start_span, usage_service, sample_user, test_db
    ):
        for month in (11, 2, 7):
            test_db.add(
                UsageMetricsEntity(
                    user_id=sample_user.id, month=month, year=2024, api_calls_count=month
                )
            )
        test_db.add(UsageMetricsEntity(user_id=sample_user.id, month=1, year=2025))
        await test_db.commit()

        months = (await usage_service.get_yearly_usage(sample_user.id, 2024)).value

        assert [m.month for m in months] == [2, 7, 11]
        assert [m.api_calls_count for m in months] == [2, 7, 11]

    @pytest.mark.asyncio
    async def test_history_newest_first_with_limit(
        self, mock_start_span, usage_service, sample_user, test_db
    ):
        for year, month in ((2024, 11), (2024, 12), (2025, 1), (2025, 2)):
            test_db.add(UsageMetricsEntity(user_id=sample_user.id, month=month, year=year))
        await test_db.commit()

        history = (await usage_service.get_usage_history(sample_user.id, limit=3)).value

        assert [(m.year, m.month) for m in history] == [(2025, 2), (2025, 1), (2024, 12)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 101])
    async def test_history_limit_bounds(
        self, mock_start_span, usage_service, sample_user, limit
    ):
        result = await usage_service.get_usage_history(sample_user.id, limit=limit)

        assert isinstance(result.error, ValidationError)


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
class TestCheckPlanLimits:
    @pytest.mark.asyncio
    async def test_standard_plan_within_limits(
        self, mock_start_span, usage_service, sample_subscription, sample_usage
    ):
        report = (await usage_service.check_plan_limits(sample_usage.user_id)).value

        assert report.plan == SubscriptionPlan.STANDARD
        assert report.within_limits is True
        assert report.limits.regions_created == 20
        assert report.current_usage.places_created == 5

    @pytest.mark.asyncio
    async def test_no_subscription_uses_free_plan(
        self, mock_start_span, usage_service, sample_usage
    ):
        """Without a subscription, usage is held to free-tier caps."""
        await usage_service.record_usage(
            sample_usage.user_id, UsageDelta(regions_created=3)
        )

        report = (await usage_service.check_plan_limits(sample_usage.user_id)).value

        assert report.plan == SubscriptionPlan.FREE
        assert report.overages.regions_created == 2
        assert report.overages.places_created == 0
        assert report.within_limits is False


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
class TestAggregatedUsage:
    @pytest.mark.asyncio
    async def test_sums_users_on_plan_within_range(
        self,
        mock_start_span,
        usage_service,
        sample_subscription,
        sample_usage,
        other_user,
        admin_user,
        test_db,
    ):
        """
        Only users on the requested plan count, and only months inside the
        inclusive range.
        """
        test_db.add(
            SubscriptionEntity(
                user_id=other_user.id,
                plan=SubscriptionPlan.PREMIUM.value,
                status=SubscriptionStatus.ACTIVE.value,
                current_period_start=sample_subscription.current_period_start,
                current_period_end=sample_subscription.current_period_end,
            )
        )
        test_db.add(
            UsageMetricsEntity(
                user_id=other_user.id, month=3, year=2025, regions_created=40
            )
        )
        test_db.add(
            UsageMetricsEntity(
                user_id=sample_usage.user_id, month=1, year=2025, regions_created=4
            )
        )
        test_db.add(
            UsageMetricsEntity(
                user_id=sample_usage.user_id, month=12, year=2024, regions_created=100
            )
        )
        await test_db.commit()

        result = await usage_service.get_aggregated_usage_by_plan(
            admin_user.id,
            SubscriptionPlan.STANDARD,
            datetime(2025, 1, 10, tzinfo=timezone.utc),
            datetime(2025, 3, 1, tzinfo=timezone.utc),
        )

        totals = result.value
        assert totals.regions_created == 6
        assert totals.places_created == 5
        assert (totals.year, totals.month) == (2025, 1)

    @pytest.mark.asyncio
    async def test_empty_range_is_zero(self, mock_start_span, usage_service, admin_user):
        result = await usage_service.get_aggregated_usage_by_plan(
            admin_user.id,
            SubscriptionPlan.PREMIUM,
            datetime(2025, 1, 1, tzinfo=timezone.utc),
            datetime(2025, 2, 1, tzinfo=timezone.utc),
        )

        assert result.value.api_calls_count == 0
        assert result.value.storage_used_mb == 0

    @pytest.mark.asyncio
    async def test_inverted_range(self, mock_start_span, usage_service, admin_user):
        result = await usage_service.get_aggregated_usage_by_plan(
            admin_user.id,
            SubscriptionPlan.FREE,
            datetime(2025, 3, 1, tzinfo=timezone.utc),
            datetime(2025, 1, 1, tzinfo=timezone.utc),
        )

        assert isinstance(result.error, ValidationError)

    @pytest.mark.asyncio
    async def test_requires_admin(self, mock_start_span, usage_service, sample_user):
        result = await usage_service.get_aggregated_usage_by_plan(
            sample_user.id,
            SubscriptionPlan.FREE,
            datetime(2025, 1, 1, tzinfo=timezone.utc),
            datetime(2025, 2, 1, tzinfo=timezone.utc),
        )

        assert isinstance(result.error, AdminPermissionRequiredError)
