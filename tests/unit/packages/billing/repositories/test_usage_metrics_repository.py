import pytest

from packages.billing.repositories.usage_metrics_repository import (
    UsageMetricsRepository,
    month_index,
)


def test_month_index_orders_across_years():
    assert month_index(2024, 12) + 1 == month_index(2025, 1)
    assert month_index(2025, 3) > month_index(2024, 11)


class TestUsageMetricsRepository:
    @pytest.mark.asyncio
    async def test_increment_creates_then_adds(self, sample_user):
        repo = UsageMetricsRepository()

        first = await repo.increment(sample_user.id, 3, 2025, {"api_calls_count": 2})
        second = await repo.increment(
            sample_user.id, 3, 2025, {"api_calls_count": 3, "storage_used_mb": 0.25}
        )

        assert first.id == second.id
        assert second.api_calls_count == 5
        assert second.storage_used_mb == 0.25

    @pytest.mark.asyncio
    async def test_get_monthly_missing(self, sample_user):
        assert await UsageMetricsRepository().get_monthly(sample_user.id, 1, 2025) is None
