"""
Repository for the monthly usage ledger.
"""

from typing import Optional
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.models.database.usage_metrics import UsageMetricsEntity
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.domain.usage import UsageMetrics
from packages.billing.models.domain.enums import SubscriptionPlan

logger = get_logger(__name__)

COUNTER_COLUMNS = (
    "regions_created",
    "places_created",
    "checkins_count",
    "images_uploaded",
    "storage_used_mb",
    "api_calls_count",
)


def month_index(year: int, month: int) -> int:
    """Months since year 0, so (year, month) ranges compare as integers."""
    return year * 12 + (month - 1)


class UsageMetricsRepository(BaseRepository[UsageMetricsEntity, UsageMetrics]):
    """
    Ledger access. One row per (user, year, month), enforced by a unique
    constraint; counters only move through atomic column increments.
    """

    def __init__(self):
        super().__init__(UsageMetricsEntity, UsageMetrics)

    @trace_span
    async def get_monthly(
        self, user_id: int, month: int, year: int
    ) -> Optional[UsageMetrics]:
        async with self._get_session() as session:
            result = await session.execute(
                select(UsageMetricsEntity).where(
                    UsageMetricsEntity.user_id == user_id,
                    UsageMetricsEntity.year == year,
                    UsageMetricsEntity.month == month,
                )
            )
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None

    @trace_span
    async def get_yearly(self, user_id: int, year: int) -> list[UsageMetrics]:
        """Recorded months of one year, January first."""
        async with self._get_session() as session:
            result = await session.execute(
                select(UsageMetricsEntity)
                .where(
                    UsageMetricsEntity.user_id == user_id,
                    UsageMetricsEntity.year == year,
                )
                .order_by(UsageMetricsEntity.month.asc())
            )
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def get_history(self, user_id: int, limit: int) -> list[UsageMetrics]:
        """Most recent months first."""
        async with self._get_session() as session:
            result = await session.execute(
                select(UsageMetricsEntity)
                .where(UsageMetricsEntity.user_id == user_id)
                .order_by(
                    UsageMetricsEntity.year.desc(), UsageMetricsEntity.month.desc()
                )
                .limit(limit)
            )
            return self._entities_to_domain(result.scalars().all())

    async def _apply_increments(
        self, user_id: int, month: int, year: int, increments: dict[str, float]
    ) -> bool:
        values = {
            name: getattr(UsageMetricsEntity, name) + amount
            for name, amount in increments.items()
        }

        async with self._get_session() as session:
            result = await session.execute(
                update(UsageMetricsEntity)
                .where(
                    UsageMetricsEntity.user_id == user_id,
                    UsageMetricsEntity.year == year,
                    UsageMetricsEntity.month == month,
                )
                .values(values)
            )
            await session.flush()
            return result.rowcount > 0

    async def _insert_month(
        self, user_id: int, month: int, year: int, increments: dict[str, float]
    ) -> None:
        entity = UsageMetricsEntity(
            user_id=user_id,
            month=month,
            year=year,
            **{name: increments.get(name, 0) for name in COUNTER_COLUMNS},
        )
        async with self._get_session() as session:
            session.add(entity)
            await session.flush()

    @trace_span
    async def increment(
        self, user_id: int, month: int, year: int, increments: dict[str, float]
    ) -> UsageMetrics:
        """
        Add ``increments`` to the month's counters, creating the row on first use.

        A concurrent first write for the same month makes the insert fail on
        the unique constraint; the loser then increments the winner's row.
        Must not run inside ``transaction()``.
        """
        if not await self._apply_increments(user_id, month, year, increments):
            try:
                await self._insert_month(user_id, month, year, increments)
            except IntegrityError:
                logger.info(
                    f"Usage row for user {user_id} {year}-{month:02d} created concurrently, incrementing"
                )
                await self._apply_increments(user_id, month, year, increments)

        return await self.get_monthly(user_id, month, year)

    @trace_span
    async def aggregate_by_plan(
        self,
        plan: SubscriptionPlan,
        start_year: int,
        start_month: int,
        end_year: int,
        end_month: int,
    ) -> dict[str, float]:
        """
        Sum every counter over users currently on ``plan``, for the months
        between start and end inclusive.
        """
        period = UsageMetricsEntity.year * 12 + (UsageMetricsEntity.month - 1)
        sums = [
            func.coalesce(func.sum(getattr(UsageMetricsEntity, name)), 0).label(name)
            for name in COUNTER_COLUMNS
        ]

        async with self._get_session() as session:
            result = await session.execute(
                select(*sums)
                .select_from(UsageMetricsEntity)
                .join(
                    SubscriptionEntity,
                    SubscriptionEntity.user_id == UsageMetricsEntity.user_id,
                )
                .where(
                    SubscriptionEntity.plan == plan.value,
                    period >= month_index(start_year, start_month),
                    period <= month_index(end_year, end_month),
                )
            )
            row = result.one()
            return dict(row._mapping)
