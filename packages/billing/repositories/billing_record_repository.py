"""
Repository for billing history records.
"""

from sqlalchemy import select, update, func

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span
from packages.billing.models.database.billing_record import BillingRecordEntity
from packages.billing.models.domain.billing import (
    BillingRecord,
    BillingHistoryQuery,
    BillingStatusTransition,
)
from packages.billing.models.domain.enums import (
    BillingStatus,
    BillingHistoryOrderBy,
    SortOrder,
)


class BillingRecordRepository(BaseRepository[BillingRecordEntity, BillingRecord]):
    def __init__(self):
        super().__init__(BillingRecordEntity, BillingRecord)

    @trace_span
    async def list_by_user(
        self, user_id: int, query: BillingHistoryQuery
    ) -> tuple[list[BillingRecord], int]:
        """One page of a user's records plus the user's total record count."""
        order_column = (
            BillingRecordEntity.paid_at
            if query.order_by == BillingHistoryOrderBy.PAID_AT
            else BillingRecordEntity.created_at
        )
        if query.order == SortOrder.ASC:
            ordering = (order_column.asc(), BillingRecordEntity.id.asc())
        else:
            ordering = (order_column.desc(), BillingRecordEntity.id.desc())

        async with self._get_session() as session:
            result = await session.execute(
                select(BillingRecordEntity)
                .where(BillingRecordEntity.user_id == user_id)
                .order_by(*ordering)
                .offset(query.offset)
                .limit(query.limit)
            )
            records = self._entities_to_domain(result.scalars().all())

            count_result = await session.execute(
                select(func.count(BillingRecordEntity.id)).where(
                    BillingRecordEntity.user_id == user_id
                )
            )
            return records, count_result.scalar_one()

    @trace_span
    async def transition_from_pending(
        self, record_id: int, transition: BillingStatusTransition
    ) -> bool:
        """
        Apply a terminal transition only if the record is still pending.

        Returns False when the record already left pending, including when a
        concurrent transition got there first.
        """
        async with self._get_session() as session:
            result = await session.execute(
                update(BillingRecordEntity)
                .where(
                    BillingRecordEntity.id == record_id,
                    BillingRecordEntity.status == BillingStatus.PENDING.value,
                )
                .values(transition.model_dump(exclude_none=True))
            )
            await session.flush()
            return result.rowcount > 0
