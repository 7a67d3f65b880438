"""
Repository for subscription management.
"""

from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import case, literal, select, update
from sqlalchemy.exc import IntegrityError

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.domain.subscription import (
    Subscription,
    SubscriptionCreateModel,
)
from packages.billing.models.domain.enums import SubscriptionStatus

logger = get_logger(__name__)


class SubscriptionRepository(BaseRepository[SubscriptionEntity, Subscription]):
    """Repository for managing user subscriptions."""

    def __init__(self):
        super().__init__(SubscriptionEntity, Subscription)

    @trace_span
    async def get_by_user_id(self, user_id: int) -> Optional[Subscription]:
        """Get the subscription owned by a user, whatever its status."""
        return await self._fetch_one(
            select(SubscriptionEntity).where(SubscriptionEntity.user_id == user_id)
        )

    @trace_span
    async def create_if_absent(
        self, create_model: SubscriptionCreateModel
    ) -> Optional[Subscription]:
        """
        Insert the user's subscription.

        Returns None when the unique user constraint rejects the row, i.e. a
        concurrent create for the same user won. Must not run inside
        ``transaction()``: the failed insert rolls back the whole session.
        """
        try:
            return await self.create(create_model)
        except IntegrityError as e:
            logger.info(
                f"Subscription insert for user {create_model.user_id} lost to an existing row: {e.orig}"
            )
            return None

    @trace_span
    async def cancel_immediately(self, subscription_id: int, now: datetime) -> bool:
        """
        End the subscription at ``now``.

        A period that has not started yet (early renewal) or starts at ``now``
        gets its start pulled just before ``now`` so the end stays after the
        start. Conditional on the row not being cancelled yet, so of two
        concurrent calls only one reports True.
        """
        start_column = SubscriptionEntity.current_period_start
        latest_start = literal(now - timedelta(microseconds=1), start_column.type)
        async with self._get_session() as session:
            result = await session.execute(
                update(SubscriptionEntity)
                .where(
                    SubscriptionEntity.id == subscription_id,
                    SubscriptionEntity.status != SubscriptionStatus.CANCELLED.value,
                )
                .values(
                    status=SubscriptionStatus.CANCELLED.value,
                    current_period_start=case(
                        (start_column >= now, latest_start), else_=start_column
                    ),
                    current_period_end=now,
                    cancel_at_period_end=False,
                )
            )
            await session.flush()
            return result.rowcount > 0
