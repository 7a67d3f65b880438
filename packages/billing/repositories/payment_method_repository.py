"""
Repository for stored payment methods.
"""

from typing import Optional
from sqlalchemy import select, update

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span
from packages.billing.models.database.payment_method import PaymentMethodEntity
from packages.billing.models.domain.payment_method import PaymentMethod


class PaymentMethodRepository(BaseRepository[PaymentMethodEntity, PaymentMethod]):
    def __init__(self):
        super().__init__(PaymentMethodEntity, PaymentMethod)

    @trace_span
    async def list_by_user(self, user_id: int) -> list[PaymentMethod]:
        """Default method first, then newest first."""
        return await self._fetch_all(
            select(PaymentMethodEntity)
            .where(PaymentMethodEntity.user_id == user_id)
            .order_by(
                PaymentMethodEntity.is_default.desc(),
                PaymentMethodEntity.created_at.desc(),
                PaymentMethodEntity.id.desc(),
            )
        )

    @trace_span
    async def get_default(self, user_id: int) -> Optional[PaymentMethod]:
        return await self._fetch_one(
            select(PaymentMethodEntity)
            .where(
                PaymentMethodEntity.user_id == user_id,
                PaymentMethodEntity.is_default.is_(True),
            )
            .order_by(PaymentMethodEntity.id.desc())
            .limit(1)
        )

    @trace_span
    async def clear_default(
        self, user_id: int, except_id: Optional[int] = None
    ) -> None:
        """Un-default every method of the user, optionally sparing one."""
        statement = update(PaymentMethodEntity).where(
            PaymentMethodEntity.user_id == user_id,
            PaymentMethodEntity.is_default.is_(True),
        )
        if except_id is not None:
            statement = statement.where(PaymentMethodEntity.id != except_id)

        async with self._get_session() as session:
            await session.execute(statement.values(is_default=False))
            await session.flush()
