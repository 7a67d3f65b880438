from contextlib import asynccontextmanager
from typing import Generic, TypeVar, Optional, List, Type, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select, update, delete
from pydantic import BaseModel

from common.core.otel_axiom_exporter import trace_span
from common.db.scoped import get_session

EntityType = TypeVar("EntityType")
DomainModelType = TypeVar("DomainModelType")
CreateModelType = TypeVar("CreateModelType", bound=BaseModel)
UpdateModelType = TypeVar("UpdateModelType", bound=BaseModel)


class BaseRepository(Generic[EntityType, DomainModelType]):
    """
    Generic CRUD over one entity, returning pydantic domain models.

    Every call runs in its own short-lived session (see ``common.db.scoped``)
    unless an enclosing ``transaction()`` provides one. Reads ask for the
    read-only session, which joins an enclosing write transaction.
    """

    def __init__(
        self,
        entity_class: Type[EntityType],
        domain_class: Type[DomainModelType],
    ):
        self.entity_class = entity_class
        self.domain_class = domain_class

    @asynccontextmanager
    async def _get_session(
        self, readonly: bool = False
    ) -> AsyncGenerator[AsyncSession, None]:
        async with get_session(readonly=readonly) as session:
            yield session

    def _owned_by(self, query: Select, user_id: Optional[int]) -> Select:
        """Restrict a query to rows of one user; no-op for ``None``."""
        if user_id is None:
            return query
        return query.where(self.entity_class.user_id == user_id)

    def _entity_to_domain(self, entity: EntityType) -> DomainModelType:
        return self.domain_class.model_validate(entity)

    def _entities_to_domain(self, entities: List[EntityType]) -> List[DomainModelType]:
        return [self._entity_to_domain(entity) for entity in entities]

    async def _fetch_one(self, query: Select) -> Optional[DomainModelType]:
        async with self._get_session(readonly=True) as session:
            entity = (await session.execute(query)).scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None

    async def _fetch_all(self, query: Select) -> List[DomainModelType]:
        async with self._get_session(readonly=True) as session:
            return self._entities_to_domain((await session.execute(query)).scalars().all())

    @trace_span
    async def get(
        self, id: int, user_id: Optional[int] = None
    ) -> Optional[DomainModelType]:
        """Row by id; with ``user_id`` it must also belong to that user."""
        query = select(self.entity_class).where(self.entity_class.id == id)
        return await self._fetch_one(self._owned_by(query, user_id))

    @trace_span
    async def create(self, create_model: CreateModelType) -> DomainModelType:
        """Insert from a create model. Unset optional fields fall back to column defaults."""
        entity = self.entity_class(**create_model.model_dump(exclude_none=True))
        async with self._get_session() as session:
            session.add(entity)
            await session.flush()
            await session.refresh(entity)
            return self._entity_to_domain(entity)

    @trace_span
    async def update(
        self, id: int, update_model: UpdateModelType
    ) -> Optional[DomainModelType]:
        """Write only the fields set on ``update_model``. None if the row is gone."""
        values = update_model.model_dump(exclude_unset=True)
        async with self._get_session() as session:
            if values:
                result = await session.execute(
                    update(self.entity_class)
                    .where(self.entity_class.id == id)
                    .values(values)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    return None
            entity = await session.get(self.entity_class, id, populate_existing=True)
            return self._entity_to_domain(entity) if entity else None

    @trace_span
    async def delete(self, id: int) -> bool:
        async with self._get_session() as session:
            result = await session.execute(
                delete(self.entity_class).where(self.entity_class.id == id)
            )
            await session.flush()
            return result.rowcount > 0
