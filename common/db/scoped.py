"""
Operation-scoped database sessions.

Usage:
    # One statement: the session is opened, committed and released around it
    async with get_session() as session:
        result = await session.execute(select(SubscriptionEntity))

    # Several writes that must land together
    async with transaction():
        await payment_method_repo.clear_default(user_id)
        await payment_method_repo.create(...)
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from common.core.otel_axiom_exporter import get_logger
from common.db.session import AsyncSessionLocal, AsyncSessionLocalReadonly
from common.db.context import bind_session, current_session, unbind_session

logger = get_logger(__name__)


def _session_factory(readonly: bool) -> async_sessionmaker:
    # Resolved per call so tests can swap the factories
    return AsyncSessionLocalReadonly if readonly else AsyncSessionLocal


@asynccontextmanager
async def _owned_session(
    readonly: bool, scope: str
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session; commit writes on clean exit, roll back on error."""
    async with _session_factory(readonly)() as session:
        logger.debug(f"{scope} session opened (readonly={readonly})")
        try:
            yield session
            if not readonly:
                await session.commit()
        except Exception as e:
            logger.error(f"{scope} rolled back: {e}")
            await session.rollback()
            raise


@asynccontextmanager
async def transaction(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """
    Explicit transaction boundary. Every repository call inside shares one
    session and commits with it; nested calls join the outer transaction.
    """
    existing = current_session(readonly)
    if existing is not None:
        yield existing
        return

    async with _owned_session(readonly, "Transaction") as session:
        token = bind_session(session, readonly)
        try:
            yield session
        finally:
            unbind_session(token, readonly)


@asynccontextmanager
async def get_session(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """Session for a single operation, or the enclosing transaction's session."""
    existing = current_session(readonly)
    if existing is not None:
        yield existing
        return

    async with _owned_session(readonly, "Operation") as session:
        yield session
