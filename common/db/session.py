from typing import Optional
from uuid import uuid4

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


def _async_url(url: str) -> str:
    return url.replace("postgresql://", "postgresql+asyncpg://", 1)


def _build_engine(url: str) -> AsyncEngine:
    url = _async_url(url)
    options: dict = {"echo": settings.debug}

    if not url.startswith("sqlite"):
        options["pool_pre_ping"] = True
        options["pool_recycle"] = 3600
        # asyncpg's statement cache breaks behind pgbouncer without unique names
        options["connect_args"] = {
            "prepared_statement_name_func": lambda: f"__asyncpg_{uuid4()}__",
        }
        if settings.db_use_nullpool:
            options["poolclass"] = pool.NullPool
        else:
            options["pool_size"] = settings.db_pool_size
            options["max_overflow"] = settings.db_pool_overflow

    engine = create_async_engine(url, **options)
    logger.info(
        f"Database engine for {engine.url.render_as_string(hide_password=True)} "
        f"({'NullPool' if settings.db_use_nullpool else 'pooled'})"
    )
    return engine


def _sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = _build_engine(settings.database_url)
readonly_engine: Optional[AsyncEngine] = (
    _build_engine(settings.database_readonly_url) if settings.database_readonly_url else None
)

AsyncSessionLocal = _sessionmaker(engine)
AsyncSessionLocalReadonly = _sessionmaker(readonly_engine or engine)


async def init_db():
    """Create tables when ``db_create_all`` is set. Deployed databases are provisioned separately."""
    if not settings.db_create_all:
        return

    # Entity modules must be imported so they register on the metadata
    from common.db.base import Base  # noqa: PLC0415
    import packages.users.models.database  # noqa: F401, PLC0415
    import packages.billing.models.database  # noqa: F401, PLC0415

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def dispose_engines() -> None:
    await engine.dispose()
    if readonly_engine is not None:
        await readonly_engine.dispose()
