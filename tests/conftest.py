# Shared pytest configuration and fixtures for all test types
import pytest
import pytest_asyncio
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from api.main import app
from common.core.clock import FixedClock
from common.db.base import Base
from common.providers.caching.memory_cache import MemoryCache
from packages.billing.dependencies import (
    get_billing_service,
    get_payment_method_service,
    get_subscription_service,
    get_usage_service,
)
from packages.billing.models.database import (
    BillingRecordEntity,
    PaymentMethodEntity,
    SubscriptionEntity,
    UsageMetricsEntity,
)
from packages.billing.models.domain.billing import BillingRecord
from packages.billing.models.domain.enums import (
    BillingStatus,
    PaymentMethodType,
    SubscriptionPlan,
    SubscriptionStatus,
)
from packages.billing.models.domain.payment_method import PaymentMethod
from packages.billing.models.domain.subscription import Subscription
from packages.billing.services.billing_service import BillingService
from packages.billing.services.payment_method_service import PaymentMethodService
from packages.billing.services.subscription_service import SubscriptionService
from packages.billing.services.usage_service import UsageService
from packages.users.models.database.user import UserEntity
from packages.users.models.domain.enums import UserRole, UserStatus
from packages.users.models.domain.user import User

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# 2025-03-15 10:30:00 UTC
FIXED_NOW = datetime(2025, 3, 15, 10, 30, tzinfo=timezone.utc)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine and initialize schema."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_connection(test_engine):
    """Create test connection with outer transaction for rollback isolation."""
    async with test_engine.connect() as connection:
        trans = await connection.begin()
        yield connection
        await trans.rollback()


@pytest_asyncio.fixture(scope="function")
async def test_session_factory(test_connection):
    """Create session factory bound to test connection.

    Using join_transaction_mode="create_savepoint" so nested transaction()
    calls create savepoints instead of real nested transactions.
    """
    return async_sessionmaker(
        bind=test_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )


@pytest_asyncio.fixture(scope="function")
async def test_db(test_session_factory):
    """Create a test database session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function", autouse=True)
async def patch_lazy_sessions(test_session_factory, monkeypatch):
    """
    Patch session factories to use test database.

    This allows real transaction() and get_session() to run with proper
    commit/rollback/ContextVar semantics while using the test database.
    """
    monkeypatch.setattr("common.db.scoped.AsyncSessionLocal", test_session_factory)
    monkeypatch.setattr(
        "common.db.scoped.AsyncSessionLocalReadonly", test_session_factory
    )


@pytest.fixture(autouse=True)
def memory_cache(monkeypatch):
    """Fresh in-process cache per test; ids restart with every test database."""
    cache = MemoryCache()
    monkeypatch.setattr("common.providers.caching.factory._cache_provider", cache)
    return cache


@pytest.fixture
def clock():
    """Clock pinned to FIXED_NOW; tests move it with ``clock.advance(days=...)``."""
    return FixedClock(FIXED_NOW)


@pytest.fixture
def subscription_service(clock):
    return SubscriptionService(clock=clock)


@pytest.fixture
def billing_service(clock):
    return BillingService(clock=clock)


@pytest.fixture
def payment_method_service():
    return PaymentMethodService()


@pytest.fixture
def usage_service(clock):
    return UsageService(clock=clock)


async def _add_user(test_db: AsyncSession, email: str, role: str, status: str) -> User:
    user = UserEntity(email=email, full_name="Test User", role=role, status=status)
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return User.model_validate(user)


@pytest_asyncio.fixture(scope="function")
async def sample_user(test_db: AsyncSession):
    """Active regular user."""
    return await _add_user(
        test_db, "user@example.com", UserRole.VISITOR.value, UserStatus.ACTIVE.value
    )


@pytest_asyncio.fixture(scope="function")
async def other_user(test_db: AsyncSession):
    """Second active user, for ownership checks."""
    return await _add_user(
        test_db, "other@example.com", UserRole.EDITOR.value, UserStatus.ACTIVE.value
    )


@pytest_asyncio.fixture(scope="function")
async def inactive_user(test_db: AsyncSession):
    """Suspended user."""
    return await _add_user(
        test_db,
        "suspended@example.com",
        UserRole.VISITOR.value,
        UserStatus.SUSPENDED.value,
    )


@pytest_asyncio.fixture(scope="function")
async def admin_user(test_db: AsyncSession):
    """Active admin."""
    return await _add_user(
        test_db, "admin@example.com", UserRole.ADMIN.value, UserStatus.ACTIVE.value
    )


@pytest_asyncio.fixture(scope="function")
async def sample_subscription(test_db: AsyncSession, sample_user):
    """Active standard subscription for sample_user, 30 days from FIXED_NOW."""
    subscription = SubscriptionEntity(
        user_id=sample_user.id,
        plan=SubscriptionPlan.STANDARD.value,
        status=SubscriptionStatus.ACTIVE.value,
        current_period_start=FIXED_NOW,
        current_period_end=FIXED_NOW + timedelta(days=30),
        cancel_at_period_end=False,
    )
    test_db.add(subscription)
    await test_db.commit()
    await test_db.refresh(subscription)
    return Subscription.model_validate(subscription)


@pytest_asyncio.fixture(scope="function")
async def sample_payment_method(test_db: AsyncSession, sample_user):
    """Default credit card for sample_user."""
    payment_method = PaymentMethodEntity(
        user_id=sample_user.id,
        type=PaymentMethodType.CREDIT_CARD.value,
        is_default=True,
        card_last4="4242",
        card_brand="visa",
        expiry_month=12,
        expiry_year=2030,
    )
    test_db.add(payment_method)
    await test_db.commit()
    await test_db.refresh(payment_method)
    return PaymentMethod.model_validate(payment_method)


@pytest_asyncio.fixture(scope="function")
async def pending_billing_record(test_db: AsyncSession, sample_subscription):
    """Pending 29.99 USD charge for the sample subscription's period."""
    record = BillingRecordEntity(
        user_id=sample_subscription.user_id,
        subscription_id=sample_subscription.id,
        amount=Decimal("29.99"),
        currency="USD",
        status=BillingStatus.PENDING.value,
        billing_period_start=sample_subscription.current_period_start,
        billing_period_end=sample_subscription.current_period_end,
    )
    test_db.add(record)
    await test_db.commit()
    await test_db.refresh(record)
    return BillingRecord.model_validate(record)


@pytest_asyncio.fixture(scope="function")
async def sample_usage(test_db: AsyncSession, sample_user):
    """Usage ledger row for sample_user in FIXED_NOW's month."""
    usage = UsageMetricsEntity(
        user_id=sample_user.id,
        month=FIXED_NOW.month,
        year=FIXED_NOW.year,
        regions_created=2,
        places_created=5,
        checkins_count=7,
        images_uploaded=3,
        storage_used_mb=12.5,
        api_calls_count=150,
    )
    test_db.add(usage)
    await test_db.commit()
    await test_db.refresh(usage)
    return usage


@pytest.fixture
def auth_headers():
    """Build the identity header the upstream gateway would set."""

    def build(user_id: int) -> dict[str, str]:
        return {"X-User-Id": str(user_id)}

    return build


@pytest_asyncio.fixture(scope="function")
async def client(clock):
    """Create a test client whose services read the fixed clock."""
    app.dependency_overrides[get_subscription_service] = lambda: SubscriptionService(
        clock=clock
    )
    app.dependency_overrides[get_billing_service] = lambda: BillingService(clock=clock)
    app.dependency_overrides[get_payment_method_service] = lambda: PaymentMethodService()
    app.dependency_overrides[get_usage_service] = lambda: UsageService(clock=clock)

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
