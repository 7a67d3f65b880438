"""
Service for the subscription lifecycle.

States: (none) -> trial -> active -> expired | cancelled. Deferred
cancellation only raises ``cancel_at_period_end``; immediate cancellation
ends the period at the cancellation instant. Renewal always lands on active.
"""

from typing import Optional

from common.core.clock import Clock, add_days, get_clock
from common.core.config import settings
from common.core.exceptions import (
    SubscriptionAlreadyCancelledError,
    SubscriptionAlreadyExistsError,
    SubscriptionNotFoundError,
    ValidationError,
)
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.result import Ok, Err, Result, returns_result
from common.providers.caching.decorators import cache, invalidate
from packages.billing.cache_keys import subscription_by_user_key
from packages.billing.models.domain.enums import SubscriptionPlan, SubscriptionStatus
from packages.billing.models.domain.subscription import (
    Subscription,
    SubscriptionCreateModel,
    SubscriptionCreateRequest,
    SubscriptionStatusSummary,
    SubscriptionUpdateModel,
    SubscriptionUpdateRequest,
)
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.users.services.user_service import UserService

logger = get_logger(__name__)

MIN_PERIOD_DAYS = 1
MAX_PERIOD_DAYS = 365


class SubscriptionService:
    """Service for subscription management."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        user_service: Optional[UserService] = None,
    ):
        self.subscription_repo = SubscriptionRepository()
        self.user_service = user_service or UserService()
        self.clock = clock or get_clock()

    @trace_span
    @cache(
        model_type=Subscription,
        ttl=settings.subscription_cache_ttl,
        key_generator=subscription_by_user_key,
    )
    async def get_by_user_id(self, user_id: int) -> Optional[Subscription]:
        """
        Read-side lookup. Cached; every write below invalidates it.

        The entry is stored after the database read, so a write that
        invalidates between the read and the store leaves a stale entry.
        ``subscription_cache_ttl`` bounds how long it can be served.
        """
        return await self.subscription_repo.get_by_user_id(user_id)

    @trace_span
    @returns_result("Failed to create subscription")
    async def create_subscription(self, request: SubscriptionCreateRequest) -> Result:
        """
        Open the user's subscription slot.

        A user gets one subscription for the lifetime of the account: an
        existing row in any status, expired and cancelled included, blocks
        creation. Lapsed subscriptions come back through renewal.
        """
        logger.info(
            f"Creating subscription for user {request.user_id}, plan: {request.plan.value}"
        )

        user_result = await self.user_service.get_active_user(request.user_id)
        if user_result.is_err():
            return user_result

        existing = await self.subscription_repo.get_by_user_id(request.user_id)
        if existing:
            return Err(
                SubscriptionAlreadyExistsError(
                    "Subscription already exists for this user"
                )
            )

        now = self.clock.now()
        subscription = await self.subscription_repo.create_if_absent(
            SubscriptionCreateModel(
                user_id=request.user_id,
                plan=request.plan,
                status=request.status,
                current_period_start=now,
                current_period_end=add_days(now, request.period_length_days),
                cancel_at_period_end=False,
            )
        )
        if subscription is None:
            return Err(
                SubscriptionAlreadyExistsError(
                    "Subscription already exists for this user"
                )
            )

        await invalidate(subscription_by_user_key(request.user_id))
        logger.info(
            f"Created subscription {subscription.id} for user {request.user_id}",
            extra={
                "subscription_id": subscription.id,
                "user_id": request.user_id,
                "plan": request.plan.value,
            },
        )
        return Ok(subscription)

    @trace_span
    @returns_result("Failed to get subscription")
    async def get_subscription(self, user_id: int) -> Result:
        """The user's subscription, or ``Ok(None)`` when there is none."""
        return Ok(await self.get_by_user_id(user_id))

    @trace_span
    @returns_result("Failed to get subscription status")
    async def get_subscription_status(self, user_id: int) -> Result:
        subscription = await self.get_by_user_id(user_id)
        return Ok(SubscriptionStatusSummary.evaluate(subscription, self.clock.now()))

    @trace_span
    @returns_result("Failed to check subscription permissions")
    async def check_subscription_permissions(
        self, user_id: int, required_plan: SubscriptionPlan = SubscriptionPlan.FREE
    ) -> Result:
        """
        Whether the user may use features of ``required_plan``.

        Free features need nothing. Anything above needs a subscription that
        currently grants access on a plan at least as high.
        """
        if required_plan == SubscriptionPlan.FREE:
            return Ok(True)

        subscription = await self.get_by_user_id(user_id)
        if subscription is None or not subscription.has_access(self.clock.now()):
            return Ok(False)

        return Ok(subscription.plan.includes(required_plan))

    @trace_span
    @returns_result("Failed to update subscription")
    async def update_subscription(
        self, user_id: int, request: SubscriptionUpdateRequest
    ) -> Result:
        """
        Partial update. ``extend_days`` is added to the current period end,
        so a plan change and extra runway land in one write.
        """
        subscription = await self.subscription_repo.get_by_user_id(user_id)
        if not subscription:
            return Err(SubscriptionNotFoundError("Subscription not found"))

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        extend_days = changes.pop("extend_days", None)
        if extend_days:
            changes["current_period_end"] = add_days(
                subscription.current_period_end, extend_days
            )

        updated = await self.subscription_repo.update(
            subscription.id, SubscriptionUpdateModel(**changes)
        )
        await invalidate(subscription_by_user_key(user_id))

        logger.info(
            f"Updated subscription {subscription.id} fields: {sorted(changes)}",
            extra={"subscription_id": subscription.id, "user_id": user_id},
        )
        return Ok(updated)

    @trace_span
    @returns_result("Failed to cancel subscription")
    async def cancel_subscription(
        self, user_id: int, immediately: bool = False
    ) -> Result:
        """
        Cancel the user's subscription.

        Deferred (default): flag cancel_at_period_end, keep status and period.
        Immediate: status cancelled, period ends now, flag cleared. Repeating
        an immediate cancel, or losing a race to one, is
        SubscriptionAlreadyCancelledError.
        """
        subscription = await self.subscription_repo.get_by_user_id(user_id)
        if not subscription:
            return Err(SubscriptionNotFoundError("Subscription not found"))

        if immediately:
            cancelled = await self.subscription_repo.cancel_immediately(
                subscription.id, self.clock.now()
            )
            if not cancelled:
                await invalidate(subscription_by_user_key(user_id))
                return Err(
                    SubscriptionAlreadyCancelledError("Subscription already cancelled")
                )
            updated = await self.subscription_repo.get(subscription.id)
        else:
            updated = await self.subscription_repo.update(
                subscription.id, SubscriptionUpdateModel(cancel_at_period_end=True)
            )

        await invalidate(subscription_by_user_key(user_id))
        logger.info(
            f"Cancelled subscription {subscription.id} (immediately={immediately})",
            extra={"subscription_id": subscription.id, "user_id": user_id},
        )
        return Ok(updated)

    @trace_span
    @returns_result("Failed to renew subscription")
    async def renew_subscription(
        self, user_id: int, period_length_days: Optional[int] = None
    ) -> Result:
        """
        Start the next period and force the subscription back to active.

        The new period starts at the old end if that is still ahead,
        otherwise now, so a lapsed subscription is never back-dated.
        """
        days = (
            settings.default_period_days
            if period_length_days is None
            else period_length_days
        )
        if not MIN_PERIOD_DAYS <= days <= MAX_PERIOD_DAYS:
            return Err(
                ValidationError(
                    f"Period length must be between {MIN_PERIOD_DAYS} and {MAX_PERIOD_DAYS} days"
                )
            )

        subscription = await self.subscription_repo.get_by_user_id(user_id)
        if not subscription:
            return Err(SubscriptionNotFoundError("Subscription not found"))

        new_start = max(subscription.current_period_end, self.clock.now())
        updated = await self.subscription_repo.update(
            subscription.id,
            SubscriptionUpdateModel(
                status=SubscriptionStatus.ACTIVE,
                current_period_start=new_start,
                current_period_end=add_days(new_start, days),
                cancel_at_period_end=False,
            ),
        )
        await invalidate(subscription_by_user_key(user_id))

        logger.info(
            f"Renewed subscription {subscription.id} until {updated.current_period_end.isoformat()}",
            extra={"subscription_id": subscription.id, "user_id": user_id},
        )
        return Ok(updated)
