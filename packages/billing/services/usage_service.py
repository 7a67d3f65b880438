"""
Service for the monthly usage ledger and plan limit checks.
"""

import math
from datetime import datetime
from typing import Optional

from common.core.clock import Clock, ensure_utc, get_clock
from common.core.config import settings
from common.core.exceptions import (
    InvalidMonthError,
    InvalidYearError,
    ValidationError,
)
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.result import Ok, Err, Result, returns_result
from packages.auth.services.admin_guard import AdminGuard
from packages.billing.models.domain.enums import SubscriptionPlan, UsageAction
from packages.billing.models.domain.plans import PlanLimitReport
from packages.billing.models.domain.usage import UsageDelta, UsageMetricsSummary
from packages.billing.repositories.usage_metrics_repository import (
    UsageMetricsRepository,
)
from packages.billing.services.plans_service import evaluate_plan_limits
from packages.billing.services.subscription_service import SubscriptionService
from packages.users.services.user_service import UserService

logger = get_logger(__name__)


def delta_for_action(action: UsageAction, size_kb: Optional[float] = None) -> UsageDelta:
    """
    Map an event reported by another subsystem to a counter increment.

    Raises ValueError for an unknown action or a size that is not a finite number.
    """
    if action == UsageAction.REGION_CREATED:
        return UsageDelta(regions_created=1)
    if action == UsageAction.PLACE_CREATED:
        return UsageDelta(places_created=1)
    if action == UsageAction.CHECKIN_CREATED:
        return UsageDelta(checkins_count=1)
    if action == UsageAction.IMAGE_UPLOADED:
        size = 0.0 if size_kb is None else float(size_kb)
        if not math.isfinite(size):
            raise ValueError(f"Image size must be a finite number, got {size_kb!r}")
        return UsageDelta(images_uploaded=1, storage_used_mb=max(size, 0) / 1024)
    if action == UsageAction.API_CALL:
        return UsageDelta(api_calls_count=1)
    raise ValueError(f"Unknown usage action: {action}")


class UsageService:
    """Service for usage recording and reporting."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        user_service: Optional[UserService] = None,
        subscription_service: Optional[SubscriptionService] = None,
    ):
        self.clock = clock or get_clock()
        self.usage_repo = UsageMetricsRepository()
        self.user_service = user_service or UserService()
        self.subscription_service = subscription_service or SubscriptionService(
            clock=self.clock, user_service=self.user_service
        )
        self.admin_guard = AdminGuard(self.user_service)

    def _validate_period(self, month: Optional[int], year: int) -> Result:
        if month is not None and not 1 <= month <= 12:
            return Err(InvalidMonthError("Month must be between 1 and 12"))
        if year < settings.usage_baseline_year:
            return Err(
                InvalidYearError(f"Year must be {settings.usage_baseline_year} or later")
            )
        return Ok(None)

    async def _monthly_summary(
        self, user_id: int, month: int, year: int
    ) -> UsageMetricsSummary:
        metrics = await self.usage_repo.get_monthly(user_id, month, year)
        if metrics is None:
            return UsageMetricsSummary.empty(month, year)
        return UsageMetricsSummary.model_validate(metrics)

    @trace_span
    @returns_result("Failed to record usage")
    async def record_usage(self, user_id: int, delta: UsageDelta) -> Result:
        """Add non-negative deltas to the current month, creating the month's entry lazily."""
        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        now = self.clock.now()
        increments = delta.increments()
        if not increments:
            return Ok(await self._monthly_summary(user_id, now.month, now.year))

        metrics = await self.usage_repo.increment(
            user_id, now.month, now.year, increments
        )
        logger.info(
            f"Recorded usage for user {user_id} {now.year}-{now.month:02d}: {increments}"
        )
        return Ok(UsageMetricsSummary.model_validate(metrics))

    @trace_span
    async def auto_record_usage(
        self, user_id: int, action: UsageAction, size_kb: Optional[float] = None
    ) -> None:
        """
        Best-effort recording attached to another operation (region created,
        image uploaded, ...). A failure is logged and dropped; the primary
        operation never sees it.
        """
        try:
            delta = delta_for_action(action, size_kb)
        except (TypeError, ValueError) as e:
            logger.warning(
                f"Auto-record of {action} for user {user_id} skipped: {e}",
                extra={"user_id": user_id, "action": str(action)},
            )
            return

        result = await self.record_usage(user_id, delta)
        if result.is_err():
            logger.warning(
                f"Auto-record of {action.value} for user {user_id} failed: {result.error!r}",
                extra={"user_id": user_id, "action": action.value},
            )

    @trace_span
    @returns_result("Failed to get current month usage")
    async def get_current_month_usage(self, user_id: int) -> Result:
        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        now = self.clock.now()
        return Ok(await self._monthly_summary(user_id, now.month, now.year))

    @trace_span
    @returns_result("Failed to get monthly usage")
    async def get_monthly_usage(self, user_id: int, month: int, year: int) -> Result:
        """Summary for one month; a month without activity is all zeros."""
        valid = self._validate_period(month, year)
        if valid.is_err():
            return valid

        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        return Ok(await self._monthly_summary(user_id, month, year))

    @trace_span
    @returns_result("Failed to get yearly usage")
    async def get_yearly_usage(self, user_id: int, year: int) -> Result:
        """Summaries of the recorded months of ``year``, January first."""
        valid = self._validate_period(None, year)
        if valid.is_err():
            return valid

        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        metrics = await self.usage_repo.get_yearly(user_id, year)
        return Ok([UsageMetricsSummary.model_validate(m) for m in metrics])

    @trace_span
    @returns_result("Failed to get usage history")
    async def get_usage_history(
        self, user_id: int, limit: Optional[int] = None
    ) -> Result:
        """The most recent recorded months, newest first."""
        limit = settings.usage_history_default_limit if limit is None else limit
        if not 1 <= limit <= settings.usage_history_max_limit:
            return Err(
                ValidationError(
                    f"Limit must be between 1 and {settings.usage_history_max_limit}"
                )
            )

        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        return Ok(await self.usage_repo.get_history(user_id, limit))

    @trace_span
    @returns_result("Failed to check plan limits")
    async def check_plan_limits(self, user_id: int) -> Result:
        """
        Current month's usage against the user's plan.

        No subscription is evaluated as the free plan.
        """
        subscription = await self.subscription_service.get_by_user_id(user_id)
        plan = subscription.plan if subscription else SubscriptionPlan.FREE

        usage_result = await self.get_current_month_usage(user_id)
        if usage_result.is_err():
            return usage_result

        usage: UsageMetricsSummary = usage_result.value
        evaluation = evaluate_plan_limits(plan, usage)
        return Ok(
            PlanLimitReport(
                plan=plan,
                current_usage=usage,
                limits=evaluation.limits,
                overages=evaluation.overages,
                within_limits=evaluation.within_limits,
            )
        )

    @trace_span
    @returns_result("Failed to aggregate usage")
    async def get_aggregated_usage_by_plan(
        self,
        admin_user_id: int,
        plan: SubscriptionPlan,
        start_date: datetime,
        end_date: datetime,
    ) -> Result:
        """
        Totals over every user currently on ``plan`` for the calendar months
        from ``start_date`` to ``end_date`` inclusive. Admin only.
        """
        admin_result = await self.admin_guard.require_admin(admin_user_id)
        if admin_result.is_err():
            return admin_result

        start, end = ensure_utc(start_date), ensure_utc(end_date)
        if start > end:
            return Err(ValidationError("start_date must not be after end_date"))

        totals = await self.usage_repo.aggregate_by_plan(
            plan, start.year, start.month, end.year, end.month
        )
        logger.info(
            f"Aggregated {plan.value} usage for {start.year}-{start.month:02d}..{end.year}-{end.month:02d}"
        )
        return Ok(UsageMetricsSummary(month=start.month, year=start.year, **totals))
