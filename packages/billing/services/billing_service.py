"""
Service for billing history records.

A record is created pending and leaves pending exactly once. The transition
is a conditional write, so a record that is already paid (or failed,
refunded, cancelled) can never be stamped a second time.
"""

from typing import Optional

from common.core.clock import Clock, get_clock
from common.core.exceptions import (
    BillingRecordNotFoundError,
    ForbiddenOwnershipError,
    InvalidStatusTransitionError,
    SubscriptionNotFoundError,
)
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.result import Ok, Err, Result, returns_result
from packages.auth.services.admin_guard import AdminGuard
from packages.billing.models.domain.billing import (
    BillingHistoryPage,
    BillingHistoryQuery,
    BillingRecord,
    BillingRecordCreateModel,
    BillingRecordCreateRequest,
    BillingStatusTransition,
    BillingStatusUpdateRequest,
)
from packages.billing.models.domain.enums import BillingStatus
from packages.billing.repositories.billing_record_repository import (
    BillingRecordRepository,
)
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.billing.services.payment_method_service import PaymentMethodService
from packages.users.services.user_service import UserService

logger = get_logger(__name__)


class BillingService:
    def __init__(
        self,
        clock: Optional[Clock] = None,
        user_service: Optional[UserService] = None,
    ):
        self.billing_repo = BillingRecordRepository()
        self.subscription_repo = SubscriptionRepository()
        self.user_service = user_service or UserService()
        self.payment_method_service = PaymentMethodService(self.user_service)
        self.admin_guard = AdminGuard(self.user_service)
        self.clock = clock or get_clock()

    @trace_span
    @returns_result("Failed to create billing record")
    async def create_billing_record(
        self, user_id: int, request: BillingRecordCreateRequest
    ) -> Result:
        """
        Record a pending charge against the user's own subscription.

        Requires an active user, the user's subscription under the given id and,
        when one is named, a payment method the user owns.
        """
        user_result = await self.user_service.get_active_user(user_id)
        if user_result.is_err():
            return user_result

        subscription = await self.subscription_repo.get_by_user_id(user_id)
        if not subscription or subscription.id != request.subscription_id:
            return Err(SubscriptionNotFoundError("Subscription not found"))

        if request.payment_method_id is not None:
            method_result = await self.payment_method_service.get_owned_payment_method(
                user_id, request.payment_method_id
            )
            if method_result.is_err():
                return method_result

        record = await self.billing_repo.create(
            BillingRecordCreateModel(
                user_id=user_id,
                subscription_id=subscription.id,
                payment_method_id=request.payment_method_id,
                amount=request.amount,
                currency=request.currency,
                status=BillingStatus.PENDING,
                billing_period_start=request.billing_period_start,
                billing_period_end=request.billing_period_end,
            )
        )

        logger.info(
            f"Created billing record {record.id} for user {user_id}: {record.amount} {record.currency}",
            extra={"billing_record_id": record.id, "subscription_id": subscription.id},
        )
        return Ok(record)

    async def _get_owned_record(self, user_id: int, record_id: int) -> Result:
        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        record = await self.billing_repo.get(record_id)
        if not record:
            return Err(BillingRecordNotFoundError("Billing record not found"))
        if record.user_id != user_id:
            return Err(ForbiddenOwnershipError("Billing record belongs to another user"))
        return Ok(record)

    @trace_span
    @returns_result("Failed to get billing record")
    async def get_billing_record(self, user_id: int, record_id: int) -> Result:
        return await self._get_owned_record(user_id, record_id)

    @trace_span
    @returns_result("Failed to get billing history")
    async def get_billing_history(
        self, user_id: int, query: Optional[BillingHistoryQuery] = None
    ) -> Result:
        """One page of the user's records; ``count`` is the user's total."""
        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        items, count = await self.billing_repo.list_by_user(
            user_id, query or BillingHistoryQuery()
        )
        return Ok(BillingHistoryPage(items=items, count=count))

    async def _transition(
        self, record: BillingRecord, request: BillingStatusUpdateRequest
    ) -> Result:
        if request.status == BillingStatus.PENDING:
            return Err(
                InvalidStatusTransitionError("Billing records cannot return to pending")
            )
        if record.status.is_terminal():
            return Err(
                InvalidStatusTransitionError(
                    f"Billing record is already {record.status.value}"
                )
            )

        transition = BillingStatusTransition.build(request, self.clock.now())
        applied = await self.billing_repo.transition_from_pending(record.id, transition)
        if not applied:
            return Err(
                InvalidStatusTransitionError("Billing record is no longer pending")
            )

        updated = await self.billing_repo.get(record.id)
        logger.info(
            f"Billing record {record.id} moved from pending to {updated.status.value}",
            extra={"billing_record_id": record.id, "user_id": record.user_id},
        )
        return Ok(updated)

    @trace_span
    @returns_result("Failed to update billing status")
    async def update_billing_status(
        self, user_id: int, record_id: int, request: BillingStatusUpdateRequest
    ) -> Result:
        """Owner-scoped terminal transition of a pending record."""
        owned = await self._get_owned_record(user_id, record_id)
        if owned.is_err():
            return owned

        return await self._transition(owned.value, request)

    @trace_span
    @returns_result("Failed to process payment")
    async def process_billing_payment(
        self,
        admin_user_id: int,
        record_id: int,
        success: bool,
        failure_reason: Optional[str] = None,
    ) -> Result:
        """
        Back-office payment outcome (e.g. gateway reconciliation).

        Skips ownership checks; the caller must be an active admin instead.
        """
        admin_result = await self.admin_guard.require_admin(admin_user_id)
        if admin_result.is_err():
            return admin_result

        record = await self.billing_repo.get(record_id)
        if not record:
            return Err(BillingRecordNotFoundError("Billing record not found"))

        request = BillingStatusUpdateRequest(
            status=BillingStatus.PAID if success else BillingStatus.FAILED,
            failure_reason=None if success else failure_reason,
        )
        logger.info(
            f"Admin {admin_user_id} processing payment for billing record {record_id} (success={success})"
        )
        return await self._transition(record, request)
