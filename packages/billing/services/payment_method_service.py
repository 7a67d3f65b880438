"""
Service for stored payment methods.
"""

from typing import Optional

from common.core.exceptions import (
    ForbiddenOwnershipError,
    PaymentMethodNotFoundError,
    ValidationError,
)
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.result import Ok, Err, Result, returns_result
from common.db.scoped import transaction
from packages.billing.models.domain.payment_method import (
    PaymentMethod,
    PaymentMethodCreateModel,
    PaymentMethodUpdateModel,
)
from packages.billing.repositories.payment_method_repository import (
    PaymentMethodRepository,
)
from packages.users.services.user_service import UserService

logger = get_logger(__name__)


class PaymentMethodService:
    """At most one default method per user; every write keeps it that way."""

    def __init__(self, user_service: Optional[UserService] = None):
        self.payment_method_repo = PaymentMethodRepository()
        self.user_service = user_service or UserService()

    @trace_span
    @returns_result("Failed to add payment method")
    async def add_payment_method(
        self, user_id: int, data: PaymentMethodCreateModel
    ) -> Result:
        """Add a method for an active user. Type-specific details are required."""
        user_result = await self.user_service.get_active_user(user_id)
        if user_result.is_err():
            return user_result

        missing = data.missing_details()
        if missing:
            return Err(
                ValidationError(
                    f"Missing details for {data.type} payment method: {', '.join(missing)}"
                )
            )

        async with transaction():
            if data.is_default:
                await self.payment_method_repo.clear_default(user_id)
            payment_method = await self.payment_method_repo.create(
                data.model_copy(update={"user_id": user_id})
            )

        logger.info(
            f"Added {data.type} payment method {payment_method.id} for user {user_id}"
        )
        return Ok(payment_method)

    @trace_span
    @returns_result("Failed to list payment methods")
    async def list_payment_methods(self, user_id: int) -> Result:
        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        return Ok(await self.payment_method_repo.list_by_user(user_id))

    @trace_span
    @returns_result("Failed to get default payment method")
    async def get_default_payment_method(self, user_id: int) -> Result:
        """The default method, or ``Ok(None)`` when the user has none."""
        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        return Ok(await self.payment_method_repo.get_default(user_id))

    @trace_span
    @returns_result("Failed to find payment method")
    async def get_owned_payment_method(
        self, user_id: int, payment_method_id: int
    ) -> Result:
        """
        Payment method lookup scoped to its owner.

        Someone else's method is reported as not found, so callers cannot probe
        ids that belong to other users.
        """
        payment_method = await self.payment_method_repo.get(
            payment_method_id, user_id=user_id
        )
        if not payment_method:
            return Err(PaymentMethodNotFoundError("Payment method not found"))
        return Ok(payment_method)

    async def _get_for_owner(self, user_id: int, payment_method_id: int) -> Result:
        user_result = await self.user_service.get_user(user_id)
        if user_result.is_err():
            return user_result

        payment_method = await self.payment_method_repo.get(payment_method_id)
        if not payment_method:
            return Err(PaymentMethodNotFoundError("Payment method not found"))
        if payment_method.user_id != user_id:
            return Err(
                ForbiddenOwnershipError("Payment method belongs to another user")
            )
        return Ok(payment_method)

    @trace_span
    @returns_result("Failed to update payment method")
    async def update_payment_method(
        self, user_id: int, payment_method_id: int, data: PaymentMethodUpdateModel
    ) -> Result:
        """Only set fields are written. ``is_default=True`` makes it the sole default."""
        owned = await self._get_for_owner(user_id, payment_method_id)
        if owned.is_err():
            return owned

        async with transaction():
            if data.is_default:
                await self.payment_method_repo.clear_default(
                    user_id, except_id=payment_method_id
                )
            updated: PaymentMethod = await self.payment_method_repo.update(
                payment_method_id, data
            )

        logger.info(f"Updated payment method {payment_method_id} for user {user_id}")
        return Ok(updated)

    @trace_span
    @returns_result("Failed to delete payment method")
    async def delete_payment_method(self, user_id: int, payment_method_id: int) -> Result:
        owned = await self._get_for_owner(user_id, payment_method_id)
        if owned.is_err():
            return owned

        await self.payment_method_repo.delete(payment_method_id)
        logger.info(f"Deleted payment method {payment_method_id} for user {user_id}")
        return Ok(None)
