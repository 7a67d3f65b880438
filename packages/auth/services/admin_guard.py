"""
Admin guard shared by every privileged billing operation.

Checks run in a fixed order so callers always see the most specific failure:
missing user, then inactive account, then missing admin role.
"""

from typing import Optional

from common.core.exceptions import AdminPermissionRequiredError
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.result import Ok, Err, Result, returns_result
from packages.users.models.domain.user import User
from packages.users.services.user_service import UserService

logger = get_logger(__name__)


class AdminGuard:
    def __init__(self, user_service: Optional[UserService] = None):
        self.user_service = user_service or UserService()

    @trace_span
    @returns_result("Failed to verify admin permissions")
    async def require_admin(self, user_id: int) -> Result:
        result = await self.user_service.get_active_user(user_id)
        if result.is_err():
            return result

        user: User = result.value
        if not user.is_admin():
            logger.warning(f"User {user_id} attempted an admin operation")
            return Err(AdminPermissionRequiredError("Admin permissions required"))
        return Ok(user)
