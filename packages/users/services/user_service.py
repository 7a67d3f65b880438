from common.core.exceptions import (
    UserInactiveError,
    UserNotFoundError,
    ValidationError,
)
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.result import Ok, Err, Result, returns_result
from packages.users.models.domain.user import User, UserCreateModel
from packages.users.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class UserService:
    """User lookup used by the billing core, plus creation for onboarding."""

    def __init__(self):
        self.user_repo = UserRepository()

    @trace_span
    @returns_result("Failed to create user")
    async def create_user(self, user_data: UserCreateModel) -> Result:
        logger.info(f"Creating user: {user_data.email}")

        existing = await self.user_repo.get_by_email(user_data.email)
        if existing:
            return Err(
                ValidationError(f"User with email '{user_data.email}' already exists")
            )

        user = await self.user_repo.create(user_data)
        logger.info(f"Created user with ID: {user.id}")
        return Ok(user)

    @trace_span
    @returns_result("Failed to find user")
    async def get_user(self, user_id: int) -> Result:
        """Get a user by ID, failing with UserNotFoundError when absent."""
        user = await self.user_repo.get(user_id)
        if not user:
            return Err(UserNotFoundError("User not found"))
        return Ok(user)

    @trace_span
    @returns_result("Failed to find user")
    async def get_active_user(self, user_id: int) -> Result:
        """Get a user that exists and whose account is active."""
        result = await self.get_user(user_id)
        if result.is_err():
            return result

        user: User = result.value
        if not user.is_active():
            return Err(UserInactiveError("User account is not active"))
        return Ok(user)
