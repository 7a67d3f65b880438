from typing import Optional
from sqlalchemy import func, select

from common.repositories.base import BaseRepository
from packages.users.models.database.user import UserEntity
from packages.users.models.domain.user import User
from common.core.otel_axiom_exporter import trace_span


class UserRepository(BaseRepository[UserEntity, User]):
    def __init__(self):
        super().__init__(UserEntity, User)

    @trace_span
    async def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup; addresses are stored as given."""
        return await self._fetch_one(
            select(UserEntity).where(func.lower(UserEntity.email) == email.strip().lower())
        )
