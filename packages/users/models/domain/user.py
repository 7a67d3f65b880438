from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr

from packages.users.models.domain.enums import UserRole, UserStatus


class User(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str] = None
    role: UserRole = UserRole.VISITOR
    status: UserStatus = UserStatus.ACTIVE
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserCreateModel(BaseModel):
    """Model for creating a new user."""

    model_config = ConfigDict(use_enum_values=True)

    email: EmailStr
    full_name: Optional[str] = None
    role: UserRole = UserRole.VISITOR
    status: UserStatus = UserStatus.ACTIVE


class UserUpdateModel(BaseModel):
    """Model for updating a user."""

    model_config = ConfigDict(use_enum_values=True)

    full_name: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
