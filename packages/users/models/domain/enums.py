from enum import Enum


class UserRole(str, Enum):
    VISITOR = "visitor"
    EDITOR = "editor"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"
