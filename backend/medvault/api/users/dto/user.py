"""User Data Transfer Objects."""

from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    SUPER_ADMIN = "super-admin"
    ADMIN = "admin"
    STANDARD_USER = "standard-user"
    GUEST = "guest"


ADMIN_ROLES = (Role.SUPER_ADMIN.value, Role.ADMIN.value)


class UserResponse(BaseModel):
    id: int
    username: str
    role: str
    is_active: bool
    created_at: int
