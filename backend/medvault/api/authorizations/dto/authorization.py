"""Download authorization Data Transfer Objects."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from medvault.config import DEFAULT_AUTHORIZATION_HOURS


class AuthorizationStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AuthorizationRecord(BaseModel):
    id: int
    file_id: int
    user_id: int
    expires_at: int
    status: str
    created_at: int
    updated_at: int


class AuthorizationCheck(BaseModel):
    authorized: bool
    reason: Literal["not_authorized", "expired"] | None = None


class AccessDecision(BaseModel):
    granted: bool
    reason: Literal["not_authorized", "expired"] | None = None


class AuthorizeDownloadRequest(BaseModel):
    file_id: int = Field(ge=1)
    user_id: int = Field(ge=1)
    expires_in_hours: int = Field(default=DEFAULT_AUTHORIZATION_HOURS, gt=0)


class AuthorizationGrant(BaseModel):
    username: str
    file_id: int
    expires_at: int


class AuthorizeDownloadResult(BaseModel):
    success: bool
    username: str | None = None
    file_id: int | None = None
    expires_at: int | None = None
    reason: str | None = None


class RevokeResult(BaseModel):
    success: bool
    reason: str | None = None
