"""Download request Data Transfer Objects."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from medvault.api.authorizations.dto.authorization import AuthorizationGrant
from medvault.config import DEFAULT_AUTHORIZATION_HOURS


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DownloadRequestResponse(BaseModel):
    id: int
    file_id: int
    user_id: int
    username: str
    message: str | None = None
    status: str
    created_at: int
    processed_by: int | None = None
    processed_at: int | None = None


class DownloadRequestListItem(DownloadRequestResponse):
    filename: str | None = None
    original_name: str | None = None
    patient_id: int | None = None
    patient_name: str | None = None
    patient_group: str | None = None


class DownloadRequestFilter(BaseModel):
    status: RequestStatus | None = None
    file_id: int | None = None
    user_id: int | None = None
    patient_name: str | None = None
    patient_group: str | None = None


class DownloadRequestPage(BaseModel):
    items: list[DownloadRequestListItem]
    total: int
    page: int
    limit: int
    total_pages: int


class CreateDownloadRequest(BaseModel):
    file_id: int = Field(ge=1)
    message: str | None = Field(default=None, max_length=1000)


class ProcessDownloadRequest(BaseModel):
    action: Literal["approve", "reject"]
    expires_in_hours: int = Field(default=DEFAULT_AUTHORIZATION_HOURS, gt=0)


class SubmitRequestResult(BaseModel):
    success: bool
    request: DownloadRequestResponse | None = None
    reason: str | None = None
    status: str | None = None
    retry_after_seconds: int | None = None


class ProcessRequestResult(BaseModel):
    success: bool
    action: Literal["approved", "rejected"] | None = None
    authorization: AuthorizationGrant | None = None
    reason: str | None = None
    status: str | None = None
