"""Download requests controller — guest requests and administrator decisions."""

from fastapi import APIRouter, Depends, Query

from medvault.auth import get_current_user, require_roles
from medvault.config import MAX_PAGE_SIZE
from medvault.dependencies import get_download_requests_service
from medvault.errors import raise_for_failure
from medvault.api.download_requests.dto.download_request import (
    CreateDownloadRequest,
    DownloadRequestFilter,
    DownloadRequestPage,
    ProcessDownloadRequest,
    ProcessRequestResult,
    RequestStatus,
    SubmitRequestResult,
)
from medvault.api.download_requests.services.download_requests_service import (
    DownloadRequestsService,
)
from medvault.api.users.dto.user import ADMIN_ROLES, UserResponse

router = APIRouter(prefix="/api/download-requests", tags=["Download Requests"])


@router.post("", response_model=SubmitRequestResult, status_code=201)
def create_download_request(
    data: CreateDownloadRequest,
    user: UserResponse = Depends(get_current_user),
    service: DownloadRequestsService = Depends(get_download_requests_service),
):
    result = service.submit_request(data.file_id, user.id, data.message)
    raise_for_failure(result)
    return result


@router.post("/{request_id}/process", response_model=ProcessRequestResult)
def process_download_request(
    request_id: int,
    data: ProcessDownloadRequest,
    admin: UserResponse = Depends(require_roles(*ADMIN_ROLES)),
    service: DownloadRequestsService = Depends(get_download_requests_service),
):
    result = service.process_request(request_id, data.action, admin.id, data.expires_in_hours)
    raise_for_failure(result)
    return result


@router.get("", response_model=DownloadRequestPage)
def list_download_requests(
    status: RequestStatus | None = None,
    file_id: int | None = None,
    user_id: int | None = None,
    patient_name: str | None = None,
    patient_group: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    user: UserResponse = Depends(get_current_user),
    service: DownloadRequestsService = Depends(get_download_requests_service),
):
    """Administrators see every request, everyone else only their own."""
    if user.role not in ADMIN_ROLES:
        user_id = user.id
    filter = DownloadRequestFilter(
        status=status,
        file_id=file_id,
        user_id=user_id,
        patient_name=patient_name,
        patient_group=patient_group,
    )
    return service.list_requests(filter, page=page, limit=limit)
