"""Files controller — download authorization routes."""

from fastapi import APIRouter, Depends, HTTPException, status

from medvault.auth import get_current_user, require_roles
from medvault.clock import Clock
from medvault.dependencies import (
    get_authorizations_repository,
    get_authorizations_service,
    get_clock,
    get_files_repository,
)
from medvault.errors import raise_for_failure
from medvault.api.authorizations.dto.authorization import (
    AccessDecision,
    AuthorizationCheck,
    AuthorizeDownloadRequest,
    AuthorizeDownloadResult,
)
from medvault.api.authorizations.repositories.authorizations_repository import (
    AuthorizationsRepository,
)
from medvault.api.authorizations.services.access_service import check_access
from medvault.api.authorizations.services.authorizations_service import AuthorizationsService
from medvault.api.files.repositories.files_repository import FilesRepository
from medvault.api.users.dto.user import ADMIN_ROLES, Role, UserResponse

router = APIRouter(prefix="/api/files", tags=["Files"])


@router.post("/authorize-download", response_model=AuthorizeDownloadResult)
def authorize_download(
    data: AuthorizeDownloadRequest,
    _: UserResponse = Depends(require_roles(Role.SUPER_ADMIN.value)),
    service: AuthorizationsService = Depends(get_authorizations_service),
):
    """Grant a guest time-boxed access to a file directly."""
    result = service.authorize_download(data.file_id, data.user_id, data.expires_in_hours)
    raise_for_failure(result)
    return result


@router.get("/{file_id}/authorizations/{user_id}", response_model=AuthorizationCheck)
def check_download_authorization(
    file_id: int,
    user_id: int,
    _: UserResponse = Depends(require_roles(*ADMIN_ROLES)),
    service: AuthorizationsService = Depends(get_authorizations_service),
):
    return service.check_download_authorization(file_id, user_id)


@router.delete("/{file_id}/authorizations/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_authorization(
    file_id: int,
    user_id: int,
    _: UserResponse = Depends(require_roles(Role.SUPER_ADMIN.value)),
    service: AuthorizationsService = Depends(get_authorizations_service),
):
    raise_for_failure(service.revoke_authorization(file_id, user_id))


@router.get("/{file_id}/access", response_model=AccessDecision)
def get_access(
    file_id: int,
    user: UserResponse = Depends(get_current_user),
    files: FilesRepository = Depends(get_files_repository),
    authorizations: AuthorizationsRepository = Depends(get_authorizations_repository),
    clock: Clock = Depends(get_clock),
):
    """Whether the caller may download the file right now."""
    file = files.get_by_id(file_id)
    if not file:
        raise HTTPException(status_code=404, detail="File not found")
    return check_access(file, user, authorizations, clock)
