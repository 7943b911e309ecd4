"""Download requests service — guest request lifecycle.

Per (file, user) pair the latest request moves through::

    (none) -> pending -> approved | rejected
    rejected -> pending      once the cooldown has elapsed (a new row is appended)
    rejected -> approved     administrator override
    approved -> pending      only after the authorization has expired (new row)

An approved request can never be rejected.
"""

import logging

from medvault.clock import Clock, now
from medvault.config import DEFAULT_AUTHORIZATION_HOURS, MAX_PAGE_SIZE, REQUEST_COOLDOWN_SECONDS
from medvault.api.authorizations.dto.authorization import AuthorizationGrant
from medvault.api.authorizations.services.authorizations_service import AuthorizationsService
from medvault.api.authorizations.services.permissions import can_download_directly
from medvault.api.download_requests.dto.download_request import (
    DownloadRequestFilter,
    DownloadRequestPage,
    DownloadRequestResponse,
    ProcessRequestResult,
    RequestStatus,
    SubmitRequestResult,
)
from medvault.api.download_requests.repositories.download_requests_repository import (
    DownloadRequestsRepository,
    PendingRequestExists,
)
from medvault.api.files.repositories.files_repository import FilesRepository
from medvault.api.users.repositories.users_repository import UsersRepository

logger = logging.getLogger(__name__)

# Statuses an administrator decision may move a request out of
DECIDABLE = (RequestStatus.PENDING, RequestStatus.REJECTED)


class DownloadRequestsService:
    def __init__(
        self,
        users: UsersRepository,
        files: FilesRepository,
        requests: DownloadRequestsRepository,
        authorizations: AuthorizationsService,
        clock: Clock = now,
        cooldown_seconds: int = REQUEST_COOLDOWN_SECONDS,
    ):
        self.users = users
        self.files = files
        self.requests = requests
        self.authorizations = authorizations
        self.clock = clock
        self.cooldown_seconds = cooldown_seconds

    def submit_request(
        self,
        file_id: int,
        user_id: int,
        message: str | None = None,
    ) -> SubmitRequestResult:
        """Ask for download access to a file on behalf of a guest."""
        user = self.users.get_by_id(user_id)
        if user is None:
            return SubmitRequestResult(success=False, reason="user_not_found")
        if can_download_directly(user.role):
            return SubmitRequestResult(success=False, reason="not_needed")
        if self.files.get_by_id(file_id) is None:
            return SubmitRequestResult(success=False, reason="file_not_found")

        latest = self.requests.latest_for(file_id, user_id)
        if latest is not None:
            blocked = self._blocked_by(latest)
            if blocked is not None:
                logger.debug(
                    "Request by user %s for file %s refused: %s", user_id, file_id, blocked.reason
                )
                return blocked

        try:
            request = self.requests.insert(file_id, user_id, user.username, message)
        except PendingRequestExists:
            return SubmitRequestResult(
                success=False, reason="already_pending", status=RequestStatus.PENDING.value
            )

        logger.info("User %s requested download of file %s (request %s)", user.username, file_id, request.id)
        return SubmitRequestResult(success=True, request=request)

    def _blocked_by(self, latest: DownloadRequestResponse) -> SubmitRequestResult | None:
        """Why the latest request prevents a new one, or None when a new one is allowed."""
        if latest.status == RequestStatus.PENDING.value:
            return SubmitRequestResult(success=False, reason="already_pending", status=latest.status)

        if latest.status == RequestStatus.APPROVED.value:
            check = self.authorizations.check_download_authorization(latest.file_id, latest.user_id)
            if check.authorized:
                return SubmitRequestResult(success=False, reason="already_approved", status=latest.status)
            # Expired approvals stay in the log as approved
            return None

        if latest.status == RequestStatus.REJECTED.value:
            elapsed = self.clock() - latest.created_at
            if elapsed < self.cooldown_seconds:
                return SubmitRequestResult(
                    success=False,
                    reason="recently_rejected",
                    status=latest.status,
                    retry_after_seconds=self.cooldown_seconds - elapsed,
                )
        return None

    def process_request(
        self,
        request_id: int,
        action: str,
        admin_user_id: int,
        expires_in_hours: int = DEFAULT_AUTHORIZATION_HOURS,
    ) -> ProcessRequestResult:
        """Approve or reject a request."""
        if action not in ("approve", "reject"):
            return ProcessRequestResult(success=False, reason="invalid_action")

        request = self.requests.get_by_id(request_id)
        if request is None:
            return ProcessRequestResult(success=False, reason="not_found")

        if action == "approve":
            return self._approve(request, admin_user_id, expires_in_hours)
        return self._reject(request, admin_user_id)

    def _approve(
        self,
        request: DownloadRequestResponse,
        admin_user_id: int,
        expires_in_hours: int,
    ) -> ProcessRequestResult:
        if request.status == RequestStatus.APPROVED.value:
            return ProcessRequestResult(success=False, reason="already_approved", status=request.status)

        # Flip the request first so a losing decision never touches the authorization
        decided = self.requests.update_status(
            request.id,
            RequestStatus.APPROVED,
            processed_by=admin_user_id,
            allowed_from=DECIDABLE,
        )
        if decided is None:
            return self._lost_race(request.id, "already_approved")

        record = self.authorizations.grant(request.file_id, request.user_id, expires_in_hours)
        logger.info(
            "Request %s approved by user %s, %s may download file %s until %s",
            request.id,
            admin_user_id,
            request.username,
            request.file_id,
            record.expires_at,
        )
        return ProcessRequestResult(
            success=True,
            action="approved",
            authorization=AuthorizationGrant(
                username=request.username,
                file_id=request.file_id,
                expires_at=record.expires_at,
            ),
        )

    def _reject(self, request: DownloadRequestResponse, admin_user_id: int) -> ProcessRequestResult:
        if request.status == RequestStatus.APPROVED.value:
            return ProcessRequestResult(success=False, reason="cannot_reject_approved", status=request.status)
        if request.status not in (RequestStatus.PENDING.value, RequestStatus.REJECTED.value):
            return ProcessRequestResult(success=False, reason="already_processed", status=request.status)

        decided = self.requests.update_status(
            request.id,
            RequestStatus.REJECTED,
            processed_by=admin_user_id,
            allowed_from=DECIDABLE,
        )
        if decided is None:
            return self._lost_race(request.id, "cannot_reject_approved")

        logger.info("Request %s rejected by user %s", request.id, admin_user_id)
        return ProcessRequestResult(success=True, action="rejected")

    def _lost_race(self, request_id: int, reason_if_approved: str) -> ProcessRequestResult:
        """Result for a decision whose conditional update matched no row."""
        current = self.requests.get_by_id(request_id)
        if current is None:
            return ProcessRequestResult(success=False, reason="not_found")
        if current.status == RequestStatus.APPROVED.value:
            return ProcessRequestResult(success=False, reason=reason_if_approved, status=current.status)
        return ProcessRequestResult(success=False, reason="already_processed", status=current.status)

    def list_requests(
        self,
        filter: DownloadRequestFilter | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> DownloadRequestPage:
        return self.requests.list(filter, page=page, limit=min(limit, MAX_PAGE_SIZE))
