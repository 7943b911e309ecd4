"""Authorizations service — direct grants, checks and revocation."""

import logging

from medvault.clock import Clock, now
from medvault.config import DEFAULT_AUTHORIZATION_HOURS
from medvault.api.authorizations.dto.authorization import (
    AuthorizationCheck,
    AuthorizationRecord,
    AuthorizationStatus,
    AuthorizeDownloadResult,
    RevokeResult,
)
from medvault.api.authorizations.repositories.authorizations_repository import (
    AuthorizationsRepository,
)
from medvault.api.files.repositories.files_repository import FilesRepository
from medvault.api.users.dto.user import Role
from medvault.api.users.repositories.users_repository import UsersRepository

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 60 * 60


class AuthorizationsService:
    def __init__(
        self,
        users: UsersRepository,
        files: FilesRepository,
        authorizations: AuthorizationsRepository,
        clock: Clock = now,
    ):
        self.users = users
        self.files = files
        self.authorizations = authorizations
        self.clock = clock

    def grant(self, file_id: int, user_id: int, expires_in_hours: int) -> AuthorizationRecord:
        """Upsert an active authorization expiring ``expires_in_hours`` from now."""
        expires_at = self.clock() + int(expires_in_hours) * SECONDS_PER_HOUR
        self.authorizations.upsert(file_id, user_id, expires_at)
        self.authorizations.set_status(file_id, user_id, AuthorizationStatus.ACTIVE)
        return self.authorizations.get(file_id, user_id)

    def authorize_download(
        self,
        file_id: int,
        user_id: int,
        expires_in_hours: int = DEFAULT_AUTHORIZATION_HOURS,
    ) -> AuthorizeDownloadResult:
        """Grant a guest time-boxed access to one file without a request."""
        user = self.users.get_by_id(user_id)
        if user is None:
            return AuthorizeDownloadResult(success=False, reason="user_not_found")
        if user.role != Role.GUEST.value:
            return AuthorizeDownloadResult(success=False, reason="not_guest")
        if self.files.get_by_id(file_id) is None:
            return AuthorizeDownloadResult(success=False, reason="file_not_found")

        record = self.grant(file_id, user.id, expires_in_hours)
        logger.info(
            "Authorized user %s for file %s until %s", user.username, file_id, record.expires_at
        )
        return AuthorizeDownloadResult(
            success=True,
            username=user.username,
            file_id=file_id,
            expires_at=record.expires_at,
        )

    def check_download_authorization(self, file_id: int, user_id: int) -> AuthorizationCheck:
        return self.authorizations.is_authorized(file_id, user_id, self.clock())

    def revoke_authorization(self, file_id: int, user_id: int) -> RevokeResult:
        if not self.authorizations.set_status(file_id, user_id, AuthorizationStatus.INACTIVE):
            return RevokeResult(success=False, reason="not_found")
        logger.info("Revoked authorization of user %s for file %s", user_id, file_id)
        return RevokeResult(success=True)
