"""Access check performed at download time."""

from medvault.api.authorizations.dto.authorization import AccessDecision
from medvault.api.authorizations.repositories.authorizations_repository import (
    AuthorizationsRepository,
)
from medvault.api.authorizations.services.permissions import can_download_directly
from medvault.api.files.dto.file import FileResponse
from medvault.api.users.dto.user import UserResponse
from medvault.clock import Clock, now


def check_access(
    file: FileResponse,
    user: UserResponse,
    authorizations: AuthorizationsRepository,
    clock: Clock = now,
) -> AccessDecision:
    if can_download_directly(user.role):
        return AccessDecision(granted=True)
    check = authorizations.is_authorized(file.id, user.id, clock())
    if check.authorized:
        return AccessDecision(granted=True)
    return AccessDecision(granted=False, reason=check.reason)
