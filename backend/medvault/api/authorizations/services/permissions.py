"""Role tiers for file downloads."""

from medvault.api.users.dto.user import Role

DIRECT_DOWNLOAD_ROLES = frozenset(
    {
        Role.SUPER_ADMIN.value,
        Role.ADMIN.value,
        Role.STANDARD_USER.value,
    }
)


def can_download_directly(role) -> bool:
    """Whether the role downloads without a per-file authorization.

    Guests and unknown roles must hold an authorization.
    """
    if isinstance(role, Role):
        role = role.value
    if not isinstance(role, str):
        return False
    return role in DIRECT_DOWNLOAD_ROLES
