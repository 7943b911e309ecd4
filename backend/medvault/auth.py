"""Bearer token verification and role guards.

Tokens are issued elsewhere; they have the form ``<user_id>.<hmac>``.
"""

import hashlib
import hmac
import secrets

from fastapi import Depends, HTTPException, Request

from medvault.config import SECRET_KEY
from medvault.dependencies import get_users_repository
from medvault.api.users.dto.user import UserResponse
from medvault.api.users.repositories.users_repository import UsersRepository


def _sign(user_id: int) -> str:
    return hmac.new(SECRET_KEY.encode(), f"medvault_user:{user_id}".encode(), hashlib.sha256).hexdigest()


def create_user_token(user_id: int) -> str:
    return f"{user_id}.{_sign(user_id)}"


def _verify_token(token: str) -> int | None:
    """Return the user id the token was signed for, or None."""
    user_part, _, signature = token.partition(".")
    if not (user_part.isascii() and user_part.isdigit()) or not signature:
        return None
    user_id = int(user_part)
    if not secrets.compare_digest(signature.encode(), _sign(user_id).encode()):
        return None
    return user_id


def get_current_user(
    request: Request,
    users: UsersRepository = Depends(get_users_repository),
) -> UserResponse:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Authentication required")

    user_id = _verify_token(token.strip())
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account disabled")
    return user


def require_roles(*roles: str):
    """Dependency that admits only users holding one of ``roles``."""

    def dependency(user: UserResponse = Depends(get_current_user)) -> UserResponse:
        if user.role not in roles:
            raise HTTPException(
                status_code=403,
                detail=f"Requires one of: {', '.join(roles)}",
            )
        return user

    return dependency
