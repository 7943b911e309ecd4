"""Mapping of workflow failure reasons onto HTTP responses."""

from fastapi import HTTPException
from pydantic import BaseModel

STATUS_BY_REASON = {
    "user_not_found": 404,
    "file_not_found": 404,
    "not_found": 404,
    "not_guest": 400,
    "not_needed": 400,
    "invalid_action": 400,
    "already_pending": 409,
    "already_approved": 409,
    "cannot_reject_approved": 409,
    "already_processed": 409,
    "recently_rejected": 429,
}


def raise_for_failure(result: BaseModel) -> None:
    """Raise an HTTPException carrying the failure body if ``result`` is a failure."""
    if result.success:
        return
    body = result.model_dump(exclude_none=True)
    headers = None
    retry_after = body.get("retry_after_seconds")
    if retry_after is not None:
        headers = {"Retry-After": str(retry_after)}
    raise HTTPException(
        status_code=STATUS_BY_REASON.get(body.get("reason"), 400),
        detail=body,
        headers=headers,
    )
