"""File Data Transfer Objects."""

from pydantic import BaseModel


class FileResponse(BaseModel):
    id: int
    filename: str
    original_name: str
    mime_type: str
    size: int
    patient_id: int | None = None
    uploaded_by: int | None = None
    download_count: int
    created_at: int
