"""Files repository — data access layer."""

from medvault.clock import now
from medvault.database import Database
from medvault.api.files.dto.file import FileResponse
from medvault.api.files.orm.file_model import FileModel


def _model_to_dto(model: FileModel) -> FileResponse:
    return FileResponse(
        id=model.id,
        filename=model.filename,
        original_name=model.original_name,
        mime_type=model.mime_type,
        size=model.size or 0,
        patient_id=model.patient_id,
        uploaded_by=model.uploaded_by,
        download_count=model.download_count or 0,
        created_at=model.created_at,
    )


class FilesRepository:
    def __init__(self, db: Database):
        self.db = db

    def get_by_id(self, file_id: int) -> FileResponse | None:
        """Return the file unless it does not exist or was soft-deleted."""
        with self.db.session() as session:
            model = (
                session.query(FileModel)
                .filter(FileModel.id == file_id, FileModel.is_deleted.is_(False))
                .first()
            )
            return _model_to_dto(model) if model else None

    def create(
        self,
        filename: str,
        original_name: str | None = None,
        mime_type: str = "application/octet-stream",
        size: int = 0,
        patient_id: int | None = None,
        uploaded_by: int | None = None,
    ) -> FileResponse:
        with self.db.session() as session:
            model = FileModel(
                filename=filename,
                original_name=original_name or filename,
                mime_type=mime_type,
                size=size,
                patient_id=patient_id,
                uploaded_by=uploaded_by,
                created_at=now(),
            )
            session.add(model)
            session.commit()
            session.refresh(model)
            return _model_to_dto(model)
