"""Download requests repository — append-mostly log of guest requests."""

import math

from sqlalchemy.exc import IntegrityError

from medvault.clock import Clock, now
from medvault.database import Database
from medvault.api.download_requests.dto.download_request import (
    DownloadRequestFilter,
    DownloadRequestListItem,
    DownloadRequestPage,
    DownloadRequestResponse,
    RequestStatus,
)
from medvault.api.download_requests.orm.download_request_model import DownloadRequestModel
from medvault.api.files.orm.file_model import FileModel
from medvault.api.patients.orm.patient_model import PatientModel


class PendingRequestExists(Exception):
    """Another pending request for the same (file, user) was committed first."""


def _model_to_dto(model: DownloadRequestModel) -> DownloadRequestResponse:
    return DownloadRequestResponse(
        id=model.id,
        file_id=model.file_id,
        user_id=model.user_id,
        username=model.username,
        message=model.message,
        status=model.status,
        created_at=model.created_at,
        processed_by=model.processed_by,
        processed_at=model.processed_at,
    )


class DownloadRequestsRepository:
    def __init__(self, db: Database, clock: Clock = now):
        self.db = db
        self.clock = clock

    def get_by_id(self, request_id: int) -> DownloadRequestResponse | None:
        with self.db.session() as session:
            model = session.get(DownloadRequestModel, request_id)
            return _model_to_dto(model) if model else None

    def latest_for(self, file_id: int, user_id: int) -> DownloadRequestResponse | None:
        """Most recent request for the pair; ids break created_at ties."""
        with self.db.session() as session:
            model = (
                session.query(DownloadRequestModel)
                .filter_by(file_id=file_id, user_id=user_id)
                .order_by(DownloadRequestModel.id.desc())
                .first()
            )
            return _model_to_dto(model) if model else None

    def insert(
        self,
        file_id: int,
        user_id: int,
        username: str,
        message: str | None = None,
    ) -> DownloadRequestResponse:
        with self.db.session() as session:
            model = DownloadRequestModel(
                file_id=file_id,
                user_id=user_id,
                username=username,
                message=message,
                status=RequestStatus.PENDING.value,
                created_at=self.clock(),
            )
            session.add(model)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                pending = (
                    session.query(DownloadRequestModel)
                    .filter_by(
                        file_id=file_id,
                        user_id=user_id,
                        status=RequestStatus.PENDING.value,
                    )
                    .first()
                )
                if pending is not None:
                    raise PendingRequestExists(pending.id)
                raise
            session.refresh(model)
            return _model_to_dto(model)

    def update_status(
        self,
        request_id: int,
        status: RequestStatus,
        processed_by: int | None = None,
        allowed_from: tuple[RequestStatus, ...] | None = None,
    ) -> DownloadRequestResponse | None:
        """Set the status in one conditional UPDATE.

        With ``allowed_from`` the row only changes while its current status is
        one of those. Returns None when no row changed.
        """
        conditions = [DownloadRequestModel.id == request_id]
        if allowed_from is not None:
            conditions.append(
                DownloadRequestModel.status.in_([RequestStatus(s).value for s in allowed_from])
            )
        with self.db.session() as session:
            updated = (
                session.query(DownloadRequestModel)
                .filter(*conditions)
                .update(
                    {
                        "status": RequestStatus(status).value,
                        "processed_by": processed_by,
                        "processed_at": self.clock(),
                    },
                    synchronize_session=False,
                )
            )
            session.commit()
            if not updated:
                return None
            return _model_to_dto(session.get(DownloadRequestModel, request_id))

    def list(
        self,
        filter: DownloadRequestFilter | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> DownloadRequestPage:
        filter = filter or DownloadRequestFilter()
        page = max(page, 1)
        limit = max(limit, 1)

        with self.db.session() as session:
            query = (
                session.query(
                    DownloadRequestModel,
                    FileModel.filename,
                    FileModel.original_name,
                    FileModel.patient_id,
                    PatientModel.name,
                    PatientModel.group,
                )
                .outerjoin(FileModel, FileModel.id == DownloadRequestModel.file_id)
                .outerjoin(PatientModel, PatientModel.id == FileModel.patient_id)
            )

            if filter.status is not None:
                query = query.filter(DownloadRequestModel.status == RequestStatus(filter.status).value)
            if filter.file_id is not None:
                query = query.filter(DownloadRequestModel.file_id == filter.file_id)
            if filter.user_id is not None:
                query = query.filter(DownloadRequestModel.user_id == filter.user_id)
            if filter.patient_name:
                query = query.filter(PatientModel.name.contains(filter.patient_name, autoescape=True))
            if filter.patient_group:
                query = query.filter(PatientModel.group == filter.patient_group)

            total = query.count()
            rows = (
                query.order_by(DownloadRequestModel.id.desc())
                .limit(limit)
                .offset((page - 1) * limit)
                .all()
            )

            items = [
                DownloadRequestListItem(
                    **_model_to_dto(model).model_dump(),
                    filename=filename,
                    original_name=original_name,
                    patient_id=patient_id,
                    patient_name=patient_name,
                    patient_group=patient_group,
                )
                for model, filename, original_name, patient_id, patient_name, patient_group in rows
            ]

        return DownloadRequestPage(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )
