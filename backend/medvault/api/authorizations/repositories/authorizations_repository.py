"""Authorizations repository — one (file, user) -> expiry row per pair."""

import logging

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError

from medvault.clock import Clock, now
from medvault.database import Database
from medvault.api.authorizations.dto.authorization import (
    AuthorizationCheck,
    AuthorizationRecord,
    AuthorizationStatus,
)
from medvault.api.authorizations.orm.authorization_model import AuthorizationModel

logger = logging.getLogger(__name__)

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _model_to_dto(model: AuthorizationModel) -> AuthorizationRecord:
    return AuthorizationRecord(
        id=model.id,
        file_id=model.file_id,
        user_id=model.user_id,
        expires_at=model.expires_at,
        status=model.status,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class AuthorizationsRepository:
    def __init__(self, db: Database, clock: Clock = now):
        self.db = db
        self.clock = clock

    def get(self, file_id: int, user_id: int) -> AuthorizationRecord | None:
        with self.db.session() as session:
            model = (
                session.query(AuthorizationModel)
                .filter_by(file_id=file_id, user_id=user_id)
                .first()
            )
            return _model_to_dto(model) if model else None

    def upsert(self, file_id: int, user_id: int, expires_at: int) -> AuthorizationRecord:
        """Create or refresh the authorization for a pair and mark it active.

        Concurrent callers never produce a second row; the last write wins.
        """
        expires_at = int(expires_at)
        ts = self.clock()
        insert = _UPSERT_INSERTS.get(self.db.dialect)
        if insert is None:
            self._insert_or_update(file_id, user_id, expires_at, ts)
        else:
            stmt = insert(AuthorizationModel).values(
                file_id=file_id,
                user_id=user_id,
                expires_at=expires_at,
                status=AuthorizationStatus.ACTIVE.value,
                created_at=ts,
                updated_at=ts,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["file_id", "user_id"],
                set_={
                    "expires_at": stmt.excluded.expires_at,
                    "status": stmt.excluded.status,
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            with self.db.session() as session:
                session.execute(stmt)
                session.commit()
        return self.get(file_id, user_id)

    def _insert_or_update(self, file_id: int, user_id: int, expires_at: int, ts: int) -> None:
        """Insert, and on a uniqueness conflict update the existing row instead."""
        with self.db.session() as session:
            try:
                session.add(
                    AuthorizationModel(
                        file_id=file_id,
                        user_id=user_id,
                        expires_at=expires_at,
                        status=AuthorizationStatus.ACTIVE.value,
                        created_at=ts,
                        updated_at=ts,
                    )
                )
                session.commit()
                return
            except IntegrityError as e:
                session.rollback()
                conflict = e

            updated = (
                session.query(AuthorizationModel)
                .filter_by(file_id=file_id, user_id=user_id)
                .update(
                    {
                        "expires_at": expires_at,
                        "status": AuthorizationStatus.ACTIVE.value,
                        "updated_at": ts,
                    },
                    synchronize_session=False,
                )
            )
            if not updated:
                # Not the (file_id, user_id) conflict
                raise conflict
            session.commit()
            logger.debug("Authorization for file %s user %s existed, updated in place", file_id, user_id)

    def is_authorized(self, file_id: int, user_id: int, at: int | None = None) -> AuthorizationCheck:
        """Evaluate the stored expiry against the current time.

        Expiry is decided lazily here; expired rows are never swept.
        """
        current = self.clock() if at is None else int(at)
        record = self.get(file_id, user_id)
        if record is None or record.status != AuthorizationStatus.ACTIVE.value:
            return AuthorizationCheck(authorized=False, reason="not_authorized")
        if record.expires_at > current:
            return AuthorizationCheck(authorized=True)
        return AuthorizationCheck(authorized=False, reason="expired")

    def set_status(self, file_id: int, user_id: int, status: AuthorizationStatus) -> bool:
        """Returns False when the pair has no authorization row."""
        with self.db.session() as session:
            updated = (
                session.query(AuthorizationModel)
                .filter_by(file_id=file_id, user_id=user_id)
                .update(
                    {"status": AuthorizationStatus(status).value, "updated_at": self.clock()},
                    synchronize_session=False,
                )
            )
            session.commit()
            return updated > 0
