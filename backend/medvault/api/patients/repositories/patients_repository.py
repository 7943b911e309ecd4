"""Patients repository."""

from medvault.clock import now
from medvault.database import Database
from medvault.api.patients.orm.patient_model import PatientModel


class PatientsRepository:
    def __init__(self, db: Database):
        self.db = db

    def create(self, name: str, serial_no: str, group: str | None = None) -> int:
        """Insert a patient and return its generated id."""
        with self.db.session() as session:
            model = PatientModel(name=name, serial_no=serial_no, group=group, created_at=now())
            session.add(model)
            session.commit()
            return model.id
