"""Patient ORM model."""

from sqlalchemy import Column, Integer, String

from medvault.database import Base


class PatientModel(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    serial_no = Column(String(100), unique=True, nullable=False)
    group = Column("group", String(100), nullable=True)
    created_at = Column(Integer, nullable=False)
