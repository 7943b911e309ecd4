"""File ORM model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String

from medvault.database import Base


class FileModel(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False, default="application/octet-stream")
    size = Column(Integer, default=0)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=True, index=True)
    uploaded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    download_count = Column(Integer, default=0)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(Integer, nullable=False)
