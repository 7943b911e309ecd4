"""Download request ORM model."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text, text

from medvault.database import Base


class DownloadRequestModel(Base):
    __tablename__ = "download_requests"
    __table_args__ = (
        Index("ix_download_requests_file_user", "file_id", "user_id"),
        # At most one pending request per (file, user)
        Index(
            "uq_download_requests_pending",
            "file_id",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column(Integer, ForeignKey("files.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    username = Column(String(50), nullable=False)
    message = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(Integer, nullable=False)
    processed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    processed_at = Column(Integer, nullable=True)
