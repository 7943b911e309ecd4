"""Download authorization ORM model."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint

from medvault.database import Base


class AuthorizationModel(Base):
    __tablename__ = "file_download_authorizations"
    __table_args__ = (
        UniqueConstraint("file_id", "user_id", name="uq_authorization_file_user"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column(Integer, ForeignKey("files.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    expires_at = Column(Integer, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(Integer, nullable=False)
    updated_at = Column(Integer, nullable=False)
