"""User ORM model."""

from sqlalchemy import Boolean, Column, Integer, String

from medvault.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    role = Column(String(20), nullable=False, default="guest")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(Integer, nullable=False)
