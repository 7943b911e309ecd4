"""Central ORM module — imports all models for Alembic metadata discovery."""

from medvault.api.authorizations.orm import AuthorizationModel
from medvault.api.download_requests.orm import DownloadRequestModel
from medvault.api.files.orm import FileModel
from medvault.api.patients.orm import PatientModel
from medvault.api.users.orm import UserModel

__all__ = [
    "AuthorizationModel",
    "DownloadRequestModel",
    "FileModel",
    "PatientModel",
    "UserModel",
]
