"""Request-scoped wiring of repositories and services.

The database handle and clock live on ``app.state``; nothing here is global.
"""

from fastapi import Depends, Request

from medvault.clock import Clock
from medvault.database import Database
from medvault.api.authorizations.repositories.authorizations_repository import (
    AuthorizationsRepository,
)
from medvault.api.authorizations.services.authorizations_service import AuthorizationsService
from medvault.api.download_requests.repositories.download_requests_repository import (
    DownloadRequestsRepository,
)
from medvault.api.download_requests.services.download_requests_service import (
    DownloadRequestsService,
)
from medvault.api.files.repositories.files_repository import FilesRepository
from medvault.api.users.repositories.users_repository import UsersRepository


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_users_repository(db: Database = Depends(get_database)) -> UsersRepository:
    return UsersRepository(db)


def get_files_repository(db: Database = Depends(get_database)) -> FilesRepository:
    return FilesRepository(db)


def get_authorizations_repository(
    db: Database = Depends(get_database),
    clock: Clock = Depends(get_clock),
) -> AuthorizationsRepository:
    return AuthorizationsRepository(db, clock)


def get_download_requests_repository(
    db: Database = Depends(get_database),
    clock: Clock = Depends(get_clock),
) -> DownloadRequestsRepository:
    return DownloadRequestsRepository(db, clock)


def get_authorizations_service(
    users: UsersRepository = Depends(get_users_repository),
    files: FilesRepository = Depends(get_files_repository),
    authorizations: AuthorizationsRepository = Depends(get_authorizations_repository),
    clock: Clock = Depends(get_clock),
) -> AuthorizationsService:
    return AuthorizationsService(users, files, authorizations, clock)


def get_download_requests_service(
    users: UsersRepository = Depends(get_users_repository),
    files: FilesRepository = Depends(get_files_repository),
    requests: DownloadRequestsRepository = Depends(get_download_requests_repository),
    authorizations: AuthorizationsService = Depends(get_authorizations_service),
    clock: Clock = Depends(get_clock),
) -> DownloadRequestsService:
    return DownloadRequestsService(users, files, requests, authorizations, clock)
