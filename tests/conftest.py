# tests/conftest.py
"""
Shared fixtures. Every test gets a disposable SQLite database under tmp_path
and a controllable clock.
"""
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from medvault.auth import create_user_token
from medvault.database import Database
from medvault.main import create_app
from medvault.api.authorizations.repositories.authorizations_repository import AuthorizationsRepository
from medvault.api.authorizations.services.authorizations_service import AuthorizationsService
from medvault.api.download_requests.repositories.download_requests_repository import DownloadRequestsRepository
from medvault.api.download_requests.services.download_requests_service import DownloadRequestsService
from medvault.api.files.repositories.files_repository import FilesRepository
from medvault.api.patients.repositories.patients_repository import PatientsRepository
from medvault.api.users.repositories.users_repository import UsersRepository

START = 1_760_000_000


class FakeClock:
    def __init__(self, start=START):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, seconds):
        self.current += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db(tmp_path):
    database = Database(f"sqlite:///{tmp_path}/medvault_test.db").open()
    database.create_all()
    yield database
    database.close()


@pytest.fixture
def users(db):
    return UsersRepository(db)


@pytest.fixture
def files(db):
    return FilesRepository(db)


@pytest.fixture
def authorizations(db, clock):
    return AuthorizationsRepository(db, clock)


@pytest.fixture
def requests_repo(db, clock):
    return DownloadRequestsRepository(db, clock)


@pytest.fixture
def authorizations_service(users, files, authorizations, clock):
    return AuthorizationsService(users, files, authorizations, clock)


@pytest.fixture
def service(users, files, requests_repo, authorizations_service, clock):
    return DownloadRequestsService(users, files, requests_repo, authorizations_service, clock)


@pytest.fixture
def people(db, users, files):
    """A user of every role plus two files attached to patients."""
    patients = PatientsRepository(db)
    alice = patients.create(name="Alice Zhang", serial_no="S-001", group="cohort-a")
    bob = patients.create(name="Bob Li", serial_no="S-002", group="cohort-b")
    return SimpleNamespace(
        super_admin=users.create("root", role="super-admin"),
        admin=users.create("admin", role="admin"),
        standard=users.create("doctor", role="standard-user"),
        guest=users.create("guest1", role="guest"),
        other_guest=users.create("guest2", role="guest"),
        scan=files.create("scan.csv", patient_id=alice),
        report=files.create("report.pdf", mime_type="application/pdf", patient_id=bob),
    )


@pytest.fixture
def client(db, clock):
    app = create_app(database=db, clock=clock, migrate=False)
    with TestClient(app) as c:
        yield c


def auth_header(user):
    return {"Authorization": f"Bearer {create_user_token(user.id)}"}
