# tests/test_download_requests_service.py
"""
State machine tests for guest download requests, driven through the service
with a controllable clock.
"""
import pytest

from medvault.api.download_requests.dto.download_request import DownloadRequestFilter, RequestStatus
from medvault.api.download_requests.orm.download_request_model import DownloadRequestModel
from medvault.api.download_requests.repositories.download_requests_repository import PendingRequestExists
from medvault.api.files.orm.file_model import FileModel

from conftest import START

DAY = 24 * 60 * 60


def _requests(db, file_id, user_id):
    with db.session() as session:
        return session.query(DownloadRequestModel).filter_by(file_id=file_id, user_id=user_id).count()


def _soft_delete(db, file_id):
    with db.session() as session:
        session.query(FileModel).filter_by(id=file_id).update({"is_deleted": True})
        session.commit()


def test_first_request_is_pending(service, requests_repo, people):
    result = service.submit_request(people.scan.id, people.guest.id, "need for review")

    assert result.success is True
    assert result.request.status == "pending"
    assert result.request.username == "guest1"
    assert result.request.message == "need for review"
    assert requests_repo.latest_for(people.scan.id, people.guest.id).status == "pending"


@pytest.mark.parametrize("who", ["super_admin", "admin", "standard"])
def test_direct_roles_do_not_need_to_request(service, people, who):
    result = service.submit_request(people.scan.id, getattr(people, who).id)
    assert result.success is False
    assert result.reason == "not_needed"


def test_unknown_user_and_file(service, people):
    assert service.submit_request(people.scan.id, 9999).reason == "user_not_found"
    assert service.submit_request(9999, people.guest.id).reason == "file_not_found"


def test_deleted_file_cannot_be_requested(service, db, people):
    _soft_delete(db, people.scan.id)
    assert service.submit_request(people.scan.id, people.guest.id).reason == "file_not_found"


def test_second_request_while_pending(service, db, people):
    service.submit_request(people.scan.id, people.guest.id)
    result = service.submit_request(people.scan.id, people.guest.id)

    assert result.success is False
    assert result.reason == "already_pending"
    assert _requests(db, people.scan.id, people.guest.id) == 1


def test_pending_requests_are_per_pair(service, people):
    assert service.submit_request(people.scan.id, people.guest.id).success
    assert service.submit_request(people.report.id, people.guest.id).success
    assert service.submit_request(people.scan.id, people.other_guest.id).success


def test_store_refuses_second_pending_row(requests_repo, people):
    requests_repo.insert(people.scan.id, people.guest.id, "guest1")
    with pytest.raises(PendingRequestExists):
        requests_repo.insert(people.scan.id, people.guest.id, "guest1")


def test_approve_grants_authorization(service, authorizations, requests_repo, people, clock):
    request = service.submit_request(people.scan.id, people.guest.id).request
    clock.advance(5)

    result = service.process_request(request.id, "approve", people.admin.id, 24)

    assert result.success is True
    assert result.action == "approved"
    assert result.authorization.username == "guest1"
    assert result.authorization.file_id == people.scan.id
    assert result.authorization.expires_at == START + 5 + DAY
    assert authorizations.is_authorized(people.scan.id, people.guest.id).authorized is True

    stored = requests_repo.get_by_id(request.id)
    assert stored.status == "approved"
    assert stored.processed_by == people.admin.id
    assert stored.processed_at == START + 5


def test_approve_uses_requested_duration(service, people):
    request = service.submit_request(people.scan.id, people.guest.id).request
    result = service.process_request(request.id, "approve", people.admin.id, expires_in_hours=2)
    assert result.authorization.expires_at == START + 2 * 3600


def test_cannot_approve_twice(service, people):
    request = service.submit_request(people.scan.id, people.guest.id).request
    service.process_request(request.id, "approve", people.admin.id)

    result = service.process_request(request.id, "approve", people.admin.id)
    assert result.success is False
    assert result.reason == "already_approved"
    assert result.status == "approved"


def test_request_while_approval_valid(service, people):
    request = service.submit_request(people.scan.id, people.guest.id).request
    service.process_request(request.id, "approve", people.admin.id, 24)

    result = service.submit_request(people.scan.id, people.guest.id)
    assert result.success is False
    assert result.reason == "already_approved"


def test_request_after_approval_expired(service, requests_repo, people, clock):
    request = service.submit_request(people.scan.id, people.guest.id).request
    service.process_request(request.id, "approve", people.admin.id, 1)
    clock.advance(3600)

    result = service.submit_request(people.scan.id, people.guest.id)
    assert result.success is True
    assert result.request.id != request.id
    # The expired approval stays in the log untouched
    assert requests_repo.get_by_id(request.id).status == "approved"


def test_reject_then_cooldown(service, db, requests_repo, people, clock):
    request = service.submit_request(people.scan.id, people.guest.id).request
    rejected = service.process_request(request.id, "reject", people.admin.id)
    assert rejected.success is True
    assert rejected.action == "rejected"
    assert rejected.authorization is None

    clock.advance(DAY - 100)
    result = service.submit_request(people.scan.id, people.guest.id)
    assert result.success is False
    assert result.reason == "recently_rejected"
    assert result.retry_after_seconds == 100

    clock.advance(100)
    result = service.submit_request(people.scan.id, people.guest.id)
    assert result.success is True
    assert result.request.id > request.id
    assert requests_repo.get_by_id(request.id).status == "rejected"
    assert _requests(db, people.scan.id, people.guest.id) == 2


def test_reject_creates_no_authorization(service, authorizations, people):
    request = service.submit_request(people.scan.id, people.guest.id).request
    service.process_request(request.id, "reject", people.admin.id)
    assert authorizations.get(people.scan.id, people.guest.id) is None


def test_cannot_reject_approved(service, authorizations, requests_repo, people):
    request = service.submit_request(people.scan.id, people.guest.id).request
    service.process_request(request.id, "approve", people.admin.id)
    before = authorizations.get(people.scan.id, people.guest.id)

    result = service.process_request(request.id, "reject", people.admin.id)
    assert result.success is False
    assert result.reason == "cannot_reject_approved"
    assert result.status == "approved"
    assert requests_repo.get_by_id(request.id).status == "approved"
    assert authorizations.get(people.scan.id, people.guest.id) == before


def test_stale_reject_after_approve_keeps_approval(service, authorizations, requests_repo, people):
    request = service.submit_request(people.scan.id, people.guest.id).request
    stale = requests_repo.get_by_id(request.id)
    assert service.process_request(request.id, "approve", people.admin.id).success is True

    # A second admin decides from the copy read before the approval landed
    result = service._reject(stale, people.super_admin.id)

    assert result.success is False
    assert result.reason == "cannot_reject_approved"
    assert result.status == "approved"
    stored = requests_repo.get_by_id(request.id)
    assert stored.status == "approved"
    assert stored.processed_by == people.admin.id
    assert authorizations.is_authorized(people.scan.id, people.guest.id).authorized is True


def test_stale_approve_after_approve_grants_nothing_new(service, authorizations, requests_repo, people, clock):
    request = service.submit_request(people.scan.id, people.guest.id).request
    stale = requests_repo.get_by_id(request.id)
    service.process_request(request.id, "approve", people.admin.id, 1)
    before = authorizations.get(people.scan.id, people.guest.id)
    clock.advance(60)

    result = service._approve(stale, people.super_admin.id, 48)

    assert result.success is False
    assert result.reason == "already_approved"
    assert authorizations.get(people.scan.id, people.guest.id) == before


def test_conditional_status_update_skips_disallowed_rows(requests_repo, people):
    request = requests_repo.insert(people.scan.id, people.guest.id, "guest1")
    requests_repo.update_status(request.id, RequestStatus.APPROVED, processed_by=people.admin.id)

    changed = requests_repo.update_status(
        request.id,
        RequestStatus.REJECTED,
        processed_by=people.super_admin.id,
        allowed_from=(RequestStatus.PENDING, RequestStatus.REJECTED),
    )

    assert changed is None
    assert requests_repo.get_by_id(request.id).status == "approved"
    assert requests_repo.update_status(9999, RequestStatus.REJECTED, allowed_from=(RequestStatus.PENDING,)) is None


def test_rejected_request_can_be_approved(service, authorizations, people):
    request = service.submit_request(people.scan.id, people.guest.id).request
    service.process_request(request.id, "reject", people.admin.id)

    result = service.process_request(request.id, "approve", people.super_admin.id)
    assert result.success is True
    assert authorizations.is_authorized(people.scan.id, people.guest.id).authorized is True


def test_rejecting_a_rejected_request_is_idempotent(service, people):
    request = service.submit_request(people.scan.id, people.guest.id).request
    service.process_request(request.id, "reject", people.admin.id)
    assert service.process_request(request.id, "reject", people.admin.id).success is True


def test_process_unknown_request_and_action(service, people):
    assert service.process_request(12345, "approve", people.admin.id).reason == "not_found"
    request = service.submit_request(people.scan.id, people.guest.id).request
    assert service.process_request(request.id, "archive", people.admin.id).reason == "invalid_action"


def test_list_requests_filters_and_pages(service, people):
    first = service.submit_request(people.scan.id, people.guest.id).request
    service.submit_request(people.report.id, people.guest.id)
    service.submit_request(people.scan.id, people.other_guest.id)
    service.process_request(first.id, "reject", people.admin.id)

    everything = service.list_requests()
    assert everything.total == 3
    assert [item.id for item in everything.items] == sorted((item.id for item in everything.items), reverse=True)

    by_patient = service.list_requests(DownloadRequestFilter(patient_name="Alice"))
    assert by_patient.total == 2
    assert {item.patient_name for item in by_patient.items} == {"Alice Zhang"}
    assert {item.filename for item in by_patient.items} == {"scan.csv"}

    by_group = service.list_requests(DownloadRequestFilter(patient_group="cohort-b"))
    assert [item.file_id for item in by_group.items] == [people.report.id]

    rejected = service.list_requests(DownloadRequestFilter(status="rejected"))
    assert [item.id for item in rejected.items] == [first.id]

    mine = service.list_requests(DownloadRequestFilter(user_id=people.guest.id), page=2, limit=1)
    assert mine.total == 2
    assert mine.total_pages == 2
    assert mine.page == 2
    assert len(mine.items) == 1
    assert mine.items[0].id == first.id


@pytest.mark.parametrize("pattern", ["_", "%", "Alice%"])
def test_patient_name_filter_treats_wildcards_literally(service, people, pattern):
    service.submit_request(people.scan.id, people.guest.id)
    service.submit_request(people.report.id, people.guest.id)

    assert service.list_requests(DownloadRequestFilter(patient_name=pattern)).total == 0
