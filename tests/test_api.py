"""
HTTP API tests through FastAPI's TestClient
"""

import pytest
from fastapi.testclient import TestClient

from case_review.app import app
from case_review.config import settings

OKW = {"X-Role": "okw"}
CDD = {"X-Role": "cdd"}
ACME = {"X-Role": "client", "X-Client-Id": "C12345"}
OTHER_CLIENT = {"X-Role": "client", "X-Client-Id": "C99999"}


@pytest.fixture
def api(monkeypatch):
    monkeypatch.setattr(settings, "SEED_DEMO_CASES", False)
    monkeypatch.setattr(settings, "NOTIFY_ON_DECISION", False)
    monkeypatch.setattr(settings, "ENFORCE_REQUIRED_DOCUMENTS", False)
    monkeypatch.setattr(settings, "AUTO_INTAKE_ASSIGNMENT", True)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def submission(client_info, address_update):
    return {"client_info": client_info, "change_requests": address_update}


@pytest.fixture
def created(api, submission):
    response = api.post("/api/cases", json=submission, headers=ACME)
    assert response.status_code == 201
    return response.json()


def _move_to_cdd(api, case_id):
    response = api.post(f"/api/cases/{case_id}/status", json={"status": "with-cdd"}, headers=OKW)
    assert response.status_code == 200
    return response.json()


class TestHealthAndIdentity:

    def test_health(self, api):
        response = api.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["cases"] == 0
        assert "X-Trace-ID" in response.headers

    @pytest.mark.parametrize("headers", [{}, {"X-Role": "auditor"}])
    def test_role_header_required(self, api, headers):
        response = api.get("/api/cases", headers=headers)
        assert response.status_code == 401
        assert response.json()["error"] == "HTTP 401"


class TestCaseEndpoints:

    def test_create_assigns_intake(self, created):
        assert created["status"] == "with-okw"
        assert created["current_assignee"] == "OKW Team"
        assert created["required_documents"] == ["Proof of Address"]
        assert created["any_documents_required"] is True
        assert created["missing_required_documents"] == ["Proof of Address"]
        assert created["permissions"] == {
            "can_comment": False, "can_approve": False, "can_reject": False, "can_move_forward": False,
        }

    def test_create_without_intake(self, api, submission, monkeypatch):
        monkeypatch.setattr(settings, "AUTO_INTAKE_ASSIGNMENT", False)
        response = api.post("/api/cases", json=submission, headers=ACME)
        assert response.json()["status"] == "pending"
        assert response.json()["current_assignee"] == "System"

    def test_create_requires_change_requests(self, api, submission):
        response = api.post("/api/cases", json={**submission, "change_requests": []}, headers=ACME)
        assert response.status_code == 422

    def test_client_submission_defaults_to_own_account(self, api, submission):
        client_info = {k: v for k, v in submission["client_info"].items() if k != "account_id"}
        response = api.post("/api/cases", json={**submission, "client_info": client_info}, headers=ACME)

        assert response.status_code == 201
        case_id = response.json()["case_id"]
        assert response.json()["client_info"]["account_id"] == "C12345"
        assert api.get(f"/api/cases/{case_id}", headers=ACME).status_code == 200
        assert api.get("/api/cases", headers=ACME).json()["total_count"] == 1

    def test_client_cannot_submit_for_another_account(self, api, submission):
        other_account = {**submission["client_info"], "account_id": "C99999"}
        response = api.post("/api/cases", json={**submission, "client_info": other_account}, headers=ACME)

        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"
        assert api.get("/api/cases", headers=OTHER_CLIENT).json()["total_count"] == 0
        assert api.get("/api/cases", headers=OKW).json()["total_count"] == 0

    def test_client_submission_requires_client_id(self, api, submission):
        response = api.post("/api/cases", json=submission, headers={"X-Role": "client"})
        assert response.status_code == 403

    def test_reviewer_may_submit_for_any_account(self, api, submission):
        response = api.post("/api/cases", json=submission, headers=OKW)
        assert response.status_code == 201
        assert response.json()["client_info"]["account_id"] == "C12345"

    def test_client_sees_only_own_cases(self, api, created):
        assert api.get("/api/cases", headers=ACME).json()["total_count"] == 1
        assert api.get("/api/cases", headers=OTHER_CLIENT).json()["total_count"] == 0
        assert api.get("/api/cases", headers={"X-Role": "client"}).json()["total_count"] == 0

        response = api.get(f"/api/cases/{created['case_id']}", headers=OTHER_CLIENT)
        assert response.status_code == 404
        assert response.json()["error"] == "RESOURCE_NOT_FOUND"

    def test_status_filter(self, api, created):
        assert api.get("/api/cases", params={"status": "with-okw"}, headers=CDD).json()["total_count"] == 1
        assert api.get("/api/cases", params={"status": "pending"}, headers=CDD).json()["total_count"] == 0

    def test_unknown_case(self, api):
        assert api.get("/api/cases/missing", headers=OKW).status_code == 404

    def test_permissions_and_required_documents(self, api, created):
        case_id = created["case_id"]

        permissions = api.get(f"/api/cases/{case_id}/permissions", headers=OKW).json()
        assert permissions["can_move_forward"] and permissions["can_comment"]

        required = api.get(f"/api/cases/{case_id}/required-documents", headers=ACME).json()
        assert required["required_documents"] == ["Proof of Address"]


class TestStatusEndpoint:

    def test_review_to_approval(self, api, created):
        case_id = created["case_id"]
        moved = _move_to_cdd(api, case_id)
        assert moved["current_assignee"] == "CDD Team"
        assert moved["permissions"]["can_move_forward"] is False

        response = api.post(f"/api/cases/{case_id}/status", json={"status": "approved"}, headers=CDD)
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["current_assignee"] == "System"

    def test_client_cannot_approve(self, api, created):
        case_id = created["case_id"]
        _move_to_cdd(api, case_id)

        response = api.post(f"/api/cases/{case_id}/status", json={"status": "approved"}, headers=ACME)

        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"
        assert api.get(f"/api/cases/{case_id}", headers=CDD).json()["status"] == "with-cdd"

    def test_invalid_transition(self, api, created):
        case_id = created["case_id"]
        _move_to_cdd(api, case_id)

        response = api.post(f"/api/cases/{case_id}/status", json={"status": "pending"}, headers=CDD)

        assert response.status_code == 409
        assert response.json()["error"] == "INVALID_TRANSITION"
        assert response.json()["detail"]["field"] == "status"

    def test_stale_version(self, api, created):
        case_id = created["case_id"]
        response = api.post(
            f"/api/cases/{case_id}/status",
            json={"status": "with-cdd", "expected_version": created["version"] - 1},
            headers=OKW,
        )
        assert response.status_code == 409
        assert response.json()["error"] == "CONFLICT_ERROR"


class TestCommentEndpoints:

    def test_add_and_list(self, api, created):
        case_id = created["case_id"]
        response = api.post(
            f"/api/cases/{case_id}/comments",
            json={"text": "HDI checked", "target": "change-request", "target_id": "cr-1"},
            headers=OKW,
        )
        assert response.status_code == 201
        assert response.json()["comment"]["author"] == "OKW Team"

        listed = api.get(
            f"/api/cases/{case_id}/comments",
            params={"target": "change-request", "target_id": "cr-1"},
            headers=ACME,
        ).json()
        assert [c["text"] for c in listed["comments"]] == ["HDI checked"]

    def test_blank_text(self, api, created):
        response = api.post(f"/api/cases/{created['case_id']}/comments", json={"text": " "}, headers=OKW)
        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "text"

    def test_unknown_target_on_add_and_query(self, api, created):
        case_id = created["case_id"]
        response = api.post(
            f"/api/cases/{case_id}/comments",
            json={"text": "Hi", "target": "change-request", "target_id": "cr-404"},
            headers=OKW,
        )
        assert response.status_code == 400

        response = api.get(
            f"/api/cases/{case_id}/comments",
            params={"target": "change-request", "target_id": "cr-404"},
            headers=OKW,
        )
        assert response.status_code == 404

    def test_client_cannot_comment(self, api, created):
        response = api.post(f"/api/cases/{created['case_id']}/comments", json={"text": "Hello"}, headers=ACME)
        assert response.status_code == 403


class TestAttachmentEndpoints:

    def test_attachment_lifecycle(self, api, created):
        case_id = created["case_id"]

        added = api.post(f"/api/cases/{case_id}/attachments", json={"name": "Lease"}, headers=OKW)
        assert added.status_code == 201
        document = added.json()["document"]
        assert document["awaiting"] is True

        uploaded = api.put(
            f"/api/cases/{case_id}/attachments/{document['document_id']}",
            json={"file_handle": "files/lease.pdf"},
            headers=OKW,
        )
        assert uploaded.status_code == 200
        assert uploaded.json()["document"]["uploaded"] is True
        assert uploaded.json()["document"]["awaiting"] is False

        removed = api.delete(f"/api/cases/{case_id}/attachments/{document['document_id']}", headers=OKW)
        assert removed.json()["removed"] is True

    def test_required_document_is_reset(self, api, created):
        case_id = created["case_id"]
        proof = created["documents"][0]
        api.put(f"/api/cases/{case_id}/attachments/{proof['document_id']}", json={"file_handle": "poa.pdf"}, headers=OKW)

        removed = api.delete(f"/api/cases/{case_id}/attachments/{proof['document_id']}", headers=OKW).json()

        assert removed["removed"] is False
        assert removed["document"]["uploaded"] is False
        assert removed["document"]["required"] is True

    def test_unassigned_role(self, api, created):
        response = api.post(f"/api/cases/{created['case_id']}/attachments", json={"name": "Lease"}, headers=CDD)
        assert response.status_code == 403

    def test_unknown_document(self, api, created):
        response = api.delete(f"/api/cases/{created['case_id']}/attachments/doc-404", headers=OKW)
        assert response.status_code == 404


class TestReportEndpoint:

    def test_export_respects_visibility(self, api, created, submission):
        api.post("/api/cases", json={**submission, "client_info": {**submission["client_info"], "account_id": "C99999"}}, headers=OTHER_CLIENT)

        okw_report = api.get("/api/reports/export", headers=OKW).json()
        client_report = api.get("/api/reports/export", headers=ACME).json()

        assert okw_report["summary"]["total_cases"] == 2
        assert okw_report["summary"]["queue"]["in_review"] == 2
        assert [r["case_id"] for r in client_report["case_details"]] == [created["case_id"]]
