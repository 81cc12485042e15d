"""HTTP tests for the recruiter and public endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from api.config.database import get_db
from api.main import app
from api.services.token import issue_token
from api.services.workflow import get_calendar, get_document_store, get_notifier, get_scorer
from pipeline.screening import ScoreResult
from tests.fakes import OTHER_USER_ID, OWNER_ID, FakeCalendar, FakeNotifier, FakeScorer, FakeStore

SLOTS = [
    datetime(2030, 3, 4, 15, 0, tzinfo=timezone.utc),
    datetime(2030, 3, 5, 9, 30, tzinfo=timezone.utc),
]


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _auth(user_id: str = OWNER_ID) -> dict:
    return {"Authorization": f"Bearer {issue_token(user_id)}"}


@pytest.fixture
def fakes():
    return {
        "scorer": FakeScorer(),
        "store": FakeStore(),
        "notifier": FakeNotifier(),
        "calendar": FakeCalendar(),
    }


@pytest.fixture
def client(db_session, fakes):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_scorer] = lambda: fakes["scorer"]
    app.dependency_overrides[get_document_store] = lambda: fakes["store"]
    app.dependency_overrides[get_notifier] = lambda: fakes["notifier"]
    app.dependency_overrides[get_calendar] = lambda: fakes["calendar"]
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_job(client, **form_config) -> dict:
    response = client.post(
        "/api/v1/jobs",
        json={
            "title": "Backend Engineer",
            "description": "Build and run the hiring platform APIs.",
            "keywords": "python, fastapi",
            "assignmentDetails": "Build a small REST service.",
            "formConfig": {"includeResume": True, **form_config},
        },
        headers=_auth(),
    )
    assert response.status_code == 201, response.text
    return response.json()


def _apply(client, job_id: str) -> str:
    response = client.post(
        f"/api/v1/public/jobs/{job_id}/applications",
        data={"name": "Ada Lovelace", "email": "ada@example.com"},
        files={"resume": ("resume.pdf", b"%PDF-1.4 not really", "application/pdf")},
    )
    assert response.status_code == 201, response.text
    return response.json()["candidateId"]


class TestAuth:
    def test_missing_token(self, client):
        response = client.get("/api/v1/jobs")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_invalid_token(self, client):
        response = client.get("/api/v1/jobs", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401

    def test_public_and_health_paths_are_open(self, client):
        assert client.get("/health").json()["database"] == "connected"
        assert client.get("/api/v1/public/jobs/missing").status_code == 404


class TestJobs:
    def test_create_and_list(self, client):
        job = _create_job(client)

        assert job["isOpen"] is True
        assert job["formConfig"]["includeResume"] is True
        assert job["candidateCount"] == 0

        listed = client.get("/api/v1/jobs", headers=_auth()).json()
        assert [j["id"] for j in listed] == [job["id"]]
        assert client.get("/api/v1/jobs", headers=_auth(OTHER_USER_ID)).json() == []

    def test_invalid_body(self, client):
        response = client.post(
            "/api/v1/jobs",
            json={"title": "X", "description": "Build and run the hiring platform APIs."},
            headers=_auth(),
        )
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"]["field"] == "title"

    def test_close_job_blocks_applications(self, client):
        job = _create_job(client)
        response = client.patch(f"/api/v1/jobs/{job['id']}/status", json={"isOpen": False}, headers=_auth())
        assert response.json()["isOpen"] is False

        response = client.post(
            f"/api/v1/public/jobs/{job['id']}/applications",
            data={"name": "Ada Lovelace", "email": "ada@example.com"},
            files={"resume": ("resume.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "job_id"

    def test_other_recruiter_cannot_see_job(self, client):
        job = _create_job(client)
        response = client.get(f"/api/v1/jobs/{job['id']}", headers=_auth(OTHER_USER_ID))
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_generate_responsibilities(self, client):
        response = client.post(
            "/api/v1/jobs/generate-responsibilities",
            json={"title": "Backend Engineer"},
            headers=_auth(),
        )
        assert response.json() == {"responsibilities": "- Own the Backend Engineer roadmap"}


class TestCandidateFlow:
    def test_application_to_scheduled_interview(self, client, fakes):
        job = _create_job(client)
        public = client.get(f"/api/v1/public/jobs/{job['id']}").json()
        assert public["formConfig"]["includeResume"] is True

        candidate_id = _apply(client, job["id"])

        candidate = client.get(f"/api/v1/candidates/{candidate_id}", headers=_auth()).json()
        assert candidate["status"] == "ASSIGNMENT_SENT"
        assert candidate["statusLabel"] == "Assignment Sent"
        assert candidate["allowedEvents"] == ["receive_assignment", "reject"]
        assert fakes["notifier"].kinds() == ["assignment_invite"]

        page = client.get(f"/api/v1/public/assignments/{candidate_id}").json()
        assert page["canSubmit"] is True
        response = client.post(
            f"/api/v1/public/assignments/{candidate_id}",
            data={"assignment_link": "https://github.com/ada/solution"},
        )
        assert response.json()["status"] == "ASSIGNMENT_RECEIVED"

        response = client.post(
            f"/api/v1/candidates/{candidate_id}/approve",
            json={"slots": [_iso(slot) for slot in SLOTS]},
            headers=_auth(),
        )
        approved = response.json()
        assert approved["status"] == "APPROVED"
        assert approved["interviewStatus"] == "INVITE_SENT"
        assert [_parse(s) for s in approved["proposedSlots"]] == SLOTS

        booking = client.get(f"/api/v1/public/bookings/{candidate_id}").json()
        assert booking["firstName"] == "Ada"
        assert [_parse(s) for s in booking["proposedSlots"]] == SLOTS

        response = client.post(f"/api/v1/public/bookings/{candidate_id}", json={"slot": _iso(SLOTS[1])})
        assert response.status_code == 200, response.text
        booked = response.json()
        assert booked["interviewStatus"] == "SCHEDULED"
        assert _parse(booked["interviewDate"]) == SLOTS[1]

        [(owner_id, request)] = fakes["calendar"].created
        assert owner_id == OWNER_ID
        assert request.end - request.start == timedelta(minutes=45)

        response = client.post(f"/api/v1/candidates/{candidate_id}/reject", headers=_auth())
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ILLEGAL_TRANSITION"

    def test_low_score_is_rejected(self, client, fakes):
        fakes["scorer"].result = ScoreResult(40, "missing required skill X")
        candidate_id = _apply(client, _create_job(client)["id"])

        candidate = client.get(f"/api/v1/candidates/{candidate_id}", headers=_auth()).json()
        assert candidate["status"] == "REJECTED"
        assert candidate["screeningReason"] == "missing required skill X"
        assert candidate["allowedEvents"] == []

    def test_missing_resume(self, client):
        job = _create_job(client)
        response = client.post(
            f"/api/v1/public/jobs/{job['id']}/applications",
            data={"name": "Ada Lovelace", "email": "ada@example.com"},
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "resume"

    def test_too_many_slots(self, client):
        job = _create_job(client, includeResume=False)
        response = client.post(
            f"/api/v1/public/jobs/{job['id']}/applications",
            data={"name": "Ada Lovelace", "email": "ada@example.com"},
        )
        candidate_id = response.json()["candidateId"]

        slots = SLOTS + [SLOTS[0] + timedelta(days=2), SLOTS[0] + timedelta(days=3)]
        response = client.post(
            f"/api/v1/candidates/{candidate_id}/propose-slots",
            json={"slots": [_iso(s) for s in slots]},
            headers=_auth(),
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "slots"

    def test_calendar_failure_is_bad_gateway(self, client, fakes):
        job = _create_job(client, includeResume=False)
        candidate_id = client.post(
            f"/api/v1/public/jobs/{job['id']}/applications",
            data={"name": "Ada Lovelace", "email": "ada@example.com"},
        ).json()["candidateId"]
        client.post(
            f"/api/v1/candidates/{candidate_id}/approve",
            json={"slots": [_iso(SLOTS[0])]},
            headers=_auth(),
        )
        fakes["calendar"].fail = True

        response = client.post(f"/api/v1/public/bookings/{candidate_id}", json={"slot": _iso(SLOTS[0])})

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["code"] == "COLLABORATOR_FAILURE"
        assert error["retryable"] is True

    def test_unknown_candidate(self, client):
        response = client.get("/api/v1/candidates/missing", headers=_auth())
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_other_recruiter_forbidden(self, client):
        candidate_id = _apply(client, _create_job(client)["id"])
        response = client.post(f"/api/v1/candidates/{candidate_id}/reject", headers=_auth(OTHER_USER_ID))
        assert response.status_code == 403

    def test_resume_link(self, client):
        candidate_id = _apply(client, _create_job(client)["id"])
        response = client.get(f"/api/v1/candidates/{candidate_id}/resume", headers=_auth())
        body = response.json()
        assert body["expiresIn"] == 3600
        assert body["url"].startswith("https://storage.test/uploads/resumes/")


class TestSettings:
    def test_update_and_status(self, client):
        response = client.put(
            "/api/v1/settings",
            json={"anthropicApiKey": "sk-ant-secret", "googleRefreshToken": "refresh"},
            headers=_auth(),
        )
        body = response.json()
        assert body["anthropicApiKey"] is True
        assert body["calendarConnected"] is True
        assert "sk-ant-secret" not in response.text

        assert client.get("/api/v1/calendar/status", headers=_auth()).json() == {"connected": True}
        assert client.get("/api/v1/calendar/status", headers=_auth(OTHER_USER_ID)).json() == {"connected": False}

    def test_busy_range_validated(self, client):
        response = client.get(
            "/api/v1/calendar/busy",
            params={"start": _iso(SLOTS[1]), "end": _iso(SLOTS[0])},
            headers=_auth(),
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "end"
