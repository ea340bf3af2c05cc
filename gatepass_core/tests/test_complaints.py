# gatepass_core/tests/test_complaints.py

from __future__ import annotations

import pytest

from gatepass_core.models import Complaint


@pytest.fixture
def complaint_factory(db):
    def _factory(student, **extra):
        kwargs = {"subject": "Hostel water supply", "message": "No water since morning"}
        kwargs.update(extra)
        return Complaint.objects.create(student=student, **kwargs)

    return _factory


@pytest.mark.django_db
def test_student_files_and_lists_own(api_client, student, make_user, complaint_factory):
    complaint_factory(make_user("STUDENT"))

    resp = api_client.as_user(student).post(
        "/api/complaints", {"subject": "Library hours", "message": "Open later please"}, format="json"
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "PENDING"
    assert resp.json()["student"]["username"] == "student"

    rows = api_client.get("/api/complaints").json()
    assert [r["subject"] for r in rows] == ["Library hours"]


@pytest.mark.django_db
def test_only_students_file(api_client, staff):
    resp = api_client.as_user(staff).post("/api/complaints", {"subject": "x", "message": "y"}, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_executive_director_resolves(api_client, student, executive_director, complaint_factory):
    complaint = complaint_factory(student)
    api_client.as_user(executive_director)

    resp = api_client.patch(f"/api/complaints/{complaint.id}", {"status": "in-progress"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["status"] == "IN_PROGRESS"

    resp = api_client.patch(
        f"/api/complaints/{complaint.id}", {"status": "RESOLVED", "response": "Pump repaired"}, format="json"
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "RESOLVED"
    assert data["response"] == "Pump repaired"
    assert data["director"]["username"] == "ed"

    resp = api_client.patch(f"/api/complaints/{complaint.id}", {"status": "PENDING"}, format="json")
    assert resp.status_code == 409


@pytest.mark.django_db
def test_rejection_needs_response(api_client, student, executive_director, complaint_factory):
    complaint = complaint_factory(student)
    resp = api_client.as_user(executive_director).patch(
        f"/api/complaints/{complaint.id}", {"status": "REJECTED"}, format="json"
    )
    assert resp.status_code == 400
    assert "response" in resp.json()


@pytest.mark.django_db
def test_students_cannot_update(api_client, student, complaint_factory):
    complaint = complaint_factory(student)
    resp = api_client.as_user(student).patch(f"/api/complaints/{complaint.id}", {"status": "RESOLVED"}, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_department_and_hostel_views(
    api_client, student, hosteller, hod, warden, make_user, other_department, complaint_factory
):
    mine = complaint_factory(student)
    from_hostel = complaint_factory(hosteller)
    complaint_factory(make_user("STUDENT", department=other_department))

    resp = api_client.as_user(hod).get("/api/complaints/department")
    assert resp.status_code == 200
    assert {r["id"] for r in resp.json()} == {mine.id, from_hostel.id}

    resp = api_client.as_user(warden).get("/api/complaints/hostel")
    assert [r["id"] for r in resp.json()] == [from_hostel.id]

    assert api_client.as_user(student).get("/api/complaints/hostel").status_code == 403


@pytest.mark.django_db
def test_status_view_for_executive_director(api_client, student, executive_director, complaint_factory):
    pending = complaint_factory(student)
    done = complaint_factory(student, subject="Fan broken")
    api_client.as_user(executive_director).patch(
        f"/api/complaints/{done.id}", {"status": "RESOLVED", "response": "Replaced"}, format="json"
    )

    assert [r["id"] for r in api_client.get("/api/complaints/status/pending").json()] == [pending.id]
    assert [r["id"] for r in api_client.get("/api/complaints/status/RESOLVED").json()] == [done.id]
    assert [r["id"] for r in api_client.get("/api/complaints", {"status": "resolved"}).json()] == [done.id]
