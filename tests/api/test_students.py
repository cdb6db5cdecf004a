"""Admin student management and per-student statistics."""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient


def test_list_students_excludes_admins(admin_client: TestClient, seed) -> None:
    seed.student(name="Zed")
    seed.student(name="Amy")
    names = [u["name"] for u in admin_client.get("/students").json()]
    assert names == ["Amy", "Zed"]


def test_create_student_generates_temporary_password(
    admin_client: TestClient, client: TestClient
) -> None:
    resp = admin_client.post(
        "/students",
        json={"name": "Tia", "email": "tia@example.com", "phone": "555-0100"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["user"]["role"] == "student"
    assert body["user"]["phone"] == "555-0100"
    temporary = body["temporaryPassword"]
    assert len(temporary) == 8

    login = client.post(
        "/auth/login", json={"email": "tia@example.com", "password": temporary}
    )
    assert login.status_code == 200


def test_create_student_with_password(admin_client: TestClient) -> None:
    resp = admin_client.post(
        "/students",
        json={"name": "Tom", "email": "tom@example.com", "password": "chosen1"},
    )
    assert resp.status_code == 201
    assert resp.json()["temporaryPassword"] is None


def test_get_student_detail_and_stats(admin_client: TestClient, seed) -> None:
    s = seed.student(name="Dee")
    c = seed.course()
    mods = seed.modules(c, 3)
    seed.enroll(s, c)
    seed.complete(s, mods[0])

    detail = admin_client.get(f"/students/{s.id}")
    assert detail.status_code == 200
    assert detail.json()["user"]["name"] == "Dee"
    assert detail.json()["stats"]["averageProgress"] == 33

    stats = admin_client.get(f"/students/{s.id}/stats").json()
    assert stats == {
        "enrolledCourses": 1,
        "completedCourses": 0,
        "totalModules": 3,
        "completedModules": 1,
        "averageProgress": 33,
        "lastActivity": stats["lastActivity"],
    }
    assert stats["lastActivity"] is not None


def test_admin_id_is_not_a_student(admin_client: TestClient, admin) -> None:
    resp = admin_client.get(f"/students/{admin.id}/stats")
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Student not found"
    assert admin_client.get(f"/students/{uuid4()}").status_code == 404


def test_all_student_stats(admin_client: TestClient, seed) -> None:
    a = seed.student(name="Ann")
    seed.student(name="Ben")
    c = seed.course()
    (m,) = seed.modules(c, 1)
    seed.enroll(a, c)
    seed.complete(a, m)

    rows = admin_client.get("/students/stats").json()
    assert [r["name"] for r in rows] == ["Ann", "Ben"]
    assert rows[0]["studentId"] == str(a.id)
    assert rows[0]["completedCourses"] == 1
    assert rows[1]["enrolledCourses"] == 0


def test_student_course_breakdown(admin_client: TestClient, seed) -> None:
    s = seed.student()
    c = seed.course("Only")
    mods = seed.modules(c, 2)
    seed.enroll(s, c)
    seed.complete(s, mods[1])

    (row,) = admin_client.get(f"/students/{s.id}/courses").json()
    assert row["course"]["title"] == "Only"
    assert row["progress"]["progressPercentage"] == 50


def test_update_student(admin_client: TestClient, seed) -> None:
    s = seed.student(name="Old Name")
    seed.student(email="taken@example.com")
    resp = admin_client.put(
        f"/students/{s.id}",
        json={"name": "New Name", "email": "new@example.com", "phone": None},
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "New Name"

    clash = admin_client.put(
        f"/students/{s.id}", json={"name": "New Name", "email": "taken@example.com"}
    )
    assert clash.status_code == 409


def test_reset_password(admin_client: TestClient, client: TestClient, seed) -> None:
    s = seed.student(email="forgot@example.com")
    resp = admin_client.post(f"/students/{s.id}/reset-password")
    assert resp.status_code == 200
    new_password = resp.json()["temporaryPassword"]

    login = client.post(
        "/auth/login", json={"email": "forgot@example.com", "password": new_password}
    )
    assert login.status_code == 200


def test_students_endpoints_are_admin_only(student_client: TestClient) -> None:
    assert student_client.get("/students").status_code == 403
    assert student_client.get("/students/stats").status_code == 403
