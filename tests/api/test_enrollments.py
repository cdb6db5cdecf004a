from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient


def test_enroll_and_unenroll(admin_client: TestClient, seed) -> None:
    s, c = seed.student(), seed.course()
    payload = {"studentId": str(s.id), "courseId": str(c.id)}

    resp = admin_client.post("/enrollments", json=payload)
    assert resp.status_code == 201
    assert resp.json()["studentId"] == str(s.id)
    assert resp.json()["courseId"] == str(c.id)

    again = admin_client.post("/enrollments", json=payload)
    assert again.status_code == 409
    assert again.json()["detail"]["message"] == (
        "Student already enrolled in this course"
    )

    gone = admin_client.request("DELETE", "/enrollments", json=payload)
    assert gone.status_code == 204

    missing = admin_client.request("DELETE", "/enrollments", json=payload)
    assert missing.status_code == 404
    assert missing.json()["detail"]["message"] == "Enrollment not found"


def test_enroll_unknown_student_or_course(admin_client: TestClient, seed) -> None:
    s, c = seed.student(), seed.course()
    no_student = admin_client.post(
        "/enrollments", json={"studentId": str(uuid4()), "courseId": str(c.id)}
    )
    assert no_student.status_code == 404
    no_course = admin_client.post(
        "/enrollments", json={"studentId": str(s.id), "courseId": str(uuid4())}
    )
    assert no_course.status_code == 404


def test_unenroll_deletes_progress(admin_client: TestClient, seed, store) -> None:
    s, c = seed.student(), seed.course()
    mods = seed.modules(c, 2)
    seed.enroll(s, c)
    seed.complete(s, mods[0])

    resp = admin_client.request(
        "DELETE", "/enrollments", json={"studentId": str(s.id), "courseId": str(c.id)}
    )
    assert resp.status_code == 204

    stats = admin_client.get(f"/students/{s.id}/stats").json()
    assert stats["enrolledCourses"] == 0
    assert stats["completedModules"] == 0


def test_students_cannot_enroll(student_client: TestClient, student, seed) -> None:
    c = seed.course()
    resp = student_client.post(
        "/enrollments", json={"studentId": str(student.id), "courseId": str(c.id)}
    )
    assert resp.status_code == 403


def test_enrollment_status_lists_every_student(admin_client: TestClient, seed) -> None:
    c, other = seed.course(), seed.course("Other")
    amy, zed = seed.student(name="Amy"), seed.student(name="Zed")
    enrollment = seed.enroll(zed, c)
    seed.enroll(amy, other)

    resp = admin_client.get(f"/courses/{c.id}/enrollment-status")
    assert resp.status_code == 200
    rows = resp.json()
    assert [r["name"] for r in rows] == ["Amy", "Zed"]
    assert rows[0]["enrolled"] is False
    assert rows[0]["enrolledAt"] is None
    assert rows[1]["enrolled"] is True
    assert rows[1]["studentId"] == str(zed.id)
    assert rows[1]["enrolledAt"] is not None
    assert rows[1]["enrolledAt"].startswith(enrollment.enrolled_at.date().isoformat())


def test_enrollment_status_unknown_course(admin_client: TestClient) -> None:
    resp = admin_client.get(f"/courses/{uuid4()}/enrollment-status")
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Course not found"
