"""The signed-in student's own endpoints: /student/* and POST /progress."""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient


def test_my_stats_with_no_enrollments(student_client: TestClient) -> None:
    resp = student_client.get("/student/stats")
    assert resp.status_code == 200
    assert resp.json() == {
        "enrolledCourses": 0,
        "completedCourses": 0,
        "totalModules": 0,
        "completedModules": 0,
        "averageProgress": 0,
        "lastActivity": None,
    }


def test_admin_cannot_use_student_endpoints(admin_client: TestClient) -> None:
    resp = admin_client.get("/student/stats")
    assert resp.status_code == 403
    assert resp.json()["detail"]["message"] == "Student access required"


def test_complete_module_updates_views(student_client: TestClient, student, seed) -> None:
    c = seed.course("Mine")
    m0, m1 = seed.modules(c, 2)
    seed.enroll(student, c)

    resp = student_client.post(
        "/progress", json={"moduleId": str(m0.id), "completed": True}
    )
    assert resp.status_code == 200
    assert resp.json()["completed"] is True
    assert resp.json()["completedAt"] is not None

    (course,) = student_client.get("/student/courses").json()
    assert course["title"] == "Mine"
    assert [m["completed"] for m in course["modules"]] == [True, False]
    assert course["modules"][1]["completedAt"] is None
    assert course["progress"]["progressPercentage"] == 50

    stats = student_client.get("/student/stats").json()
    assert stats["completedModules"] == 1
    assert stats["averageProgress"] == 50


def test_toggle_back_to_incomplete(student_client: TestClient, student, seed) -> None:
    c = seed.course()
    (m,) = seed.modules(c, 1)
    seed.enroll(student, c)

    student_client.post("/progress", json={"moduleId": str(m.id), "completed": True})
    resp = student_client.post(
        "/progress", json={"moduleId": str(m.id), "completed": False}
    )
    assert resp.json() == {
        "moduleId": str(m.id),
        "completed": False,
        "completedAt": None,
    }
    assert student_client.get("/student/stats").json()["completedCourses"] == 0


def test_progress_requires_enrollment(student_client: TestClient, seed) -> None:
    c = seed.course()
    (m,) = seed.modules(c, 1)
    resp = student_client.post(
        "/progress", json={"moduleId": str(m.id), "completed": True}
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["message"] == "Not enrolled in this course"


def test_progress_unknown_module(student_client: TestClient) -> None:
    resp = student_client.post(
        "/progress", json={"moduleId": str(uuid4()), "completed": True}
    )
    assert resp.status_code == 404


def test_progress_admin_forbidden(admin_client: TestClient, seed) -> None:
    c = seed.course()
    (m,) = seed.modules(c, 1)
    resp = admin_client.post(
        "/progress", json={"moduleId": str(m.id), "completed": True}
    )
    assert resp.status_code == 403


def test_my_course_detail(student_client: TestClient, student, seed) -> None:
    c = seed.course()
    seed.modules(c, 3)
    seed.enroll(student, c)

    resp = student_client.get(f"/student/courses/{c.id}")
    assert resp.status_code == 200
    assert len(resp.json()["modules"]) == 3
    assert resp.json()["progress"]["totalModulesInCourse"] == 3


def test_my_course_detail_not_enrolled(student_client: TestClient, seed) -> None:
    c = seed.course()
    resp = student_client.get(f"/student/courses/{c.id}")
    assert resp.status_code == 403

    seed.deactivate_course(c)
    assert student_client.get(f"/student/courses/{c.id}").status_code == 404


def test_my_courses_hides_inactive_courses(
    student_client: TestClient, student, seed
) -> None:
    live, dead = seed.course("Live"), seed.course("Dead")
    seed.enroll(student, live)
    seed.enroll(student, dead)
    seed.deactivate_course(dead)

    titles = [c["title"] for c in student_client.get("/student/courses").json()]
    assert titles == ["Live"]
