from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient


def _url(course_id, announcement_id=None) -> str:
    base = f"/courses/{course_id}/announcements"
    return base if announcement_id is None else f"{base}/{announcement_id}"


def test_create_and_list_newest_first(
    admin_client: TestClient, student_client: TestClient, admin, seed
) -> None:
    c = seed.course()
    first = admin_client.post(_url(c.id), json={"content": "  Welcome!  "})
    assert first.status_code == 201
    body = first.json()
    assert body["content"] == "Welcome!"
    assert body["courseId"] == str(c.id)
    assert body["createdBy"] == str(admin.id)
    assert body["author"] == {"id": str(admin.id), "name": admin.name, "role": "admin"}

    admin_client.post(_url(c.id), json={"content": "Lesson 2 is up"})

    listed = student_client.get(_url(c.id))
    assert listed.status_code == 200
    assert [a["content"] for a in listed.json()] == ["Lesson 2 is up", "Welcome!"]
    assert listed.json()[1]["author"]["name"] == admin.name


def test_content_is_validated(admin_client: TestClient, seed) -> None:
    c = seed.course()
    blank = admin_client.post(_url(c.id), json={"content": "   "})
    assert blank.status_code == 400
    assert blank.json()["detail"]["message"] == "Announcement content is required"

    too_long = admin_client.post(_url(c.id), json={"content": "x" * 5001})
    assert too_long.status_code == 400
    assert too_long.json()["detail"]["message"] == (
        "Content cannot exceed 5000 characters"
    )


def test_update_and_delete(admin_client: TestClient, seed) -> None:
    c = seed.course()
    created = admin_client.post(_url(c.id), json={"content": "Draft"}).json()

    updated = admin_client.put(_url(c.id, created["id"]), json={"content": "Final"})
    assert updated.status_code == 200
    assert updated.json()["content"] == "Final"
    assert updated.json()["createdAt"] == created["createdAt"]

    gone = admin_client.delete(_url(c.id, created["id"]))
    assert gone.status_code == 204
    assert admin_client.get(_url(c.id)).json() == []

    again = admin_client.delete(_url(c.id, created["id"]))
    assert again.status_code == 404
    assert again.json()["detail"]["message"] == "Announcement not found"


def test_announcement_is_scoped_to_its_course(admin_client: TestClient, seed) -> None:
    a, b = seed.course("A"), seed.course("B")
    created = admin_client.post(_url(a.id), json={"content": "Only for A"}).json()

    wrong_course = admin_client.put(
        _url(b.id, created["id"]), json={"content": "hijack"}
    )
    assert wrong_course.status_code == 404
    assert admin_client.delete(_url(b.id, created["id"])).status_code == 404
    assert admin_client.get(_url(a.id)).json()[0]["content"] == "Only for A"


def test_unknown_or_deleted_course_is_404(admin_client: TestClient, seed) -> None:
    assert admin_client.get(_url(uuid4())).status_code == 404
    assert admin_client.post(_url(uuid4()), json={"content": "x"}).status_code == 404

    c = seed.course()
    admin_client.post(_url(c.id), json={"content": "Before delete"})
    seed.deactivate_course(c)
    resp = admin_client.get(_url(c.id))
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Course not found"


def test_students_cannot_write(student_client: TestClient, admin_client, seed) -> None:
    c = seed.course()
    created = admin_client.post(_url(c.id), json={"content": "Hi"}).json()

    assert student_client.post(_url(c.id), json={"content": "x"}).status_code == 403
    assert (
        student_client.put(_url(c.id, created["id"]), json={"content": "x"}).status_code
        == 403
    )
    assert student_client.delete(_url(c.id, created["id"])).status_code == 403


def test_requires_session(client: TestClient, seed) -> None:
    c = seed.course()
    assert client.get(_url(c.id)).status_code == 401
