"""Demo: admin builds a course, a student works through it.

Runs entirely in-process against the in-memory store using FastAPI
TestClient.

Run with:
    JWT_SECRET=$(openssl rand -hex 32) python scripts/demo_progress_flow.py
"""

from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from lms.main import app
from lms.models.user import ROLE_ADMIN
from lms.repos.store import get_store
from lms.services import auth_service

ADMIN_EMAIL = "demo-admin@example.com"
ADMIN_PASSWORD = "demo-admin-pass"
VIDEOS = (
    "https://www.youtube.com/watch?v=aaaaaaaaaaa",
    "https://youtu.be/bbbbbbbbbbb",
    "https://www.youtube.com/embed/ccccccccccc",
)


def _login(client: TestClient, email: str, password: str) -> None:
    r = client.post("/auth/login", json={"email": email, "password": password})
    r.raise_for_status()


def main() -> None:
    store = get_store()
    if asyncio.run(store.users.get_by_email(ADMIN_EMAIL)) is None:
        asyncio.run(
            auth_service.create_user(
                store.users,
                email=ADMIN_EMAIL,
                name="Demo Admin",
                password=ADMIN_PASSWORD,
                role=ROLE_ADMIN,
            )
        )

    admin = TestClient(app)
    student = TestClient(app)

    # ── Step 1: admin signs in and creates a course ─────────────────
    _login(admin, ADMIN_EMAIL, ADMIN_PASSWORD)
    course = admin.post(
        "/courses", json={"title": "Python Basics", "description": "Demo course"}
    ).json()
    print(f"1. POST /courses              → {course['title']} ({course['id']})")

    # ── Step 2: three modules ───────────────────────────────────────
    modules = [
        admin.post(
            f"/courses/{course['id']}/modules",
            json={"title": f"Lesson {i + 1}", "videoUrl": url, "durationMinutes": 10},
        ).json()
        for i, url in enumerate(VIDEOS)
    ]
    print(f"2. POST /courses/…/modules    → {len(modules)} modules")

    # ── Step 3: admin creates a student with a generated password ──
    created = admin.post(
        "/students", json={"name": "Demo Student", "email": "demo-student@example.com"}
    ).json()
    temporary = created["temporaryPassword"]
    print(f"3. POST /students             → temporary password {temporary}")

    # ── Step 4: enroll ──────────────────────────────────────────────
    r = admin.post(
        "/enrollments",
        json={"studentId": created["user"]["id"], "courseId": course["id"]},
    )
    print(f"4. POST /enrollments          → {r.status_code}")

    # ── Step 5: student completes two of three modules ──────────────
    _login(student, "demo-student@example.com", temporary)
    for m in modules[:2]:
        student.post("/progress", json={"moduleId": m["id"], "completed": True})
    stats = student.get("/student/stats").json()
    print(
        f"5. GET  /student/stats        → "
        f"{stats['completedModules']}/{stats['totalModules']} modules, "
        f"{stats['averageProgress']}%"
    )

    # ── Step 6: admin dashboard ─────────────────────────────────────
    dash = admin.get("/analytics/dashboard").json()
    print(
        f"6. GET  /analytics/dashboard  → "
        f"average {dash['averageProgress']}%, "
        f"{dash['totalCompletions']} completions"
    )

    # ── Step 7: a new module re-opens progress ──────────────────────
    admin.post(
        f"/courses/{course['id']}/modules",
        json={"title": "Bonus", "videoUrl": VIDEOS[0]},
    )
    stats = student.get("/student/stats").json()
    print(
        f"7. after adding a module      → "
        f"{stats['completedModules']}/{stats['totalModules']} modules, "
        f"{stats['averageProgress']}%"
    )

    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
