"""A failing store surfaces as 500, never as zeroed statistics."""

from __future__ import annotations

from dataclasses import replace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from lms.core.errors import DataAccessError
from lms.main import app
from lms.repos.store import Store, get_store
from tests.conftest import session_cookies


class _BrokenEnrollments:
    def __init__(self, inner) -> None:
        self._inner = inner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    async def list_enrollments(self, **_kwargs):
        raise DataAccessError("list_enrollments")


@pytest.fixture
def broken_admin_client(store: Store, admin) -> TestClient:
    broken = replace(store, progress=_BrokenEnrollments(store.progress))
    app.dependency_overrides[get_store] = lambda: broken
    return TestClient(app, cookies=session_cookies(admin))


def test_dashboard_store_failure_is_500(broken_admin_client: TestClient) -> None:
    resp = broken_admin_client.get("/analytics/dashboard")
    assert resp.status_code == 500
    assert resp.json() == {"detail": {"message": "Internal server error"}}


def test_student_stats_store_failure_is_500(
    broken_admin_client: TestClient, seed
) -> None:
    s = seed.student()
    resp = broken_admin_client.get(f"/students/{s.id}/stats")
    assert resp.status_code == 500
    assert "enrolledCourses" not in resp.text


class _CountingEnrollments:
    def __init__(self, inner) -> None:
        self._inner = inner
        self.calls = 0

    def __getattr__(self, name):
        return getattr(self._inner, name)

    async def list_enrollments(self, **kwargs):
        self.calls += 1
        return await self._inner.list_enrollments(**kwargs)


def test_unknown_student_detail_skips_aggregation(store: Store, admin) -> None:
    counting = _CountingEnrollments(store.progress)
    app.dependency_overrides[get_store] = lambda: replace(store, progress=counting)
    client = TestClient(app, cookies=session_cookies(admin))

    resp = client.get(f"/students/{uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Student not found"
    assert counting.calls == 0
