"""Pure arithmetic in lms.services.aggregation, no store involved."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from lms.models.course import Module
from lms.models.progress import Enrollment, ModuleProgress
from lms.services import aggregation
from lms.services.aggregation import percent


def _module(course_id) -> Module:
    return Module.new(course_id=course_id, title="m", video_url="u", order_index=0)


def _done(student_id, module_id, at: datetime | None = None) -> ModuleProgress:
    return ModuleProgress.new(
        student_id=student_id,
        module_id=module_id,
        completed=True,
        completed_at=at or datetime.now(UTC),
    )


# ---- percent ----


@pytest.mark.parametrize(
    ("n", "d", "expected"),
    [
        (0, 0, 0),
        (5, 0, 0),
        (0, 7, 0),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),  # 12.5 rounds up
        (1, 200, 1),  # 0.5 rounds up
        (2, 11, 18),
        (7, 7, 100),
    ],
)
def test_percent_rounds_half_up(n: int, d: int, expected: int) -> None:
    assert percent(n, d) == expected


# ---- student_stats ----


def test_student_stats_empty_enrollments_are_all_zero() -> None:
    sid = uuid4()
    stats = aggregation.student_stats(sid, [], {}, [])
    assert stats.enrolled_courses == 0
    assert stats.completed_courses == 0
    assert stats.total_modules == 0
    assert stats.completed_modules == 0
    assert stats.average_progress == 0
    assert stats.last_activity is None


def test_student_stats_ignores_progress_outside_enrolled_courses() -> None:
    sid = uuid4()
    enrolled, other = uuid4(), uuid4()
    m1, m2 = _module(enrolled), _module(other)
    by_course = aggregation.group_modules_by_course([m1, m2])

    stats = aggregation.student_stats(
        sid,
        [Enrollment.new(student_id=sid, course_id=enrolled)],
        by_course,
        [_done(sid, m2.id)],
    )
    assert stats.total_modules == 1
    assert stats.completed_modules == 0
    assert stats.average_progress == 0
    assert stats.last_activity is None


def test_student_stats_last_activity_is_latest_completion() -> None:
    sid, cid = uuid4(), uuid4()
    m1, m2 = _module(cid), _module(cid)
    early = datetime(2026, 1, 1, tzinfo=UTC)
    late = early + timedelta(days=3)

    stats = aggregation.student_stats(
        sid,
        [Enrollment.new(student_id=sid, course_id=cid)],
        aggregation.group_modules_by_course([m1, m2]),
        [_done(sid, m1.id, late), _done(sid, m2.id, early)],
    )
    assert stats.last_activity == late
    assert stats.completed_courses == 1
    assert stats.average_progress == 100


def test_zero_module_course_is_never_completed() -> None:
    sid, empty = uuid4(), uuid4()
    stats = aggregation.student_stats(
        sid, [Enrollment.new(student_id=sid, course_id=empty)], {}, []
    )
    assert stats.enrolled_courses == 1
    assert stats.completed_courses == 0
    assert stats.average_progress == 0


def test_incomplete_rows_do_not_count() -> None:
    sid, cid = uuid4(), uuid4()
    m = _module(cid)
    row = ModuleProgress.new(
        student_id=sid, module_id=m.id, completed=False, completed_at=None
    )
    stats = aggregation.student_stats(
        sid,
        [Enrollment.new(student_id=sid, course_id=cid)],
        aggregation.group_modules_by_course([m]),
        [row],
    )
    assert stats.completed_modules == 0


# ---- dashboard / summaries ----


def test_dashboard_average_is_enrollment_weighted() -> None:
    a, b = uuid4(), uuid4()
    small, big = uuid4(), uuid4()
    small_mods = [_module(small)]
    big_mods = [_module(big) for _ in range(10)]
    by_course = aggregation.group_modules_by_course(small_mods + big_mods)

    stats = aggregation.dashboard_stats(
        total_courses=2,
        total_students=3,
        enrollments=[
            Enrollment.new(student_id=a, course_id=small),
            Enrollment.new(student_id=b, course_id=big),
        ],
        modules_by_course=by_course,
        progress=[_done(a, small_mods[0].id), _done(b, big_mods[0].id)],
    )
    assert stats.average_progress == 18  # not (100 + 10) / 2 = 55
    assert stats.total_completions == 1
    assert stats.active_students == 2
    assert stats.total_modules == 11
    assert stats.total_students == 3


def test_course_summary_counts_only_its_own_enrollments() -> None:
    s1, s2 = uuid4(), uuid4()
    cid, other = uuid4(), uuid4()
    mods = [_module(cid), _module(cid)]

    summary = aggregation.course_summary(
        cid,
        [
            Enrollment.new(student_id=s1, course_id=cid),
            Enrollment.new(student_id=s2, course_id=cid),
            Enrollment.new(student_id=s1, course_id=other),
        ],
        frozenset(m.id for m in mods),
        [_done(s1, mods[0].id), _done(s1, mods[1].id), _done(s2, mods[0].id)],
    )
    assert summary.enrolled_students == 2
    assert summary.module_count == 2
    assert summary.total_completions == 1
    assert summary.average_progress == 75


def test_course_student_matrix_zero_modules_is_zero_percent() -> None:
    sid, cid = uuid4(), uuid4()
    (row,) = aggregation.course_student_matrix(
        cid, [Enrollment.new(student_id=sid, course_id=cid)], frozenset(), []
    )
    assert row.total_modules_in_course == 0
    assert row.progress_percentage == 0
    assert row.is_completed is False
