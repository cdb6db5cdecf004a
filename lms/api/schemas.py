"""Response bodies shared by several routers.

Field names are the camelCase keys the web client reads.  Each
`from_*` helper converts one domain object.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from lms.models.course import Course, Module
from lms.models.stats import (
    CourseSummary,
    DashboardStats,
    StudentCourseStat,
    StudentStats,
)
from lms.models.user import User
from lms.services.course_service import youtube_embed_url


class MessageOut(BaseModel):
    message: str


class UserOut(BaseModel):
    id: UUID
    email: str
    name: str
    role: str
    phone: str | None = None
    createdAt: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            phone=user.phone,
            createdAt=user.created_at,
        )


class ModuleOut(BaseModel):
    id: UUID
    courseId: UUID
    title: str
    description: str | None = None
    videoUrl: str
    embedUrl: str | None = None
    orderIndex: int
    durationMinutes: int

    @classmethod
    def from_module(cls, m: Module) -> ModuleOut:
        return cls(
            id=m.id,
            courseId=m.course_id,
            title=m.title,
            description=m.description,
            videoUrl=m.video_url,
            embedUrl=youtube_embed_url(m.video_url),
            orderIndex=m.order_index,
            durationMinutes=m.duration_minutes,
        )


class CourseOut(BaseModel):
    id: UUID
    title: str
    description: str | None = None
    thumbnailUrl: str | None = None
    createdBy: UUID | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None

    @classmethod
    def from_course(cls, c: Course) -> CourseOut:
        return cls(
            id=c.id,
            title=c.title,
            description=c.description,
            thumbnailUrl=c.thumbnail_url,
            createdBy=c.created_by,
            createdAt=c.created_at,
            updatedAt=c.updated_at,
        )


class CourseDetailOut(CourseOut):
    modules: list[ModuleOut]


class StudentStatsOut(BaseModel):
    enrolledCourses: int
    completedCourses: int
    totalModules: int
    completedModules: int
    averageProgress: int
    lastActivity: datetime | None = None

    @classmethod
    def from_stats(cls, s: StudentStats) -> StudentStatsOut:
        return cls(
            enrolledCourses=s.enrolled_courses,
            completedCourses=s.completed_courses,
            totalModules=s.total_modules,
            completedModules=s.completed_modules,
            averageProgress=s.average_progress,
            lastActivity=s.last_activity,
        )


class StudentWithStatsOut(StudentStatsOut):
    studentId: UUID
    name: str
    email: str
    phone: str | None = None

    @classmethod
    def from_pair(cls, user: User, s: StudentStats) -> StudentWithStatsOut:
        return cls(
            studentId=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            **StudentStatsOut.from_stats(s).model_dump(),
        )


class StudentCourseStatOut(BaseModel):
    studentId: UUID
    courseId: UUID
    completedModulesInCourse: int
    totalModulesInCourse: int
    progressPercentage: int
    isCompleted: bool

    @classmethod
    def from_stat(cls, s: StudentCourseStat) -> StudentCourseStatOut:
        return cls(
            studentId=s.student_id,
            courseId=s.course_id,
            completedModulesInCourse=s.completed_modules_in_course,
            totalModulesInCourse=s.total_modules_in_course,
            progressPercentage=s.progress_percentage,
            isCompleted=s.is_completed,
        )


class CourseSummaryOut(BaseModel):
    courseId: UUID
    title: str
    moduleCount: int
    enrolledStudents: int
    averageProgress: int
    totalCompletions: int

    @classmethod
    def from_pair(cls, course: Course, s: CourseSummary) -> CourseSummaryOut:
        return cls(
            courseId=course.id,
            title=course.title,
            moduleCount=s.module_count,
            enrolledStudents=s.enrolled_students,
            averageProgress=s.average_progress,
            totalCompletions=s.total_completions,
        )


class DashboardStatsOut(BaseModel):
    totalCourses: int
    totalStudents: int
    totalModules: int
    averageProgress: int
    totalCompletions: int
    activeStudents: int

    @classmethod
    def from_stats(cls, s: DashboardStats) -> DashboardStatsOut:
        return cls(
            totalCourses=s.total_courses,
            totalStudents=s.total_students,
            totalModules=s.total_modules,
            averageProgress=s.average_progress,
            totalCompletions=s.total_completions,
            activeStudents=s.active_students,
        )
