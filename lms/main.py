from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lms.api.admins import router as admins_router
from lms.api.analytics import router as analytics_router
from lms.api.announcements import router as announcements_router
from lms.api.auth import router as auth_router
from lms.api.courses import router as courses_router
from lms.api.enrollments import router as enrollments_router
from lms.api.health import router as health_router
from lms.api.metrics_endpoint import router as metrics_router
from lms.api.progress import router as progress_router
from lms.api.student import router as student_router
from lms.api.students import router as students_router
from lms.core.config import SETTINGS
from lms.core.errors import DataAccessError, LMSError
from lms.core.logging import setup_logging
from lms.db.engine import lifespan_db
from lms.db.redis import lifespan_redis
from lms.middleware.metrics import MetricsMiddleware
from lms.middleware.request_context import RequestContextMiddleware
from lms.models.user import ROLE_ADMIN
from lms.repos.store import Store, store
from lms.services import auth_service

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


async def bootstrap_admin(target: Store) -> None:
    """Create the BOOTSTRAP_ADMIN_* account unless it already exists."""
    email = SETTINGS.bootstrap_admin_email
    password = SETTINGS.bootstrap_admin_password
    if not email or not password:
        return
    if await target.users.get_by_email(email.strip().lower()) is not None:
        return
    user, _ = await auth_service.create_user(
        target.users,
        email=email,
        name=SETTINGS.bootstrap_admin_name,
        password=password,
        role=ROLE_ADMIN,
    )
    logger.info("Bootstrap admin created user_id=%s", user.id)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order even if one fails.
    async with lifespan_db():
        async with lifespan_redis():
            await bootstrap_admin(store)
            yield


app = FastAPI(
    title="lms-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)


@app.exception_handler(LMSError)
async def lms_error_handler(_request: Request, exc: LMSError) -> JSONResponse:
    if isinstance(exc, DataAccessError):
        # The cause was logged with its traceback where it was raised.
        logger.error("Request failed in store operation=%s", exc.operation)
    elif exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"message": exc.message}},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) -> Metrics -> CORS -> route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(courses_router)
app.include_router(announcements_router)
app.include_router(enrollments_router)
app.include_router(students_router)
app.include_router(admins_router)
app.include_router(student_router)
app.include_router(progress_router)
app.include_router(analytics_router)

logger.info(
    "lms-service started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
