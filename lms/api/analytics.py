from __future__ import annotations

import logging

from fastapi import APIRouter

from lms.api.dependencies import AdminUser, StoreDep
from lms.api.schemas import DashboardStatsOut
from lms.services import progress_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/dashboard", response_model=DashboardStatsOut)
async def dashboard(admin: AdminUser, store: StoreDep) -> DashboardStatsOut:
    logger.info("Dashboard requested by admin=%s", admin.user_id)
    stats = await progress_service.compute_system_dashboard_stats(store)
    return DashboardStatsOut.from_stats(stats)
