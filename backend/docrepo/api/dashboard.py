# backend/docrepo/api/dashboard.py
import time

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import DashboardUnavailable
from ..models import Profile, Role
from ..schemas.dashboard import AdminDashboardStats, ReportStats, UserDashboardStats
from ..services.dashboard import dashboard_service
from ..utils.logging import api_logger
from .deps import get_current_user, require_admin

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/admin", response_model=AdminDashboardStats)
async def admin_dashboard(db: Session = Depends(get_db), user: Profile = Depends(require_admin)):
    start_time = time.time()
    try:
        stats = await dashboard_service.admin_stats(db)
    except DashboardUnavailable as e:
        raise HTTPException(status_code=503, detail=f"Dashboard data unavailable: {str(e)}")

    api_logger.info("Admin dashboard loaded", extra={
        "total_documents": stats.total_documents,
        "execution_time_ms": round((time.time() - start_time) * 1000, 2)
    })
    return stats


@router.get("", response_model=UserDashboardStats)
async def user_dashboard(db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    try:
        return await dashboard_service.user_stats(db, include_users=Role(user.role) == Role.ADMIN)
    except DashboardUnavailable as e:
        raise HTTPException(status_code=503, detail=f"Dashboard data unavailable: {str(e)}")


@router.get("/reports", response_model=ReportStats)
async def reports(db: Session = Depends(get_db), user: Profile = Depends(require_admin)):
    return await dashboard_service.report_stats(db)
