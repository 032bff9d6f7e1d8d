# backend/docrepo/api/settings.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Profile
from ..schemas.settings import SystemSettings, UserPreferences
from ..services.settings import settings_service
from .deps import get_current_user, require_admin

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/system", response_model=SystemSettings)
async def get_system_settings(db: Session = Depends(get_db), admin: Profile = Depends(require_admin)):
    return settings_service.get_system(db)


@router.put("/system", response_model=SystemSettings)
async def save_system_settings(
        values: SystemSettings,
        db: Session = Depends(get_db),
        admin: Profile = Depends(require_admin)
):
    return settings_service.save_system(db, values)


@router.get("/preferences", response_model=UserPreferences)
async def get_preferences(db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    return settings_service.get_preferences(db, user.id)


@router.put("/preferences", response_model=UserPreferences)
async def save_preferences(
        values: UserPreferences,
        db: Session = Depends(get_db),
        user: Profile = Depends(get_current_user)
):
    return settings_service.save_preferences(db, user.id, values)
