# backend/docrepo/services/settings.py
from sqlalchemy.orm import Session

from ..config import settings
from ..models import SystemSetting, UserPreferences as UserPreferencesRow
from ..schemas.settings import SystemSettings, UserPreferences
from ..utils.logging import service_logger


class SettingsService:
    @staticmethod
    def get_system(db: Session) -> SystemSettings:
        row = db.query(SystemSetting).filter(SystemSetting.id == 1).first()
        if not row:
            return SystemSettings()
        return SystemSettings.model_validate(row.values or {})

    @staticmethod
    def max_document_size(db: Session) -> int:
        """Upload limit in bytes; the configured default until an admin saves one"""
        row = db.query(SystemSetting).filter(SystemSetting.id == 1).first()
        if not row:
            return settings.MAX_DOCUMENT_SIZE
        return SystemSettings.model_validate(row.values or {}).max_upload_size_mb * 1024 * 1024

    @staticmethod
    def save_system(db: Session, values: SystemSettings) -> SystemSettings:
        row = db.query(SystemSetting).filter(SystemSetting.id == 1).first()
        if not row:
            row = SystemSetting(id=1)
            db.add(row)
        row.values = values.model_dump()
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        service_logger.info("Saved system settings", extra={"settings": row.values})
        return values

    @staticmethod
    def get_preferences(db: Session, user_id: str) -> UserPreferences:
        row = db.query(UserPreferencesRow).filter(UserPreferencesRow.user_id == user_id).first()
        if not row:
            return UserPreferences()
        return UserPreferences.model_validate(row)

    @staticmethod
    def save_preferences(db: Session, user_id: str, values: UserPreferences) -> UserPreferences:
        row = db.query(UserPreferencesRow).filter(UserPreferencesRow.user_id == user_id).first()
        if not row:
            row = UserPreferencesRow(user_id=user_id)
            db.add(row)
        for field, value in values.model_dump().items():
            setattr(row, field, value)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        return values


settings_service = SettingsService()
