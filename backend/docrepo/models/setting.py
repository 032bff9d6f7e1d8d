# backend/docrepo/models/setting.py
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from ..database import Base


class SystemSetting(Base):
    """Single-row table holding the validated system settings document"""
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, default=1)
    values = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
