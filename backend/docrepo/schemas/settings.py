# backend/docrepo/schemas/settings.py
from pydantic import BaseModel, ConfigDict, Field


class SystemSettings(BaseModel):
    """Site-wide settings; unknown keys are rejected"""
    model_config = ConfigDict(extra="forbid")

    site_name: str = "Academic Repository"
    site_description: str = ""
    max_upload_size_mb: int = Field(default=10, ge=1, le=100)
    items_per_page: int = Field(default=10, ge=1, le=100)
    allow_registration: bool = False
    maintenance_mode: bool = False
    email_notifications: bool = False
    default_language: str = "pt-BR"


class UserPreferences(BaseModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    email_notifications: bool = True
    document_updates: bool = True
    new_uploads: bool = False
