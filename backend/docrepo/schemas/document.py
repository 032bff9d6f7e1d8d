# backend/docrepo/schemas/document.py
from datetime import datetime
from typing import Optional, List

from pydantic import Field, field_validator

from .base import BaseSchema, TimestampMixin
from ..models.document import ContentKind


class DocumentBase(BaseSchema):
    title: str
    description: Optional[str] = None
    category_id: int
    tags: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class DocumentCreate(DocumentBase):
    file_path: str
    cover_image_path: Optional[str] = None
    author_id: Optional[str] = None

    @field_validator("file_path")
    @classmethod
    def file_path_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("file_path is required")
        return value


class DocumentUpdate(BaseSchema):
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    tags: Optional[List[str]] = None
    file_path: Optional[str] = None
    cover_image_path: Optional[str] = None

    # Omitted fields are left alone; only explicitly sent values reach these
    @field_validator("title", "file_path")
    @classmethod
    def required_text(cls, value: Optional[str], info) -> str:
        if value is None or not value.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return value.strip()

    @field_validator("category_id", "tags")
    @classmethod
    def not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class Document(DocumentBase, TimestampMixin):
    id: int
    author_id: Optional[str] = None
    file_path: str
    cover_image_path: Optional[str] = None
    content_kind: ContentKind
    category_name: Optional[str] = None
    updated_at: Optional[datetime] = None


class DocumentSummary(BaseSchema):
    id: int
    title: str
    created_at: datetime
    author_name: Optional[str] = None


class StorageStep(BaseSchema):
    target: str  # "file", "cover" or "row"
    bucket: Optional[str] = None
    path: Optional[str] = None
    succeeded: bool
    error: Optional[str] = None


class DeletionReport(BaseSchema):
    document_id: int
    steps: List[StorageStep] = []

    @property
    def complete(self) -> bool:
        return all(step.succeeded for step in self.steps)


class SignedUrl(BaseSchema):
    url: str
    expires_in: int
