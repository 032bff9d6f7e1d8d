# backend/docrepo/schemas/category.py
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from .base import BaseSchema, TimestampMixin


class CategoryBase(BaseSchema):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Category name is required")
        return value


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(CategoryBase):
    pass


class Category(CategoryBase, TimestampMixin):
    id: int
    updated_at: Optional[datetime] = None


class CategoryWithCount(Category):
    document_count: int = 0
