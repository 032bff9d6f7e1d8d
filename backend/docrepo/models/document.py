# backend/docrepo/models/document.py
import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from ..database import Base


class ContentKind(str, enum.Enum):
    PDF = "pdf"
    IMAGE = "image"
    OFFICE = "office"
    UNKNOWN = "unknown"


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    author_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    file_path = Column(String(512), nullable=False)
    cover_image_path = Column(String(512), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    content_kind = Column(Enum(ContentKind), nullable=False, default=ContentKind.UNKNOWN)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    category = relationship("Category", back_populates="documents")
    author = relationship("Profile", back_populates="documents")
    downloads = relationship("DocumentDownload", back_populates="document", cascade="all, delete-orphan")
    views = relationship("DocumentView", back_populates="document", cascade="all, delete-orphan")

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None

    @property
    def author_name(self) -> str | None:
        if not self.author:
            return None
        return self.author.full_name or self.author.email
