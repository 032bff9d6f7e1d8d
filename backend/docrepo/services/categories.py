# backend/docrepo/services/categories.py
from typing import List, Optional

from sqlalchemy import delete, exists, func, select
from sqlalchemy.orm import Session

from ..errors import CategoryInUse, NotFound
from ..models import Category, Document
from ..schemas.category import CategoryCreate, CategoryUpdate
from ..utils.logging import service_logger


class CategoryService:
    """CRUD over the categories table"""

    @staticmethod
    def list(db: Session) -> List[Category]:
        return db.query(Category).order_by(Category.name).all()

    @staticmethod
    def list_with_counts(db: Session) -> List[tuple[Category, int]]:
        rows = db.query(Category, func.count(Document.id)) \
            .outerjoin(Document, Document.category_id == Category.id) \
            .group_by(Category.id) \
            .order_by(Category.name) \
            .all()
        return [(category, count) for category, count in rows]

    @staticmethod
    def get(db: Session, category_id: int) -> Optional[Category]:
        return db.query(Category).filter(Category.id == category_id).first()

    @staticmethod
    def create(db: Session, data: CategoryCreate) -> Category:
        category = Category(**data.model_dump())
        db.add(category)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(category)
        return category

    @staticmethod
    def update(db: Session, category_id: int, data: CategoryUpdate) -> Category:
        category = CategoryService.get(db, category_id)
        if not category:
            raise NotFound("Category", category_id)

        category.name = data.name
        category.description = data.description
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(category)
        return category

    @staticmethod
    def count_documents(db: Session, category_id: int) -> int:
        return db.query(func.count(Document.id)).filter(Document.category_id == category_id).scalar() or 0

    @staticmethod
    def delete(db: Session, category_id: int) -> None:
        """Delete a category only while no document references it.

        The reference check is part of the DELETE statement itself, so a
        document inserted concurrently either lands before (and blocks the
        delete) or fails its own foreign key check afterwards.
        """
        statement = delete(Category) \
            .where(Category.id == category_id) \
            .where(~exists(select(Document.id).where(Document.category_id == category_id))) \
            .execution_options(synchronize_session=False)

        try:
            result = db.execute(statement)
            db.commit()
        except Exception:
            db.rollback()
            raise

        if result.rowcount:
            service_logger.info("Deleted category", extra={"category_id": category_id})
            return

        if not CategoryService.get(db, category_id):
            raise NotFound("Category", category_id)

        document_count = CategoryService.count_documents(db, category_id)
        service_logger.warning("Category in use, refusing deletion", extra={
            "category_id": category_id,
            "document_count": document_count
        })
        raise CategoryInUse(category_id, document_count)


category_service = CategoryService()
