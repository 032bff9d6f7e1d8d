# backend/docrepo/api/categories.py
import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import CategoryInUse, NotFound
from ..models import Profile
from ..schemas.category import Category as CategorySchema, CategoryCreate, CategoryUpdate, CategoryWithCount
from ..services.categories import category_service
from ..utils.logging import api_logger
from .deps import require_admin

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=List[CategoryWithCount])
async def list_categories(db: Session = Depends(get_db)):
    """List all categories ordered by name, with their document counts"""
    api_logger.info("Listing categories")

    try:
        start_time = time.time()
        result = []
        for category, count in category_service.list_with_counts(db):
            item = CategoryWithCount.model_validate(category)
            item.document_count = count
            result.append(item)

        api_logger.info("Successfully listed categories", extra={
            "category_count": len(result),
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return result
    except Exception as e:
        api_logger.error("Failed to list categories", extra={"error": str(e)})
        raise


@router.get("/{category_id}", response_model=CategoryWithCount)
async def get_category(category_id: int, db: Session = Depends(get_db)):
    category = category_service.get(db, category_id)
    if not category:
        api_logger.warning("Category not found", extra={"category_id": category_id})
        raise HTTPException(status_code=404, detail="Category not found")

    result = CategoryWithCount.model_validate(category)
    result.document_count = category_service.count_documents(db, category_id)
    return result


@router.post("", response_model=CategorySchema)
async def create_category(
        category: CategoryCreate,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin)
):
    api_logger.info("Creating category", extra={"category_name": category.name, "user_id": user.id})

    try:
        created = category_service.create(db, category)
        api_logger.info("Category created successfully", extra={"category_id": created.id})
        return created
    except Exception as e:
        api_logger.error("Failed to create category", extra={
            "category_name": category.name,
            "error": str(e)
        })
        raise


@router.put("/{category_id}", response_model=CategorySchema)
async def update_category(
        category_id: int,
        category: CategoryUpdate,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin)
):
    api_logger.info("Updating category", extra={"category_id": category_id, "user_id": user.id})

    try:
        return category_service.update(db, category_id, category)
    except NotFound:
        api_logger.warning("Category not found for update", extra={"category_id": category_id})
        raise HTTPException(status_code=404, detail="Category not found")
    except Exception as e:
        api_logger.error("Failed to update category", extra={
            "category_id": category_id,
            "error": str(e)
        })
        raise


@router.delete("/{category_id}")
async def delete_category(
        category_id: int,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_admin)
):
    api_logger.info("Deleting category", extra={"category_id": category_id, "user_id": user.id})

    try:
        category_service.delete(db, category_id)
        return {"success": True}
    except NotFound:
        raise HTTPException(status_code=404, detail="Category not found")
    except CategoryInUse as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        api_logger.error(f"Failed to delete category: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
