# backend/docrepo/api/uploads.py
from fastapi import APIRouter, Depends, HTTPException, UploadFile
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import ObjectExists, StorageError, ValidationFailed
from ..models import Profile
from ..services.ingress import UploadKind, file_ingress
from ..services.settings import settings_service
from ..utils.logging import api_logger
from .deps import require_editor

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


@router.post("/{kind}")
async def upload_file(
        kind: UploadKind,
        file: UploadFile,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_editor)
):
    """Store a file ahead of creating or updating a document row"""
    api_logger.info("Receiving upload", extra={
        "kind": kind.value,
        "file_name": file.filename,
        "user_id": user.id
    })

    try:
        result = await file_ingress.ingest(
            file, kind, user.id, max_document_size=settings_service.max_document_size(db)
        )
    except ValidationFailed as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ObjectExists as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        api_logger.error("Upload failed", extra={"error": str(e)})
        raise HTTPException(status_code=502, detail=f"Upload failed: {str(e)}")

    return {
        "bucket": result.bucket,
        "path": result.path,
        "size": result.size,
        "content_type": result.content_type,
        "name": result.original_name
    }
