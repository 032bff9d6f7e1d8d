# backend/docrepo/api/documents.py
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..errors import NotFound, ObjectExists, StorageError, ValidationFailed
from ..models import Profile, Role
from ..schemas.document import (DeletionReport, Document as DocumentSchema, DocumentCreate, DocumentUpdate,
                                SignedUrl)
from ..schemas.viewer import ViewerResult
from ..services.documents import document_service
from ..services.ingress import UploadKind, file_ingress
from ..services.settings import settings_service
from ..services.viewer import DocumentViewer
from ..utils.logging import api_logger
from .deps import get_current_user, get_optional_user, require_editor

router = APIRouter(prefix="/api/documents", tags=["documents"])


def split_tags(values: List[str]) -> List[str]:
    tags = []
    for value in values:
        for tag in value.split(","):
            tag = tag.strip()
            if tag and tag not in tags:
                tags.append(tag)
    return tags


@router.get("", response_model=List[DocumentSchema])
async def list_documents(
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        db: Session = Depends(get_db)
):
    api_logger.info("Listing documents", extra={
        "search": search,
        "category_id": category_id,
        "operation": "list_documents"
    })

    try:
        start_time = time.time()
        documents = document_service.list(db, search=search, category_id=category_id)

        api_logger.info("Successfully listed documents", extra={
            "document_count": len(documents),
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return documents
    except Exception as e:
        api_logger.error("Error listing documents", extra={"error": str(e)})
        raise


@router.get("/mine", response_model=List[DocumentSchema])
async def list_my_documents(
        search: Optional[str] = None,
        db: Session = Depends(get_db),
        user: Profile = Depends(get_current_user)
):
    return document_service.list(db, search=search, author_id=user.id)


@router.post("", response_model=DocumentSchema)
async def create_document(
        document: DocumentCreate,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_editor)
):
    """Insert metadata for a file that was already uploaded to storage"""
    api_logger.info("Creating new document", extra={
        "category_id": document.category_id,
        "title": document.title,
        "file_path": document.file_path
    })

    if document.author_id is None or Role(user.role) != Role.ADMIN:
        document.author_id = user.id

    try:
        start_time = time.time()
        db_document = document_service.create(db, document)

        api_logger.info("Successfully created document", extra={
            "document_id": db_document.id,
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return db_document
    except IntegrityError:
        api_logger.warning("Document references an unknown category or author", extra={
            "category_id": document.category_id
        })
        raise HTTPException(status_code=422, detail="Unknown category")
    except Exception as e:
        api_logger.error("Error creating document", extra={
            "title": document.title,
            "error": str(e)
        })
        raise


@router.post("/upload", response_model=DocumentSchema)
async def upload_document(
        file: UploadFile = File(...),
        title: str = Form(...),
        category_id: int = Form(...),
        description: Optional[str] = Form(None),
        tags: List[str] = Form([]),
        cover: Optional[UploadFile] = File(None),
        db: Session = Depends(get_db),
        user: Profile = Depends(require_editor)
):
    """Upload the file (and optional cover), then insert the metadata row.

    Both files are validated before either is stored. The storage writes
    and the insert are not transactional: if a later step fails the stored
    objects stay behind and are only logged.
    """
    api_logger.info("Starting document upload", extra={
        "file_name": file.filename,
        "has_cover": cover is not None,
        "user_id": user.id
    })

    try:
        metadata = DocumentCreate(
            title=title,
            description=description,
            category_id=category_id,
            tags=split_tags(tags),
            file_path="pending",
            author_id=user.id,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        pending_file = await file_ingress.prepare(
            file, UploadKind.DOCUMENT, max_document_size=settings_service.max_document_size(db)
        )
        pending_cover = None
        if cover is not None and cover.filename:
            pending_cover = await file_ingress.prepare(cover, UploadKind.COVER)
    except ValidationFailed as e:
        api_logger.warning("Upload rejected", extra={"error": str(e), "user_id": user.id})
        raise HTTPException(status_code=422, detail=str(e))

    try:
        metadata.file_path = (await file_ingress.store(pending_file, user.id)).path
        if pending_cover is not None:
            metadata.cover_image_path = (await file_ingress.store(pending_cover, user.id)).path
    except StorageError as e:
        api_logger.error("Upload to storage failed", extra={
            "error": str(e),
            "orphaned_file_path": None if metadata.file_path == "pending" else metadata.file_path
        })
        if isinstance(e, ObjectExists):
            raise HTTPException(status_code=409, detail=str(e))
        raise HTTPException(status_code=502, detail=f"Upload failed: {str(e)}")

    try:
        return document_service.create(db, metadata)
    except IntegrityError:
        api_logger.error("Document row rejected, stored objects are orphaned", extra={
            "file_path": metadata.file_path,
            "cover_image_path": metadata.cover_image_path,
            "category_id": category_id
        })
        raise HTTPException(status_code=422, detail="Unknown category")
    except Exception as e:
        api_logger.error("Document row insert failed, stored objects are orphaned", extra={
            "file_path": metadata.file_path,
            "cover_image_path": metadata.cover_image_path,
            "error": str(e)
        })
        raise HTTPException(status_code=500, detail=f"Could not save document: {str(e)}")


@router.get("/{document_id}", response_model=DocumentSchema)
async def get_document(document_id: int, db: Session = Depends(get_db)):
    api_logger.info("Retrieving document details", extra={"document_id": document_id})

    document = document_service.get_by_id(db, document_id)
    if not document:
        api_logger.warning("Document not found", extra={"document_id": document_id})
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.put("/{document_id}", response_model=DocumentSchema)
async def update_document(
        document_id: int,
        document: DocumentUpdate,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_editor)
):
    api_logger.info("Updating document", extra={
        "document_id": document_id,
        "update_fields": list(document.model_dump(exclude_unset=True).keys())
    })

    try:
        start_time = time.time()
        updated = document_service.update(db, document_id, document)

        api_logger.info("Successfully updated document", extra={
            "document_id": document_id,
            "new_values": document.model_dump(exclude_unset=True),
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return updated
    except IntegrityError:
        raise HTTPException(status_code=422, detail="Unknown category")
    except NotFound:
        api_logger.warning("Document not found for update", extra={"document_id": document_id})
        raise HTTPException(status_code=404, detail="Document not found")
    except Exception as e:
        api_logger.error("Error updating document", extra={
            "document_id": document_id,
            "error": str(e)
        })
        raise


@router.delete("/{document_id}", response_model=DeletionReport)
async def delete_document(
        document_id: int,
        db: Session = Depends(get_db),
        user: Profile = Depends(require_editor)
):
    api_logger.info("Deleting document", extra={"document_id": document_id, "user_id": user.id})

    try:
        report = await document_service.delete(db, document_id)
        api_logger.info(f"Successfully deleted document {document_id}", extra={
            "complete": report.complete
        })
        return report
    except NotFound:
        api_logger.warning("Document not found for deletion", extra={"document_id": document_id})
        raise HTTPException(status_code=404, detail="Document not found")
    except Exception as e:
        api_logger.error(f"Failed to delete document: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{document_id}/preview", response_model=ViewerResult)
async def preview_document(
        document_id: int,
        db: Session = Depends(get_db),
        user: Optional[Profile] = Depends(get_optional_user)
):
    document = document_service.get_by_id(db, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")

    result = await DocumentViewer(document_service).open(document)
    try:
        document_service.register_view(db, document_id, user.id if user else None)
    except Exception as e:
        api_logger.warning("Could not record document view", extra={
            "document_id": document_id,
            "error": str(e)
        })
    return result


@router.post("/{document_id}/download", response_model=SignedUrl)
async def download_document(
        document_id: int,
        db: Session = Depends(get_db),
        user: Optional[Profile] = Depends(get_optional_user)
):
    document = document_service.get_by_id(db, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")

    url = await document_service.get_signed_url(document.file_path)
    if not url:
        raise HTTPException(status_code=502, detail="Could not obtain a download URL for the file")

    document_service.register_download(db, document_id, user.id if user else None)
    api_logger.info("Issued download URL", extra={"document_id": document_id})
    return SignedUrl(url=url, expires_in=settings.SIGNED_URL_TTL)


@router.get("/{document_id}/cover", response_model=SignedUrl)
async def get_cover(document_id: int, db: Session = Depends(get_db)):
    document = document_service.get_by_id(db, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    if not document.cover_image_path:
        raise HTTPException(status_code=404, detail="Document has no cover image")

    url = await document_service.get_signed_url(document.cover_image_path, bucket=settings.COVERS_BUCKET)
    if not url:
        raise HTTPException(status_code=502, detail="Could not obtain a URL for the cover image")
    return SignedUrl(url=url, expires_in=settings.SIGNED_URL_TTL)
