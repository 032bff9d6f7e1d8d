# backend/docrepo/services/documents.py
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..errors import NotFound
from ..models import Document, DocumentDownload, DocumentView
from ..schemas.document import DocumentCreate, DocumentUpdate, DeletionReport, StorageStep
from ..utils.files import content_kind_for
from ..utils.logging import service_logger
from .cleanup import CleanupService, cleanup_service
from .storage import ObjectStorage, object_storage


def matches_search(document: Document, term: str) -> bool:
    """Case-insensitive substring match over title, description, category name and tags"""
    needle = term.lower()
    haystack = [document.title, document.description, document.category_name, *(document.tags or [])]
    return any(needle in value.lower() for value in haystack if value)


class DocumentService:
    """Metadata rows in the documents table plus their stored objects"""

    def __init__(self, storage: ObjectStorage = object_storage, cleanup: CleanupService = cleanup_service):
        self.storage = storage
        self.cleanup = cleanup

    @staticmethod
    def _query(db: Session):
        return db.query(Document).options(joinedload(Document.category), joinedload(Document.author))

    def list(self, db: Session, search: Optional[str] = None, category_id: Optional[int] = None,
             author_id: Optional[str] = None) -> List[Document]:
        query = self._query(db)
        if category_id is not None:
            query = query.filter(Document.category_id == category_id)
        if author_id is not None:
            query = query.filter(Document.author_id == author_id)

        documents = query.order_by(Document.created_at.desc(), Document.id.desc()).all()

        if search and search.strip():
            documents = [doc for doc in documents if matches_search(doc, search.strip())]
        return documents

    def get_by_id(self, db: Session, document_id: int) -> Optional[Document]:
        return self._query(db).filter(Document.id == document_id).first()

    def create(self, db: Session, data: DocumentCreate) -> Document:
        document = Document(**data.model_dump())
        document.content_kind = content_kind_for(document.file_path)
        db.add(document)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(document)
        return document

    def update(self, db: Session, document_id: int, data: DocumentUpdate) -> Document:
        document = self.get_by_id(db, document_id)
        if not document:
            raise NotFound("Document", document_id)

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(document, field, value)
        if "file_path" in changes:
            document.content_kind = content_kind_for(document.file_path)

        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(document)
        return document

    async def delete(self, db: Session, document_id: int) -> DeletionReport:
        """Remove stored objects best-effort, then the row.

        Storage failures are reported in the result; only a failure to
        delete the row itself raises.
        """
        document = self.get_by_id(db, document_id)
        if not document:
            raise NotFound("Document", document_id)

        steps = await self.cleanup.delete_document_artifacts(document)

        try:
            db.delete(document)
            db.commit()
        except Exception:
            db.rollback()
            service_logger.error("Error deleting document row", extra={
                "document_id": document_id,
                "storage_steps": [step.model_dump() for step in steps]
            })
            raise

        steps.append(StorageStep(target="row", succeeded=True))
        report = DeletionReport(document_id=document_id, steps=steps)
        if not report.complete:
            service_logger.warning("Document deleted with storage leftovers", extra={
                "document_id": document_id,
                "failed": [step.path for step in steps if not step.succeeded]
            })
        return report

    async def get_signed_url(self, path: Optional[str], bucket: Optional[str] = None,
                             ttl: Optional[int] = None) -> Optional[str]:
        """Time-limited URL for a stored object, or None when it cannot be produced"""
        if not path:
            return None

        bucket = bucket or settings.DOCUMENTS_BUCKET
        try:
            return await self.storage.create_signed_url(bucket, path, ttl or settings.SIGNED_URL_TTL)
        except Exception as e:
            service_logger.error(f"Error generating signed URL for {path}", extra={
                "bucket": bucket,
                "error": str(e)
            })
            return None

    @staticmethod
    def register_download(db: Session, document_id: int, user_id: Optional[str] = None) -> DocumentDownload:
        download = DocumentDownload(document_id=document_id, user_id=user_id)
        db.add(download)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        return download

    @staticmethod
    def register_view(db: Session, document_id: int, user_id: Optional[str] = None) -> DocumentView:
        view = DocumentView(document_id=document_id, user_id=user_id)
        db.add(view)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        return view


document_service = DocumentService()
