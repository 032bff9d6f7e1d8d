# backend/docrepo/services/viewer.py
from typing import Optional

from ..models.document import ContentKind, Document
from ..schemas.viewer import RenderMode, ViewerResult, ViewerState
from ..utils.files import content_kind_for, file_extension
from ..utils.logging import service_logger
from .documents import DocumentService, document_service

RENDER_MODES = {
    ContentKind.PDF: RenderMode.EMBEDDED_FRAME,
    ContentKind.IMAGE: RenderMode.INLINE_IMAGE,
    ContentKind.OFFICE: RenderMode.DOWNLOAD_FALLBACK,
    ContentKind.UNKNOWN: RenderMode.UNSUPPORTED,
}


class DocumentViewer:
    """Decides how a single document is presented.

    States run idle -> loading -> ready | error; a document without a
    file path goes straight to empty without touching storage. Every call
    to ``open`` starts again from idle and fetches a fresh signed URL.
    """

    def __init__(self, documents: DocumentService = document_service):
        self.documents = documents
        self.state = ViewerState.IDLE
        self.result: Optional[ViewerResult] = None

    def reset(self) -> None:
        self.state = ViewerState.IDLE
        self.result = None

    async def open(self, document: Optional[Document]) -> ViewerResult:
        self.reset()

        if document is None or not document.file_path:
            self.state = ViewerState.EMPTY
            self.result = ViewerResult(
                document_id=document.id if document else None,
                state=self.state,
                message="Nothing to preview",
            )
            return self.result

        self.state = ViewerState.LOADING
        extension = file_extension(document.file_path)
        download_name = self._download_name(document, extension)

        url = await self.documents.get_signed_url(document.file_path)
        if not url:
            service_logger.warning("Viewer could not obtain a signed URL", extra={
                "document_id": document.id,
                "file_path": document.file_path
            })
            self.state = ViewerState.ERROR
            self.result = ViewerResult(
                document_id=document.id,
                state=self.state,
                extension=extension or None,
                download_name=download_name,
                message="Could not obtain a secure URL for the file",
            )
            return self.result

        kind = document.content_kind or content_kind_for(document.file_path)
        self.state = ViewerState.READY
        self.result = ViewerResult(
            document_id=document.id,
            state=self.state,
            render_mode=RENDER_MODES[ContentKind(kind)],
            url=url,
            extension=extension or None,
            download_name=download_name,
        )
        return self.result

    @staticmethod
    def _download_name(document: Document, extension: str) -> str:
        base = document.title or "document"
        return f"{base}.{extension}" if extension else base
