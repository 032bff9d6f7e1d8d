# backend/docrepo/services/cleanup.py
import asyncio
from typing import List

from ..config import settings
from ..models import Document
from ..schemas.document import StorageStep
from ..utils.logging import service_logger
from .storage import ObjectStorage, object_storage


class CleanupService:
    """Removes the stored objects behind a document"""

    def __init__(self, storage: ObjectStorage = object_storage):
        self.storage = storage

    async def _remove(self, target: str, bucket: str, path: str) -> StorageStep:
        try:
            await self.storage.remove(bucket, path)
        except Exception as e:
            service_logger.error(f"Error deleting {target} from storage: {str(e)}", extra={
                "bucket": bucket,
                "path": path
            })
            return StorageStep(target=target, bucket=bucket, path=path, succeeded=False, error=str(e))

        service_logger.info(f"Deleted {target} from storage", extra={"bucket": bucket, "path": path})
        return StorageStep(target=target, bucket=bucket, path=path, succeeded=True)

    async def delete_document_artifacts(self, document: Document) -> List[StorageStep]:
        """Remove the document file and cover image independently.

        A failing removal is recorded in its step and never stops the other.
        """
        removals = []
        if document.file_path:
            removals.append(self._remove("file", settings.DOCUMENTS_BUCKET, document.file_path))
        if document.cover_image_path:
            removals.append(self._remove("cover", settings.COVERS_BUCKET, document.cover_image_path))

        if not removals:
            service_logger.info("No stored objects to delete", extra={"document_id": document.id})
            return []

        return list(await asyncio.gather(*removals))


cleanup_service = CleanupService()
