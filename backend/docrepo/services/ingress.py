# backend/docrepo/services/ingress.py
import enum
from dataclasses import dataclass
from typing import Optional

from fastapi import UploadFile

from ..config import settings
from ..errors import ValidationFailed
from ..utils.files import build_storage_key, sanitize_filename
from ..utils.logging import service_logger
from .storage import ObjectStorage, object_storage

ALLOWED_DOCUMENT_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
})


class UploadKind(str, enum.Enum):
    DOCUMENT = "document"
    COVER = "cover"


@dataclass
class PendingUpload:
    """An upload that was read and validated but not yet stored"""
    kind: UploadKind
    data: bytes
    filename: str
    content_type: Optional[str]

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class UploadResult:
    bucket: str
    path: str
    size: int
    content_type: Optional[str]
    original_name: str


class FileIngress:
    """Validates client uploads and forwards their bytes to a storage bucket.

    ``prepare`` reads and validates without touching storage, ``store``
    writes a prepared upload. Callers with several files prepare all of
    them before storing any.
    """

    def __init__(self, storage: ObjectStorage = object_storage):
        self.storage = storage

    @staticmethod
    def bucket_for(kind: UploadKind) -> str:
        return settings.COVERS_BUCKET if kind == UploadKind.COVER else settings.DOCUMENTS_BUCKET

    @staticmethod
    def validate(filename: Optional[str], content_type: Optional[str], size: int, kind: UploadKind,
                 max_document_size: Optional[int] = None) -> None:
        """Size and type guardrails for the upload form; not a security boundary"""
        if not filename or not sanitize_filename(filename):
            raise ValidationFailed("A file with a usable name is required")

        if kind == UploadKind.COVER:
            if not (content_type or "").startswith("image/"):
                raise ValidationFailed("Cover must be an image")
            if size > settings.MAX_COVER_SIZE:
                raise ValidationFailed(
                    f"Cover image exceeds the {settings.MAX_COVER_SIZE // (1024 * 1024)}MB limit"
                )
            return

        limit = max_document_size or settings.MAX_DOCUMENT_SIZE
        if content_type not in ALLOWED_DOCUMENT_TYPES:
            raise ValidationFailed(f"File type not allowed: {content_type or 'unknown'}")
        if size > limit:
            raise ValidationFailed(f"File exceeds the {limit // (1024 * 1024)}MB limit")

    async def prepare(self, upload_file: UploadFile, kind: UploadKind,
                      max_document_size: Optional[int] = None) -> PendingUpload:
        data = await upload_file.read()
        self.validate(upload_file.filename, upload_file.content_type, len(data), kind,
                      max_document_size=max_document_size)
        return PendingUpload(
            kind=kind,
            data=data,
            filename=upload_file.filename,
            content_type=upload_file.content_type,
        )

    async def upload(self, data: bytes, bucket: str, key: str,
                     content_type: Optional[str] = None) -> str:
        """Single-shot write; storage errors propagate to the caller"""
        return await self.storage.upload(bucket, key, data, content_type or "application/octet-stream")

    async def store(self, pending: PendingUpload, user_id: Optional[str]) -> UploadResult:
        key = build_storage_key(user_id, sanitize_filename(pending.filename), cover=pending.kind == UploadKind.COVER)
        bucket = self.bucket_for(pending.kind)

        service_logger.info("Uploading file", extra={
            "bucket": bucket,
            "path": key,
            "size": pending.size,
            "user_id": user_id
        })
        await self.upload(pending.data, bucket, key, pending.content_type)

        return UploadResult(
            bucket=bucket,
            path=key,
            size=pending.size,
            content_type=pending.content_type,
            original_name=pending.filename,
        )

    async def ingest(self, upload_file: UploadFile, kind: UploadKind, user_id: Optional[str],
                     max_document_size: Optional[int] = None) -> UploadResult:
        pending = await self.prepare(upload_file, kind, max_document_size=max_document_size)
        return await self.store(pending, user_id)


file_ingress = FileIngress()
