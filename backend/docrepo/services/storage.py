# backend/docrepo/services/storage.py
from pathlib import Path
from typing import Dict, Optional, Tuple

from svc_infra.storage.backends import LocalBackend
from svc_infra.storage.base import FileNotFoundError as BackendFileNotFound
from svc_infra.storage.base import InvalidKeyError
from svc_infra.storage.base import StorageError as BackendStorageError

from ..config import settings
from ..errors import ObjectExists, ObjectNotFound, StorageError
from ..utils.logging import storage_logger


class ObjectStorage:
    """Named buckets, each backed by its own svc-infra ``LocalBackend``.

    A bucket lives in ``<root>/<bucket>`` and its signed URLs point at
    ``<base_url>/storage/<bucket>/<key>``, which ``api/storage.py`` serves
    after ``verify_url``.
    """

    def __init__(self, root: Optional[Path] = None, signing_secret: Optional[str] = None,
                 base_url: Optional[str] = None, buckets: Optional[Tuple[str, ...]] = None):
        self._root = root
        self._signing_secret = signing_secret
        self._base_url = base_url
        self._buckets = buckets
        self._backends: Dict[Tuple[str, str], LocalBackend] = {}

    @property
    def root(self) -> Path:
        return self._root if self._root is not None else settings.STORAGE_PATH / "buckets"

    @property
    def buckets(self) -> Tuple[str, ...]:
        return self._buckets if self._buckets is not None else settings.buckets

    @property
    def base_url(self) -> str:
        return (self._base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def backend(self, bucket: str) -> LocalBackend:
        if bucket not in self.buckets:
            raise StorageError(f"Bucket not found: {bucket}")

        # Keyed by root so a relocated STORAGE_PATH gets fresh backends
        cache_key = (str(self.root), bucket)
        if cache_key not in self._backends:
            self._backends[cache_key] = LocalBackend(
                base_path=str(self.root / bucket),
                base_url=f"{self.base_url}/storage/{bucket}",
                # Per-bucket secret, the signed message itself names only the key
                signing_secret=f"{self._signing_secret or settings.SIGNING_SECRET}:{bucket}",
            )
        return self._backends[cache_key]

    async def upload(self, bucket: str, path: str, data: bytes,
                     content_type: str = "application/octet-stream") -> str:
        backend = self.backend(bucket)
        try:
            if await backend.exists(path):
                raise ObjectExists(f"Object already exists: {bucket}/{path}")
            await backend.put(path, data, content_type)
        except InvalidKeyError as e:
            raise StorageError(f"Invalid object path: {path!r}") from e
        except BackendStorageError as e:
            storage_logger.error("Error writing object", extra={
                "bucket": bucket,
                "path": path,
                "error": str(e)
            })
            raise StorageError(str(e)) from e

        storage_logger.info("Stored object", extra={"bucket": bucket, "path": path, "size": len(data)})
        return path

    async def download(self, bucket: str, path: str) -> bytes:
        try:
            return await self.backend(bucket).get(path)
        except BackendFileNotFound as e:
            raise ObjectNotFound(f"Object not found: {bucket}/{path}") from e
        except InvalidKeyError as e:
            raise StorageError(f"Invalid object path: {path!r}") from e

    async def content_type(self, bucket: str, path: str) -> str:
        try:
            metadata = await self.backend(bucket).get_metadata(path)
        except BackendFileNotFound as e:
            raise ObjectNotFound(f"Object not found: {bucket}/{path}") from e
        return metadata.get("content_type") or "application/octet-stream"

    async def remove(self, bucket: str, path: str) -> None:
        try:
            deleted = await self.backend(bucket).delete(path)
        except InvalidKeyError as e:
            raise StorageError(f"Invalid object path: {path!r}") from e
        except BackendStorageError as e:
            raise StorageError(str(e)) from e

        if not deleted:
            raise ObjectNotFound(f"Object not found: {bucket}/{path}")
        storage_logger.info("Removed object", extra={"bucket": bucket, "path": path})

    async def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        try:
            return await self.backend(bucket).get_url(path, expires_in=expires_in)
        except BackendFileNotFound as e:
            raise ObjectNotFound(f"Object not found: {bucket}/{path}") from e
        except InvalidKeyError as e:
            raise StorageError(f"Invalid object path: {path!r}") from e

    def verify_signature(self, bucket: str, path: str, expires: str, signature: str,
                         download: bool = False) -> bool:
        if bucket not in self.buckets:
            return False
        try:
            return self.backend(bucket).verify_url(
                key=path,
                expires=expires,
                signature=signature,
                download=download,
            )
        except (ValueError, BackendStorageError):
            return False


object_storage = ObjectStorage()


def get_storage() -> ObjectStorage:
    return object_storage
