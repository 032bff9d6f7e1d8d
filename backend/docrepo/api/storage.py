# backend/docrepo/api/storage.py
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..errors import StorageError
from ..services.storage import ObjectStorage, get_storage
from ..utils.logging import api_logger

router = APIRouter(prefix="/storage", tags=["storage"])


@router.get("/{bucket}/{path:path}")
async def serve_object(
        bucket: str,
        path: str,
        expires: str,
        signature: str,
        download: bool = False,
        storage: ObjectStorage = Depends(get_storage)
):
    """Serve a private object to the holder of a valid signed URL"""
    if not storage.verify_signature(bucket, path, expires, signature, download=download):
        api_logger.warning("Rejected signed URL", extra={"bucket": bucket, "path": path})
        raise HTTPException(status_code=403, detail="Invalid or expired signature")

    try:
        content = await storage.download(bucket, path)
        media_type = await storage.content_type(bucket, path)
    except StorageError:
        raise HTTPException(status_code=404, detail="Object not found")

    filename = path.rsplit("/", 1)[-1]
    disposition = "attachment" if download else "inline"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'{disposition}; filename="{filename}"'},
    )
