# backend/docrepo/schemas/viewer.py
import enum
from typing import Optional

from .base import BaseSchema


class ViewerState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    EMPTY = "empty"


class RenderMode(str, enum.Enum):
    EMBEDDED_FRAME = "embedded_frame"
    INLINE_IMAGE = "inline_image"
    DOWNLOAD_FALLBACK = "download_fallback"
    UNSUPPORTED = "unsupported"


class ViewerResult(BaseSchema):
    document_id: Optional[int] = None
    state: ViewerState
    render_mode: Optional[RenderMode] = None
    url: Optional[str] = None
    extension: Optional[str] = None
    download_name: Optional[str] = None
    message: Optional[str] = None
