# backend/docrepo/utils/files.py
import re
import time
from typing import Optional

from ..models.document import ContentKind

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp", "svg"})
OFFICE_EXTENSIONS = frozenset({"doc", "docx", "ppt", "pptx", "xls", "xlsx"})


def sanitize_filename(name: str) -> str:
    """Replace spaces with underscores and drop anything outside [A-Za-z0-9._-]"""
    return _UNSAFE_CHARS.sub("", name.replace(" ", "_"))


def build_storage_key(user_id: Optional[str], sanitized_name: str, cover: bool = False,
                      now_ms: Optional[int] = None) -> str:
    """Build the per-user, millisecond-stamped key an upload is stored under"""
    owner = user_id or "unknown"
    stamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    folder = f"{owner}/covers" if cover else owner
    return f"{folder}/{stamp}-{sanitized_name}"


def file_extension(path: Optional[str]) -> str:
    """Lower-cased text after the last dot of the final path segment, or '' when there is none"""
    if not path:
        return ""
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def content_kind_for(path: Optional[str]) -> ContentKind:
    extension = file_extension(path)
    if extension == "pdf":
        return ContentKind.PDF
    if extension in IMAGE_EXTENSIONS:
        return ContentKind.IMAGE
    if extension in OFFICE_EXTENSIONS:
        return ContentKind.OFFICE
    return ContentKind.UNKNOWN
