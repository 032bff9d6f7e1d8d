from ..database import Base
from .category import Category
from .profile import Profile, Role, UserPreferences
from .document import Document, ContentKind
from .activity import DocumentDownload, DocumentView
from .setting import SystemSetting

__all__ = [
    "Base",
    "Category",
    "Profile",
    "Role",
    "UserPreferences",
    "Document",
    "ContentKind",
    "DocumentDownload",
    "DocumentView",
    "SystemSetting"
]
