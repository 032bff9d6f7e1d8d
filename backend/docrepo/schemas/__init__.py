from .category import Category, CategoryCreate, CategoryUpdate, CategoryWithCount
from .document import Document, DocumentCreate, DocumentUpdate, DocumentSummary, DeletionReport, StorageStep, SignedUrl
from .viewer import ViewerResult, ViewerState, RenderMode
from .auth import User, Session, SignInRequest, UserCreate, UserMetadataUpdate, RoleUpdate
from .dashboard import AdminDashboardStats, UserDashboardStats, ReportStats, CountEntry
from .settings import SystemSettings, UserPreferences

__all__ = [
    "Category", "CategoryCreate", "CategoryUpdate", "CategoryWithCount",
    "Document", "DocumentCreate", "DocumentUpdate", "DocumentSummary", "DeletionReport", "StorageStep", "SignedUrl",
    "ViewerResult", "ViewerState", "RenderMode",
    "User", "Session", "SignInRequest", "UserCreate", "UserMetadataUpdate", "RoleUpdate",
    "AdminDashboardStats", "UserDashboardStats", "ReportStats", "CountEntry",
    "SystemSettings", "UserPreferences"
]
