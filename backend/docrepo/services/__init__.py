from .storage import object_storage
from .ingress import file_ingress
from .categories import category_service
from .documents import document_service
from .cleanup import cleanup_service
from .dashboard import dashboard_service
from .settings import settings_service

__all__ = [
    "object_storage",
    "file_ingress",
    "category_service",
    "document_service",
    "cleanup_service",
    "dashboard_service",
    "settings_service"
]
