from .auth import router as auth_router
from .users import router as users_router
from .categories import router as categories_router
from .documents import router as documents_router
from .uploads import router as uploads_router
from .storage import router as storage_router
from .dashboard import router as dashboard_router
from .settings import router as settings_router

__all__ = [
    "auth_router", "users_router", "categories_router", "documents_router",
    "uploads_router", "storage_router", "dashboard_router", "settings_router"
]
