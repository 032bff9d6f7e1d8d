# backend/docrepo/errors.py
"""Exceptions raised by the service layer.

Routers translate these into HTTP responses; services never raise
HTTPException themselves.
"""


class DocrepoError(Exception):
    """Base class for all service errors"""


class ValidationFailed(DocrepoError):
    """Input rejected before any storage or database call"""


class NotFound(DocrepoError):
    def __init__(self, resource: str, identifier):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found")


class CategoryInUse(DocrepoError):
    def __init__(self, category_id: int, document_count: int):
        self.category_id = category_id
        self.document_count = document_count
        super().__init__(
            f"Category is used by {document_count} document(s) and cannot be deleted"
        )


class StorageError(DocrepoError):
    """Object storage operation failed"""


class ObjectNotFound(StorageError):
    pass


class ObjectExists(StorageError):
    pass


class AuthError(DocrepoError):
    """Credentials or token rejected"""


class PermissionDenied(DocrepoError):
    pass


class DashboardUnavailable(DocrepoError):
    """A load-bearing dashboard query failed"""
