# backend/docrepo/schemas/dashboard.py
from typing import List, Optional

from pydantic import BaseModel

from .document import DocumentSummary


class AdminDashboardStats(BaseModel):
    total_documents: int
    recent_documents: int
    total_categories: int
    latest_documents: List[DocumentSummary] = []


class UserDashboardStats(BaseModel):
    total_documents: int
    recent_uploads: int
    total_users: Optional[int] = None
    total_downloads: int
    latest_documents: List[DocumentSummary] = []


class CountEntry(BaseModel):
    id: int
    label: str
    count: int


class ReportStats(BaseModel):
    top_downloads: List[CountEntry] = []
    documents_per_category: List[CountEntry] = []
