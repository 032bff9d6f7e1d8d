# backend/docrepo/services/dashboard.py
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..errors import DashboardUnavailable
from ..models import Category, Document, DocumentDownload, Profile
from ..schemas.dashboard import AdminDashboardStats, CountEntry, ReportStats, UserDashboardStats
from ..schemas.document import DocumentSummary
from ..utils.logging import service_logger


class DashboardService:
    """Stat cards and "latest N" tables for the dashboards.

    A dashboard gathers all of its query coroutines and inspects each
    outcome once every one has settled. The queries share the request session and run one after
    another on the event loop. Critical queries abort the whole
    dashboard; the others fall back to zero.
    """

    @staticmethod
    def _since() -> datetime:
        return datetime.now(timezone.utc) - timedelta(days=settings.RECENT_DAYS)

    @staticmethod
    async def count_documents(db: Session, since: Optional[datetime] = None) -> int:
        query = db.query(func.count(Document.id))
        if since is not None:
            query = query.filter(Document.created_at >= since)
        return query.scalar() or 0

    @staticmethod
    async def count_categories(db: Session) -> int:
        return db.query(func.count(Category.id)).scalar() or 0

    @staticmethod
    async def count_users(db: Session) -> int:
        return db.query(func.count(Profile.id)).scalar() or 0

    @staticmethod
    async def count_downloads(db: Session) -> int:
        return db.query(func.count(DocumentDownload.id)).scalar() or 0

    @staticmethod
    async def latest_documents(db: Session, limit: Optional[int] = None) -> List[DocumentSummary]:
        documents = db.query(Document) \
            .options(joinedload(Document.author)) \
            .order_by(Document.created_at.desc(), Document.id.desc()) \
            .limit(limit or settings.LATEST_LIMIT) \
            .all()
        return [DocumentSummary.model_validate(doc) for doc in documents]

    @staticmethod
    def _settled(name: str, outcome: Any, critical: bool, default: Any = 0) -> Any:
        if not isinstance(outcome, BaseException):
            return outcome

        if critical:
            service_logger.error(f"Dashboard query failed: {name}", extra={"error": str(outcome)})
            raise DashboardUnavailable(f"{name}: {outcome}") from outcome

        service_logger.warning(f"Dashboard query failed, using default: {name}", extra={
            "error": str(outcome),
            "default": default
        })
        return default

    async def admin_stats(self, db: Session) -> AdminDashboardStats:
        total, recent, categories, latest = await asyncio.gather(
            self.count_documents(db),
            self.count_documents(db, since=self._since()),
            self.count_categories(db),
            self.latest_documents(db),
            return_exceptions=True,
        )

        return AdminDashboardStats(
            total_documents=self._settled("documents count", total, critical=True),
            recent_documents=self._settled("recent documents count", recent, critical=True),
            total_categories=self._settled("categories count", categories, critical=False),
            latest_documents=self._settled("recent documents list", latest, critical=True),
        )

    async def user_stats(self, db: Session, include_users: bool) -> UserDashboardStats:
        queries = [
            self.count_documents(db),
            self.count_documents(db, since=self._since()),
            self.count_downloads(db),
            self.latest_documents(db),
        ]
        if include_users:
            queries.append(self.count_users(db))

        outcomes = await asyncio.gather(*queries, return_exceptions=True)
        total, recent, downloads, latest = outcomes[:4]

        return UserDashboardStats(
            total_documents=self._settled("documents count", total, critical=True),
            recent_uploads=self._settled("recent uploads count", recent, critical=True),
            total_downloads=self._settled("downloads count", downloads, critical=False),
            latest_documents=self._settled("recent documents list", latest, critical=True),
            total_users=self._settled("users count", outcomes[4], critical=True) if include_users else None,
        )

    @staticmethod
    async def top_downloads(db: Session, limit: int = 10) -> List[CountEntry]:
        rows = db.query(Document.id, Document.title, func.count(DocumentDownload.id).label("downloads")) \
            .join(DocumentDownload, DocumentDownload.document_id == Document.id) \
            .group_by(Document.id, Document.title) \
            .order_by(func.count(DocumentDownload.id).desc(), Document.id) \
            .limit(limit) \
            .all()
        return [CountEntry(id=row.id, label=row.title, count=row.downloads) for row in rows]

    @staticmethod
    async def documents_per_category(db: Session) -> List[CountEntry]:
        rows = db.query(Category.id, Category.name, func.count(Document.id).label("documents")) \
            .outerjoin(Document, Document.category_id == Category.id) \
            .group_by(Category.id, Category.name) \
            .order_by(func.count(Document.id).desc(), Category.name) \
            .all()
        return [CountEntry(id=row.id, label=row.name, count=row.documents) for row in rows]

    async def report_stats(self, db: Session) -> ReportStats:
        downloads, per_category = await asyncio.gather(
            self.top_downloads(db),
            self.documents_per_category(db),
            return_exceptions=True,
        )
        return ReportStats(
            top_downloads=self._settled("top downloads", downloads, critical=False, default=[]),
            documents_per_category=self._settled("documents per category", per_category, critical=False, default=[]),
        )


dashboard_service = DashboardService()
