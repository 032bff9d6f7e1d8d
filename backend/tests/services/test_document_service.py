# backend/tests/services/test_document_service.py
from urllib.parse import parse_qs, urlsplit

import pytest

from docrepo.config import settings
from docrepo.errors import NotFound, ObjectNotFound, StorageError
from docrepo.models import Document
from docrepo.schemas.document import DocumentCreate
from docrepo.services.cleanup import CleanupService
from docrepo.services.documents import DocumentService
from docrepo.services.storage import ObjectStorage


class FlakyStorage(ObjectStorage):
    """Storage whose removals fail for one bucket"""

    def __init__(self, failing_bucket):
        super().__init__()
        self.failing_bucket = failing_bucket
        self.removed = []

    async def remove(self, bucket, path):
        if bucket == self.failing_bucket:
            raise StorageError("bucket offline")
        self.removed.append((bucket, path))


def service_with(storage):
    return DocumentService(storage=storage, cleanup=CleanupService(storage))


@pytest.mark.asyncio
async def test_delete_continues_when_file_removal_fails(db_session, sample_document):
    storage = FlakyStorage(settings.DOCUMENTS_BUCKET)
    report = await service_with(storage).delete(db_session, sample_document.id)

    steps = {step.target: step for step in report.steps}
    assert steps["file"].succeeded is False
    assert steps["file"].error == "bucket offline"
    assert steps["cover"].succeeded is True
    assert steps["row"].succeeded is True
    assert not report.complete
    assert storage.removed == [(settings.COVERS_BUCKET, sample_document.cover_image_path)]
    assert db_session.query(Document).count() == 0


@pytest.mark.asyncio
async def test_delete_continues_when_cover_removal_fails(db_session, sample_document):
    storage = FlakyStorage(settings.COVERS_BUCKET)
    report = await service_with(storage).delete(db_session, sample_document.id)

    steps = {step.target: step for step in report.steps}
    assert steps["file"].succeeded is True
    assert steps["cover"].succeeded is False
    assert db_session.query(Document).count() == 0


@pytest.mark.asyncio
async def test_delete_without_cover_has_no_cover_step(db_session, sample_category):
    service = service_with(FlakyStorage(failing_bucket=None))
    document = service.create(db_session, DocumentCreate(
        title="No cover", category_id=sample_category.id, file_path="u1/1-a.pdf"
    ))

    report = await service.delete(db_session, document.id)
    assert [step.target for step in report.steps] == ["file", "row"]
    assert report.complete


@pytest.mark.asyncio
async def test_delete_unknown_document(db_session):
    with pytest.raises(NotFound):
        await DocumentService().delete(db_session, 12345)


def test_get_by_id_returns_none_when_missing(db_session):
    assert DocumentService().get_by_id(db_session, 12345) is None


def test_list_newest_first(db_session, sample_category):
    service = DocumentService()
    first = service.create(db_session, DocumentCreate(title="First", category_id=sample_category.id,
                                                      file_path="u1/1-a.pdf"))
    second = service.create(db_session, DocumentCreate(title="Second", category_id=sample_category.id,
                                                       file_path="u1/2-b.pdf"))

    assert [doc.id for doc in service.list(db_session)] == [second.id, first.id]
    assert service.list(db_session)[0].category_name == "Theses"


@pytest.mark.asyncio
async def test_signed_url_none_for_missing_object(db_session):
    assert await DocumentService().get_signed_url("nobody/1-ghost.pdf") is None
    assert await DocumentService().get_signed_url("") is None


@pytest.mark.asyncio
async def test_signed_url_for_existing_object(sample_document):
    url = await DocumentService().get_signed_url(sample_document.file_path)
    assert url.startswith(f"{settings.PUBLIC_BASE_URL}/storage/documents/")
    assert "signature=" in url


@pytest.mark.asyncio
async def test_storage_remove_missing_object_raises(temp_storage_dir):
    with pytest.raises(ObjectNotFound):
        await ObjectStorage().remove(settings.DOCUMENTS_BUCKET, "u1/none.pdf")


@pytest.mark.asyncio
async def test_storage_rejects_path_traversal():
    with pytest.raises(StorageError):
        await ObjectStorage().upload(settings.DOCUMENTS_BUCKET, "../escape.pdf", b"x")


@pytest.mark.asyncio
async def test_signed_url_verifies_only_for_its_bucket(sample_document):
    storage = ObjectStorage()
    url = await storage.create_signed_url(settings.DOCUMENTS_BUCKET, sample_document.file_path, 60)
    query = parse_qs(urlsplit(url).query)
    expires, signature = query["expires"][0], query["signature"][0]

    assert storage.verify_signature(settings.DOCUMENTS_BUCKET, sample_document.file_path, expires, signature)
    assert not storage.verify_signature(settings.COVERS_BUCKET, sample_document.file_path, expires, signature)
    assert not storage.verify_signature("elsewhere", sample_document.file_path, expires, signature)
    assert not storage.verify_signature(settings.DOCUMENTS_BUCKET, "other/1-x.pdf", expires, signature)


@pytest.mark.asyncio
async def test_storage_round_trip_keeps_content_type(temp_storage_dir):
    storage = ObjectStorage()
    await storage.upload(settings.COVERS_BUCKET, "u1/covers/1-c.png", b"png", "image/png")

    assert await storage.download(settings.COVERS_BUCKET, "u1/covers/1-c.png") == b"png"
    assert await storage.content_type(settings.COVERS_BUCKET, "u1/covers/1-c.png") == "image/png"


@pytest.mark.asyncio
async def test_storage_unknown_bucket():
    with pytest.raises(StorageError):
        await ObjectStorage().upload("archive", "u1/1-a.pdf", b"x")
