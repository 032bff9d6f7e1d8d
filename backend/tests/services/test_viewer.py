# backend/tests/services/test_viewer.py
import pytest

from docrepo.models import ContentKind, Document
from docrepo.schemas.viewer import RenderMode, ViewerState
from docrepo.services.viewer import DocumentViewer
from docrepo.utils.files import content_kind_for


class FakeDocuments:
    def __init__(self, url="https://files.example/signed"):
        self.url = url
        self.requested = []

    async def get_signed_url(self, path, bucket=None, ttl=None):
        self.requested.append(path)
        return self.url


def make_document(file_path, title="Paper"):
    return Document(id=1, title=title, file_path=file_path, content_kind=content_kind_for(file_path))


@pytest.mark.asyncio
@pytest.mark.parametrize("file_path,mode", [
    ("u1/1-paper.pdf", RenderMode.EMBEDDED_FRAME),
    ("u1/1-figure.png", RenderMode.INLINE_IMAGE),
    ("u1/1-photo.JPG", RenderMode.INLINE_IMAGE),
    ("u1/1-report.docx", RenderMode.DOWNLOAD_FALLBACK),
    ("u1/1-sheet.xlsx", RenderMode.DOWNLOAD_FALLBACK),
    ("u1/1-data.csv", RenderMode.UNSUPPORTED),
])
async def test_render_mode_follows_content_kind(file_path, mode):
    viewer = DocumentViewer(FakeDocuments())
    result = await viewer.open(make_document(file_path))

    assert result.state == ViewerState.READY
    assert result.render_mode == mode
    assert result.url == "https://files.example/signed"
    assert viewer.state == ViewerState.READY


@pytest.mark.asyncio
async def test_empty_file_path_skips_signed_url():
    documents = FakeDocuments()
    viewer = DocumentViewer(documents)

    result = await viewer.open(Document(id=2, title="Draft", file_path=""))

    assert result.state == ViewerState.EMPTY
    assert result.render_mode is None
    assert documents.requested == []


@pytest.mark.asyncio
async def test_missing_document_is_empty():
    result = await DocumentViewer(FakeDocuments()).open(None)
    assert result.state == ViewerState.EMPTY


@pytest.mark.asyncio
async def test_signed_url_failure_is_error():
    viewer = DocumentViewer(FakeDocuments(url=None))

    result = await viewer.open(make_document("u1/1-paper.pdf", title="Paper"))

    assert result.state == ViewerState.ERROR
    assert result.url is None
    assert result.download_name == "Paper.pdf"
    assert result.message


@pytest.mark.asyncio
async def test_reopening_resets_and_fetches_again():
    documents = FakeDocuments()
    viewer = DocumentViewer(documents)

    await viewer.open(make_document("u1/1-a.pdf"))
    result = await viewer.open(make_document("u1/2-b.png"))

    assert documents.requested == ["u1/1-a.pdf", "u1/2-b.png"]
    assert result.render_mode == RenderMode.INLINE_IMAGE


@pytest.mark.asyncio
async def test_stored_kind_wins_over_extension():
    document = Document(id=3, title="Scan", file_path="u1/1-scan.bin", content_kind=ContentKind.PDF)
    result = await DocumentViewer(FakeDocuments()).open(document)
    assert result.render_mode == RenderMode.EMBEDDED_FRAME
