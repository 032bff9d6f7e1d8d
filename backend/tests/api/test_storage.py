# backend/tests/api/test_storage.py
import io
from urllib.parse import parse_qs, urlsplit

from fastapi import status


def relative(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.path}?{parts.query}"


def upload(client, headers, name, content, content_type="application/pdf", kind="document"):
    return client.post(
        f"/api/uploads/{kind}",
        files={"file": (name, io.BytesIO(content), content_type)},
        headers=headers
    )


def test_upload_then_fetch_by_signed_url(client, editor_headers, sample_category):
    """Bytes fetched through either of two signed URLs match the uploaded file"""
    content = bytes(range(256)) * 8
    response = upload(client, editor_headers, "Notes v2.pdf", content)
    assert response.status_code == status.HTTP_200_OK
    path = response.json()["path"]
    assert path.endswith("-Notes_v2.pdf")
    assert response.json()["size"] == len(content)

    created = client.post(
        "/api/documents",
        json={"title": "Notes", "category_id": sample_category.id, "file_path": path},
        headers=editor_headers
    ).json()

    urls = [client.post(f"/api/documents/{created['id']}/download").json()["url"] for _ in range(2)]
    for url in urls:
        fetched = client.get(relative(url))
        assert fetched.status_code == status.HTTP_200_OK
        assert fetched.content == content


def test_cover_upload_goes_to_covers_folder(client, editor_headers, editor_user):
    response = upload(client, editor_headers, "cover.png", b"png", content_type="image/png", kind="cover")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["bucket"] == "covers"
    assert response.json()["path"].startswith(f"{editor_user.id}/covers/")


def test_upload_requires_editor(client, viewer_headers):
    response = upload(client, viewer_headers, "a.pdf", b"%PDF")
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_tampered_signature_rejected(client, sample_document):
    url = client.post(f"/api/documents/{sample_document.id}/download").json()["url"]
    parts = urlsplit(url)
    query = parse_qs(parts.query)

    response = client.get(parts.path, params={"expires": query["expires"][0], "signature": "0" * 64})
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_expired_signature_rejected(client, sample_document):
    url = client.post(f"/api/documents/{sample_document.id}/download").json()["url"]
    parts = urlsplit(url)
    query = parse_qs(parts.query)

    response = client.get(parts.path, params={"expires": "1", "signature": query["signature"][0]})
    assert response.status_code == status.HTTP_403_FORBIDDEN
