# backend/tests/conftest.py
import os
import shutil
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from docrepo.main import app
from docrepo.config import settings
from docrepo.database import Base, get_db, enable_sqlite_foreign_keys
from docrepo.models import Category, Document, Profile, Role
from docrepo.services.auth import AuthClient, hash_password
from docrepo.utils.files import content_kind_for

# Create test database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool  # Needed for SQLite in-memory database
    )
    enable_sqlite_foreign_keys(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def tables(engine):
    """Create all tables in the test database"""
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(engine, tables):
    """Creates a new database session for a test"""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def temp_storage_dir():
    """Create temporary storage directory for test files"""
    temp_dir = tempfile.mkdtemp()
    for bucket in settings.buckets:
        Path(temp_dir, "buckets", bucket).mkdir(parents=True, exist_ok=True)
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture(autouse=True)
def override_settings(temp_storage_dir):
    """Point object storage at the temporary directory"""
    original_storage = settings.STORAGE_PATH
    settings.STORAGE_PATH = temp_storage_dir
    yield
    settings.STORAGE_PATH = original_storage


@pytest.fixture
def client(db_session):
    """Test client using the test database"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db_session, email: str, role: Role) -> Profile:
    profile = Profile(
        email=email,
        full_name=email.split("@")[0].title(),
        role=role,
        password_hash=hash_password(TEST_PASSWORD)
    )
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, "admin@example.com", Role.ADMIN)


@pytest.fixture
def editor_user(db_session):
    return make_user(db_session, "editor@example.com", Role.EDITOR)


@pytest.fixture
def viewer_user(db_session):
    return make_user(db_session, "viewer@example.com", Role.VIEWER)


def auth_headers(db_session, user: Profile) -> dict:
    session = AuthClient(db_session).sign_in_with_password(user.email, TEST_PASSWORD)
    return {"Authorization": f"Bearer {session.access_token}"}


@pytest.fixture
def admin_headers(db_session, admin_user):
    return auth_headers(db_session, admin_user)


@pytest.fixture
def editor_headers(db_session, editor_user):
    return auth_headers(db_session, editor_user)


@pytest.fixture
def viewer_headers(db_session, viewer_user):
    return auth_headers(db_session, viewer_user)


@pytest.fixture
def sample_category(db_session):
    """Create a sample category"""
    category = Category(name="Theses", description="Graduate theses")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


def store_object(storage_dir: Path, bucket: str, key: str, content: bytes) -> None:
    target = storage_dir / "buckets" / bucket / key
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)


@pytest.fixture
def sample_document(db_session, sample_category, editor_user, temp_storage_dir):
    """Create a sample document with a stored PDF and cover"""
    file_path = f"{editor_user.id}/1700000000000-thesis.pdf"
    cover_path = f"{editor_user.id}/covers/1700000000000-cover.png"
    store_object(temp_storage_dir, settings.DOCUMENTS_BUCKET, file_path, b"%PDF-1.4 fake pdf")
    store_object(temp_storage_dir, settings.COVERS_BUCKET, cover_path, b"fake png")

    document = Document(
        title="Test Thesis",
        description="On the structure of repositories",
        category_id=sample_category.id,
        author_id=editor_user.id,
        file_path=file_path,
        cover_image_path=cover_path,
        tags=["research", "archives"],
        content_kind=content_kind_for(file_path)
    )
    db_session.add(document)
    db_session.commit()
    db_session.refresh(document)
    return document


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_files():
    """Clean up test files after all tests are done"""
    yield
    for file in ["test.db", "docrepo.db"]:
        if os.path.exists(file):
            os.remove(file)


@pytest.fixture
def user_password():
    return TEST_PASSWORD
