# tests/conftest.py
import io
import os
import shutil
import tempfile
from pathlib import Path

_TEST_STORAGE = tempfile.mkdtemp(prefix="portal-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_PATH", _TEST_STORAGE)
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "production")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers, UploadFile

from portal.main import app
from portal.database import Base, get_db
from portal.config import settings
from portal.core.security import create_access_token, get_password_hash
from portal.models import Account, Article, Category, ContactMessage, Document, Role
from portal.services.media import LocalMediaStorage, MediaStorage, get_media_storage

SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_PASSWORD = "Passw0rd!"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF_BYTES = b"%PDF-1.4\n%test document\n"


@pytest.fixture(scope="session")
def engine():
    """Create test database engine"""
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool  # Needed for SQLite in-memory database
    )

    # pysqlite's implicit transaction handling breaks SAVEPOINT isolation;
    # let SQLAlchemy emit BEGIN itself (documented SQLAlchemy recipe).
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture(scope="session")
def tables(engine):
    """Create all tables in the test database"""
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(engine, tables):
    """Session whose commits become savepoints inside a rolled-back transaction"""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="session")
def temp_storage_dir():
    """Create temporary storage directory for test files"""
    temp_dir = tempfile.mkdtemp()
    Path(temp_dir, "uploads").mkdir(parents=True, exist_ok=True)
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture(autouse=True)
def override_settings(temp_storage_dir):
    """Point uploads at the temp directory and restore behaviour switches"""
    original_uploads = settings.UPLOADS_PATH
    original_category_policy = settings.INVALID_CATEGORY_POLICY
    original_reset_flag = settings.PASSWORD_RESET_RETURNS_PLAINTEXT

    settings.UPLOADS_PATH = temp_storage_dir / "uploads"

    yield

    settings.UPLOADS_PATH = original_uploads
    settings.INVALID_CATEGORY_POLICY = original_category_policy
    settings.PASSWORD_RESET_RETURNS_PLAINTEXT = original_reset_flag


@pytest.fixture
def storage():
    return LocalMediaStorage()


class BrokenStorage(MediaStorage):
    """Store whose every upload fails; deletes succeed"""
    backend_name = "broken"

    async def _put(self, pending, folder, policy):
        raise ConnectionError("store unreachable")

    async def _delete(self, storage_key):
        pass


@pytest.fixture
def client(db_session, storage):
    """Test client using the test database and local storage"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_account(db_session):
    """Factory for persisted accounts"""
    counter = {"n": 0}

    def _make(role=Role.ADMIN, email=None, password=TEST_PASSWORD, active=True, deleted=False, name=None):
        counter["n"] += 1
        account = Account(
            name=name or f"{role.value.title()} {counter['n']}",
            email=email or f"{role.value.lower()}{counter['n']}@zone.gov.et",
            password_hash=get_password_hash(password),
            role=role,
            active=active,
            deleted=deleted,
        )
        db_session.add(account)
        db_session.commit()
        db_session.refresh(account)
        return account

    return _make


@pytest.fixture
def super_admin(make_account):
    return make_account(Role.SUPER_ADMIN, email="root@zone.gov.et")


@pytest.fixture
def admin(make_account):
    return make_account(Role.ADMIN, email="admin@zone.gov.et")


@pytest.fixture
def writer(make_account):
    return make_account(Role.WRITER, email="writer@zone.gov.et")


@pytest.fixture
def other_writer(make_account):
    return make_account(Role.WRITER, email="other.writer@zone.gov.et")


def auth_headers(account):
    token = create_access_token({"sub": str(account.id), "role": account.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def make_article(db_session):
    def _make(author, title="Road works on the main street", category=Category.GENERAL,
              language=None, images=None, deleted_at=None):
        article = Article(
            title=title,
            content="The zone administration announced new road works.",
            author_id=author.id,
            category=category,
            language=language,
            images=images or [],
            deleted_at=deleted_at,
        )
        db_session.add(article)
        db_session.commit()
        db_session.refresh(article)
        return article

    return _make


@pytest.fixture
def sample_article(make_article, writer):
    return make_article(writer)


@pytest.fixture
def make_message(db_session):
    def _make(responded=False, deleted_at=None, subject="Water supply"):
        message = ContactMessage(
            first_name="Abebe",
            last_name="Kebede",
            email="abebe@example.com",
            subject=subject,
            message="When will the water supply be restored?",
            responded=responded,
            deleted_at=deleted_at,
        )
        db_session.add(message)
        db_session.commit()
        db_session.refresh(message)
        return message

    return _make


@pytest.fixture
def sample_document(db_session, temp_storage_dir):
    """Document row backed by a real file in the uploads directory"""
    docs_dir = temp_storage_dir / "uploads" / "docs"
    docs_dir.mkdir(parents=True, exist_ok=True)
    (docs_dir / "budget.pdf").write_bytes(PDF_BYTES)

    doc = Document(
        title="Annual Budget",
        description="Budget for the fiscal year",
        category="finance",
        file_url="/uploads/docs/budget.pdf",
        file_key="docs/budget.pdf",
        file_type="application/pdf",
    )
    db_session.add(doc)
    db_session.commit()
    db_session.refresh(doc)
    return doc


@pytest.fixture
def make_upload():
    """Build in-memory UploadFile objects for service-level tests"""
    def _make(filename="photo.png", content=PNG_BYTES, content_type="image/png"):
        return UploadFile(
            file=io.BytesIO(content),
            filename=filename,
            headers=Headers({"content-type": content_type})
        )

    return _make


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_files():
    """Clean up test files after all tests are done"""
    yield
    shutil.rmtree(_TEST_STORAGE, ignore_errors=True)
    for file in ["portal.db", "test-portal.db"]:
        if os.path.exists(file):
            os.remove(file)


@pytest.fixture
def account_password():
    return TEST_PASSWORD


@pytest.fixture
def login(client):
    """POST credentials to the login endpoint"""
    def _login(email, password=TEST_PASSWORD):
        return client.post("/api/auth/login", json={"email": email, "password": password})

    return _login


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES


@pytest.fixture
def broken_storage(client):
    """Swap the attachment store for one that is unreachable"""
    app.dependency_overrides[get_media_storage] = lambda: BrokenStorage()
    return client
