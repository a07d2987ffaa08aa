"""Pytest configuration and fixtures for testing."""
import os
import tempfile

# Settings are read at import time; point them at throwaway locations first
_TEST_ROOT = tempfile.mkdtemp(prefix="expense-claims-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///" + os.path.join(_TEST_ROOT, "app.db"))
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TEST_ROOT, "uploads"))
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

import expense_claims.models  # noqa: E402,F401
from expense_claims.database import Base, create_engine_from_url, create_session_factory  # noqa: E402
from expense_claims.utils.document_store import DocumentStore  # noqa: E402

ALLOWED_TYPES = ["application/pdf", "image/jpeg", "image/png"]
PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a file-backed SQLite engine with a fresh schema per test."""
    engine = create_engine_from_url(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine."""
    return create_session_factory(test_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for a test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def document_store(tmp_path) -> DocumentStore:
    """Document store rooted in the test's temporary directory."""
    return DocumentStore(
        root_dir=str(tmp_path / "uploads"),
        allowed_content_types=ALLOWED_TYPES,
        max_size_bytes=5 * 1024 * 1024,
    )


@pytest_asyncio.fixture
async def async_client(session_factory, document_store) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, with a fresh session per request."""
    from expense_claims.main import app
    from expense_claims.database import get_db
    from expense_claims.utils.document_store import get_document_store

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_store] = lambda: document_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Test Data Fixtures
# ============================================================================


def recent_date(days_ago: int = 10) -> str:
    """ISO date a number of days before today (UTC)."""
    return (datetime.now(timezone.utc).date() - timedelta(days=days_ago)).isoformat()


@pytest.fixture
def claim_fields() -> dict:
    """Valid claim fields keyed by model attribute name."""
    return {
        "employee_name": "Priya Raman",
        "employee_email": "priya.raman@gmail.com",
        "employee_id": "ATS0123",
        "department": "Engineering",
        "claim_date": recent_date(),
        "amount": "1250.50",
        "description": "Client visit travel",
        "type": "Travel",
    }


@pytest.fixture
def claim_form() -> dict:
    """Valid multipart form fields as sent by the frontend."""
    return {
        "empName": "Priya Raman",
        "empEmail": "priya.raman@gmail.com",
        "empId": "ATS0123",
        "department": "Engineering",
        "claimDate": recent_date(),
        "amount": "1250.50",
        "description": "Client visit travel",
        "type": "Travel",
    }


@pytest.fixture
def pdf_upload() -> tuple:
    """A PDF file part for the documents field."""
    return ("documents", ("receipt.pdf", PDF_BYTES, "application/pdf"))


def stored_files(store: DocumentStore) -> list:
    """Names of every blob in the store, promoted or staged."""
    return sorted(
        p.name for d in (store.root_dir, store.staging_dir) for p in d.iterdir() if p.is_file()
    )
