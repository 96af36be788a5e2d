"""
Root conftest.py for doc_manager tests.

Fixtures:
- in-memory SQLite engine and a FastAPI app bound to it
- httpx clients driving the app through ASGITransport
- FakeDocumentClient: a store client whose responses are released by the test
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from doc_manager.client.cache import DocumentCache
from doc_manager.client.errors import NotFound
from doc_manager.client.transport import DocumentClient
from doc_manager.core.db import create_tables, get_db
from doc_manager.domains.documents.schemas import DocumentResponse
from doc_manager.main import create_app


# =============================================================================
# STORE SERVICE FIXTURES
# =============================================================================


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def app(db_engine):
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    application = create_app()
    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest_asyncio.fixture
async def http_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def document_client(app):
    client = DocumentClient(base_url="/api", origin="http://testserver", transport=ASGITransport(app=app))
    yield client
    await client.aclose()


@pytest.fixture
def store_cache(document_client) -> DocumentCache:
    return DocumentCache(document_client)


# =============================================================================
# CONTROLLED CLIENT
# =============================================================================


def make_document(document_id: str = "abc", content: str = "hello", **kwargs) -> DocumentResponse:
    return DocumentResponse(id=document_id, content=content, **kwargs)


class FakeDocumentClient:
    """Store client whose read requests stay pending until the test resolves them.

    Every list/get call appends ``(call, future)`` to ``requests``; the test
    completes requests in any order with ``resolve``/``fail``.
    """

    def __init__(self):
        self.requests: List[Tuple[Tuple[str, ...], asyncio.Future]] = []
        self.writes: List[Tuple[str, ...]] = []
        self.write_error: Exception | None = None
        self.documents: Dict[str, DocumentResponse] = {}

    async def _pending(self, *call: str) -> Any:
        future = asyncio.get_running_loop().create_future()
        self.requests.append((call, future))
        return await future

    async def list_documents(self):
        return await self._pending("list")

    async def get_document(self, document_id: str):
        return await self._pending("get", document_id)

    async def create_document(self, content, file=None):
        self.writes.append(("create", content))
        if self.write_error is not None:
            raise self.write_error
        return make_document("new-id", content)

    async def update_document(self, document_id, content, file=None):
        self.writes.append(("update", document_id, content))
        if self.write_error is not None:
            raise self.write_error
        return make_document(document_id, content)

    async def delete_document(self, document_id):
        self.writes.append(("delete", document_id))
        if document_id not in self.documents:
            raise NotFound()
        del self.documents[document_id]

    def download_url(self, blob_id: str) -> str:
        return f"http://testserver/api/documents/download/{blob_id}"

    def resolve(self, index: int, value: Any) -> None:
        self.requests[index][1].set_result(value)

    def fail(self, index: int, error: Exception) -> None:
        self.requests[index][1].set_exception(error)


async def drain(rounds: int = 10) -> None:
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def fake_client() -> FakeDocumentClient:
    return FakeDocumentClient()


@pytest.fixture
def cache(fake_client) -> DocumentCache:
    return DocumentCache(fake_client)
