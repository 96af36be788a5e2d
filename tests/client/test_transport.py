"""
Tests for DocumentClient error normalization and wire handling.
"""

import httpx
import pytest

from doc_manager.client.cache import CacheStatus, DocumentCache, document_key
from doc_manager.client.errors import NetworkFailure, NotFound, StoreError
from doc_manager.client.transport import AttachedFile, DocumentClient, resolve_base_url


def test_relative_backend_url_is_same_origin():
    assert resolve_base_url("/api", origin="http://example.org/") == "http://example.org/api"


def test_absolute_backend_url_is_used_as_is():
    assert resolve_base_url("https://store.example.org/api/", origin="http://ignored") == "https://store.example.org/api"


def test_download_url_points_at_download_route():
    client = DocumentClient(base_url="/api", origin="http://testserver")
    assert client.download_url("abc") == "http://testserver/api/documents/download/abc"


@pytest.mark.asyncio
async def test_create_then_fetch_round_trip(document_client):
    created = await document_client.create_document("hello")
    fetched = await document_client.get_document(created.id)

    assert fetched.content == "hello"
    assert fetched == created


@pytest.mark.asyncio
async def test_create_with_attachment_uses_multipart(document_client):
    created = await document_client.create_document(
        "with file", AttachedFile(filename="data.bin", data=b"\x00\xff")
    )

    assert created.file_id == f"{created.id}_data.bin"
    assert created.is_binary is True

    downloaded = await document_client.download(created.file_id)
    assert downloaded.content == b"\x00\xff"
    assert downloaded.filename == "data.bin"
    assert downloaded.is_binary


@pytest.mark.asyncio
async def test_missing_document_raises_not_found(document_client):
    with pytest.raises(NotFound) as exc_info:
        await document_client.get_document("missing")

    assert exc_info.value.message == "Document not found"
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_store_error_message_is_verbatim(document_client):
    with pytest.raises(StoreError) as exc_info:
        await document_client.create_document("   ")

    assert exc_info.value.status_code == 422
    assert "Content cannot be empty" in exc_info.value.message


@pytest.mark.asyncio
async def test_transport_failure_is_network_failure():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    async with DocumentClient(base_url="http://store", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(NetworkFailure) as exc_info:
            await client.list_documents()

    assert exc_info.value.message == "Could not reach server"
    # No automatic retry
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_error_without_message_body_falls_back_to_text():
    transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad gateway upstream"))

    async with DocumentClient(base_url="http://store", transport=transport) as client:
        with pytest.raises(StoreError) as exc_info:
            await client.delete_document("abc")

    assert exc_info.value.message == "Bad gateway upstream"
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_html_page_instead_of_json_is_a_store_error():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, text="<!doctype html><html></html>", headers={"content-type": "text/html"})
    )

    async with DocumentClient(base_url="http://store", transport=transport) as client:
        with pytest.raises(StoreError) as exc_info:
            await client.get_document("abc")

    assert exc_info.value.message == "Invalid response from server"
    assert exc_info.value.status_code == 200


@pytest.mark.asyncio
async def test_list_with_wrong_shape_is_a_store_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"documents": []}))

    async with DocumentClient(base_url="http://store", transport=transport) as client:
        with pytest.raises(StoreError) as exc_info:
            await client.list_documents()

    assert exc_info.value.message == "Invalid response from server"


@pytest.mark.asyncio
async def test_unparseable_response_lands_in_cache_error_entry():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>app shell</html>"))

    async with DocumentClient(base_url="http://store", transport=transport) as client:
        cache = DocumentCache(client)
        entry = await cache.get(document_key("abc"))

    assert entry.status is CacheStatus.ERROR
    assert isinstance(entry.error, StoreError)
    assert cache.peek(document_key("abc")).status is CacheStatus.ERROR
