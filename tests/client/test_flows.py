"""
End-to-end flows against the store app: list, view, edit and delete through the cache.
"""

import pytest

from doc_manager.client.cache import CacheStatus, document_key
from doc_manager.client.editor import EditorMode, EditorState
from doc_manager.client.errors import NotFound
from doc_manager.client.flows import (
    delete_document, load_document_list, load_document_view, open_editor
)
from doc_manager.client.transport import AttachedFile


@pytest.mark.asyncio
async def test_create_list_view_delete_scenario(store_cache):
    editor = await open_editor(store_cache)
    assert editor.mode is EditorMode.NEW
    editor.edit_content("hello")
    created = await editor.submit()

    assert created.content == "hello"
    assert created.file_id is None
    assert created.is_binary is False

    listing = await load_document_list(store_cache)
    assert [doc.id for doc in listing.data] == [created.id]

    view = await load_document_view(store_cache, created.id)
    assert view.document.content == "hello"
    assert view.title == f"Document {created.id[:8]}"
    assert view.download.url.endswith(f"/api/documents/download/{created.id}")
    assert view.attachment is None

    await delete_document(store_cache, created.id)

    listing = await load_document_list(store_cache)
    assert created.id not in [doc.id for doc in listing.data]

    view = await load_document_view(store_cache, created.id)
    assert view.entry.status is CacheStatus.ERROR
    assert isinstance(view.entry.error, NotFound)
    assert view.document is None


@pytest.mark.asyncio
async def test_view_exposes_attachment_link(store_cache):
    created = await store_cache.client.create_document(
        "with file", AttachedFile(filename="scan.pdf", data=b"%PDF\xff\xfe", content_type="application/pdf")
    )

    view = await load_document_view(store_cache, created.id)

    assert view.attachment.label == f"Download {created.file_id}"
    assert view.attachment.url.endswith(f"/api/documents/download/{created.file_id}")


@pytest.mark.asyncio
async def test_edit_flow_reads_back_own_write(store_cache):
    created = await store_cache.client.create_document("v1")
    await load_document_view(store_cache, created.id)

    editor = await open_editor(store_cache, created.id)
    assert editor.mode is EditorMode.EDIT
    assert editor.state is EditorState.CLEAN
    assert editor.draft_content == "v1"

    editor.edit_content("v2")
    await editor.submit()

    view = await load_document_view(store_cache, created.id)
    assert view.document.content == "v2"
    assert store_cache.peek(document_key(created.id)).status is CacheStatus.READY


@pytest.mark.asyncio
async def test_editor_for_deleted_document_is_not_found(store_cache):
    editor = await open_editor(store_cache, "no-such-id")

    assert editor.state is EditorState.NOT_FOUND
