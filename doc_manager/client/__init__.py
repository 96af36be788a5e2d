from doc_manager.client.cache import CacheEntry, CacheStatus, DocumentCache, document_key, list_key
from doc_manager.client.editor import EditorMode, EditorSession, EditorState, EditorStateError
from doc_manager.client.errors import (
    DocumentClientError, NetworkFailure, NotFound, StoreError, ValidationRejected
)
from doc_manager.client.flows import (
    DocumentLink, DocumentView, delete_document, load_document_list, load_document_view, open_editor
)
from doc_manager.client.transport import AttachedFile, DocumentClient, DownloadedFile, resolve_base_url

__all__ = [
    "CacheEntry", "CacheStatus", "DocumentCache", "document_key", "list_key",
    "EditorMode", "EditorSession", "EditorState", "EditorStateError",
    "DocumentClientError", "NetworkFailure", "NotFound", "StoreError", "ValidationRejected",
    "DocumentLink", "DocumentView", "delete_document", "load_document_list",
    "load_document_view", "open_editor",
    "AttachedFile", "DocumentClient", "DownloadedFile", "resolve_base_url"
]
