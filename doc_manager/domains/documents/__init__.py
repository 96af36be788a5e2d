from doc_manager.domains.documents.entities import Document, StoredFile, is_binary_payload
from doc_manager.domains.documents.schemas import (
    DocumentBase, DocumentCreate, DocumentResponse, MessageResponse
)
from doc_manager.domains.documents.services import DocumentService, DownloadedBlob, UploadedFile

__all__ = [
    "Document", "StoredFile", "is_binary_payload",
    "DocumentBase", "DocumentCreate", "DocumentResponse", "MessageResponse",
    "DocumentService", "DownloadedBlob", "UploadedFile"
]
