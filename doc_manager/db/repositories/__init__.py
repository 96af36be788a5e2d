from doc_manager.db.repositories.document_repository import DocumentRepository, StoredFileRepository

__all__ = [
    "DocumentRepository",
    "StoredFileRepository"
]
