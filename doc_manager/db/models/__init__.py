from doc_manager.db.models.document import DocumentModel, StoredFileModel

__all__ = [
    "DocumentModel",
    "StoredFileModel"
]
