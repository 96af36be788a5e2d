import logging
from dataclasses import dataclass
from typing import List, Optional

from doc_manager.client.cache import CacheEntry, DocumentCache, document_key, list_key
from doc_manager.client.editor import EditorMode, EditorSession
from doc_manager.domains.documents.schemas import DocumentResponse

logger = logging.getLogger(__name__)


@dataclass
class DocumentLink:
    label: str
    url: str


@dataclass
class DocumentView:
    """Данные для отображения одного документа"""
    entry: CacheEntry
    title: Optional[str] = None
    download: Optional[DocumentLink] = None
    attachment: Optional[DocumentLink] = None

    @property
    def document(self) -> Optional[DocumentResponse]:
        return self.entry.data if self.entry.has_data else None


def document_title(document: DocumentResponse) -> str:
    return f"Document {document.id[:8]}"


def document_links(cache: DocumentCache, document: DocumentResponse) -> List[DocumentLink]:
    """Ссылка на текст документа и, если есть вложение, ссылка на файл"""
    client = cache.client
    links = [DocumentLink(label="Download Text File", url=client.download_url(document.id))]
    if document.file_id:
        links.append(DocumentLink(label=f"Download {document.file_id}", url=client.download_url(document.file_id)))
    return links


async def load_document_list(cache: DocumentCache) -> CacheEntry:
    return await cache.get(list_key())


async def load_document_view(cache: DocumentCache, document_id: str) -> DocumentView:
    entry = await cache.get(document_key(document_id))
    view = DocumentView(entry=entry)

    document = view.document
    if document is not None:
        links = document_links(cache, document)
        view.title = document_title(document)
        view.download = links[0]
        view.attachment = links[1] if len(links) > 1 else None
    return view


async def delete_document(cache: DocumentCache, document_id: str) -> None:
    """Удаление документа; список перечитывается через инвалидацию кэша"""
    await cache.client.delete_document(document_id)
    cache.invalidate(list_key(), document_key(document_id))
    logger.info(f"Document {document_id} deleted, list invalidated")


async def open_editor(cache: DocumentCache, document_id: Optional[str] = None) -> EditorSession:
    """Открытие редактора: без id - новый документ, с id - редактирование"""
    mode = EditorMode.EDIT if document_id else EditorMode.NEW
    session = EditorSession(cache, mode, document_id)
    return await session.open()
