"""
Сессия редактора одного документа.

Открытый редактор показывает содержимое с сервера, пока пользователь ничего
не изменил (CLEAN): каждое завершение загрузки ключа "doc:<id>" заменяет
черновик. После первого изменения (DIRTY) ответы сервера по этому ключу
продолжают попадать в кэш, но черновик больше не трогают - до отправки или
закрытия редактора.

    LOADING -> CLEAN -> DIRTY
    CLEAN | DIRTY -> SUBMITTING -> CLOSED (успех) | CLEAN | DIRTY (ошибка)
    LOADING | CLEAN -> NOT_FOUND (документ удален)
    SUBMITTING -> NOT_FOUND (документ удален до сохранения)
"""
import logging
from enum import Enum
from typing import Callable, Optional

from doc_manager.client.cache import CacheEntry, CacheStatus, DocumentCache, document_key, list_key
from doc_manager.client.errors import DocumentClientError, NotFound, ValidationRejected
from doc_manager.client.transport import AttachedFile
from doc_manager.domains.documents.schemas import DocumentResponse

logger = logging.getLogger(__name__)


class EditorMode(Enum):
    NEW = "new"
    EDIT = "edit"


class EditorState(Enum):
    LOADING = "loading"
    CLEAN = "clean"
    DIRTY = "dirty"
    SUBMITTING = "submitting"
    CLOSED = "closed"
    NOT_FOUND = "not_found"


class EditorStateError(RuntimeError):
    """Действие недопустимо в текущем состоянии редактора"""


EDITABLE_STATES = (EditorState.LOADING, EditorState.CLEAN, EditorState.DIRTY)


class EditorSession:
    """Черновик документа и правило согласования его с ответами сервера"""

    def __init__(self, cache: DocumentCache, mode: EditorMode, document_id: Optional[str] = None):
        if mode is EditorMode.EDIT and not document_id:
            raise ValueError("document_id is required for EditorMode.EDIT")
        if mode is EditorMode.NEW and document_id:
            raise ValueError("document_id must not be set for EditorMode.NEW")

        self.cache = cache
        self.mode = mode
        self.document_id = document_id
        self.draft_content = ""
        self.draft_file: Optional[AttachedFile] = None
        self.dirty = False
        self.error: Optional[DocumentClientError] = None
        # Последний снимок с сервера, принятый в черновик
        self.server_document: Optional[DocumentResponse] = None
        self.state = EditorState.LOADING if mode is EditorMode.EDIT else EditorState.CLEAN
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def key(self) -> Optional[str]:
        return document_key(self.document_id) if self.document_id else None

    @property
    def is_open(self) -> bool:
        return self.state not in (EditorState.CLOSED, EditorState.NOT_FOUND)

    @property
    def download_label(self) -> Optional[str]:
        if self.server_document is None:
            return None
        return "Download Binary File" if self.server_document.is_binary else "Download Text File"

    async def open(self) -> "EditorSession":
        """Подписка на ключ документа и первая загрузка (только для EDIT)"""
        if self.mode is EditorMode.NEW or self._unsubscribe is not None:
            return self

        self._unsubscribe = self.cache.subscribe(self.key, self._receive)

        entry = self.cache.peek(self.key)
        if entry is not None and entry.status is CacheStatus.READY and not self.cache.is_stale(self.key):
            # Свежая запись уже в кэше, уведомления о ней не будет
            self._receive(entry)
        else:
            await self.cache.get(self.key)
        return self

    def edit_content(self, content: str) -> None:
        self._ensure_editable()
        self.draft_content = content
        self._mark_dirty()

    def select_file(self, file: AttachedFile) -> None:
        self._ensure_editable()
        self.draft_file = file
        self._mark_dirty()

    async def submit(self) -> DocumentResponse:
        """Отправка черновика. Пустой текст отклоняется без запроса к серверу"""
        if self.state not in (EditorState.CLEAN, EditorState.DIRTY):
            raise EditorStateError(f"Cannot submit from state {self.state.value}")
        if not self.draft_content.strip():
            self.error = ValidationRejected("Document content cannot be empty")
            raise self.error

        previous_state = self.state
        self.state = EditorState.SUBMITTING
        self.error = None
        client = self.cache.client

        try:
            if self.mode is EditorMode.NEW:
                document = await client.create_document(self.draft_content, self.draft_file)
            else:
                document = await client.update_document(self.document_id, self.draft_content, self.draft_file)
        except DocumentClientError as e:
            self.error = e
            if isinstance(e, NotFound) and self.mode is EditorMode.EDIT:
                # Документ удален, пока редактор был открыт; черновик остается у сессии
                self.close()
                self.state = EditorState.NOT_FOUND
                self.cache.invalidate(list_key(), self.key)
                logger.warning(f"Document {self.document_id} disappeared before submit")
                raise
            self.state = EditorState.DIRTY if self.dirty else previous_state
            logger.warning(f"Submit of {self.mode.value} document failed: {e.message}")
            raise

        self.close()
        self.cache.invalidate(list_key(), document_key(document.id))
        logger.info(f"Document {document.id} saved from editor")
        return document

    def close(self) -> None:
        """Закрытие сессии; поздние ответы сервера игнорируются"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.state is not EditorState.NOT_FOUND:
            self.state = EditorState.CLOSED

    def _receive(self, entry: CacheEntry) -> None:
        if not self.is_open:
            return

        if entry.status is CacheStatus.READY:
            if self.state in (EditorState.LOADING, EditorState.CLEAN):
                self.server_document = entry.data
                self.draft_content = entry.data.content
                self.error = None
                self.state = EditorState.CLEAN
            else:
                logger.debug(f"Ignoring server response for {self.key}: draft is {self.state.value}")
        elif entry.status is CacheStatus.ERROR:
            if isinstance(entry.error, NotFound) and self.state in (EditorState.LOADING, EditorState.CLEAN):
                self.close()
                self.state = EditorState.NOT_FOUND
            self.error = entry.error

    def _mark_dirty(self) -> None:
        self.dirty = True
        self.state = EditorState.DIRTY

    def _ensure_editable(self) -> None:
        if self.state not in EDITABLE_STATES:
            raise EditorStateError(f"Cannot edit in state {self.state.value}")
