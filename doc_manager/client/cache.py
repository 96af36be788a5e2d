"""
Кэш ответов хранилища по ключам.

Ключ "list" хранит список документов, ключ "doc:<id>" - один документ.
Кэш - единственный владелец записей: каждая запись заменяется целиком
после завершения запроса. Для одного ключа одновременно выполняется не
больше одного запроса; ответ запроса, номер которого уже не последний
для ключа, отбрасывается.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from doc_manager.client.errors import DocumentClientError
from doc_manager.client.transport import DocumentClient

logger = logging.getLogger(__name__)

LIST_KEY = "list"
DOCUMENT_KEY_PREFIX = "doc:"

Listener = Callable[["CacheEntry"], None]


def list_key() -> str:
    return LIST_KEY


def document_key(document_id: str) -> str:
    return f"{DOCUMENT_KEY_PREFIX}{document_id}"


class CacheStatus(Enum):
    """Состояние записи кэша"""
    PENDING = "pending"
    READY = "ready"
    REFRESHING = "refreshing"
    ERROR = "error"


@dataclass(frozen=True)
class CacheEntry:
    status: CacheStatus
    data: Any = None
    error: Optional[DocumentClientError] = None

    @property
    def has_data(self) -> bool:
        return self.status in (CacheStatus.READY, CacheStatus.REFRESHING)


@dataclass
class _Fetch:
    seq: int
    task: "asyncio.Future"


class DocumentCache:
    """Последнее известное состояние сервера для каждого ключа"""

    def __init__(self, client: DocumentClient):
        self.client = client
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, _Fetch] = {}
        self._seq: Dict[str, int] = {}
        self._stale: Set[str] = set()
        self._listeners: Dict[str, List[Listener]] = {}

    def peek(self, key: str) -> Optional[CacheEntry]:
        """Текущая запись без запроса к серверу"""
        return self._entries.get(key)

    def is_stale(self, key: str) -> bool:
        return key in self._stale

    async def get(self, key: str) -> CacheEntry:
        """Запись для ключа; отсутствующая, устаревшая или ошибочная запись загружается заново"""
        while True:
            entry = self._entries.get(key)
            needs_fetch = entry is None or key in self._stale or entry.status is CacheStatus.ERROR
            if needs_fetch and key not in self._inflight:
                self._start_fetch(key, CacheStatus.PENDING)
            entry = await self._settle(key)
            # Ключ могли инвалидировать, пока запрос выполнялся
            if key not in self._stale:
                return entry

    async def refresh(self, key: str) -> CacheEntry:
        """Повторная загрузка без сброса отображаемых данных"""
        if key not in self._inflight:
            self._start_refresh(key)
        while True:
            entry = await self._settle(key)
            if key not in self._stale:
                return entry
            # Ответ отброшен инвалидацией, загружаем заново
            self._start_refresh(key)

    def invalidate(self, *keys: str) -> None:
        """Пометка ключей устаревшими после изменения на сервере.

        Результат уже выполняющегося запроса для ключа отбрасывается. Если
        на ключ есть подписчики, загрузка начинается сразу.
        """
        for key in keys:
            self._stale.add(key)
            self._seq[key] = self._seq.get(key, 0) + 1
            self._inflight.pop(key, None)
            logger.debug(f"Cache key {key} invalidated")

            if self._listeners.get(key):
                self._start_fetch(key, CacheStatus.PENDING)

    def subscribe(self, key: str, listener: Listener) -> Callable[[], None]:
        """Подписка на каждое изменение записи; возвращает функцию отписки"""
        self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(key, None)

        return unsubscribe

    def _start_refresh(self, key: str) -> None:
        entry = self._entries.get(key)
        if entry is not None and entry.has_data:
            self._start_fetch(key, CacheStatus.REFRESHING)
        else:
            self._start_fetch(key, CacheStatus.PENDING)

    def _start_fetch(self, key: str, status: CacheStatus) -> None:
        if key != LIST_KEY and not key.startswith(DOCUMENT_KEY_PREFIX):
            raise ValueError(f"Unknown cache key: {key}")

        seq = self._seq[key] = self._seq.get(key, 0) + 1
        previous = self._entries.get(key)

        if status is CacheStatus.REFRESHING and previous is not None:
            self._set(key, CacheEntry(status=status, data=previous.data))
        else:
            self._set(key, CacheEntry(status=CacheStatus.PENDING))

        task = asyncio.ensure_future(self._run_fetch(key, seq))
        self._inflight[key] = _Fetch(seq=seq, task=task)

    async def _run_fetch(self, key: str, seq: int) -> None:
        try:
            data = await self._load(key)
        except DocumentClientError as e:
            entry = CacheEntry(status=CacheStatus.ERROR, error=e)
        else:
            entry = CacheEntry(status=CacheStatus.READY, data=data)
        finally:
            current = self._inflight.get(key)
            if current is not None and current.seq == seq:
                del self._inflight[key]

        if self._seq.get(key) != seq:
            logger.debug(f"Discarding stale response for {key} (seq {seq}, latest {self._seq.get(key)})")
            return

        self._stale.discard(key)
        self._set(key, entry)
        if entry.error is not None:
            logger.warning(f"Fetch for {key} failed: {entry.error.message}")
        else:
            logger.info(f"Fetch for {key} applied")

    async def _load(self, key: str) -> Any:
        if key == LIST_KEY:
            return await self.client.list_documents()
        if key.startswith(DOCUMENT_KEY_PREFIX):
            return await self.client.get_document(key[len(DOCUMENT_KEY_PREFIX):])

    async def _settle(self, key: str) -> CacheEntry:
        # Ожидание до тех пор, пока по ключу не останется выполняющихся запросов
        while key in self._inflight:
            await asyncio.shield(self._inflight[key].task)
        return self._entries[key]

    def _set(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry
        for listener in list(self._listeners.get(key, [])):
            listener(entry)
