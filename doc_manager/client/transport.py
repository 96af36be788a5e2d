import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, TypeVar

import httpx
from pydantic import ValidationError

from doc_manager.client.errors import NetworkFailure, NotFound, StoreError
from doc_manager.core.config import settings
from doc_manager.domains.documents.schemas import DocumentResponse

logger = logging.getLogger(__name__)

DEFAULT_ORIGIN = "http://localhost:8000"

T = TypeVar("T")


@dataclass
class AttachedFile:
    """Файл, выбранный пользователем для загрузки"""
    filename: str
    data: bytes
    content_type: str = "application/octet-stream"


@dataclass
class DownloadedFile:
    """Скачанное содержимое документа или вложения"""
    content: bytes
    filename: Optional[str]
    media_type: str

    @property
    def is_binary(self) -> bool:
        return not self.media_type.startswith("text/")


def resolve_base_url(backend_url: Optional[str] = None, origin: str = DEFAULT_ORIGIN) -> str:
    """Абсолютный адрес хранилища; относительный backend_url считается same-origin"""
    url = backend_url if backend_url is not None else settings.backend_url
    if url.startswith(("http://", "https://")):
        return url.rstrip("/")
    return origin.rstrip("/") + "/" + url.strip("/")


def _filename_from(response: httpx.Response) -> Optional[str]:
    disposition = response.headers.get("content-disposition", "")
    for part in disposition.split(";"):
        key, _, value = part.strip().partition("=")
        if key.lower() == "filename":
            return value.strip('"')
    return None


class DocumentClient:
    """HTTP-клиент хранилища документов.

    Все ошибки приводятся к одной форме: NetworkFailure, если запрос не дошел
    до сервиса, StoreError/NotFound с сообщением из тела ответа иначе.
    Повторные попытки не выполняются.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        origin: str = DEFAULT_ORIGIN,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = resolve_base_url(base_url, origin)
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport
        )

    async def __aenter__(self) -> "DocumentClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def download_url(self, blob_id: str) -> str:
        """Ссылка на скачивание текста документа или вложения"""
        return f"{self.base_url}/documents/download/{blob_id}"

    async def list_documents(self) -> List[DocumentResponse]:
        response = await self._request("GET", "/documents")
        return self._parse(response, lambda body: [DocumentResponse.model_validate(item) for item in body])

    async def get_document(self, document_id: str) -> DocumentResponse:
        response = await self._request("GET", f"/documents/{document_id}")
        return self._parse(response, DocumentResponse.model_validate)

    async def create_document(self, content: str, file: Optional[AttachedFile] = None) -> DocumentResponse:
        response = await self._request("POST", "/documents", **self._body(content, file))
        return self._parse(response, DocumentResponse.model_validate)

    async def update_document(
        self,
        document_id: str,
        content: str,
        file: Optional[AttachedFile] = None
    ) -> DocumentResponse:
        response = await self._request("PUT", f"/documents/{document_id}", **self._body(content, file))
        return self._parse(response, DocumentResponse.model_validate)

    async def delete_document(self, document_id: str) -> None:
        await self._request("DELETE", f"/documents/{document_id}")

    async def download(self, blob_id: str) -> DownloadedFile:
        """Скачивание по id документа или по file_id вложения"""
        response = await self._request("GET", f"/documents/download/{blob_id}")
        return DownloadedFile(
            content=response.content,
            filename=_filename_from(response),
            media_type=response.headers.get("content-type", "application/octet-stream")
        )

    @staticmethod
    def _body(content: str, file: Optional[AttachedFile]) -> dict:
        if file is None:
            return {"json": {"content": content}}
        return {
            "data": {"content": content},
            "files": {"file": (file.filename, file.data, file.content_type)},
        }

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"{method} {url} failed before reaching the store: {e}")
            raise NetworkFailure() from e

        if response.is_success:
            return response

        message = self._error_message(response)
        logger.warning(f"{method} {url} -> {response.status_code}: {message}")
        if response.status_code == 404:
            raise NotFound(message)
        raise StoreError(message, status_code=response.status_code)

    @staticmethod
    def _parse(response: httpx.Response, build: Callable[[Any], T]) -> T:
        """Разбор успешного ответа; тело не того вида считается ошибкой сервиса"""
        try:
            return build(response.json())
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Unexpected response body from {response.request.url}: {e}")
            raise StoreError("Invalid response from server", status_code=response.status_code) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]
        return response.text or response.reason_phrase or f"HTTP {response.status_code}"
