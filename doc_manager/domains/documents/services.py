import logging
from dataclasses import dataclass
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession

from doc_manager.db.repositories.document_repository import DocumentRepository, StoredFileRepository
from doc_manager.domains.documents.entities import Document, StoredFile

logger = logging.getLogger(__name__)

TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"
BINARY_MEDIA_TYPE = "application/octet-stream"


@dataclass
class UploadedFile:
    """Файл из multipart-запроса"""
    data: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None


@dataclass
class DownloadedBlob:
    """Содержимое для скачивания"""
    content: bytes
    filename: str
    is_binary: bool

    @property
    def media_type(self) -> str:
        return BINARY_MEDIA_TYPE if self.is_binary else TEXT_MEDIA_TYPE


class DocumentService:
    """Сервис для работы с документами"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.file_repository = StoredFileRepository(session)

    async def create_document(self, content: str, upload: Optional[UploadedFile] = None) -> Document:
        """Создание нового документа"""
        document = Document.create_document(content=content)
        created_document = await self.document_repository.create(document)

        if upload is not None:
            created_document = await self._attach(created_document, upload)

        logger.info(f"Document {created_document.id} created (file_id={created_document.file_id})")
        return created_document

    async def get_document(self, document_id: str) -> Optional[Document]:
        """Получение документа по id"""
        return await self.document_repository.get_by_id(document_id)

    async def list_documents(self) -> List[Document]:
        """Получение списка документов"""
        return await self.document_repository.list_all()

    async def update_document(
        self,
        document_id: str,
        content: str,
        upload: Optional[UploadedFile] = None
    ) -> Optional[Document]:
        """Обновление документа: текст заменяется целиком, файл - только если загружен новый"""
        document = await self.document_repository.get_by_id(document_id)

        if not document:
            return None

        document.replace_content(content)

        if upload is not None:
            document = await self._attach(document, upload)
        else:
            document = await self.document_repository.update(document)

        logger.info(f"Document {document.id} updated (file_id={document.file_id})")
        return document

    async def delete_document(self, document_id: str) -> bool:
        """Удаление документа"""
        deleted = await self.document_repository.delete(document_id)
        if deleted:
            logger.info(f"Document {document_id} deleted")
        return deleted

    async def download(self, blob_id: str) -> Optional[DownloadedBlob]:
        """Скачивание текста документа (по id документа) или прикрепленного файла (по file_id)"""
        document = await self.document_repository.get_by_id(blob_id)
        if document is not None:
            return DownloadedBlob(
                content=document.content.encode("utf-8"),
                filename=f"{document.id}.txt",
                is_binary=False
            )

        stored_file = await self.file_repository.get_by_id(blob_id)
        if stored_file is not None:
            return DownloadedBlob(
                content=stored_file.data,
                filename=stored_file.filename,
                is_binary=stored_file.is_binary
            )

        return None

    async def _attach(self, document: Document, upload: UploadedFile) -> Document:
        """Сохранение загруженного файла и привязка его к документу"""
        stored_file = StoredFile.create_file(
            document_id=document.id,
            data=upload.data,
            filename=upload.filename,
            content_type=upload.content_type
        )
        await self.file_repository.replace(stored_file)
        document.attach_file(stored_file)
        return await self.document_repository.update(document)
