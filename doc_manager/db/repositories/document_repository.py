from typing import Optional, List, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func

from doc_manager.db.models.document import DocumentModel, StoredFileModel

if TYPE_CHECKING:
    from doc_manager.domains.documents.entities import Document, StoredFile


class DocumentRepository:
    """Репозиторий для работы с документами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: "Document") -> "Document":
        """Создание нового документа"""
        result = await self.session.execute(select(func.max(DocumentModel.position)))
        last_position = result.scalar()

        db_document = DocumentModel(
            id=document.id,
            content=document.content,
            file_id=document.file_id,
            is_binary=document.is_binary,
            position=(last_position or 0) + 1
        )

        self.session.add(db_document)
        await self.session.commit()
        await self.session.refresh(db_document)
        return self._to_domain(db_document)

    async def get_by_id(self, document_id: str) -> Optional["Document"]:
        """Получение документа по id"""
        db_document = await self.session.get(DocumentModel, document_id)
        return self._to_domain(db_document) if db_document else None

    async def list_all(self) -> List["Document"]:
        """Получение всех документов в порядке создания"""
        result = await self.session.execute(
            select(DocumentModel).order_by(DocumentModel.position)
        )
        db_documents = result.scalars().all()
        return [self._to_domain(doc) for doc in db_documents]

    async def update(self, document: "Document") -> "Document":
        """Обновление документа"""
        db_document = await self.session.get(DocumentModel, document.id)
        db_document.content = document.content
        db_document.file_id = document.file_id
        db_document.is_binary = document.is_binary

        await self.session.commit()
        await self.session.refresh(db_document)
        return self._to_domain(db_document)

    async def delete(self, document_id: str) -> bool:
        """Удаление документа вместе с прикрепленными файлами"""
        db_document = await self.session.get(DocumentModel, document_id)
        if db_document is None:
            return False

        await self.session.delete(db_document)
        await self.session.commit()
        return True

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from doc_manager.domains.documents.entities import Document

        return Document(
            id=db_document.id,
            content=db_document.content,
            file_id=db_document.file_id,
            is_binary=db_document.is_binary,
            created_at=db_document.created_at,
            updated_at=db_document.updated_at
        )


class StoredFileRepository:
    """Репозиторий для работы с прикрепленными файлами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def replace(self, stored_file: "StoredFile") -> "StoredFile":
        """Сохранение файла документа; предыдущие файлы документа удаляются"""
        await self.session.execute(
            delete(StoredFileModel).where(StoredFileModel.document_id == stored_file.document_id)
        )
        db_file = StoredFileModel(
            id=stored_file.id,
            document_id=stored_file.document_id,
            filename=stored_file.filename,
            content_type=stored_file.content_type,
            data=stored_file.data
        )

        self.session.add(db_file)
        await self.session.flush()
        return self._to_domain(db_file)

    async def get_by_id(self, file_id: str) -> Optional["StoredFile"]:
        """Получение файла по id"""
        db_file = await self.session.get(StoredFileModel, file_id)
        return self._to_domain(db_file) if db_file else None

    def _to_domain(self, db_file: StoredFileModel) -> "StoredFile":
        """Преобразование модели БД в доменную сущность"""
        from doc_manager.domains.documents.entities import StoredFile

        return StoredFile(
            id=db_file.id,
            document_id=db_file.document_id,
            filename=db_file.filename,
            data=db_file.data,
            content_type=db_file.content_type
        )
