import uuid
from datetime import datetime
from typing import Optional

DEFAULT_FILENAME = "file"


def is_binary_payload(data: bytes, content_type: Optional[str] = None) -> bool:
    """Определение, является ли содержимое бинарным"""
    if content_type and content_type.startswith("text/"):
        return False
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False


class StoredFile:
    """Файл, прикрепленный к документу"""

    def __init__(
        self,
        id: str,
        document_id: str,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None
    ):
        self.id = id
        self.document_id = document_id
        self.filename = filename
        self.data = data
        self.content_type = content_type

    @property
    def is_binary(self) -> bool:
        return is_binary_payload(self.data, self.content_type)

    @classmethod
    def create_file(
        cls,
        document_id: str,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None
    ) -> "StoredFile":
        """Создание файла; идентификатор строится из id документа и имени файла"""
        name = filename or DEFAULT_FILENAME
        return cls(
            id=f"{document_id}_{name}",
            document_id=document_id,
            filename=name,
            data=data,
            content_type=content_type
        )

    def __repr__(self) -> str:
        return f"StoredFile(id={self.id}, size={len(self.data)})"


class Document:
    """Сущность документа: текст и необязательный прикрепленный файл"""

    def __init__(
        self,
        id: str,
        content: str,
        file_id: Optional[str] = None,
        is_binary: bool = False,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.id = id
        self.content = content
        self.file_id = file_id
        self.is_binary = is_binary
        self.created_at = created_at
        self.updated_at = updated_at

    def replace_content(self, new_content: str) -> None:
        """Полная замена текста документа"""
        self.content = new_content

    def attach_file(self, stored_file: StoredFile) -> None:
        """Прикрепление файла; новый файл заменяет предыдущий"""
        self.file_id = stored_file.id
        self.is_binary = stored_file.is_binary

    @classmethod
    def create_document(cls, content: str) -> "Document":
        """Создание нового документа"""
        return cls(id=str(uuid.uuid4()), content=content)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"Document(id={self.id}, file_id={self.file_id})"
