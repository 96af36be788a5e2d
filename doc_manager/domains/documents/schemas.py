from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional


class DocumentBase(BaseModel):
    """Базовая схема документа"""
    content: str = Field(..., max_length=1000000)  # 1MB max content


class DocumentCreate(DocumentBase):
    """Схема для создания и обновления документа (полная замена)"""

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('Content cannot be empty')
        return v


class DocumentResponse(DocumentBase):
    """Полное представление документа"""
    id: str
    file_id: Optional[str] = None
    is_binary: bool = False

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    """Схема ответа с сообщением (в том числе ошибки)"""
    message: str
