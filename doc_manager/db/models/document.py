from sqlalchemy import Column, String, Text, Boolean, ForeignKey, LargeBinary, Integer
from sqlalchemy.orm import relationship

from doc_manager.db.base import BaseModel


class DocumentModel(BaseModel):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True)
    content = Column(Text, nullable=False, default="")
    file_id = Column(String(512), nullable=True)
    is_binary = Column(Boolean, nullable=False, default=False)
    # Порядок создания для стабильной сортировки списка
    position = Column(Integer, nullable=False, index=True)

    # Relationships
    files = relationship("StoredFileModel", back_populates="document", cascade="all, delete-orphan")


class StoredFileModel(BaseModel):
    __tablename__ = "stored_files"

    id = Column(String(512), primary_key=True)
    document_id = Column(String(36), ForeignKey("documents.id"), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    content_type = Column(String(255), nullable=True)
    data = Column(LargeBinary, nullable=False)

    # Relationships
    document = relationship("DocumentModel", back_populates="files")
