from sqlalchemy import Column, DateTime
from sqlalchemy.sql import func

from doc_manager.core.db import Base


class BaseModel(Base):
    """Абстрактная модель с метками времени"""
    __abstract__ = True

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
