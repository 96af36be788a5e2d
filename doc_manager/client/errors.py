from typing import Optional


class DocumentClientError(Exception):
    """Базовая ошибка клиента хранилища документов"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkFailure(DocumentClientError):
    """Запрос не дошел до сервиса"""

    def __init__(self, message: str = "Could not reach server"):
        super().__init__(message)


class StoreError(DocumentClientError):
    """Сервис ответил ошибкой; message показывается пользователю как есть"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFound(StoreError):
    """Документ с таким id не существует"""

    def __init__(self, message: str = "Document not found"):
        super().__init__(message, status_code=404)


class ValidationRejected(DocumentClientError):
    """Черновик отклонен на клиенте, запрос не отправлялся"""
