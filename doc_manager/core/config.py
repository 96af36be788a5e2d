from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Адрес хранилища документов для клиента; относительный путь = same-origin
    backend_url: str = "/api"
    database_url: str = "sqlite+aiosqlite:///./doc_manager.db"
    cors_origins: List[str] = ["*"]
    sql_echo: bool = False
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
