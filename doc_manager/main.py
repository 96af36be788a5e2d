import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from doc_manager.api.router import api_router
from doc_manager.core.config import settings
from doc_manager.core.db import create_tables

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

API_PREFIX = "/api"


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(f"{type(exc).__name__} on {request.url.path} (500): {exc}", exc_info=True)
            return JSONResponse(status_code=500, content={"message": "Internal server error"})


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    logger.info("Document store ready")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="DocManager",
        description="Хранилище документов: текст и прикрепленные файлы",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # Любая ошибка отдается клиенту в виде {"message": ...}
    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = "; ".join(err["msg"] for err in exc.errors()) or "Invalid request"
        return JSONResponse(status_code=422, content={"message": message})

    app.add_middleware(CatchAllExceptionMiddleware)
    app.include_router(api_router, prefix=API_PREFIX)
    return app


app = create_app()
