from fastapi import APIRouter

from doc_manager.api.http import documents_router

api_router = APIRouter()
api_router.include_router(documents_router)


@api_router.get("/")
async def index():
    """Корневой эндпоинт API"""
    return {"message": "Welcome to the Document Manager! Use /documents endpoints to manage documents."}
