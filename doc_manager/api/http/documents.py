from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from starlette.datastructures import UploadFile
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Tuple

from doc_manager.core.db import get_db
from doc_manager.domains.documents.schemas import DocumentCreate, DocumentResponse, MessageResponse
from doc_manager.domains.documents.services import DocumentService, UploadedFile

router = APIRouter(prefix="/documents", tags=["documents"])


async def read_document_payload(request: Request) -> Tuple[DocumentCreate, Optional[UploadedFile]]:
    """Разбор тела запроса: JSON {content} или multipart-форма content + file"""
    content_type = request.headers.get("content-type", "")
    upload = None

    try:
        if content_type.startswith("application/json"):
            payload = DocumentCreate.model_validate(await request.json())
        else:
            form = await request.form()
            payload = DocumentCreate(content=form.get("content") or "")
            file = form.get("file")
            if isinstance(file, UploadFile) and file.filename:
                upload = UploadedFile(
                    data=await file.read(),
                    filename=file.filename,
                    content_type=file.content_type
                )
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail="; ".join(err["msg"] for err in e.errors())
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Malformed request body"
        )

    return payload, upload


@router.get("", response_model=List[DocumentResponse])
async def list_documents(db: AsyncSession = Depends(get_db)):
    """Получение списка документов"""
    document_service = DocumentService(db)
    documents = await document_service.list_documents()
    return [DocumentResponse.model_validate(doc) for doc in documents]


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    body: Tuple[DocumentCreate, Optional[UploadedFile]] = Depends(read_document_payload),
    db: AsyncSession = Depends(get_db)
):
    """Создание нового документа"""
    payload, upload = body
    document_service = DocumentService(db)

    document = await document_service.create_document(payload.content, upload)
    return DocumentResponse.model_validate(document)


@router.get("/download/{blob_id}")
async def download(blob_id: str, db: AsyncSession = Depends(get_db)):
    """Скачивание текста документа или прикрепленного файла"""
    document_service = DocumentService(db)

    blob = await document_service.download(blob_id)

    if not blob:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Failed to download document: {blob_id} not found"
        )

    return Response(
        content=blob.content,
        media_type=blob.media_type,
        headers={"Content-Disposition": f'attachment; filename="{blob.filename}"'}
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str, db: AsyncSession = Depends(get_db)):
    """Получение документа по id"""
    document_service = DocumentService(db)

    document = await document_service.get_document(document_id)

    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )

    return DocumentResponse.model_validate(document)


@router.put("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    body: Tuple[DocumentCreate, Optional[UploadedFile]] = Depends(read_document_payload),
    db: AsyncSession = Depends(get_db)
):
    """Обновление документа"""
    payload, upload = body
    document_service = DocumentService(db)

    document = await document_service.update_document(document_id, payload.content, upload)

    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )

    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(document_id: str, db: AsyncSession = Depends(get_db)):
    """Удаление документа"""
    document_service = DocumentService(db)

    success = await document_service.delete_document(document_id)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )

    return MessageResponse(message="Document deleted successfully")
