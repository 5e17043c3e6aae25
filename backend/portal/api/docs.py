# backend/portal/api/docs.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from ..core.policy import Identity
from ..database import get_db
from ..schemas.base import DataResponse, MessageResponse, PageResult
from ..schemas.document import Document as DocumentSchema
from ..services.docs import docs_service
from ..services.media import MediaStorage, get_media_storage
from ..utils.logging import api_logger
from .deps import authorize

router = APIRouter(prefix="/api/docs", tags=["docs"])


@router.get("", response_model=PageResult[DocumentSchema])
async def list_docs(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        category: Optional[str] = None,
        _: Optional[Identity] = Depends(authorize("docs:list")),
        db: Session = Depends(get_db)
):
    return docs_service.list_docs(db, page, limit, category=category)


@router.get("/{doc_id}", response_model=DataResponse[DocumentSchema])
async def get_doc(
        doc_id: str,
        _: Optional[Identity] = Depends(authorize("docs:read")),
        db: Session = Depends(get_db)
):
    return {"data": docs_service.get_doc(db, doc_id)}


@router.post("", response_model=DataResponse[DocumentSchema], status_code=status.HTTP_201_CREATED)
async def create_doc(
        title: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        category: Optional[str] = Form(None),
        file: Optional[UploadFile] = File(None),
        identity: Identity = Depends(authorize("docs:create")),
        storage: MediaStorage = Depends(get_media_storage),
        db: Session = Depends(get_db)
):
    api_logger.info("Uploading document", extra={
        "account_id": identity.account_id,
        "upload_filename": file.filename if file else None
    })
    doc = await docs_service.create_doc(
        db,
        {"title": title, "description": description, "category": category},
        file,
        storage
    )
    return {"data": doc}


@router.put("/{doc_id}", response_model=DataResponse[DocumentSchema])
async def update_doc(
        doc_id: str,
        title: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        category: Optional[str] = Form(None),
        file: Optional[UploadFile] = File(None),
        _: Identity = Depends(authorize("docs:update")),
        storage: MediaStorage = Depends(get_media_storage),
        db: Session = Depends(get_db)
):
    api_logger.info("Updating document", extra={"doc_id": doc_id})
    doc = await docs_service.update_doc(
        db,
        doc_id,
        {"title": title, "description": description, "category": category},
        file,
        storage
    )
    return {"data": doc}


@router.delete("/{doc_id}", response_model=MessageResponse)
async def delete_doc(
        doc_id: str,
        _: Identity = Depends(authorize("docs:delete")),
        storage: MediaStorage = Depends(get_media_storage),
        db: Session = Depends(get_db)
):
    api_logger.info("Deleting document", extra={"doc_id": doc_id})
    await docs_service.delete_doc(db, doc_id, storage)
    return {"message": "Document deleted successfully"}
