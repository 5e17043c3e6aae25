# backend/portal/api/news.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.orm import Session

from ..core.policy import Identity
from ..database import get_db
from ..schemas.article import Article as ArticleSchema
from ..schemas.base import DataResponse, PageResult
from ..services.media import MediaStorage, get_media_storage
from ..services.news import news_service
from ..utils.logging import api_logger
from .deps import authorize

router = APIRouter(prefix="/api/news", tags=["news"])


@router.get("", response_model=PageResult[ArticleSchema])
async def list_news(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        category: Optional[str] = None,
        language: Optional[str] = None,
        _: Optional[Identity] = Depends(authorize("news:list")),
        db: Session = Depends(get_db)
):
    api_logger.info("Listing news", extra={
        "page": page,
        "limit": limit,
        "category": category,
        "language": language
    })
    return news_service.list_news(db, page, limit, category=category, language=language)


@router.get("/{news_id}", response_model=DataResponse[ArticleSchema])
async def get_news(
        news_id: str,
        _: Optional[Identity] = Depends(authorize("news:read")),
        db: Session = Depends(get_db)
):
    return {"data": news_service.get_news(db, news_id)}


@router.post("", response_model=DataResponse[ArticleSchema], status_code=status.HTTP_201_CREATED)
async def create_news(
        title: Optional[str] = Form(None),
        content: Optional[str] = Form(None),
        category: Optional[str] = Form(None),
        language: Optional[str] = Form(None),
        images: Optional[List[UploadFile]] = File(None),
        identity: Identity = Depends(authorize("news:create")),
        storage: MediaStorage = Depends(get_media_storage),
        db: Session = Depends(get_db)
):
    api_logger.info("Creating news", extra={
        "author_id": identity.account_id,
        "image_count": len(images or [])
    })
    article = await news_service.create_news(
        db,
        identity,
        {"title": title, "content": content, "category": category, "language": language},
        images or [],
        storage
    )
    return {"data": article}


@router.put("/{news_id}", response_model=DataResponse[ArticleSchema])
async def update_news(
        news_id: str,
        request: Request,
        title: Optional[str] = Form(None),
        content: Optional[str] = Form(None),
        category: Optional[str] = Form(None),
        language: Optional[str] = Form(None),
        images: Optional[List[UploadFile]] = File(None),
        identity: Identity = Depends(authorize("news:update")),
        storage: MediaStorage = Depends(get_media_storage),
        db: Session = Depends(get_db)
):
    if language is None and (await request.form()).get("language") == "":
        # empty form fields arrive as None; an explicit empty language clears it
        language = ""
    api_logger.info("Updating news", extra={"news_id": news_id, "editor_id": identity.account_id})
    article = await news_service.update_news(
        db,
        identity,
        news_id,
        {"title": title, "content": content, "category": category, "language": language},
        images or [],
        storage
    )
    return {"data": article}


@router.delete("/{news_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_news(
        news_id: str,
        identity: Identity = Depends(authorize("news:delete")),
        storage: MediaStorage = Depends(get_media_storage),
        db: Session = Depends(get_db)
):
    api_logger.info("Deleting news", extra={"news_id": news_id, "deleted_by": identity.account_id})
    await news_service.delete_news(db, identity, news_id, storage)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
