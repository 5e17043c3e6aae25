# backend/portal/services/news.py
from typing import Any, Dict, List, Optional, Sequence

from fastapi import UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..config import settings
from ..core.errors import ValidationFailed
from ..core.policy import Identity, require_role_or_owner
from ..models.article import Article, Category, Language
from ..schemas.article import ArticleCreate, ArticleUpdate
from ..utils.logging import service_logger
from .lifecycle import ResourceLifecycle, SoftDelete
from .media import MediaStorage, image_policy

NEWS_FOLDER = "news"
CATEGORY_CHOICES = ", ".join(c.value for c in Category)
LANGUAGE_CHOICES = ", ".join(l.value for l in Language)


def normalize_category(raw: Optional[str], fallback: Optional[Category]) -> Optional[Category]:
    """Case-insensitive category parse; unknown values fall back unless configured to reject"""
    if raw is None or not raw.strip():
        return fallback
    try:
        return Category(raw.strip().upper())
    except ValueError:
        if settings.INVALID_CATEGORY_POLICY == "reject":
            raise ValidationFailed.single("category", f"Category must be one of {CATEGORY_CHOICES}")
        service_logger.info("Unknown news category, using fallback", extra={
            "category": raw,
            "fallback": fallback.value if fallback else None
        })
        return fallback


def _present(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


class NewsService:
    def __init__(self):
        self.lifecycle = ResourceLifecycle(Article, "News", SoftDelete.TIMESTAMP)

    def _filter_value(self, enum_cls, field: str, raw: Optional[str], choices: str):
        if raw is None or not raw.strip():
            return None
        try:
            return enum_cls(raw.strip().upper())
        except ValueError:
            raise ValidationFailed.single(field, f"{field.capitalize()} must be one of {choices}")

    def list_news(self, db: Session, page=None, limit=None,
                  category: Optional[str] = None, language: Optional[str] = None) -> Dict[str, Any]:
        return self.lifecycle.list_page(
            db,
            page,
            limit,
            category=self._filter_value(Category, "category", category, CATEGORY_CHOICES),
            language=self._filter_value(Language, "language", language, LANGUAGE_CHOICES),
        )

    def get_news(self, db: Session, raw_id: Any) -> Article:
        return self.lifecycle.get(db, raw_id)

    async def create_news(
            self,
            db: Session,
            caller: Identity,
            fields: Dict[str, Optional[str]],
            images: Sequence[UploadFile],
            storage: MediaStorage
    ) -> Article:
        raw = _present(fields)
        raw["category"] = normalize_category(fields.get("category"), Category.GENERAL)
        if isinstance(raw.get("language"), str):
            raw["language"] = raw["language"].strip().upper() or None

        try:
            payload = ArticleCreate.model_validate(raw)
        except ValidationError as e:
            raise ValidationFailed.from_errors(e.errors()) from e

        stored = await storage.store_many(images, NEWS_FOLDER, image_policy()) if images else []

        try:
            article = self.lifecycle.create(
                db,
                title=payload.title,
                content=payload.content,
                category=payload.category,
                language=payload.language,
                images=[media.as_image_ref() for media in stored],
                author_id=caller.account_id,
            )
        except Exception:
            await storage.release_many([media.storage_key for media in stored])
            raise

        service_logger.info("News created", extra={
            "news_id": article.id,
            "author_id": caller.account_id,
            "image_count": len(stored)
        })
        return article

    async def update_news(
            self,
            db: Session,
            caller: Identity,
            raw_id: Any,
            fields: Dict[str, Optional[str]],
            images: Sequence[UploadFile],
            storage: MediaStorage
    ) -> Article:
        article = self.get_news(db, raw_id)
        require_role_or_owner("news:update", caller, article.author_id)

        raw = _present(fields)
        raw.pop("category", None)
        category = normalize_category(fields.get("category"), None)
        if category is not None:
            raw["category"] = category

        clear_language = False
        if isinstance(raw.get("language"), str):
            raw["language"] = raw["language"].strip().upper()
            if not raw["language"]:
                raw.pop("language")
                clear_language = True

        try:
            payload = ArticleUpdate.model_validate(raw)
        except ValidationError as e:
            raise ValidationFailed.from_errors(e.errors()) from e

        changes = payload.model_dump(exclude_unset=True)
        if clear_language:
            changes["language"] = None

        stored = []
        if images:
            # new set must be stored before the old one is released
            stored = await storage.store_many(images, NEWS_FOLDER, image_policy())
            await storage.release_many(self._image_keys(article))
            changes["images"] = [media.as_image_ref() for media in stored]

        try:
            article = self.lifecycle.update(db, article, changes)
        except Exception:
            await storage.release_many([media.storage_key for media in stored])
            raise
        service_logger.info("News updated", extra={
            "news_id": article.id,
            "editor_id": caller.account_id,
            "fields": sorted(changes)
        })
        return article

    async def delete_news(self, db: Session, caller: Identity, raw_id: Any, storage: MediaStorage) -> None:
        article = self.get_news(db, raw_id)
        require_role_or_owner("news:delete", caller, article.author_id)

        await storage.release_many(self._image_keys(article))
        self.lifecycle.soft_delete(db, article)
        service_logger.info("News soft-deleted", extra={
            "news_id": article.id,
            "deleted_by": caller.account_id
        })

    @staticmethod
    def _image_keys(article: Article) -> List[str]:
        return [img.get("storage_key") for img in (article.images or []) if isinstance(img, dict)]


news_service = NewsService()
