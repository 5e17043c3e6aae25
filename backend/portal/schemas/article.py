# backend/portal/schemas/article.py
from typing import List, Optional

from pydantic import Field, field_validator

from .base import BaseSchema, TimestampMixin
from ..models.article import Category, Language


class ImageRef(BaseSchema):
    url: str
    storage_key: str


class ArticleCreate(BaseSchema):
    title: str = Field(max_length=255)
    content: str
    category: Category = Category.GENERAL
    language: Optional[Language] = None

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ArticleUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    category: Optional[Category] = None
    language: Optional[Language] = None

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("must not be empty")
        return value


class Article(BaseSchema, TimestampMixin):
    id: int
    title: str
    content: str
    author_id: int
    category: Category
    language: Optional[Language] = None
    images: List[ImageRef] = []
