# backend/portal/schemas/document.py
from typing import Optional

from pydantic import Field, field_validator

from .base import BaseSchema, TimestampMixin


class DocumentBase(BaseSchema):
    title: str = Field(max_length=255)
    description: Optional[str] = None
    category: str = Field(max_length=255)

    @field_validator("title", "category")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


class DocumentCreate(DocumentBase):
    pass


class DocumentUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=255)

    @field_validator("title", "category")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("must not be empty")
        return value.strip() if value is not None else None


class Document(BaseSchema, TimestampMixin):
    id: int
    title: str
    description: Optional[str] = None
    category: str
    file_url: str
    file_type: str
