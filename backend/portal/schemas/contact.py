# backend/portal/schemas/contact.py
from datetime import datetime

from pydantic import Field, field_validator

from .base import BaseSchema
from ..core.security import is_valid_email


class ContactMessageCreate(BaseSchema):
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: str = Field(max_length=255)
    subject: str = Field(min_length=1, max_length=255)
    message: str

    @field_validator("first_name", "last_name", "subject")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("is required")
        return value.strip()

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_email(value):
            raise ValueError("Invalid email format")
        return value

    @field_validator("message")
    @classmethod
    def long_enough(cls, value: str) -> str:
        if len(value.strip()) < 10:
            raise ValueError("Message must be at least 10 characters")
        return value


class ContactMessage(BaseSchema):
    id: int
    first_name: str
    last_name: str
    email: str
    subject: str
    message: str
    responded: bool
    created_at: datetime
