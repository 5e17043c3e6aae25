# backend/portal/schemas/account.py
from typing import Optional

from pydantic import Field, field_validator

from .base import BaseSchema, TimestampMixin
from ..core.security import is_strong_password, is_valid_email, PASSWORD_POLICY_MESSAGE
from ..models.account import Role

ASSIGNABLE_ROLES = (Role.ADMIN, Role.WRITER)


def check_role(value: Optional[Role]) -> Optional[Role]:
    # SUPER_ADMIN is never assignable through the API
    if value is not None and value not in ASSIGNABLE_ROLES:
        raise ValueError("Role must be 'ADMIN' or 'WRITER'")
    return value


def check_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().lower()
    if not is_valid_email(value):
        raise ValueError("Invalid email format")
    return value


def check_password(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_strong_password(value):
        raise ValueError(PASSWORD_POLICY_MESSAGE)
    return value


class AccountCreate(BaseSchema):
    name: str = Field(max_length=255)
    email: str = Field(max_length=255)
    password: str
    role: Role = Role.ADMIN

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name is required")
        return value.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password(value)

    @field_validator("role")
    @classmethod
    def validate_role(cls, value: Role) -> Role:
        return check_role(value)


class AccountUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = None
    role: Optional[Role] = None
    active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Name must not be empty")
        return value.strip() if value is not None else None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        return check_email(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: Optional[str]) -> Optional[str]:
        return check_password(value)

    @field_validator("role")
    @classmethod
    def validate_role(cls, value: Optional[Role]) -> Optional[Role]:
        return check_role(value)


class Account(BaseSchema, TimestampMixin):
    id: int
    name: str
    email: str
    role: Role
    active: bool


class AdminResponse(BaseSchema):
    message: str
    admin: Account


class AdminDetail(BaseSchema):
    admin: Account


class AdminCount(BaseSchema):
    count: int


class PasswordResetResponse(BaseSchema):
    message: str
    new_password: str
