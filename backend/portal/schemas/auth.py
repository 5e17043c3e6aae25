# backend/portal/schemas/auth.py
from pydantic import field_validator

from .base import BaseSchema
from ..core.security import is_strong_password, PASSWORD_POLICY_MESSAGE
from ..models.account import Role


class LoginRequest(BaseSchema):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserSummary(BaseSchema):
    id: int
    name: str
    email: str
    role: Role


class LoginResponse(BaseSchema):
    user: UserSummary
    token: str


class MeResponse(BaseSchema):
    user: UserSummary


class PasswordChange(BaseSchema):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def strong(cls, value: str) -> str:
        if not is_strong_password(value):
            raise ValueError(PASSWORD_POLICY_MESSAGE)
        return value
