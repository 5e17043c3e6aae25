# backend/portal/schemas/__init__.py
from .base import PageResult, DataResponse, MessageDataResponse, MessageResponse
from .article import Article, ArticleCreate, ArticleUpdate, ImageRef
from .document import Document, DocumentCreate, DocumentUpdate
from .contact import ContactMessage, ContactMessageCreate
from .account import Account, AccountCreate, AccountUpdate
from .auth import LoginRequest, LoginResponse, UserSummary, PasswordChange

__all__ = [
    "PageResult", "DataResponse", "MessageDataResponse", "MessageResponse",
    "Article", "ArticleCreate", "ArticleUpdate", "ImageRef",
    "Document", "DocumentCreate", "DocumentUpdate",
    "ContactMessage", "ContactMessageCreate",
    "Account", "AccountCreate", "AccountUpdate",
    "LoginRequest", "LoginResponse", "UserSummary", "PasswordChange"
]
