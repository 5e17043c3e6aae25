# backend/portal/models/__init__.py
from ..database import Base
from .account import Account, Role
from .article import Article, Category, Language
from .document import Document
from .contact_message import ContactMessage

__all__ = [
    "Base",
    "Account",
    "Role",
    "Article",
    "Category",
    "Language",
    "Document",
    "ContactMessage"
]
