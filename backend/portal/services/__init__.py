# backend/portal/services/__init__.py
from .accounts import account_service
from .auth import auth_service
from .contact import contact_service
from .docs import docs_service
from .news import news_service

__all__ = ["account_service", "auth_service", "contact_service", "docs_service", "news_service"]
