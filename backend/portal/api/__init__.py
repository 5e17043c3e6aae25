# backend/portal/api/__init__.py
from .auth import router as auth_router
from .news import router as news_router
from .contact import router as contact_router
from .docs import router as docs_router
from .admins import router as admins_router

__all__ = ["auth_router", "news_router", "contact_router", "docs_router", "admins_router"]
