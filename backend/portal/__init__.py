# backend/portal/__init__.py
from .config import settings

__version__ = "0.1.0"
