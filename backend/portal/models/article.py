# backend/portal/models/article.py
import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from ..database import Base


class Category(str, enum.Enum):
    TRENDING = "TRENDING"
    TODAY = "TODAY"
    WEEKLY = "WEEKLY"
    GENERAL = "GENERAL"


class Language(str, enum.Enum):
    EN = "EN"
    AM = "AM"


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    category = Column(Enum(Category), nullable=False, default=Category.GENERAL, index=True)
    language = Column(Enum(Language), nullable=True, index=True)
    images = Column(JSON, nullable=False, default=list)  # [{"url": ..., "storage_key": ...}]
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    author = relationship("Account", back_populates="articles")
