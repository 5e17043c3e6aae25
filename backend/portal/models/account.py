# backend/portal/models/account.py
import enum

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Enum, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Role(str, enum.Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    WRITER = "WRITER"


class Account(Base):
    __tablename__ = "accounts"
    # Email is unique among live accounts only; a soft-deleted account frees its address.
    __table_args__ = (
        Index(
            "uq_accounts_live_email",
            "email",
            unique=True,
            sqlite_where=text("deleted = 0"),
            postgresql_where=text("deleted = false"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(Role), nullable=False, default=Role.ADMIN)
    active = Column(Boolean, nullable=False, default=True)
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    articles = relationship("Article", back_populates="author")
