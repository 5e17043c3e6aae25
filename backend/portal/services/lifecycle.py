# backend/portal/services/lifecycle.py
"""
Generic resource lifecycle shared by every entity kind.

A ``ResourceLifecycle`` is parameterized by the ORM model and by how the model
marks soft deletion. It owns visibility (soft-deleted rows never leave this
layer), id parsing, pagination and commit/rollback handling.
"""
import enum
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from ..core.errors import Conflict, NotFound
from ..utils.logging import db_logger

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 50
# largest value an INTEGER column or an OFFSET bind accepts
MAX_DB_INT = 2 ** 63 - 1


class SoftDelete(str, enum.Enum):
    NONE = "none"          # hard delete only
    TIMESTAMP = "timestamp"  # deleted_at column
    FLAG = "flag"          # deleted boolean column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_int(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def clamp_pagination(page: Any = None, limit: Any = None) -> Tuple[int, int]:
    """Lenient page/limit parsing: page floors at 1, limit is kept within 1..50.

    Page is also capped so the row offset stays a valid database integer.
    """
    page = max(DEFAULT_PAGE, _to_int(page, DEFAULT_PAGE))
    limit = min(MAX_LIMIT, max(1, _to_int(limit, DEFAULT_LIMIT)))
    page = min(page, MAX_DB_INT // limit)
    return page, limit


def parse_id(raw_id: Any) -> Optional[int]:
    """Positive integer id, or None for anything that cannot match a row"""
    if isinstance(raw_id, bool):
        return None
    if isinstance(raw_id, str):
        value = raw_id.strip()
        if not value.isdecimal() or len(value) > len(str(MAX_DB_INT)):
            return None
        raw_id = int(value)
    if isinstance(raw_id, int) and 0 < raw_id <= MAX_DB_INT:
        return raw_id
    return None


class ResourceLifecycle:
    def __init__(self, model, name: str, soft_delete: SoftDelete = SoftDelete.NONE):
        self.model = model
        self.name = name
        self.soft_delete_mode = soft_delete

    @property
    def not_found_message(self) -> str:
        return f"{self.name} not found"

    def visible(self, db: Session) -> Query:
        query = db.query(self.model)
        if self.soft_delete_mode is SoftDelete.TIMESTAMP:
            query = query.filter(self.model.deleted_at.is_(None))
        elif self.soft_delete_mode is SoftDelete.FLAG:
            query = query.filter(self.model.deleted.is_(False))
        return query

    def apply_filters(self, query: Query, filters: Dict[str, Any]) -> Query:
        for column, value in filters.items():
            if value is not None:
                query = query.filter(getattr(self.model, column) == value)
        return query

    def count(self, db: Session, **filters) -> int:
        return self.apply_filters(self.visible(db), filters).count()

    def list_page(self, db: Session, page: Any = None, limit: Any = None, **filters) -> Dict[str, Any]:
        page, limit = clamp_pagination(page, limit)
        query = self.apply_filters(self.visible(db), filters)

        total = query.count()
        rows = (
            query.order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        db_logger.debug(f"Listed {self.name}", extra={
            "page": page,
            "limit": limit,
            "total": total,
            "filters": {k: v for k, v in filters.items() if v is not None}
        })
        return {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
            "data": rows
        }

    def find(self, db: Session, raw_id: Any):
        item_id = parse_id(raw_id)
        if item_id is None:
            return None
        return self.visible(db).filter(self.model.id == item_id).first()

    def get(self, db: Session, raw_id: Any):
        item = self.find(db, raw_id)
        if item is None:
            db_logger.warning(self.not_found_message, extra={"resource_id": str(raw_id)})
            raise NotFound(self.not_found_message)
        return item

    def commit(self, db: Session, item=None, conflict_message: str = "Conflict"):
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            db_logger.warning(f"Integrity error on {self.name}", extra={"error": str(e.orig)})
            raise Conflict(conflict_message) from e
        except Exception:
            db.rollback()
            raise
        if item is not None:
            db.refresh(item)
        return item

    def create(self, db: Session, conflict_message: str = "Conflict", **fields):
        item = self.model(**fields)
        db.add(item)
        return self.commit(db, item, conflict_message)

    def update(self, db: Session, item, changes: Dict[str, Any], conflict_message: str = "Conflict"):
        for field, value in changes.items():
            setattr(item, field, value)
        return self.commit(db, item, conflict_message)

    def soft_delete(self, db: Session, item, **extra_changes):
        if self.soft_delete_mode is SoftDelete.TIMESTAMP:
            item.deleted_at = utcnow()
        elif self.soft_delete_mode is SoftDelete.FLAG:
            item.deleted = True
        else:
            raise TypeError(f"{self.name} does not support soft deletion")
        for field, value in extra_changes.items():
            setattr(item, field, value)
        return self.commit(db, item)

    def hard_delete(self, db: Session, item) -> None:
        db.delete(item)
        self.commit(db)
