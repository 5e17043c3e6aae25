# backend/portal/schemas/base.py
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )


class TimestampMixin(BaseModel):
    created_at: datetime
    updated_at: Optional[datetime] = None


class PageResult(BaseSchema, Generic[T]):
    page: int
    limit: int
    total: int
    total_pages: int
    data: List[T]


class DataResponse(BaseSchema, Generic[T]):
    data: T


class MessageDataResponse(BaseSchema, Generic[T]):
    message: str
    data: T


class MessageResponse(BaseSchema):
    message: str
