# backend/portal/api/contact.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..core.policy import Identity
from ..database import get_db
from ..schemas.base import DataResponse, MessageDataResponse, PageResult
from ..schemas.contact import ContactMessage as ContactMessageSchema, ContactMessageCreate
from ..services.contact import contact_service
from ..utils.logging import api_logger
from .deps import authorize

router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("", response_model=MessageDataResponse[ContactMessageSchema], status_code=status.HTTP_201_CREATED)
async def submit_contact_form(
        payload: ContactMessageCreate,
        _: Optional[Identity] = Depends(authorize("contact:create")),
        db: Session = Depends(get_db)
):
    api_logger.info("Contact form submitted", extra={"subject": payload.subject})
    message = contact_service.create_message(db, payload)
    return {"message": "Message submitted successfully.", "data": message}


@router.get("", response_model=PageResult[ContactMessageSchema])
async def list_messages(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        responded: Optional[str] = None,
        _: Identity = Depends(authorize("contact:list")),
        db: Session = Depends(get_db)
):
    api_logger.info("Listing contact messages", extra={"responded": responded})
    return contact_service.list_messages(db, page, limit, responded=responded)


@router.get("/{message_id}", response_model=DataResponse[ContactMessageSchema])
async def get_message(
        message_id: str,
        _: Identity = Depends(authorize("contact:read")),
        db: Session = Depends(get_db)
):
    return {"data": contact_service.get_message(db, message_id)}


@router.patch("/{message_id}/responded", response_model=MessageDataResponse[ContactMessageSchema])
async def mark_as_responded(
        message_id: str,
        identity: Identity = Depends(authorize("contact:respond")),
        db: Session = Depends(get_db)
):
    api_logger.info("Marking message responded", extra={
        "message_id": message_id,
        "account_id": identity.account_id
    })
    message = contact_service.mark_responded(db, message_id)
    return {"message": "Message marked as responded.", "data": message}
