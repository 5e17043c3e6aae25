# backend/portal/services/contact.py
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models.contact_message import ContactMessage
from ..schemas.contact import ContactMessageCreate
from ..utils.logging import service_logger
from .lifecycle import ResourceLifecycle, SoftDelete


def parse_responded(raw: Optional[str]) -> Optional[bool]:
    """'true'/'false' filter; anything else means no filter"""
    if raw is None:
        return None
    value = raw.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    return None


class ContactService:
    def __init__(self):
        self.lifecycle = ResourceLifecycle(ContactMessage, "Message", SoftDelete.TIMESTAMP)

    def create_message(self, db: Session, payload: ContactMessageCreate) -> ContactMessage:
        message = self.lifecycle.create(db, **payload.model_dump(), responded=False)
        service_logger.info("Contact message received", extra={"message_id": message.id})
        return message

    def list_messages(self, db: Session, page=None, limit=None, responded: Optional[str] = None) -> Dict[str, Any]:
        return self.lifecycle.list_page(db, page, limit, responded=parse_responded(responded))

    def get_message(self, db: Session, raw_id: Any) -> ContactMessage:
        return self.lifecycle.get(db, raw_id)

    def mark_responded(self, db: Session, raw_id: Any) -> ContactMessage:
        message = self.get_message(db, raw_id)
        if message.responded:
            service_logger.info("Message already marked responded", extra={"message_id": message.id})
            return message
        return self.lifecycle.update(db, message, {"responded": True})


contact_service = ContactService()
