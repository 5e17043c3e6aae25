# backend/portal/services/docs.py
from typing import Any, Dict, Optional

from fastapi import UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..core.errors import ValidationFailed
from ..models.document import Document
from ..schemas.document import DocumentCreate, DocumentUpdate
from ..utils.logging import service_logger
from .lifecycle import ResourceLifecycle, SoftDelete
from .media import MediaStorage, document_policy

DOCS_FOLDER = "docs"


class DocsService:
    def __init__(self):
        self.lifecycle = ResourceLifecycle(Document, "Document", SoftDelete.NONE)

    def list_docs(self, db: Session, page=None, limit=None, category: Optional[str] = None) -> Dict[str, Any]:
        return self.lifecycle.list_page(db, page, limit, category=(category or None))

    def get_doc(self, db: Session, raw_id: Any) -> Document:
        return self.lifecycle.get(db, raw_id)

    async def create_doc(
            self,
            db: Session,
            fields: Dict[str, Optional[str]],
            file: Optional[UploadFile],
            storage: MediaStorage
    ) -> Document:
        try:
            payload = DocumentCreate.model_validate({k: v for k, v in fields.items() if v is not None})
        except ValidationError as e:
            raise ValidationFailed.from_errors(e.errors()) from e
        if file is None:
            raise ValidationFailed.single("file", "File is required")

        stored = await storage.store(file, DOCS_FOLDER, document_policy())
        try:
            doc = self.lifecycle.create(
                db,
                **payload.model_dump(),
                file_url=stored.url,
                file_key=stored.storage_key,
                file_type=stored.content_type,
            )
        except Exception:
            await storage.release(stored.storage_key)
            raise

        service_logger.info("Document created", extra={"doc_id": doc.id, "file_type": doc.file_type})
        return doc

    async def update_doc(
            self,
            db: Session,
            raw_id: Any,
            fields: Dict[str, Optional[str]],
            file: Optional[UploadFile],
            storage: MediaStorage
    ) -> Document:
        doc = self.get_doc(db, raw_id)
        try:
            payload = DocumentUpdate.model_validate({k: v for k, v in fields.items() if v is not None})
        except ValidationError as e:
            raise ValidationFailed.from_errors(e.errors()) from e

        changes = payload.model_dump(exclude_unset=True)
        stored = None
        if file is not None:
            stored = await storage.store(file, DOCS_FOLDER, document_policy())
            await storage.release(doc.file_key)
            changes.update(file_url=stored.url, file_key=stored.storage_key, file_type=stored.content_type)

        try:
            doc = self.lifecycle.update(db, doc, changes)
        except Exception:
            if stored is not None:
                await storage.release(stored.storage_key)
            raise
        service_logger.info("Document updated", extra={"doc_id": doc.id, "fields": sorted(changes)})
        return doc

    async def delete_doc(self, db: Session, raw_id: Any, storage: MediaStorage) -> None:
        doc = self.get_doc(db, raw_id)
        await storage.release(doc.file_key)
        self.lifecycle.hard_delete(db, doc)
        service_logger.info("Document deleted", extra={"doc_id": doc.id})


docs_service = DocsService()
