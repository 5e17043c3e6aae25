# backend/portal/services/media.py
"""
Attachment storage.

``MediaStorage.store`` validates an upload against an ``UploadPolicy`` before
touching the backing store and returns a ``StoredMedia`` locator.
``MediaStorage.release`` is best effort: failures are logged and swallowed so
that a record mutation is never blocked by a stale blob.
"""
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence

import cloudinary
import cloudinary.uploader
from fastapi import Request, UploadFile
from starlette.concurrency import run_in_threadpool

from ..config import settings
from ..core.errors import UpstreamStorageFailure, ValidationFailed
from ..utils.files import delete_file, get_relative_path, resolve_storage_key, save_bytes
from ..utils.logging import storage_logger

IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})
DOCUMENT_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
}) | IMAGE_TYPES


@dataclass(frozen=True)
class UploadPolicy:
    field: str
    allowed_types: FrozenSet[str]
    max_bytes: int
    max_files: int = 1
    resource_type: str = "auto"


@dataclass(frozen=True)
class StoredMedia:
    url: str
    storage_key: str
    content_type: str

    def as_image_ref(self) -> dict:
        return {"url": self.url, "storage_key": self.storage_key}


def image_policy() -> UploadPolicy:
    return UploadPolicy(
        field="images",
        allowed_types=IMAGE_TYPES,
        max_bytes=settings.IMAGE_MAX_BYTES,
        max_files=settings.IMAGE_MAX_FILES,
        resource_type="image",
    )


def document_policy() -> UploadPolicy:
    return UploadPolicy(
        field="file",
        allowed_types=DOCUMENT_TYPES,
        max_bytes=settings.DOCUMENT_MAX_BYTES,
    )


@dataclass
class _PendingUpload:
    filename: Optional[str]
    content_type: str
    content: bytes


class MediaStorage:
    """Base class; subclasses implement ``_put`` and ``_delete``"""
    backend_name = "abstract"

    async def _put(self, pending: _PendingUpload, folder: str, policy: UploadPolicy) -> StoredMedia:
        raise NotImplementedError

    async def _delete(self, storage_key: str) -> None:
        raise NotImplementedError

    async def _read_checked(self, uploads: Sequence[UploadFile], policy: UploadPolicy) -> List[_PendingUpload]:
        if len(uploads) > policy.max_files:
            raise ValidationFailed.single(
                policy.field, f"At most {policy.max_files} file(s) may be uploaded"
            )

        pending = []
        for upload in uploads:
            content_type = (upload.content_type or "").lower()
            if content_type not in policy.allowed_types:
                raise ValidationFailed.single(
                    policy.field, f"Unsupported file type '{content_type or 'unknown'}' for {upload.filename}"
                )
            content = await upload.read()
            if len(content) > policy.max_bytes:
                raise ValidationFailed.single(
                    policy.field,
                    f"{upload.filename} exceeds the {policy.max_bytes // (1024 * 1024)}MB limit"
                )
            if not content:
                raise ValidationFailed.single(policy.field, f"{upload.filename} is empty")
            pending.append(_PendingUpload(upload.filename, content_type, content))
        return pending

    async def store(self, upload: UploadFile, folder: str, policy: UploadPolicy) -> StoredMedia:
        stored = await self.store_many([upload], folder, policy)
        return stored[0]

    async def store_many(self, uploads: Sequence[UploadFile], folder: str, policy: UploadPolicy) -> List[StoredMedia]:
        """All-or-nothing upload of a batch; nothing is stored when validation fails"""
        pending = await self._read_checked(uploads, policy)

        stored: List[StoredMedia] = []
        for item in pending:
            try:
                stored.append(await self._put(item, folder, policy))
            except Exception as e:
                storage_logger.error("Attachment upload failed", extra={
                    "backend": self.backend_name,
                    "folder": folder,
                    "upload_filename": item.filename,
                    "error": str(e)
                }, exc_info=True)
                await self.release_many([media.storage_key for media in stored])
                raise UpstreamStorageFailure() from e

        storage_logger.info("Stored attachments", extra={
            "backend": self.backend_name,
            "folder": folder,
            "count": len(stored)
        })
        return stored

    async def release(self, storage_key: Optional[str]) -> None:
        if not storage_key:
            return
        try:
            await self._delete(storage_key)
            storage_logger.info("Released attachment", extra={"storage_key": storage_key})
        except Exception as e:
            storage_logger.warning("Failed to release attachment", extra={
                "backend": self.backend_name,
                "storage_key": storage_key,
                "error": str(e)
            })

    async def release_many(self, storage_keys: Sequence[Optional[str]]) -> None:
        for key in storage_keys:
            await self.release(key)


class LocalMediaStorage(MediaStorage):
    """Files under ``settings.UPLOADS_PATH`` served at ``settings.MEDIA_URL_PREFIX``"""
    backend_name = "local"

    async def _put(self, pending: _PendingUpload, folder: str, policy: UploadPolicy) -> StoredMedia:
        path = await save_bytes(pending.content, settings.UPLOADS_PATH / folder, pending.filename)
        key = get_relative_path(path, settings.UPLOADS_PATH)
        url = f"{settings.MEDIA_URL_PREFIX.rstrip('/')}/{key}"
        return StoredMedia(url=url, storage_key=key, content_type=pending.content_type)

    async def _delete(self, storage_key: str) -> None:
        await delete_file(resolve_storage_key(storage_key, settings.UPLOADS_PATH))


class CloudinaryMediaStorage(MediaStorage):
    backend_name = "cloudinary"

    def __init__(self):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True
        )

    async def _put(self, pending: _PendingUpload, folder: str, policy: UploadPolicy) -> StoredMedia:
        options = {"folder": f"portal/{folder}", "resource_type": policy.resource_type}
        if policy.resource_type == "image":
            options["transformation"] = [{"quality": "auto"}, {"fetch_format": "auto"}]

        result = await run_in_threadpool(cloudinary.uploader.upload, pending.content, **options)
        return StoredMedia(
            url=result["secure_url"],
            storage_key=f"{result.get('resource_type', 'image')}:{result['public_id']}",
            content_type=pending.content_type
        )

    async def _delete(self, storage_key: str) -> None:
        resource_type, _, public_id = storage_key.partition(":")
        if not public_id:
            resource_type, public_id = "image", storage_key
        await run_in_threadpool(cloudinary.uploader.destroy, public_id, resource_type=resource_type)


def build_media_storage() -> MediaStorage:
    if settings.STORAGE_BACKEND == "cloudinary":
        storage = CloudinaryMediaStorage()
    else:
        storage = LocalMediaStorage()
    storage_logger.info("Attachment storage initialized", extra={"backend": storage.backend_name})
    return storage


def get_media_storage(request: Request) -> MediaStorage:
    """FastAPI dependency returning the store built at startup"""
    return request.app.state.media_storage
