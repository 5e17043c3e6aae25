# backend/portal/api/admins.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..core.policy import Identity
from ..database import get_db
from ..schemas.account import (
    Account as AccountSchema, AccountCreate, AccountUpdate,
    AdminCount, AdminDetail, AdminResponse, PasswordResetResponse
)
from ..schemas.base import MessageResponse, PageResult
from ..services.accounts import account_service
from ..utils.logging import api_logger
from .deps import authorize

router = APIRouter(prefix="/api/admins", tags=["admins"])


@router.post("/create", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
async def create_admin(
        payload: AccountCreate,
        identity: Identity = Depends(authorize("admins:create")),
        db: Session = Depends(get_db)
):
    api_logger.info("Creating account", extra={"created_by": identity.account_id, "role": payload.role.value})
    return {"message": "Admin created", "admin": await account_service.create_account(db, payload)}


@router.get("", response_model=PageResult[AccountSchema])
async def list_admins(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        _: Identity = Depends(authorize("admins:list")),
        db: Session = Depends(get_db)
):
    return account_service.list_accounts(db, page, limit)


@router.get("/count", response_model=AdminCount)
async def count_admins(
        _: Identity = Depends(authorize("admins:list")),
        db: Session = Depends(get_db)
):
    return {"count": account_service.count_accounts(db)}


@router.get("/{admin_id}", response_model=AdminDetail)
async def get_admin(
        admin_id: str,
        _: Identity = Depends(authorize("admins:read")),
        db: Session = Depends(get_db)
):
    return {"admin": account_service.get_account(db, admin_id)}


@router.put("/{admin_id}", response_model=AdminResponse)
async def update_admin(
        admin_id: str,
        payload: AccountUpdate,
        _: Identity = Depends(authorize("admins:update")),
        db: Session = Depends(get_db)
):
    api_logger.info("Updating account", extra={"admin_id": admin_id})
    return {"message": "Admin updated", "admin": await account_service.update_account(db, admin_id, payload)}


@router.delete("/{admin_id}", response_model=MessageResponse)
async def delete_admin(
        admin_id: str,
        _: Identity = Depends(authorize("admins:delete")),
        db: Session = Depends(get_db)
):
    api_logger.info("Deleting account", extra={"admin_id": admin_id})
    account_service.delete_account(db, admin_id)
    return {"message": "Admin deleted"}


@router.patch("/{admin_id}/activate", response_model=AdminResponse)
async def activate_admin(
        admin_id: str,
        _: Identity = Depends(authorize("admins:toggle")),
        db: Session = Depends(get_db)
):
    return {"message": "Admin activated", "admin": account_service.set_active(db, admin_id, True)}


@router.patch("/{admin_id}/deactivate", response_model=AdminResponse)
async def deactivate_admin(
        admin_id: str,
        _: Identity = Depends(authorize("admins:toggle")),
        db: Session = Depends(get_db)
):
    return {"message": "Admin deactivated", "admin": account_service.set_active(db, admin_id, False)}


@router.post("/{admin_id}/reset-password", response_model=PasswordResetResponse)
async def reset_password(
        admin_id: str,
        identity: Identity = Depends(authorize("admins:reset")),
        db: Session = Depends(get_db)
):
    api_logger.info("Resetting account password", extra={"admin_id": admin_id, "reset_by": identity.account_id})
    _, new_password = await account_service.reset_password(db, admin_id)
    # TODO: deliver through an outbound mail channel once one exists instead of returning it
    return {"message": "Password reset successfully", "new_password": new_password}
