# backend/portal/services/accounts.py
import asyncio
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from ..config import settings
from ..core.errors import Conflict, Forbidden
from ..core.security import generate_temporary_password, get_password_hash
from ..models.account import Account, Role
from ..schemas.account import AccountCreate, AccountUpdate
from ..utils.logging import service_logger
from .lifecycle import ResourceLifecycle, SoftDelete

EMAIL_CONFLICT = "Email already exists"


class AccountService:
    """Account management for the super-admin dashboard"""

    def __init__(self):
        self.lifecycle = ResourceLifecycle(Account, "Admin", SoftDelete.FLAG)

    def find_live_by_email(self, db: Session, email: str) -> Optional[Account]:
        return self.lifecycle.visible(db).filter(Account.email == email.strip().lower()).first()

    def _ensure_email_free(self, db: Session, email: str, exclude_id: Optional[int] = None) -> None:
        existing = self.find_live_by_email(db, email)
        if existing is not None and existing.id != exclude_id:
            raise Conflict(EMAIL_CONFLICT)

    def _get_manageable(self, db: Session, raw_id: Any) -> Account:
        account = self.lifecycle.get(db, raw_id)
        if account.role == Role.SUPER_ADMIN:
            service_logger.warning("Refused to modify super admin account", extra={"account_id": account.id})
            raise Forbidden("Forbidden: Super admin accounts cannot be modified")
        return account

    async def create_account(self, db: Session, payload: AccountCreate) -> Account:
        self._ensure_email_free(db, payload.email)
        password_hash = await asyncio.to_thread(get_password_hash, payload.password)
        account = self.lifecycle.create(
            db,
            conflict_message=EMAIL_CONFLICT,
            name=payload.name,
            email=payload.email,
            password_hash=password_hash,
            role=payload.role,
            active=True,
            deleted=False,
        )
        service_logger.info("Account created", extra={"account_id": account.id, "role": account.role.value})
        return account

    def list_accounts(self, db: Session, page=None, limit=None) -> Dict[str, Any]:
        return self.lifecycle.list_page(db, page, limit)

    def count_accounts(self, db: Session) -> int:
        return self.lifecycle.count(db)

    def get_account(self, db: Session, raw_id: Any) -> Account:
        return self.lifecycle.get(db, raw_id)

    async def update_account(self, db: Session, raw_id: Any, payload: AccountUpdate) -> Account:
        account = self._get_manageable(db, raw_id)

        changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
        if "email" in changes and changes["email"] != account.email:
            self._ensure_email_free(db, changes["email"], exclude_id=account.id)
        if "password" in changes:
            changes["password_hash"] = await asyncio.to_thread(get_password_hash, changes.pop("password"))

        account = self.lifecycle.update(db, account, changes, conflict_message=EMAIL_CONFLICT)
        service_logger.info("Account updated", extra={
            "account_id": account.id,
            "fields": sorted(k for k in changes if k != "password_hash")
        })
        return account

    def delete_account(self, db: Session, raw_id: Any) -> None:
        account = self._get_manageable(db, raw_id)
        self.lifecycle.soft_delete(db, account, active=False)
        service_logger.info("Account soft-deleted", extra={"account_id": account.id})

    def set_active(self, db: Session, raw_id: Any, active: bool) -> Account:
        account = self._get_manageable(db, raw_id)
        account = self.lifecycle.update(db, account, {"active": active})
        service_logger.info("Account active flag changed", extra={"account_id": account.id, "active": active})
        return account

    async def reset_password(self, db: Session, raw_id: Any) -> Tuple[Account, str]:
        """Store a fresh random password and hand back the plaintext once"""
        account = self._get_manageable(db, raw_id)
        if not settings.PASSWORD_RESET_RETURNS_PLAINTEXT:
            raise Forbidden("Password reset is disabled: no out-of-band delivery channel is configured")

        new_password = generate_temporary_password()
        password_hash = await asyncio.to_thread(get_password_hash, new_password)
        account = self.lifecycle.update(db, account, {"password_hash": password_hash})
        service_logger.info("Account password reset", extra={"account_id": account.id})
        return account, new_password


account_service = AccountService()
