# backend/portal/services/auth.py
import asyncio
from typing import Tuple

from sqlalchemy.orm import Session

from ..core.errors import Forbidden, NotFound, Unauthenticated
from ..core.policy import Identity
from ..core.security import create_access_token, get_password_hash, verify_password
from ..models.account import Account
from ..schemas.auth import PasswordChange
from ..utils.logging import auth_logger
from .accounts import account_service


class AuthService:
    async def authenticate(self, db: Session, email: str, password: str) -> Tuple[Account, str]:
        account = account_service.find_live_by_email(db, email)
        if account is None or not await asyncio.to_thread(verify_password, password, account.password_hash):
            auth_logger.warning("Failed login attempt", extra={"email": email})
            raise Unauthenticated("Invalid credentials")
        if not account.active:
            auth_logger.warning("Login refused for deactivated account", extra={"account_id": account.id})
            raise Forbidden("Account is deactivated")

        token = create_access_token({"sub": str(account.id), "role": account.role.value})
        auth_logger.info("Login succeeded", extra={"account_id": account.id, "role": account.role.value})
        return account, token

    def current_account(self, db: Session, identity: Identity) -> Account:
        account = account_service.lifecycle.find(db, identity.account_id)
        if account is None:
            raise NotFound("User not found")
        return account

    async def change_password(self, db: Session, identity: Identity, payload: PasswordChange) -> None:
        account = self.current_account(db, identity)
        if not await asyncio.to_thread(verify_password, payload.current_password, account.password_hash):
            raise Unauthenticated("Current password is incorrect")
        password_hash = await asyncio.to_thread(get_password_hash, payload.new_password)
        account_service.lifecycle.update(db, account, {"password_hash": password_hash})
        auth_logger.info("Password changed", extra={"account_id": account.id})


auth_service = AuthService()
