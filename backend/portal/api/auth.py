# backend/portal/api/auth.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..config import settings
from ..core.policy import Identity
from ..database import get_db
from ..schemas.auth import LoginRequest, LoginResponse, MeResponse, PasswordChange
from ..schemas.base import MessageResponse
from ..services.auth import auth_service
from ..utils.logging import api_logger
from .deps import current_identity

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest, response: Response, db: Session = Depends(get_db)):
    api_logger.info("Login requested", extra={"email": credentials.email})
    account, token = await auth_service.authenticate(db, credentials.email, credentials.password)

    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=not settings.is_development,
        samesite="strict",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return {"user": account, "token": token}


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        httponly=True,
        secure=not settings.is_development,
        samesite="strict",
    )
    return {"message": "Logged out"}


@router.get("/me", response_model=MeResponse)
async def me(identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    return {"user": auth_service.current_account(db, identity)}


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
        payload: PasswordChange,
        identity: Identity = Depends(current_identity),
        db: Session = Depends(get_db)
):
    await auth_service.change_password(db, identity, payload)
    return {"message": "Password changed successfully"}
