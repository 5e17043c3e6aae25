# backend/portal/api/deps.py
from typing import Callable, Optional

from fastapi import Request

from ..config import settings
from ..core.errors import Unauthenticated
from ..core.policy import Identity, enforce, get_rule
from ..core.security import decode_access_token, extract_token_from_header
from ..models.account import Role


def resolve_identity(request: Request, strict: bool = True) -> Optional[Identity]:
    """Read the bearer header (or the auth cookie) and return the caller.

    With ``strict`` a missing or unusable token raises ``Unauthenticated``;
    otherwise such callers resolve to ``None`` (anonymous).
    """
    token = (
        extract_token_from_header(request.headers.get("Authorization"))
        or request.cookies.get(settings.AUTH_COOKIE_NAME)
    )
    if not token:
        if strict:
            raise Unauthenticated("Not authenticated")
        return None

    payload = decode_access_token(token)
    try:
        if payload is None:
            raise ValueError("undecodable token")
        return Identity(account_id=int(payload["sub"]), role=Role(payload["role"]))
    except (KeyError, TypeError, ValueError):
        if strict:
            raise Unauthenticated("Invalid token")
        return None


def current_identity(request: Request) -> Identity:
    return resolve_identity(request)


def authorize(operation: str) -> Callable[[Request], Optional[Identity]]:
    """Dependency factory for a named policy operation.

    Ownership-aware operations only require authentication here; the owner
    comparison runs in the service once the resource has been loaded.
    """
    rule = get_rule(operation)

    def dependency(request: Request) -> Optional[Identity]:
        if rule.public:
            return resolve_identity(request, strict=False)
        identity = resolve_identity(request)
        if not rule.owner_may:
            enforce(operation, identity)
        return identity

    return dependency
