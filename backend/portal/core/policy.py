# backend/portal/core/policy.py
"""
Central role/ownership policy.

Every guarded operation is looked up here by name (``"<resource>:<action>"``).
A rule is either public, a fixed set of roles, or a set of roles that the
resource owner may bypass.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from ..models.account import Role
from .errors import Forbidden, Unauthenticated

STAFF = frozenset({Role.ADMIN, Role.SUPER_ADMIN})
SUPER = frozenset({Role.SUPER_ADMIN})


@dataclass(frozen=True)
class Identity:
    account_id: int
    role: Role


@dataclass(frozen=True)
class Rule:
    roles: FrozenSet[Role] = field(default_factory=frozenset)
    public: bool = False
    owner_may: bool = False


PUBLIC = Rule(public=True)

POLICY_TABLE = {
    "news:list": PUBLIC,
    "news:read": PUBLIC,
    "news:create": Rule(roles=frozenset({Role.ADMIN, Role.WRITER})),
    "news:update": Rule(roles=STAFF, owner_may=True),
    "news:delete": Rule(roles=STAFF, owner_may=True),

    "contact:create": PUBLIC,
    "contact:list": Rule(roles=STAFF),
    "contact:read": Rule(roles=STAFF),
    "contact:respond": Rule(roles=STAFF),

    "docs:list": PUBLIC,
    "docs:read": PUBLIC,
    "docs:create": Rule(roles=STAFF),
    "docs:update": Rule(roles=STAFF),
    "docs:delete": Rule(roles=STAFF),

    "admins:create": Rule(roles=SUPER),
    "admins:list": Rule(roles=SUPER),
    "admins:read": Rule(roles=SUPER),
    "admins:update": Rule(roles=SUPER),
    "admins:delete": Rule(roles=SUPER),
    "admins:toggle": Rule(roles=SUPER),
    "admins:reset": Rule(roles=SUPER),
}


def get_rule(operation: str) -> Rule:
    try:
        return POLICY_TABLE[operation]
    except KeyError:
        raise KeyError(f"No policy registered for operation '{operation}'") from None


def evaluate(operation: str, caller: Optional[Identity], owner_id: Optional[int] = None) -> bool:
    """allow/deny decision for ``caller`` performing ``operation``"""
    rule = get_rule(operation)
    if rule.public:
        return True
    if caller is None:
        return False
    if caller.role in rule.roles:
        return True
    return rule.owner_may and owner_id is not None and caller.account_id == owner_id


def enforce(operation: str, caller: Optional[Identity], owner_id: Optional[int] = None) -> None:
    rule = get_rule(operation)
    if rule.public:
        return
    if caller is None:
        raise Unauthenticated()
    if not evaluate(operation, caller, owner_id):
        raise Forbidden(
            "Forbidden: You don't have permission to perform this action"
            if rule.owner_may else "Forbidden"
        )


def require_role_or_owner(operation: str, caller: Optional[Identity], owner_id: int) -> None:
    """Ownership-aware check used by controllers once the resource is loaded"""
    enforce(operation, caller, owner_id)
