"""Role-based, scope-aware access control. No FastAPI."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from rentdesk.security.exceptions import AuthorizationError


class Role(str, Enum):
    ADMIN = "admin"
    OWNER = "owner"
    MANAGER = "manager"
    CLIENT = "client"


class ScopeKind(str, Enum):
    SYSTEM = "system"
    COMPANY = "company"
    SELF = "self"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


ALL_ROLES: FrozenSet[Role] = frozenset(Role)
STAFF_ROLES: FrozenSet[Role] = frozenset({Role.ADMIN, Role.OWNER, Role.MANAGER})


@dataclass(frozen=True)
class Identity:
    """Authenticated actor. Role always comes from the users table, never from the token."""

    id: str
    email: str
    role: Role


@dataclass(frozen=True)
class Scope:
    """Effective data boundary of one request."""

    kind: ScopeKind
    company_id: Optional[int] = None

    @classmethod
    def system(cls) -> "Scope":
        return cls(kind=ScopeKind.SYSTEM)

    @classmethod
    def company(cls, company_id: int) -> "Scope":
        return cls(kind=ScopeKind.COMPANY, company_id=company_id)

    @classmethod
    def self_only(cls) -> "Scope":
        return cls(kind=ScopeKind.SELF)

    @property
    def is_system(self) -> bool:
        return self.kind is ScopeKind.SYSTEM

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "company_id": self.company_id}


@dataclass(frozen=True)
class Permission:
    """Required (resource, action, scope-kind) triple. scope=None means company."""

    resource: str
    action: Action
    scope: Optional[ScopeKind] = None


def has_permission(
    identity: Identity,
    scope: Scope,
    permission: Permission,
    *,
    target_company_id: Optional[int] = None,
    record_owner_id: Optional[str] = None,
) -> bool:
    """
    Pure decision table, first match wins:
    system scope allows everything; a system permission needs system scope;
    company permissions need the target company to be the scope's company;
    self permissions need self scope, or ownership of the target record.
    """
    if scope.kind is ScopeKind.SYSTEM:
        return True

    required = permission.scope or ScopeKind.COMPANY

    if required is ScopeKind.SYSTEM:
        return False

    if required is ScopeKind.COMPANY:
        if scope.kind is not ScopeKind.COMPANY:
            return False
        target = scope.company_id if target_company_id is None else target_company_id
        return target == scope.company_id

    if required is ScopeKind.SELF:
        if record_owner_id is not None:
            return record_owner_id == identity.id
        return scope.kind is ScopeKind.SELF

    return False


class RBACService:
    """Check role allow-lists and scope permissions. Raise AuthorizationError if invalid."""

    def check_role(self, identity: Identity, allowed: FrozenSet[Role]) -> None:
        """Raises AuthorizationError if identity.role is not in allowed."""
        if identity.role not in allowed:
            raise AuthorizationError(
                f"Role {identity.role.value} is not allowed to perform this operation"
            )

    def check_permission(
        self,
        identity: Identity,
        scope: Scope,
        permission: Permission,
        *,
        target_company_id: Optional[int] = None,
        record_owner_id: Optional[str] = None,
    ) -> None:
        """Raises AuthorizationError if the scope does not cover the permission."""
        allowed = has_permission(
            identity,
            scope,
            permission,
            target_company_id=target_company_id,
            record_owner_id=record_owner_id,
        )
        if not allowed:
            raise AuthorizationError(
                f"Access denied: {permission.action.value} on '{permission.resource}' "
                f"is outside scope '{scope.kind.value}'"
            )
