"""Security: scope resolution, impersonation overlay, RBAC, tokens. No FastAPI."""

from rentdesk.security.impersonation import ImpersonationRequest, apply_overlay, impersonated_company
from rentdesk.security.rbac import (
    Action,
    Identity,
    Permission,
    RBACService,
    Role,
    Scope,
    ScopeKind,
    has_permission,
)
from rentdesk.security.scope_resolver import IdentityDirectory, ScopeResolver

__all__ = [
    "Action",
    "Identity",
    "IdentityDirectory",
    "ImpersonationRequest",
    "Permission",
    "RBACService",
    "Role",
    "Scope",
    "ScopeKind",
    "ScopeResolver",
    "apply_overlay",
    "has_permission",
    "impersonated_company",
]
