"""Request-scoped admin impersonation of one company. No FastAPI."""

from dataclasses import dataclass
from typing import Mapping, Optional

from rentdesk.security.rbac import Identity, Role, Scope

ADMIN_MODE_PARAM = "admin_mode"
COMPANY_PARAM = "company_id"


@dataclass(frozen=True)
class ImpersonationRequest:
    """What the request asked for. Carries no privilege on its own."""

    admin_mode: bool = False
    company_id: Optional[int] = None

    @classmethod
    def from_query(cls, params: Mapping[str, str]) -> "ImpersonationRequest":
        admin_mode = (params.get(ADMIN_MODE_PARAM) or "").lower() == "true"
        raw = (params.get(COMPANY_PARAM) or "").strip()
        company_id = int(raw) if raw.isdigit() else None
        return cls(admin_mode=admin_mode, company_id=company_id)


def impersonated_company(identity: Identity, request: ImpersonationRequest) -> Optional[int]:
    """Company the admin is acting inside for this request, or None."""
    if identity.role is not Role.ADMIN:
        return None
    if not request.admin_mode or request.company_id is None:
        return None
    return request.company_id


def apply_overlay(identity: Identity, resolved: Scope, request: ImpersonationRequest) -> Scope:
    """
    Narrow an admin's system scope to company:<id> for this request.
    Non-admin identities get their resolved scope back unchanged.
    """
    company_id = impersonated_company(identity, request)
    if company_id is None:
        return resolved
    return Scope.company(company_id)
