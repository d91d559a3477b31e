"""Who is calling and inside which boundary, for one request."""

from dataclasses import dataclass
from typing import Optional

from rentdesk.security.rbac import Identity, Role, Scope


@dataclass(frozen=True)
class Caller:
    identity: Identity
    scope: Scope
    impersonating: Optional[int] = None

    @property
    def id(self) -> str:
        return self.identity.id

    @property
    def role(self) -> Role:
        return self.identity.role

    @property
    def company_id(self) -> Optional[int]:
        return self.scope.company_id
