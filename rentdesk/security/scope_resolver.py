"""Resolve an identity's data scope from stored company/manager links."""

import logging
from typing import Optional, Protocol

from rentdesk.security.exceptions import AuthenticationError
from rentdesk.security.rbac import Identity, Role, Scope

logger = logging.getLogger(__name__)


class IdentityDirectory(Protocol):
    """Lookups the resolver and the audit recorder need. Infrastructure implements it."""

    async def get_identity(self, user_id: str) -> Optional[Identity]: ...

    async def find_owned_company(self, user_id: str) -> Optional[int]: ...

    async def find_managed_company(self, user_id: str) -> Optional[int]: ...


class ScopeResolver:
    """Role -> scope. Stateless; the same stored state always yields the same scope."""

    def __init__(self, directory: IdentityDirectory) -> None:
        self._directory = directory

    async def load_identity(self, user_id: Optional[str]) -> Identity:
        """Load identity by id. Raises AuthenticationError if there is none."""
        if not user_id:
            raise AuthenticationError("Unauthorized")
        identity = await self._directory.get_identity(user_id)
        if identity is None:
            raise AuthenticationError("Unauthorized")
        return identity

    async def company_of(self, identity: Identity) -> Optional[int]:
        if identity.role is Role.OWNER:
            return await self._directory.find_owned_company(identity.id)
        if identity.role is Role.MANAGER:
            return await self._directory.find_managed_company(identity.id)
        return None

    async def resolve(self, identity: Identity) -> Scope:
        if identity.role is Role.ADMIN:
            return Scope.system()
        if identity.role is Role.CLIENT:
            return Scope.self_only()
        company_id = await self.company_of(identity)
        if company_id is None:
            logger.warning(
                "scope_without_company",
                extra={"user_id": identity.id, "role": identity.role.value},
            )
            return Scope.self_only()
        return Scope.company(company_id)
