"""Best-effort audit recording of committed mutations. No FastAPI."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from rentdesk.core.request_meta import RequestMeta
from rentdesk.governance.audit_models import AuditAction, AuditRecord
from rentdesk.governance.audit_repository import AuditRepository
from rentdesk.security.rbac import Role
from rentdesk.security.scope_resolver import IdentityDirectory

logger = logging.getLogger(__name__)


class AuditRecorder:
    """
    Writes one immutable audit record per committed mutation.
    The actor's role is re-read from the directory; callers cannot supply it.
    Failures are logged and swallowed so they never change the outcome of the mutation.
    """

    def __init__(
        self,
        repository: AuditRepository,
        directory: IdentityDirectory,
        meta: RequestMeta,
        impersonated_company_id: Optional[int] = None,
    ) -> None:
        self._repository = repository
        self._directory = directory
        self._meta = meta
        self._impersonated_company_id = impersonated_company_id

    async def _company_for(self, user_id: str, role: Role) -> Optional[int]:
        if role is Role.ADMIN:
            return self._impersonated_company_id
        if role is Role.OWNER:
            return await self._directory.find_owned_company(user_id)
        if role is Role.MANAGER:
            return await self._directory.find_managed_company(user_id)
        return None

    async def record(
        self,
        *,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        action: AuditAction,
        before_state: Optional[Dict[str, Any]] = None,
        after_state: Optional[Dict[str, Any]] = None,
        company_id: Optional[int] = None,
    ) -> Optional[AuditRecord]:
        """Persist an audit record. Returns it, or None if it could not be written."""
        try:
            identity = await self._directory.get_identity(actor_id)
            if identity is None:
                logger.warning(
                    "audit_skipped_unknown_actor",
                    extra={"actor_id": actor_id, "entity_type": entity_type},
                )
                return None
            if company_id is None:
                company_id = await self._company_for(identity.id, identity.role)
            record = AuditRecord(
                user_id=identity.id,
                role=identity.role.value,
                company_id=company_id,
                entity_type=entity_type,
                entity_id=str(entity_id),
                action=action,
                before_state=before_state,
                after_state=after_state,
                ip=self._meta.ip,
                user_agent=self._meta.user_agent,
                created_at=datetime.now(timezone.utc),
            )
            await self._repository.save(record)
        except Exception as e:
            logger.warning(
                "audit_write_failed",
                extra={
                    "actor_id": actor_id,
                    "entity_type": entity_type,
                    "entity_id": str(entity_id),
                    "action": action.value,
                    "error": str(e),
                },
            )
            return None
        return record
