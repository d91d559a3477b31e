"""Scoped reads and bulk clearing of the audit log."""

import logging
from typing import List, Optional, Tuple

from rentdesk.application.caller import Caller
from rentdesk.application.exceptions import EntityNotFoundError
from rentdesk.domain.schemas.audit import (
    AuditChanges,
    AuditLogFilters,
    AuditLogRead,
    ClearedLogs,
    FieldChangeRead,
)
from rentdesk.domain.schemas.common import ListParams
from rentdesk.governance.audit_diff import diff_states
from rentdesk.infrastructure.database.audit_repository_db import AuditLogQuery, DbAuditRepository
from rentdesk.security.exceptions import AuthorizationError
from rentdesk.security.rbac import Role, ScopeKind

logger = logging.getLogger(__name__)


class AuditLogService:
    """
    Visibility: a plain admin sees everything, an impersonating admin and
    owners/managers see one company, clients see nothing.
    """

    def __init__(self, repository: DbAuditRepository) -> None:
        self._repository = repository

    def _visible_company(self, caller: Caller) -> Optional[int]:
        """None means every company."""
        if caller.scope.is_system:
            return None
        if caller.scope.kind is ScopeKind.COMPANY:
            return caller.company_id
        raise AuthorizationError("Access denied: audit logs are not visible in this scope")

    async def list(
        self, caller: Caller, filters: AuditLogFilters, params: ListParams
    ) -> Tuple[List[AuditLogRead], int]:
        query = AuditLogQuery(
            company_id=self._visible_company(caller),
            q=filters.q,
            role=filters.role,
            action=filters.action,
            entity_type=filters.entity_type,
            date_from=filters.date_from,
            date_to=filters.date_to,
            offset=params.offset,
            limit=params.page_size,
        )
        rows, total = await self._repository.list(query)
        return [AuditLogRead.model_validate(r) for r in rows], total

    async def changes(self, caller: Caller, log_id: int) -> AuditChanges:
        company_id = self._visible_company(caller)
        row = await self._repository.get(log_id)
        if row is None or (company_id is not None and row.company_id != company_id):
            raise EntityNotFoundError(f"audit log {log_id} not found")
        changes = [
            FieldChangeRead(key=c.key, kind=c.kind, old=c.old, new=c.new, text=c.render())
            for c in diff_states(row.before_state, row.after_state)
        ]
        return AuditChanges(log=AuditLogRead.model_validate(row), changes=changes)

    async def clear(self, caller: Caller) -> ClearedLogs:
        """Admin: everything, or the impersonated company. Owner: own company. Others: denied."""
        if caller.role is Role.ADMIN:
            company_id = caller.company_id
        elif caller.role is Role.OWNER and caller.scope.kind is ScopeKind.COMPANY:
            company_id = caller.company_id
        else:
            raise AuthorizationError("Access denied: only admins and owners can clear audit logs")
        deleted = await self._repository.clear(company_id)
        logger.warning(
            "audit_logs_cleared",
            extra={"user_id": caller.id, "company_id": company_id, "deleted": deleted},
        )
        return ClearedLogs(deleted=deleted, company_id=company_id)
