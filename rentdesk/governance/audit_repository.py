"""Audit repository protocol. Governance layer depends on this; infrastructure implements it."""

from typing import Protocol

from rentdesk.governance.audit_models import AuditRecord


class AuditRepository(Protocol):
    """Protocol for persisting immutable audit records."""

    async def save(self, record: AuditRecord) -> None:
        """Append one audit record. Never updates an existing one."""
        ...
