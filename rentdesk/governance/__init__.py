"""Governance: audit recording and audit diff rendering. No FastAPI."""

from rentdesk.governance.audit_diff import FieldChange, diff_states, render_changes
from rentdesk.governance.audit_logger import AuditRecorder
from rentdesk.governance.audit_models import AuditAction, AuditRecord

__all__ = [
    "AuditAction",
    "AuditRecord",
    "AuditRecorder",
    "FieldChange",
    "diff_states",
    "render_changes",
]
