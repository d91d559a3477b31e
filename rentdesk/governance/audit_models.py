"""Immutable audit record model. Domain-level immutability."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    LOGIN = "login"
    LOGOUT = "logout"
    LOGIN_FAILED = "login_failed"
    CORRECT = "correct"


@dataclass(frozen=True)
class AuditRecord:
    """
    Immutable audit record: who (user_id, role), where (company_id, ip, user_agent),
    what (entity, action, before/after), when (UTC).
    """

    user_id: str
    role: str
    company_id: Optional[int]
    entity_type: str
    entity_id: str
    action: AuditAction
    before_state: Optional[Dict[str, Any]]
    after_state: Optional[Dict[str, Any]]
    ip: str
    user_agent: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Persisted shape of an audit log row."""
        return {
            "user_id": self.user_id,
            "role": self.role,
            "company_id": self.company_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action.value,
            "before_state": self.before_state,
            "after_state": self.after_state,
            "ip": self.ip,
            "user_agent": self.user_agent,
            "created_at": self.created_at.isoformat(),
        }
