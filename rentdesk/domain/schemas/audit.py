"""Pydantic schemas for audit log reads and statistics."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class AuditLogRead(BaseModel):
    id: int
    user_id: Optional[str] = None
    role: Optional[str] = None
    company_id: Optional[int] = None
    entity_type: str
    entity_id: Optional[str] = None
    action: str
    before_state: Optional[Dict[str, Any]] = None
    after_state: Optional[Dict[str, Any]] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AuditLogFilters(BaseModel):
    q: Optional[str] = None
    role: Optional[str] = None
    action: Optional[str] = None
    entity_type: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @model_validator(mode="after")
    def range_in_order(self) -> "AuditLogFilters":
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to must not be before date_from")
        return self


class FieldChangeRead(BaseModel):
    key: str
    kind: str
    old: Any = None
    new: Any = None
    text: str


class AuditChanges(BaseModel):
    log: AuditLogRead
    changes: List[FieldChangeRead] = Field(default_factory=list)


class ClearedLogs(BaseModel):
    deleted: int
    company_id: Optional[int] = None


class DashboardStats(BaseModel):
    companies: int = 0
    cars: int = 0
    available_cars: int = 0
    rented_cars: int = 0
    clients: int = 0
    active_contracts: int = 0
    open_tasks: int = 0
    revenue: float = 0.0
    pending_payments: float = 0.0
