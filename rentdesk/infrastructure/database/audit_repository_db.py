"""DB-backed audit repository. Appends to and reads from the audit_logs table."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rentdesk.application.exceptions import StoreError
from rentdesk.governance.audit_models import AuditRecord
from rentdesk.infrastructure.database.models import AuditLog
from rentdesk.infrastructure.database.session import AsyncSessionLocal

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("entity_type", "entity_id", "action", "role", "ip", "user_agent")


@dataclass(frozen=True)
class AuditLogQuery:
    """Filters of the audit list. company_id=None means every company."""

    company_id: Optional[int] = None
    q: Optional[str] = None
    role: Optional[str] = None
    action: Optional[str] = None
    entity_type: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    offset: int = 0
    limit: int = 20


def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


class DbAuditRepository:
    """
    Implements AuditRepository. Rows are never updated; only clear() removes them.
    save() writes on its own session, so a failed audit insert never rolls back
    or expires the rows of the request session.
    """

    def __init__(
        self,
        session: AsyncSession,
        write_sessions: Optional[async_sessionmaker] = None,
    ) -> None:
        self._session = session
        self._write_sessions = write_sessions or AsyncSessionLocal

    async def save(self, record: AuditRecord) -> None:
        orm = AuditLog(
            user_id=record.user_id,
            role=record.role,
            company_id=record.company_id,
            entity_type=record.entity_type,
            entity_id=record.entity_id,
            action=record.action.value,
            before_state=record.before_state,
            after_state=record.after_state,
            ip=record.ip,
            user_agent=record.user_agent,
            created_at=record.created_at,
        )
        async with self._write_sessions() as session:
            session.add(orm)
            try:
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                raise

    def _clauses(self, query: AuditLogQuery) -> list:
        clauses = []
        if query.company_id is not None:
            clauses.append(AuditLog.company_id == query.company_id)
        if query.role:
            clauses.append(AuditLog.role == query.role)
        if query.action:
            clauses.append(AuditLog.action == query.action)
        if query.entity_type:
            clauses.append(AuditLog.entity_type == query.entity_type)
        if query.date_from:
            clauses.append(AuditLog.created_at >= _day_start(query.date_from))
        if query.date_to:
            # date_to includes the whole day
            clauses.append(AuditLog.created_at < _day_start(query.date_to + timedelta(days=1)))
        if query.q:
            pattern = f"%{query.q}%"
            clauses.append(or_(*(getattr(AuditLog, f).ilike(pattern) for f in SEARCH_FIELDS)))
        return clauses

    async def list(self, query: AuditLogQuery) -> Tuple[List[AuditLog], int]:
        clauses = self._clauses(query)
        stmt = (
            select(AuditLog)
            .where(*clauses)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset(query.offset)
            .limit(query.limit)
        )
        count_stmt = select(func.count()).select_from(AuditLog).where(*clauses)
        try:
            rows = (await self._session.execute(stmt)).scalars().all()
            total = (await self._session.execute(count_stmt)).scalar_one()
        except SQLAlchemyError as e:
            logger.error("store_error", extra={"table": "audit_logs", "error": str(e)})
            raise StoreError("Failed to list audit logs") from e
        return list(rows), total

    async def get(self, log_id: int) -> Optional[AuditLog]:
        return await self._session.get(AuditLog, log_id)

    async def clear(self, company_id: Optional[int] = None) -> int:
        """Bulk delete. company_id=None clears every entry."""
        stmt = delete(AuditLog)
        if company_id is not None:
            stmt = stmt.where(AuditLog.company_id == company_id)
        try:
            result = await self._session.execute(stmt)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error("store_error", extra={"table": "audit_logs", "error": str(e)})
            raise StoreError("Failed to clear audit logs") from e
        return result.rowcount or 0
