# rentdesk/infrastructure/database/repository.py

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import String, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.application.exceptions import ConflictError, StoreError
from rentdesk.domain.exceptions import DomainValidationError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def conflict_message(exc: IntegrityError) -> str:
    """Human readable message for a constraint violation."""
    text = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
    if "unique" in text or "duplicate" in text or "already exists" in text:
        if "license_plate" in text:
            return "A car with this license plate already exists."
        if "email" in text:
            return "A user with this email already exists."
        return "This record already exists."
    if "foreign key" in text:
        return "This action cannot be completed because it depends on other data."
    if "not null" in text:
        return "Required field is missing. Please check all mandatory fields."
    return "The data provided violates system rules."


def _bad_filter(name: str, expected: str) -> DomainValidationError:
    return DomainValidationError.for_field(name, f"Filter '{name}' expects {expected}")


def coerce_filter_value(name: str, column, value: Any) -> Any:
    """
    Filter value converted to the column's Python type. Filters arrive as JSON,
    so numbers may come as strings and dates always do. Lists and objects are rejected.
    """
    if isinstance(value, (list, dict)):
        raise _bad_filter(name, "a single value")
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value

    if python_type is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise _bad_filter(name, "true or false")
    if python_type is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
        raise _bad_filter(name, "an integer")
    if python_type in (float, Decimal):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                pass
        raise _bad_filter(name, "a number")
    if python_type is str:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise _bad_filter(name, "text")
    if python_type in (datetime, date):
        if isinstance(value, str):
            try:
                return python_type.fromisoformat(value)
            except ValueError:
                pass
        raise _bad_filter(name, "an ISO date")
    raise DomainValidationError.for_field(name, f"Field '{name}' cannot be filtered")


class AsyncRepository(Generic[T]):
    def __init__(self, model: Type[T]):
        self.model = model

    def columns(self) -> List[str]:
        return [c.key for c in self.model.__table__.columns]

    def _column(self, name: str):
        if name not in self.columns():
            raise DomainValidationError.for_field(name, f"Unknown field '{name}'")
        return getattr(self.model, name)

    async def _commit(self, db: AsyncSession, action: str) -> None:
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.info(
                "store_conflict",
                extra={"table": self.model.__tablename__, "action": action, "error": str(e.orig)},
            )
            raise ConflictError(conflict_message(e)) from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "store_error",
                extra={"table": self.model.__tablename__, "action": action, "error": str(e)},
            )
            raise StoreError(f"Failed to {action} {self.model.__tablename__}") from e

    async def get_by_id(
        self,
        db: AsyncSession,
        id,
    ) -> Optional[T]:
        try:
            return await db.get(self.model, id, populate_existing=True)
        except SQLAlchemyError as e:
            logger.error("store_error", extra={"table": self.model.__tablename__, "error": str(e)})
            raise StoreError(f"Failed to read {self.model.__tablename__}") from e

    async def find_one(self, db: AsyncSession, **equals: Any) -> Optional[T]:
        stmt = select(self.model)
        for name, value in equals.items():
            stmt = stmt.where(self._column(name) == value)
        try:
            result = await db.execute(stmt.limit(1))
        except SQLAlchemyError as e:
            logger.error("store_error", extra={"table": self.model.__tablename__, "error": str(e)})
            raise StoreError(f"Failed to read {self.model.__tablename__}") from e
        return result.scalars().first()

    async def list_page(
        self,
        db: AsyncSession,
        *,
        scope_equals: Optional[Dict[str, Any]] = None,
        filters: Optional[Dict[str, Any]] = None,
        search_fields: Sequence[str] = (),
        sort_by: str = "created_at",
        descending: bool = True,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[T], int]:
        """
        Page of rows. scope_equals is the caller's boundary and always applies.
        filters: 'q' searches search_fields; strings match by substring, anything else exactly.
        """
        clauses = []
        for name, value in (scope_equals or {}).items():
            clauses.append(self._column(name) == value)
        for name, value in (filters or {}).items():
            if value is None or value == "":
                continue
            if name == "q":
                if isinstance(value, (list, dict)):
                    raise _bad_filter(name, "text")
                if search_fields:
                    pattern = f"%{value}%"
                    clauses.append(or_(*(self._column(f).ilike(pattern) for f in search_fields)))
                continue
            column = self._column(name)
            value = coerce_filter_value(name, column, value)
            if isinstance(value, str) and isinstance(column.type, String):
                clauses.append(column.ilike(f"%{value}%"))
            else:
                clauses.append(column == value)

        order_column = self._column(sort_by)
        stmt = (
            select(self.model)
            .where(*clauses)
            .order_by(order_column.desc() if descending else order_column.asc())
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(self.model).where(*clauses)
        try:
            rows = (await db.execute(stmt)).scalars().all()
            total = (await db.execute(count_stmt)).scalar_one()
        except SQLAlchemyError as e:
            logger.error("store_error", extra={"table": self.model.__tablename__, "error": str(e)})
            raise StoreError(f"Failed to list {self.model.__tablename__}") from e
        return list(rows), total

    async def create(
        self,
        db: AsyncSession,
        values: Dict[str, Any],
    ) -> T:
        obj = self.model(**values)
        db.add(obj)
        await self._commit(db, "create")
        await db.refresh(obj)
        return obj

    async def create_many(self, db: AsyncSession, rows: Iterable[Dict[str, Any]]) -> List[T]:
        objs = [self.model(**values) for values in rows]
        db.add_all(objs)
        await self._commit(db, "create")
        for obj in objs:
            await db.refresh(obj)
        return objs

    async def update(
        self,
        db: AsyncSession,
        obj: T,
        values: Dict[str, Any],
    ) -> T:
        for name, value in values.items():
            self._column(name)
            setattr(obj, name, value)
        await self._commit(db, "update")
        await db.refresh(obj)
        return obj

    async def delete(self, db: AsyncSession, obj: T) -> None:
        await db.delete(obj)
        await self._commit(db, "delete")

    async def delete_where(self, db: AsyncSession, **equals: Any) -> int:
        rows, _ = await self.list_page(db, scope_equals=equals, limit=10_000)
        for row in rows:
            await db.delete(row)
        await self._commit(db, "delete")
        return len(rows)

    async def exists(self, db: AsyncSession, id) -> bool:
        return await self.get_by_id(db, id) is not None
