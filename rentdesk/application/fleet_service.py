"""Read-side fleet views: the catalogue of available cars and dashboard counters."""

import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.application.caller import Caller
from rentdesk.application.entities import COMPANIES
from rentdesk.application.exceptions import EntityNotFoundError
from rentdesk.domain.models.rental import CarStatus, ContractStatus, PaymentStatus, TaskStatus
from rentdesk.domain.schemas.audit import DashboardStats
from rentdesk.domain.schemas.fleet import CatalogCar
from rentdesk.infrastructure.database.models import (
    CarTemplate,
    Client,
    Company,
    CompanyCar,
    Contract,
    Payment,
    Task,
)
from rentdesk.security.exceptions import AuthorizationError
from rentdesk.security.rbac import STAFF_ROLES, Action, Permission, RBACService, ScopeKind

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncSession]


def group_by_body_type(cars: List[CatalogCar]) -> Dict[str, List[CatalogCar]]:
    grouped: Dict[str, List[CatalogCar]] = defaultdict(list)
    for car in cars:
        grouped[car.body_type].append(car)
    return dict(sorted(grouped.items()))


class CatalogService:
    """Available cars of every company (or of the caller's company), grouped by body type."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def catalog(
        self,
        caller: Caller,
        company_id: Optional[int] = None,
        location_id: Optional[int] = None,
    ) -> Dict[str, List[CatalogCar]]:
        stmt = (
            select(CompanyCar, CarTemplate)
            .join(CarTemplate, CompanyCar.car_template_id == CarTemplate.id)
            .join(Company, CompanyCar.company_id == Company.id)
            .where(CompanyCar.status == CarStatus.AVAILABLE.value, Company.is_active.is_(True))
            .order_by(CompanyCar.price_per_day.asc(), CompanyCar.id.asc())
        )
        if caller.scope.kind is ScopeKind.COMPANY:
            company_id = caller.company_id
        if company_id is not None:
            stmt = stmt.where(CompanyCar.company_id == company_id)
        if location_id is not None:
            stmt = stmt.where(Company.location_id == location_id)

        result = await self._session.execute(stmt)
        cars = [
            CatalogCar(
                id=car.id,
                company_id=car.company_id,
                brand=template.brand,
                model=template.model,
                body_type=template.body_type,
                year=car.year,
                color=car.color,
                transmission=template.transmission,
                seats=template.seats,
                price_per_day=car.price_per_day,
            )
            for car, template in result.all()
        ]
        return group_by_body_type(cars)


class StatsService:
    """
    Dashboard counters. Each counter is an independent query on its own session;
    they are awaited together.
    """

    def __init__(self, session_factory: SessionFactory, rbac: Optional[RBACService] = None) -> None:
        self._session_factory = session_factory
        self._rbac = rbac or RBACService()

    async def _scalar(self, stmt) -> float:
        async with self._session_factory() as session:
            value = await session.scalar(stmt)
        return value or 0

    def _counters(self, company_id: Optional[int]) -> Dict[str, Awaitable]:
        def scoped(stmt, column):
            return stmt if company_id is None else stmt.where(column == company_id)

        count = func.count()
        return {
            "companies": self._scalar(scoped(select(count).select_from(Company), Company.id)),
            "cars": self._scalar(scoped(select(count).select_from(CompanyCar), CompanyCar.company_id)),
            "available_cars": self._scalar(
                scoped(
                    select(count).select_from(CompanyCar).where(CompanyCar.status == CarStatus.AVAILABLE.value),
                    CompanyCar.company_id,
                )
            ),
            "rented_cars": self._scalar(
                scoped(
                    select(count).select_from(CompanyCar).where(CompanyCar.status == CarStatus.RENTED.value),
                    CompanyCar.company_id,
                )
            ),
            "clients": self._scalar(scoped(select(count).select_from(Client), Client.company_id)),
            "active_contracts": self._scalar(
                scoped(
                    select(count).select_from(Contract).where(Contract.status == ContractStatus.ACTIVE.value),
                    Contract.company_id,
                )
            ),
            "open_tasks": self._scalar(
                scoped(
                    select(count).select_from(Task).where(Task.status != TaskStatus.DONE.value),
                    Task.company_id,
                )
            ),
            "revenue": self._scalar(
                scoped(
                    select(func.coalesce(func.sum(Payment.amount), 0)).where(
                        Payment.status == PaymentStatus.PAID.value
                    ),
                    Payment.company_id,
                )
            ),
            "pending_payments": self._scalar(
                scoped(
                    select(func.coalesce(func.sum(Payment.amount), 0)).where(
                        Payment.status == PaymentStatus.PENDING.value
                    ),
                    Payment.company_id,
                )
            ),
        }

    async def _collect(self, company_id: Optional[int]) -> DashboardStats:
        counters = self._counters(company_id)
        values = await asyncio.gather(*counters.values())
        return DashboardStats(**dict(zip(counters.keys(), values)))

    async def dashboard(self, caller: Caller) -> DashboardStats:
        if caller.scope.is_system:
            return await self._collect(None)
        if caller.scope.kind is ScopeKind.COMPANY:
            return await self._collect(caller.company_id)
        raise AuthorizationError("Access denied: dashboard is not available in this scope")

    async def company_stats(self, caller: Caller, company_id: int) -> DashboardStats:
        self._rbac.check_role(caller.identity, STAFF_ROLES)
        self._rbac.check_permission(
            caller.identity,
            caller.scope,
            Permission(COMPANIES.name, Action.READ),
            target_company_id=company_id,
        )
        async with self._session_factory() as session:
            if await session.get(Company, company_id) is None:
                raise EntityNotFoundError(f"company {company_id} not found")
        return await self._collect(company_id)
