"""Booking requests: clients book a car of a company, staff work through the pending ones."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.application.caller import Caller
from rentdesk.application.entities import BOOKINGS
from rentdesk.application.entity_service import EntityService
from rentdesk.application.exceptions import EntityNotFoundError
from rentdesk.application.pricing_service import rental_days
from rentdesk.domain.exceptions import DomainValidationError
from rentdesk.domain.models.rental import BookingStatus
from rentdesk.domain.schemas.common import ListParams
from rentdesk.domain.schemas.rental import BookingCreate, BookingRead
from rentdesk.governance.audit_logger import AuditRecorder
from rentdesk.governance.audit_models import AuditAction
from rentdesk.infrastructure.database.models import Client, CompanyCar
from rentdesk.infrastructure.database.repository import AsyncRepository
from rentdesk.security.exceptions import AuthorizationError
from rentdesk.security.rbac import Action, Permission, RBACService, Role, ScopeKind

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, session: AsyncSession, recorder: AuditRecorder) -> None:
        self._session = session
        self._recorder = recorder
        self._bookings = EntityService(BOOKINGS, session, recorder)
        self._repository = AsyncRepository(BOOKINGS.model)
        self._rbac = RBACService()

    async def list(self, caller: Caller, params: ListParams):
        """Managers only ever see pending bookings."""
        if caller.identity.role is Role.MANAGER:
            params = params.model_copy(
                update={"filters": {**params.filters, "status": BookingStatus.PENDING.value}}
            )
        return await self._bookings.list(caller, params)

    async def _client_of(self, caller: Caller, company_id: int) -> int:
        stmt = (
            select(Client.id)
            .where(Client.user_id == caller.id, Client.company_id == company_id)
            .order_by(Client.id)
            .limit(1)
        )
        client_id = (await self._session.execute(stmt)).scalar_one_or_none()
        if client_id is None:
            raise AuthorizationError("No client record with this company")
        return client_id

    async def create(self, caller: Caller, payload: BookingCreate) -> BookingRead:
        """
        The booking lands in the company of the car and starts pending.
        Total is the car's daily price times the rental days.
        """
        car = await self._session.get(CompanyCar, payload.company_car_id)
        if car is None:
            raise EntityNotFoundError(f"company_car {payload.company_car_id} not found")
        company_id = car.company_id

        if caller.identity.role is Role.CLIENT:
            self._rbac.check_role(caller.identity, BOOKINGS.roles_for(Action.CREATE))
            self._rbac.check_permission(
                caller.identity, caller.scope, Permission(BOOKINGS.name, Action.CREATE, ScopeKind.SELF)
            )
            client_id = await self._client_of(caller, company_id)
        else:
            self._bookings.authorize(caller, Action.CREATE, target_company_id=company_id)
            if payload.client_id is None:
                raise DomainValidationError.for_field("client_id", "client_id is required")
            client = await self._session.get(Client, payload.client_id)
            if client is None or client.company_id != company_id:
                raise DomainValidationError.for_field(
                    "client_id", f"Client {payload.client_id} is not a client of company {company_id}"
                )
            client_id = client.id

        days = rental_days(payload)
        row = await self._repository.create(
            self._session,
            {
                "company_id": company_id,
                "client_id": client_id,
                "company_car_id": car.id,
                "start_date": payload.start_date,
                "end_date": payload.end_date,
                "total_amount": round(days * car.price_per_day, 2),
                "status": BookingStatus.PENDING.value,
                "notes": payload.notes,
            },
        )
        result = BookingRead.model_validate(row)
        logger.info(
            "booking_created",
            extra={"booking_id": row.id, "company_id": company_id, "days": days},
        )
        await self._recorder.record(
            actor_id=caller.id,
            entity_type=BOOKINGS.name,
            entity_id=str(row.id),
            action=AuditAction.CREATE,
            after_state=result.model_dump(mode="json"),
            company_id=company_id,
        )
        return result
