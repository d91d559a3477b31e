"""Contract closing: final status, car release and closing fees as pending payments."""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.application.caller import Caller
from rentdesk.application.entities import COMPANY_CARS, CONTRACTS, PAYMENTS
from rentdesk.application.entity_service import EntityService
from rentdesk.application.exceptions import EntityNotFoundError
from rentdesk.domain.models.rental import (
    CarStatus,
    ContractStatus,
    PaymentMethod,
    PaymentStatus,
    validate_contract_transition,
)
from rentdesk.domain.schemas.rental import ContractCloseRequest, ContractCloseResponse, ContractRead
from rentdesk.governance.audit_logger import AuditRecorder
from rentdesk.governance.audit_models import AuditAction
from rentdesk.infrastructure.database.repository import AsyncRepository
from rentdesk.security.rbac import Action

logger = logging.getLogger(__name__)


class ContractService:
    def __init__(self, session: AsyncSession, recorder: AuditRecorder) -> None:
        self._session = session
        self._recorder = recorder
        self._contracts = EntityService(CONTRACTS, session, recorder)
        self._cars = EntityService(COMPANY_CARS, session, recorder)
        self._payments = EntityService(PAYMENTS, session, recorder)
        self._contract_repo = AsyncRepository(CONTRACTS.model)
        self._car_repo = AsyncRepository(COMPANY_CARS.model)
        self._payment_repo = AsyncRepository(PAYMENTS.model)

    async def _record(self, caller: Caller, service: EntityService, row_id, action, before, after, company_id) -> None:
        await self._recorder.record(
            actor_id=caller.id,
            entity_type=service.definition.name,
            entity_id=str(row_id),
            action=action,
            before_state=before,
            after_state=after,
            company_id=company_id,
        )

    async def close(self, caller: Caller, contract_id: int, payload: ContractCloseRequest) -> ContractCloseResponse:
        """Raises InvalidStatusTransitionError when the contract is already completed or cancelled."""
        contract = await self._contract_repo.get_by_id(self._session, contract_id)
        if contract is None:
            raise EntityNotFoundError(f"contract {contract_id} not found")
        self._contracts.authorize(caller, Action.UPDATE, contract)
        validate_contract_transition(ContractStatus(contract.status), ContractStatus.COMPLETED)
        company_id = contract.company_id
        car_id = contract.company_car_id

        before = self._contracts.snapshot(contract)
        values = {"status": ContractStatus.COMPLETED.value}
        if payload.notes:
            values["notes"] = payload.notes
        contract = await self._contract_repo.update(self._session, contract, values)
        closed = ContractRead.model_validate(contract)
        await self._record(
            caller, self._contracts, contract_id, AuditAction.UPDATE,
            before, closed.model_dump(mode="json"), company_id,
        )

        car = await self._car_repo.get_by_id(self._session, car_id)
        if car is not None:
            car_before = self._cars.snapshot(car)
            car_values = {"status": CarStatus.AVAILABLE.value}
            if payload.mileage is not None:
                car_values["mileage"] = payload.mileage
            car = await self._car_repo.update(self._session, car, car_values)
            await self._record(
                caller, self._cars, car.id, AuditAction.UPDATE,
                car_before, self._cars.snapshot(car), company_id,
            )

        payment_ids: List[int] = []
        for fee in payload.fees:
            payment = await self._payment_repo.create(
                self._session,
                {
                    "company_id": company_id,
                    "contract_id": contract_id,
                    "amount": fee.amount,
                    "payment_method": PaymentMethod.CASH.value,
                    "status": PaymentStatus.PENDING.value,
                    "notes": fee.description,
                    "created_by": caller.id,
                },
            )
            payment_ids.append(payment.id)
            await self._record(
                caller, self._payments, payment.id, AuditAction.CREATE,
                None, self._payments.snapshot(payment), company_id,
            )

        logger.info(
            "contract_closed",
            extra={"contract_id": contract_id, "company_id": company_id, "fees": len(payment_ids)},
        )
        return ContractCloseResponse(
            contract=closed,
            pending_payment_ids=payment_ids,
        )
