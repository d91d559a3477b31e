"""Account provisioning: manager creation and owner registration as compensating sagas."""

import logging
import uuid
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.application.caller import Caller
from rentdesk.application.entities import COMPANIES, MANAGERS
from rentdesk.application.entity_service import EntityService
from rentdesk.application.saga import Saga, SagaContext, SagaStep
from rentdesk.domain.exceptions import DomainValidationError
from rentdesk.domain.schemas.company import CompanyRead
from rentdesk.domain.schemas.user import ManagerCreate, ManagerRead, NewAccount, RegisterOwnerRequest, UserRead
from rentdesk.governance.audit_logger import AuditRecorder
from rentdesk.governance.audit_models import AuditAction
from rentdesk.infrastructure.database.models import AuthIdentity, Company, Location, Manager, User
from rentdesk.infrastructure.database.repository import AsyncRepository
from rentdesk.security.auth import hash_password
from rentdesk.security.rbac import Action, Role

logger = logging.getLogger(__name__)

STEP_IDENTITY = "identity"
STEP_PROFILE = "profile"
STEP_MANAGER = "manager"
STEP_COMPANY = "company"


class ProvisioningService:
    """Each step commits on its own; a failed step rolls the earlier ones back in reverse order."""

    def __init__(self, session: AsyncSession, recorder: AuditRecorder) -> None:
        self._session = session
        self._recorder = recorder
        self._identities = AsyncRepository(AuthIdentity)
        self._users = AsyncRepository(User)
        self._managers = AsyncRepository(Manager)
        self._companies = AsyncRepository(Company)
        self._manager_entities = EntityService(MANAGERS, session, recorder)
        self._company_entities = EntityService(COMPANIES, session, recorder)

    async def _remove(self, repository: AsyncRepository, row_id) -> None:
        row = await repository.get_by_id(self._session, row_id)
        if row is not None:
            await repository.delete(self._session, row)

    def account_steps(self, account: NewAccount, role: Role) -> list:
        user_id = str(uuid.uuid4())

        async def create_identity(ctx: SagaContext) -> str:
            await self._identities.create(
                self._session,
                {"id": user_id, "email": account.email, "password_hash": hash_password(account.password)},
            )
            return user_id

        async def remove_identity(ctx: SagaContext) -> None:
            await self._remove(self._identities, ctx[STEP_IDENTITY])

        async def create_profile(ctx: SagaContext) -> str:
            await self._users.create(
                self._session,
                {
                    "id": ctx[STEP_IDENTITY],
                    "email": account.email,
                    "role": role.value,
                    "name": account.name,
                    "surname": account.surname,
                    "phone": account.phone,
                },
            )
            return ctx[STEP_IDENTITY]

        async def remove_profile(ctx: SagaContext) -> None:
            await self._remove(self._users, ctx[STEP_PROFILE])

        return [
            SagaStep(STEP_IDENTITY, create_identity, remove_identity),
            SagaStep(STEP_PROFILE, create_profile, remove_profile),
        ]

    async def create_manager(self, caller: Caller, payload: ManagerCreate) -> ManagerRead:
        company_id = self._manager_entities.resolve_company(caller, payload.company_id)
        self._manager_entities.authorize(caller, Action.CREATE, target_company_id=company_id)
        if await self._companies.get_by_id(self._session, company_id) is None:
            raise DomainValidationError.for_field("company_id", f"Referenced record {company_id} does not exist")

        async def link_manager(ctx: SagaContext) -> int:
            row = await self._managers.create(
                self._session, {"user_id": ctx[STEP_PROFILE], "company_id": company_id}
            )
            return row.id

        saga = Saga("create_manager", self.account_steps(payload, Role.MANAGER) + [SagaStep(STEP_MANAGER, link_manager)])
        ctx = await saga.run()

        row = await self._managers.get_by_id(self._session, ctx[STEP_MANAGER])
        after = self._manager_entities.snapshot(row)
        logger.info(
            "manager_provisioned",
            extra={"user_id": row.user_id, "company_id": company_id},
        )
        await self._recorder.record(
            actor_id=caller.id,
            entity_type=MANAGERS.name,
            entity_id=str(row.id),
            action=AuditAction.CREATE,
            after_state=after,
            company_id=company_id,
        )
        return ManagerRead.model_validate(row)

    async def register_owner(self, payload: RegisterOwnerRequest) -> Tuple[UserRead, CompanyRead]:
        company = payload.company
        if company.location_id is not None and await self._session.get(Location, company.location_id) is None:
            raise DomainValidationError.for_field(
                "company.location_id", f"Referenced record {company.location_id} does not exist"
            )

        async def create_company(ctx: SagaContext) -> int:
            row = await self._companies.create(
                self._session,
                {"owner_id": ctx[STEP_PROFILE], **company.model_dump()},
            )
            return row.id

        saga = Saga("register_owner", self.account_steps(payload, Role.OWNER) + [SagaStep(STEP_COMPANY, create_company)])
        ctx = await saga.run()

        user = await self._users.get_by_id(self._session, ctx[STEP_PROFILE])
        row = await self._companies.get_by_id(self._session, ctx[STEP_COMPANY])
        logger.info("owner_registered", extra={"user_id": user.id, "company_id": row.id})
        await self._recorder.record(
            actor_id=user.id,
            entity_type=COMPANIES.name,
            entity_id=str(row.id),
            action=AuditAction.CREATE,
            after_state=self._company_entities.snapshot(row),
            company_id=row.id,
        )
        return UserRead.model_validate(user), CompanyRead.model_validate(row)
