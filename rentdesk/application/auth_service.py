"""Login, logout, role changes and admin company entry. No HTTP."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.application.caller import Caller
from rentdesk.application.entities import USERS
from rentdesk.application.entity_service import EntityService
from rentdesk.application.exceptions import EntityNotFoundError
from rentdesk.domain.schemas.user import LoginRequest, MeResponse, RoleUpdate, TokenResponse, UserRead
from rentdesk.governance.audit_logger import AuditRecorder
from rentdesk.governance.audit_models import AuditAction
from rentdesk.infrastructure.database.models import AuthIdentity, Company, User
from rentdesk.infrastructure.database.repository import AsyncRepository
from rentdesk.scalability.rate_limiter import FixedWindowRateLimiter
from rentdesk.security.auth import create_access_token, verify_password
from rentdesk.security.exceptions import AuthenticationError
from rentdesk.security.rbac import RBACService, Role

logger = logging.getLogger(__name__)

LOGIN_RATE_PREFIX = "login:"
AUTH_ENTITY = "auth"
INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    def __init__(
        self,
        session: AsyncSession,
        recorder: AuditRecorder,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        rbac: Optional[RBACService] = None,
    ) -> None:
        self._session = session
        self._recorder = recorder
        self._rate_limiter = rate_limiter
        self._rbac = rbac or RBACService()
        self._users = AsyncRepository(User)
        self._user_entities = EntityService(USERS, session, recorder, rbac=self._rbac)

    async def login(self, payload: LoginRequest, client_ip: str) -> TokenResponse:
        """Rate limited per client IP. Failed attempts against a known email are audited."""
        if self._rate_limiter is not None:
            await self._rate_limiter.enforce(f"{LOGIN_RATE_PREFIX}{client_ip}")

        stmt = select(AuthIdentity).where(AuthIdentity.email == payload.email)
        credentials = (await self._session.execute(stmt)).scalar_one_or_none()
        user = await self._users.get_by_id(self._session, credentials.id) if credentials else None

        if credentials is None or user is None:
            logger.info("login_failed", extra={"reason": "unknown_email", "ip": client_ip})
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not verify_password(payload.password, credentials.password_hash) or not user.is_active:
            logger.info("login_failed", extra={"user_id": user.id, "ip": client_ip})
            await self._recorder.record(
                actor_id=user.id,
                entity_type=AUTH_ENTITY,
                entity_id=user.id,
                action=AuditAction.LOGIN_FAILED,
                after_state={"email": payload.email},
            )
            raise AuthenticationError(INVALID_CREDENTIALS)

        token = create_access_token(user.id)
        logger.info("login_succeeded", extra={"user_id": user.id, "ip": client_ip})
        await self._recorder.record(
            actor_id=user.id,
            entity_type=AUTH_ENTITY,
            entity_id=user.id,
            action=AuditAction.LOGIN,
        )
        return TokenResponse(access_token=token, user=UserRead.model_validate(user))

    async def logout(self, caller: Caller) -> None:
        logger.info("logout", extra={"user_id": caller.id})
        await self._recorder.record(
            actor_id=caller.id,
            entity_type=AUTH_ENTITY,
            entity_id=caller.id,
            action=AuditAction.LOGOUT,
        )

    async def me(self, caller: Caller) -> MeResponse:
        user = await self._users.get_by_id(self._session, caller.id)
        if user is None:
            raise AuthenticationError("Unauthorized")
        return MeResponse(user=UserRead.model_validate(user), scope=caller.scope.to_dict())

    async def change_role(self, caller: Caller, user_id: str, payload: RoleUpdate) -> UserRead:
        """Admin only. The new role takes effect on the target's next request."""
        self._rbac.check_role(caller.identity, frozenset({Role.ADMIN}))
        row = await self._users.get_by_id(self._session, user_id)
        if row is None:
            raise EntityNotFoundError(f"user {user_id} not found")
        before = self._user_entities.snapshot(row)
        row = await self._users.update(self._session, row, {"role": payload.role.value})
        after = self._user_entities.snapshot(row)
        logger.info(
            "role_changed",
            extra={"target_user_id": user_id, "old_role": before["role"], "new_role": after["role"]},
        )
        await self._recorder.record(
            actor_id=caller.id,
            entity_type=USERS.name,
            entity_id=user_id,
            action=AuditAction.UPDATE,
            before_state=before,
            after_state=after,
        )
        return UserRead.model_validate(row)

    async def _admin_company_event(self, caller: Caller, company_id: int, action: AuditAction) -> None:
        self._rbac.check_role(caller.identity, frozenset({Role.ADMIN}))
        company = await self._session.get(Company, company_id)
        if company is None:
            raise EntityNotFoundError(f"company {company_id} not found")
        logger.info(
            "admin_company_" + action.value,
            extra={"user_id": caller.id, "company_id": company_id},
        )
        await self._recorder.record(
            actor_id=caller.id,
            entity_type="company",
            entity_id=str(company_id),
            action=action,
            after_state={"company_id": company_id, "company_name": company.name},
            company_id=company_id,
        )

    async def enter_company(self, caller: Caller, company_id: int) -> None:
        await self._admin_company_event(caller, company_id, AuditAction.LOGIN)

    async def leave_company(self, caller: Caller, company_id: int) -> None:
        await self._admin_company_event(caller, company_id, AuditAction.LOGOUT)
