"""FastAPI dependency injection: session, caller (identity + scope), audit recorder, services, throttling."""

import logging
from typing import Annotated, Callable, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.application.audit_log_service import AuditLogService
from rentdesk.application.auth_service import AuthService
from rentdesk.application.booking_service import BookingService
from rentdesk.application.caller import Caller
from rentdesk.application.contract_service import ContractService
from rentdesk.application.entity_service import EntityDefinition, EntityService
from rentdesk.application.fleet_service import CatalogService, StatsService
from rentdesk.application.pricing_service import PricingService
from rentdesk.application.provisioning_service import ProvisioningService
from rentdesk.config.settings import get_settings
from rentdesk.core.context import company_id_ctx, user_id_ctx
from rentdesk.core.request_meta import RequestMeta
from rentdesk.domain.exceptions import DomainValidationError
from rentdesk.domain.schemas.audit import AuditLogFilters
from rentdesk.domain.schemas.common import ListParams
from rentdesk.governance.audit_logger import AuditRecorder
from rentdesk.infrastructure.cache.redis_client import RedisClient
from rentdesk.infrastructure.database.audit_repository_db import DbAuditRepository
from rentdesk.infrastructure.database.identity_directory import DbIdentityDirectory
from rentdesk.infrastructure.database.session import AsyncSessionLocal, get_db
from rentdesk.scalability.rate_limiter import (
    FixedWindowRateLimiter,
    InMemoryRateLimitBackend,
    RedisRateLimitBackend,
)
from rentdesk.security.auth import decode_access_token
from rentdesk.security.exceptions import AuthenticationError
from rentdesk.security.impersonation import ImpersonationRequest, apply_overlay, impersonated_company
from rentdesk.security.rbac import Identity
from rentdesk.security.scope_resolver import ScopeResolver

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)
_login_rate_limiter: FixedWindowRateLimiter | None = None

DbSession = Annotated[AsyncSession, Depends(get_db)]


def validation_error(e: ValidationError) -> DomainValidationError:
    details = [
        {"field": ".".join(str(p) for p in err["loc"]) or "body", "message": err["msg"]}
        for err in e.errors()
    ]
    return DomainValidationError("Validation error", details=details)


def get_login_rate_limiter() -> FixedWindowRateLimiter:
    """Return singleton login limiter. Redis-backed when REDIS_URL is set, in-process otherwise."""
    global _login_rate_limiter
    if _login_rate_limiter is None:
        settings = get_settings()
        if settings.redis_url:
            backend = RedisRateLimitBackend(RedisClient(settings.redis_url))
        else:
            backend = InMemoryRateLimitBackend(sweep_interval_seconds=settings.rate_limit_sweep_seconds)
        _login_rate_limiter = FixedWindowRateLimiter(
            backend,
            limit=settings.login_rate_limit,
            window_seconds=settings.login_rate_window_seconds,
            key_prefix="rate:",
        )
    return _login_rate_limiter


def get_request_meta(request: Request) -> RequestMeta:
    meta = getattr(request.state, "meta", None)
    return meta if meta is not None else RequestMeta.from_headers(request.headers)


def get_impersonation(request: Request) -> ImpersonationRequest:
    requested = getattr(request.state, "impersonation", None)
    return requested if requested is not None else ImpersonationRequest.from_query(request.query_params)


def get_directory(db: DbSession) -> DbIdentityDirectory:
    return DbIdentityDirectory(db)


async def get_identity(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer)],
    directory: Annotated[DbIdentityDirectory, Depends(get_directory)],
) -> Identity:
    """Bearer token -> identity with its stored role. 401 on anything missing or unknown."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized")
    user_id = decode_access_token(credentials.credentials)
    return await ScopeResolver(directory).load_identity(user_id)


async def get_caller(
    request: Request,
    identity: Annotated[Identity, Depends(get_identity)],
    directory: Annotated[DbIdentityDirectory, Depends(get_directory)],
    impersonation: Annotated[ImpersonationRequest, Depends(get_impersonation)],
) -> Caller:
    """Resolved scope plus the admin impersonation overlay for this request only."""
    resolved = await ScopeResolver(directory).resolve(identity)
    scope = apply_overlay(identity, resolved, impersonation)
    request.state.user_id = identity.id
    request.state.company_id = scope.company_id
    user_id_ctx.set(identity.id)
    company_id_ctx.set(scope.company_id)
    return Caller(
        identity=identity,
        scope=scope,
        impersonating=impersonated_company(identity, impersonation),
    )


CurrentCaller = Annotated[Caller, Depends(get_caller)]


def get_recorder(
    db: DbSession,
    directory: Annotated[DbIdentityDirectory, Depends(get_directory)],
    meta: Annotated[RequestMeta, Depends(get_request_meta)],
    impersonation: Annotated[ImpersonationRequest, Depends(get_impersonation)],
) -> AuditRecorder:
    # The recorder re-derives the actor's role; the company only counts for admins.
    company_id = impersonation.company_id if impersonation.admin_mode else None
    return AuditRecorder(
        repository=DbAuditRepository(db),
        directory=directory,
        meta=meta,
        impersonated_company_id=company_id,
    )


Recorder = Annotated[AuditRecorder, Depends(get_recorder)]


def get_list_params(
    page: int = 1,
    page_size: Annotated[Optional[int], Query(alias="pageSize")] = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "created_at",
    sort_order: Annotated[str, Query(alias="sortOrder")] = "desc",
    filters: Optional[str] = None,
) -> ListParams:
    settings = get_settings()
    if page_size is None:
        page_size = settings.default_page_size
    try:
        return ListParams(
            page=page,
            page_size=min(page_size, settings.max_page_size),
            sort_by=sort_by,
            sort_order=sort_order,
            filters=filters,
        )
    except ValidationError as e:
        raise validation_error(e) from e


def get_audit_filters(
    q: Optional[str] = None,
    role: Optional[str] = None,
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> AuditLogFilters:
    try:
        return AuditLogFilters(
            q=q or None,
            role=role or None,
            action=action or None,
            entity_type=entity_type or None,
            date_from=date_from or None,
            date_to=date_to or None,
        )
    except ValidationError as e:
        raise validation_error(e) from e


def entity_service(definition: EntityDefinition) -> Callable[..., EntityService]:
    """Dependency factory: one EntityService per request for the given entity."""

    def factory(db: DbSession, recorder: Recorder) -> EntityService:
        return EntityService(definition, db, recorder)

    factory.__name__ = f"get_{definition.name}_service"
    return factory


def get_auth_service(
    db: DbSession,
    recorder: Recorder,
    limiter: Annotated[FixedWindowRateLimiter, Depends(get_login_rate_limiter)],
) -> AuthService:
    return AuthService(db, recorder, rate_limiter=limiter)


def get_provisioning_service(db: DbSession, recorder: Recorder) -> ProvisioningService:
    return ProvisioningService(db, recorder)


def get_pricing_service(db: DbSession, recorder: Recorder) -> PricingService:
    return PricingService(db, recorder)


def get_contract_service(db: DbSession, recorder: Recorder) -> ContractService:
    return ContractService(db, recorder)


def get_booking_service(db: DbSession, recorder: Recorder) -> BookingService:
    return BookingService(db, recorder)


def get_catalog_service(db: DbSession) -> CatalogService:
    return CatalogService(db)


def get_stats_service() -> StatsService:
    return StatsService(AsyncSessionLocal)


def get_audit_log_service(db: DbSession) -> AuditLogService:
    return AuditLogService(DbAuditRepository(db))
