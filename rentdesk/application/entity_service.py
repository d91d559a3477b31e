"""Generic audited CRUD for one entity. No HTTP, no FastAPI."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Generic, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.application.caller import Caller
from rentdesk.application.exceptions import EntityNotFoundError
from rentdesk.domain.exceptions import DomainValidationError
from rentdesk.domain.schemas.common import Deleted, ListParams
from rentdesk.governance.audit_logger import AuditRecorder
from rentdesk.governance.audit_models import AuditAction
from rentdesk.infrastructure.database.repository import AsyncRepository
from rentdesk.security.rbac import (
    ALL_ROLES,
    STAFF_ROLES,
    Action,
    Permission,
    RBACService,
    Role,
    ScopeKind,
)

R = TypeVar("R", bound=BaseModel)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityDefinition:
    """
    Everything the generic handler needs to know about one entity.
    tenant_field: column holding the owning company (None for global entities).
    scopes: required scope kind per action; missing means company.
    roles: role allow-list per action; missing means staff.
    references: payload field -> referenced ORM model, checked before writes.
    owner_field: column holding the owning identity; enables self access for self_actions.
    actor_field: column stamped with the caller's id on create.
    """

    name: str
    model: type
    read_schema: Type[BaseModel]
    tenant_field: Optional[str] = "company_id"
    search_fields: Tuple[str, ...] = ()
    scopes: Mapping[Action, ScopeKind] = field(default_factory=dict)
    roles: Mapping[Action, FrozenSet[Role]] = field(default_factory=dict)
    public_read: bool = False
    references: Mapping[str, type] = field(default_factory=dict)
    owner_field: Optional[str] = None
    self_actions: FrozenSet[Action] = frozenset()
    actor_field: Optional[str] = None

    def scope_for(self, action: Action) -> Optional[ScopeKind]:
        return self.scopes.get(action)

    def roles_for(self, action: Action) -> FrozenSet[Role]:
        if action is Action.READ and self.public_read:
            return ALL_ROLES
        return self.roles.get(action, STAFF_ROLES)


def _plain(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in values.items()}


class EntityService(Generic[R]):
    """
    Mutation handler: permission check before any write, reads the current row
    before update/delete, writes once, then records exactly one audit entry.
    """

    def __init__(
        self,
        definition: EntityDefinition,
        session: AsyncSession,
        recorder: AuditRecorder,
        rbac: Optional[RBACService] = None,
        repository: Optional[AsyncRepository] = None,
    ) -> None:
        self.definition = definition
        self._session = session
        self._recorder = recorder
        self._rbac = rbac or RBACService()
        self._repository = repository or AsyncRepository(definition.model)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def snapshot(self, row: Any) -> Dict[str, Any]:
        return self.definition.read_schema.model_validate(row).model_dump(mode="json")

    def _tenant_of(self, row: Any) -> Optional[int]:
        if self.definition.tenant_field is None:
            return None
        return getattr(row, self.definition.tenant_field)

    def _owns(self, caller: Caller, row: Any, action: Action) -> bool:
        d = self.definition
        if d.owner_field is None or action not in d.self_actions or row is None:
            return False
        return getattr(row, d.owner_field) == caller.id

    def authorize(self, caller: Caller, action: Action, row: Any = None, target_company_id: Optional[int] = None) -> None:
        """Role allow-list first, then the scope decision table."""
        d = self.definition
        self._rbac.check_role(caller.identity, d.roles_for(action))
        if action is Action.READ and d.public_read:
            return
        if self._owns(caller, row, action):
            self._rbac.check_permission(
                caller.identity,
                caller.scope,
                Permission(d.name, action, ScopeKind.SELF),
                record_owner_id=getattr(row, d.owner_field),
            )
            return
        if row is not None and target_company_id is None:
            target_company_id = self._tenant_of(row)
        self._rbac.check_permission(
            caller.identity,
            caller.scope,
            Permission(d.name, action, d.scope_for(action)),
            target_company_id=target_company_id,
        )

    async def _check_references(self, values: Dict[str, Any], company_id: Optional[int]) -> None:
        for name, model in self.definition.references.items():
            value = values.get(name)
            if value is None:
                continue
            referenced = await self._session.get(model, value)
            if referenced is None:
                raise DomainValidationError.for_field(name, f"Referenced record {value} does not exist")
            ref_company = getattr(referenced, "company_id", None)
            if company_id is not None and ref_company is not None and ref_company != company_id:
                raise DomainValidationError.for_field(
                    name, f"Referenced record {value} belongs to another company"
                )

    async def _load(self, entity_id: Any) -> Any:
        row = await self._repository.get_by_id(self._session, entity_id)
        if row is None:
            raise EntityNotFoundError(f"{self.definition.name} {entity_id} not found")
        return row

    async def _audit(
        self,
        caller: Caller,
        row_id: Any,
        action: AuditAction,
        before: Optional[Dict[str, Any]],
        after: Optional[Dict[str, Any]],
        company_id: Optional[int],
    ) -> None:
        await self._recorder.record(
            actor_id=caller.id,
            entity_type=self.definition.name,
            entity_id=str(row_id),
            action=action,
            before_state=before,
            after_state=after,
            company_id=company_id,
        )

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    async def list(self, caller: Caller, params: ListParams) -> Tuple[List[R], int]:
        d = self.definition
        self._rbac.check_role(caller.identity, d.roles_for(Action.READ))
        boundary: Dict[str, Any] = {}
        if not caller.scope.is_system and not d.public_read:
            if caller.scope.kind is ScopeKind.SELF and d.owner_field and Action.READ in d.self_actions:
                boundary[d.owner_field] = caller.id
            else:
                self.authorize(caller, Action.READ)
                if d.tenant_field is not None:
                    boundary[d.tenant_field] = caller.company_id
        rows, total = await self._repository.list_page(
            self._session,
            scope_equals=boundary,
            filters=params.filters,
            search_fields=d.search_fields,
            sort_by=params.sort_by,
            descending=params.descending,
            offset=params.offset,
            limit=params.page_size,
        )
        return [d.read_schema.model_validate(r) for r in rows], total

    async def get(self, caller: Caller, entity_id: Any) -> R:
        row = await self._load(entity_id)
        self.authorize(caller, Action.READ, row)
        return self.definition.read_schema.model_validate(row)

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    def resolve_company(self, caller: Caller, requested: Optional[int]) -> Optional[int]:
        """Company a new tenant-bound row lands in. Self scope keeps what was requested."""
        if caller.scope.kind is ScopeKind.COMPANY:
            return caller.company_id if requested is None else requested
        if caller.scope.is_system:
            if requested is None:
                raise DomainValidationError.for_field(
                    self.definition.tenant_field, "company_id is required"
                )
            return requested
        return requested

    async def create(self, caller: Caller, payload: BaseModel) -> R:
        d = self.definition
        values = _plain(payload.model_dump())
        company_id: Optional[int] = None
        if d.tenant_field is not None and d.tenant_field != "id":
            company_id = self.resolve_company(caller, values.get(d.tenant_field))
            self.authorize(caller, Action.CREATE, target_company_id=company_id)
            values[d.tenant_field] = company_id
        else:
            self.authorize(caller, Action.CREATE)
        if d.actor_field:
            values[d.actor_field] = caller.id
        await self._check_references(values, company_id)

        row = await self._repository.create(self._session, values)
        result = d.read_schema.model_validate(row)
        after = result.model_dump(mode="json")
        logger.info(
            "entity_created",
            extra={"entity_type": d.name, "entity_id": str(row.id), "company_id": company_id},
        )
        await self._audit(caller, row.id, AuditAction.CREATE, None, after, company_id)
        return result

    async def update(self, caller: Caller, entity_id: Any, payload: BaseModel) -> R:
        d = self.definition
        row = await self._load(entity_id)
        self.authorize(caller, Action.UPDATE, row)
        before = self.snapshot(row)
        values = _plain(payload.model_dump(exclude_unset=True))
        values.pop(d.tenant_field or "", None)
        values.pop("id", None)
        if d.owner_field and (
            self._owns(caller, row, Action.UPDATE) or caller.identity.role not in STAFF_ROLES
        ):
            # access granted through ownership cannot move the record to another identity
            values.pop(d.owner_field, None)
        company_id = self._tenant_of(row)
        await self._check_references(values, company_id)

        row = await self._repository.update(self._session, row, values)
        result = d.read_schema.model_validate(row)
        after = result.model_dump(mode="json")
        logger.info(
            "entity_updated",
            extra={"entity_type": d.name, "entity_id": str(row.id), "company_id": company_id},
        )
        await self._audit(caller, row.id, AuditAction.UPDATE, before, after, company_id)
        return result

    async def delete(self, caller: Caller, entity_id: Any) -> Deleted:
        d = self.definition
        row = await self._load(entity_id)
        self.authorize(caller, Action.DELETE, row)
        before = self.snapshot(row)
        company_id = self._tenant_of(row)
        row_id = row.id

        await self._repository.delete(self._session, row)
        logger.info(
            "entity_deleted",
            extra={"entity_type": d.name, "entity_id": str(row_id), "company_id": company_id},
        )
        await self._audit(caller, row_id, AuditAction.DELETE, before, None, company_id)
        return Deleted(id=row_id)
