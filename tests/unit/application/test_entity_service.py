"""Mutation handler: permission before write, before/after snapshots, one audit entry."""

from types import SimpleNamespace
from typing import Optional
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from rentdesk.application.caller import Caller
from rentdesk.application.entity_service import EntityDefinition, EntityService
from rentdesk.application.exceptions import EntityNotFoundError
from rentdesk.domain.exceptions import DomainValidationError
from rentdesk.domain.schemas.common import ListParams
from rentdesk.governance.audit_models import AuditAction
from rentdesk.security.exceptions import AuthorizationError
from rentdesk.security.rbac import Action, Identity, Role, Scope, ScopeKind


class WidgetRead(BaseModel):
    id: int
    company_id: Optional[int] = None
    name: str
    user_id: Optional[str] = None

    model_config = {"from_attributes": True}


class WidgetCreate(BaseModel):
    company_id: Optional[int] = None
    name: str


class WidgetUpdate(BaseModel):
    company_id: Optional[int] = None
    name: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    user_id: Optional[str] = None


WIDGETS = EntityDefinition(name="widget", model=object, read_schema=WidgetRead)
PROFILES = EntityDefinition(
    name="profile",
    model=object,
    read_schema=WidgetRead,
    owner_field="user_id",
    self_actions=frozenset({Action.READ, Action.UPDATE}),
    roles={Action.READ: frozenset(Role), Action.UPDATE: frozenset(Role)},
)
GLOBAL = EntityDefinition(
    name="location",
    model=object,
    read_schema=WidgetRead,
    tenant_field=None,
    public_read=True,
    scopes={Action.CREATE: ScopeKind.SYSTEM},
    roles={Action.CREATE: frozenset({Role.ADMIN})},
)

ADMIN = Identity(id="u-admin", email="admin@example.com", role=Role.ADMIN)
MANAGER = Identity(id="u-manager", email="manager@example.com", role=Role.MANAGER)
CLIENT = Identity(id="u-client", email="client@example.com", role=Role.CLIENT)

MANAGER_OF_7 = Caller(MANAGER, Scope.company(7))
ADMIN_SYSTEM = Caller(ADMIN, Scope.system())
ADMIN_IN_12 = Caller(ADMIN, Scope.company(12), impersonating=12)
CLIENT_SELF = Caller(CLIENT, Scope.self_only())


def row(id=1, company_id=9, name="w", user_id=None):
    return SimpleNamespace(id=id, company_id=company_id, name=name, user_id=user_id)


@pytest.fixture
def repository():
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=None)
    repo.list_page = AsyncMock(return_value=([], 0))

    async def create(db, values):
        return SimpleNamespace(id=100, user_id=None, **values)

    async def update(db, obj, values):
        for key, value in values.items():
            setattr(obj, key, value)
        return obj

    repo.create = AsyncMock(side_effect=create)
    repo.update = AsyncMock(side_effect=update)
    repo.delete = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def recorder():
    r = AsyncMock()
    r.record = AsyncMock(return_value=None)
    return r


def service(definition, repository, recorder):
    return EntityService(definition, AsyncMock(), recorder, repository=repository)


async def test_cross_company_update_denied_without_write_or_audit(repository, recorder):
    repository.get_by_id.return_value = row(company_id=9)
    svc = service(WIDGETS, repository, recorder)
    with pytest.raises(AuthorizationError):
        await svc.update(MANAGER_OF_7, 1, WidgetUpdate(name="x"))
    repository.update.assert_not_awaited()
    recorder.record.assert_not_awaited()


async def test_update_records_before_and_after(repository, recorder):
    repository.get_by_id.return_value = row(company_id=7, name="old")
    svc = service(WIDGETS, repository, recorder)
    result = await svc.update(MANAGER_OF_7, 1, WidgetUpdate(name="new"))
    assert result.name == "new"
    assert recorder.record.await_count == 1
    kwargs = recorder.record.call_args.kwargs
    assert kwargs["action"] is AuditAction.UPDATE
    assert kwargs["before_state"]["name"] == "old"
    assert kwargs["after_state"]["name"] == "new"
    assert kwargs["company_id"] == 7
    assert kwargs["entity_type"] == "widget"


async def test_update_cannot_move_row_to_another_company(repository, recorder):
    repository.get_by_id.return_value = row(company_id=7)
    svc = service(WIDGETS, repository, recorder)
    await svc.update(MANAGER_OF_7, 1, WidgetUpdate(company_id=9, name="n"))
    values = repository.update.call_args[0][2]
    assert "company_id" not in values


async def test_create_forces_caller_company(repository, recorder):
    svc = service(WIDGETS, repository, recorder)
    result = await svc.create(MANAGER_OF_7, WidgetCreate(name="n"))
    assert result.company_id == 7
    assert recorder.record.call_args.kwargs["company_id"] == 7
    assert recorder.record.call_args.kwargs["before_state"] is None


async def test_create_in_foreign_company_denied(repository, recorder):
    svc = service(WIDGETS, repository, recorder)
    with pytest.raises(AuthorizationError):
        await svc.create(MANAGER_OF_7, WidgetCreate(company_id=9, name="n"))
    repository.create.assert_not_awaited()


async def test_impersonating_admin_creates_in_target_company(repository, recorder):
    svc = service(WIDGETS, repository, recorder)
    result = await svc.create(ADMIN_IN_12, WidgetCreate(name="n"))
    assert result.company_id == 12
    assert recorder.record.call_args.kwargs["company_id"] == 12


async def test_system_admin_must_name_company(repository, recorder):
    svc = service(WIDGETS, repository, recorder)
    with pytest.raises(DomainValidationError):
        await svc.create(ADMIN_SYSTEM, WidgetCreate(name="n"))


async def test_delete_missing_row_is_not_found(repository, recorder):
    svc = service(WIDGETS, repository, recorder)
    with pytest.raises(EntityNotFoundError):
        await svc.delete(MANAGER_OF_7, 5)
    recorder.record.assert_not_awaited()


async def test_delete_records_before_state(repository, recorder):
    repository.get_by_id.return_value = row(id=5, company_id=7)
    svc = service(WIDGETS, repository, recorder)
    deleted = await svc.delete(MANAGER_OF_7, 5)
    assert deleted.id == 5
    kwargs = recorder.record.call_args.kwargs
    assert kwargs["action"] is AuditAction.DELETE
    assert kwargs["after_state"] is None
    assert kwargs["before_state"]["id"] == 5


async def test_client_denied_by_role(repository, recorder):
    repository.get_by_id.return_value = row()
    svc = service(WIDGETS, repository, recorder)
    with pytest.raises(AuthorizationError):
        await svc.get(CLIENT_SELF, 1)


async def test_list_bounded_to_company(repository, recorder):
    svc = service(WIDGETS, repository, recorder)
    await svc.list(MANAGER_OF_7, ListParams())
    assert repository.list_page.call_args.kwargs["scope_equals"] == {"company_id": 7}


async def test_list_unbounded_for_system(repository, recorder):
    svc = service(WIDGETS, repository, recorder)
    await svc.list(ADMIN_SYSTEM, ListParams())
    assert repository.list_page.call_args.kwargs["scope_equals"] == {}


async def test_self_scope_lists_own_rows(repository, recorder):
    svc = service(PROFILES, repository, recorder)
    await svc.list(CLIENT_SELF, ListParams())
    assert repository.list_page.call_args.kwargs["scope_equals"] == {"user_id": "u-client"}


async def test_owner_may_update_own_row(repository, recorder):
    repository.get_by_id.return_value = row(company_id=3, user_id="u-client")
    svc = service(PROFILES, repository, recorder)
    result = await svc.update(CLIENT_SELF, 1, WidgetUpdate(name="mine"))
    assert result.name == "mine"


async def test_self_scope_cannot_touch_other_rows(repository, recorder):
    repository.get_by_id.return_value = row(company_id=3, user_id="someone-else")
    svc = service(PROFILES, repository, recorder)
    with pytest.raises(AuthorizationError):
        await svc.update(CLIENT_SELF, 1, WidgetUpdate(name="x"))


async def test_public_read_for_everyone(repository, recorder):
    repository.get_by_id.return_value = row(company_id=None)
    svc = service(GLOBAL, repository, recorder)
    assert (await svc.get(CLIENT_SELF, 1)).id == 1


async def test_system_write_denied_to_impersonating_admin(repository, recorder):
    svc = service(GLOBAL, repository, recorder)
    with pytest.raises(AuthorizationError):
        await svc.create(ADMIN_IN_12, WidgetCreate(name="n"))
    created = await svc.create(ADMIN_SYSTEM, WidgetCreate(name="n"))
    assert created.id == 100


async def test_owner_cannot_hand_row_to_another_identity(repository, recorder):
    repository.get_by_id.return_value = row(company_id=3, user_id="u-client")
    svc = service(PROFILES, repository, recorder)
    result = await svc.update(CLIENT_SELF, 1, ProfileUpdate(name="mine", user_id="u-other"))
    values = repository.update.call_args[0][2]
    assert values == {"name": "mine"}
    assert result.user_id == "u-client"


async def test_staff_may_link_row_to_identity(repository, recorder):
    repository.get_by_id.return_value = row(company_id=7, user_id=None)
    svc = service(PROFILES, repository, recorder)
    result = await svc.update(MANAGER_OF_7, 1, ProfileUpdate(user_id="u-client"))
    assert result.user_id == "u-client"


def test_resolve_company_by_scope(repository, recorder):
    svc = service(WIDGETS, repository, recorder)
    assert svc.resolve_company(MANAGER_OF_7, None) == 7
    assert svc.resolve_company(ADMIN_IN_12, None) == 12
    assert svc.resolve_company(CLIENT_SELF, None) is None
    assert svc.resolve_company(CLIENT_SELF, 3) == 3
