"""Security tests: the scope decision table and role allow-lists."""

import pytest

from rentdesk.security.exceptions import AuthorizationError
from rentdesk.security.rbac import (
    STAFF_ROLES,
    Action,
    Identity,
    Permission,
    RBACService,
    Role,
    Scope,
    ScopeKind,
    has_permission,
)

ADMIN = Identity(id="u-admin", email="admin@example.com", role=Role.ADMIN)
OWNER = Identity(id="u-owner", email="owner@example.com", role=Role.OWNER)
MANAGER = Identity(id="u-manager", email="manager@example.com", role=Role.MANAGER)
CLIENT = Identity(id="u-client", email="client@example.com", role=Role.CLIENT)

READ_CARS = Permission("company_car", Action.READ)
SYSTEM_WRITE = Permission("location", Action.CREATE, ScopeKind.SYSTEM)
SELF_READ = Permission("client", Action.READ, ScopeKind.SELF)


@pytest.fixture
def rbac():
    return RBACService()


# Decision table (first match wins):
# scope     required   outcome
# system    any        allow
# other     system     deny
# company   company    allow iff target company == scope company
# self      self       allow
# any       self       allow iff record owner == caller
# self      company    deny


@pytest.mark.parametrize(
    "permission",
    [READ_CARS, SYSTEM_WRITE, SELF_READ, Permission("x", Action.DELETE, ScopeKind.COMPANY)],
)
def test_system_scope_always_allows(permission):
    assert has_permission(ADMIN, Scope.system(), permission, target_company_id=99, record_owner_id="other")


def test_system_permission_denied_outside_system_scope():
    assert not has_permission(OWNER, Scope.company(7), SYSTEM_WRITE)
    assert not has_permission(CLIENT, Scope.self_only(), SYSTEM_WRITE)


def test_company_permission_defaults_to_own_company():
    assert has_permission(MANAGER, Scope.company(7), READ_CARS)


def test_company_permission_same_company_allowed():
    assert has_permission(MANAGER, Scope.company(7), READ_CARS, target_company_id=7)


def test_company_permission_other_company_denied():
    assert not has_permission(MANAGER, Scope.company(7), READ_CARS, target_company_id=9)


def test_company_permission_denied_for_self_scope():
    assert not has_permission(CLIENT, Scope.self_only(), READ_CARS)


def test_self_permission_with_self_scope():
    assert has_permission(CLIENT, Scope.self_only(), SELF_READ)


def test_self_permission_by_record_ownership():
    assert has_permission(OWNER, Scope.company(7), SELF_READ, record_owner_id=OWNER.id)
    assert not has_permission(CLIENT, Scope.self_only(), SELF_READ, record_owner_id="someone-else")


def test_self_permission_denied_for_company_scope_without_ownership():
    assert not has_permission(OWNER, Scope.company(7), SELF_READ)


def test_decision_is_pure():
    args = (MANAGER, Scope.company(7), READ_CARS)
    results = {has_permission(*args, target_company_id=9) for _ in range(5)}
    assert results == {False}


def test_check_role_allows_listed_roles(rbac):
    for identity in (ADMIN, OWNER, MANAGER):
        rbac.check_role(identity, STAFF_ROLES)


def test_check_role_denies_unlisted_role(rbac):
    with pytest.raises(AuthorizationError):
        rbac.check_role(CLIENT, STAFF_ROLES)


def test_check_permission_raises_with_message(rbac):
    with pytest.raises(AuthorizationError) as exc_info:
        rbac.check_permission(MANAGER, Scope.company(7), READ_CARS, target_company_id=9)
    assert "company_car" in exc_info.value.message


def test_scope_to_dict():
    assert Scope.company(12).to_dict() == {"type": "company", "company_id": 12}
    assert Scope.system().to_dict() == {"type": "system", "company_id": None}
    assert Scope.self_only().is_system is False
