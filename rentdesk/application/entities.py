"""Entity definitions: who may touch what, and inside which boundary."""

from rentdesk.application.entity_service import EntityDefinition
from rentdesk.domain.schemas.company import CompanyRead, DistrictRead, LocationRead
from rentdesk.domain.schemas.fleet import CarTemplateRead, CompanyCarRead
from rentdesk.domain.schemas.rental import BookingRead, ClientRead, ContractRead, PaymentRead, TaskRead
from rentdesk.domain.schemas.user import ManagerRead, UserRead
from rentdesk.infrastructure.database import models
from rentdesk.security.rbac import ALL_ROLES, Action, Role, ScopeKind

ADMIN_ONLY = frozenset({Role.ADMIN})
ADMIN_OWNER = frozenset({Role.ADMIN, Role.OWNER})

_GLOBAL_WRITES = {
    Action.CREATE: ScopeKind.SYSTEM,
    Action.UPDATE: ScopeKind.SYSTEM,
    Action.DELETE: ScopeKind.SYSTEM,
}
_ADMIN_WRITES = {
    Action.CREATE: ADMIN_ONLY,
    Action.UPDATE: ADMIN_ONLY,
    Action.DELETE: ADMIN_ONLY,
}

COMPANIES = EntityDefinition(
    name="company",
    model=models.Company,
    read_schema=CompanyRead,
    tenant_field="id",
    search_fields=("name", "email", "phone", "address"),
    scopes={Action.CREATE: ScopeKind.SYSTEM, Action.DELETE: ScopeKind.SYSTEM},
    roles={
        Action.CREATE: ADMIN_ONLY,
        Action.UPDATE: ADMIN_OWNER,
        Action.DELETE: ADMIN_ONLY,
    },
    references={"owner_id": models.User, "location_id": models.Location},
)

LOCATIONS = EntityDefinition(
    name="location",
    model=models.Location,
    read_schema=LocationRead,
    tenant_field=None,
    search_fields=("name",),
    scopes=_GLOBAL_WRITES,
    roles=_ADMIN_WRITES,
    public_read=True,
)

DISTRICTS = EntityDefinition(
    name="district",
    model=models.District,
    read_schema=DistrictRead,
    tenant_field=None,
    search_fields=("name",),
    scopes=_GLOBAL_WRITES,
    roles=_ADMIN_WRITES,
    public_read=True,
    references={"location_id": models.Location},
)

CAR_TEMPLATES = EntityDefinition(
    name="car_template",
    model=models.CarTemplate,
    read_schema=CarTemplateRead,
    tenant_field=None,
    search_fields=("brand", "model", "body_type"),
    scopes=_GLOBAL_WRITES,
    roles=_ADMIN_WRITES,
    public_read=True,
)

COMPANY_CARS = EntityDefinition(
    name="company_car",
    model=models.CompanyCar,
    read_schema=CompanyCarRead,
    search_fields=("license_plate", "color", "notes"),
    references={"car_template_id": models.CarTemplate},
)

CLIENTS = EntityDefinition(
    name="client",
    model=models.Client,
    read_schema=ClientRead,
    search_fields=("name", "surname", "phone", "email", "passport_number"),
    roles={Action.READ: ALL_ROLES, Action.UPDATE: ALL_ROLES},
    references={"user_id": models.User},
    owner_field="user_id",
    self_actions=frozenset({Action.READ, Action.UPDATE}),
)

CONTRACTS = EntityDefinition(
    name="contract",
    model=models.Contract,
    read_schema=ContractRead,
    search_fields=("notes", "status"),
    references={
        "client_id": models.Client,
        "company_car_id": models.CompanyCar,
        "manager_id": models.User,
    },
)

BOOKINGS = EntityDefinition(
    name="booking",
    model=models.Booking,
    read_schema=BookingRead,
    search_fields=("status", "notes"),
    roles={Action.CREATE: ALL_ROLES},
    references={"client_id": models.Client, "company_car_id": models.CompanyCar},
)

PAYMENTS = EntityDefinition(
    name="payment",
    model=models.Payment,
    read_schema=PaymentRead,
    search_fields=("notes", "payment_method", "status"),
    references={"contract_id": models.Contract},
    actor_field="created_by",
)

TASKS = EntityDefinition(
    name="task",
    model=models.Task,
    read_schema=TaskRead,
    search_fields=("title", "description"),
    references={"assigned_to": models.User},
    actor_field="created_by",
)

MANAGERS = EntityDefinition(
    name="manager",
    model=models.Manager,
    read_schema=ManagerRead,
    roles={
        Action.CREATE: ADMIN_OWNER,
        Action.UPDATE: ADMIN_OWNER,
        Action.DELETE: ADMIN_OWNER,
    },
)

USERS = EntityDefinition(
    name="user",
    model=models.User,
    read_schema=UserRead,
    tenant_field=None,
    search_fields=("email", "name", "surname", "phone"),
    scopes={
        Action.READ: ScopeKind.SYSTEM,
        Action.UPDATE: ScopeKind.SYSTEM,
        Action.DELETE: ScopeKind.SYSTEM,
    },
    roles={
        Action.READ: ALL_ROLES,
        Action.UPDATE: ALL_ROLES,
        Action.DELETE: ADMIN_ONLY,
    },
    owner_field="id",
    self_actions=frozenset({Action.READ, Action.UPDATE}),
)
