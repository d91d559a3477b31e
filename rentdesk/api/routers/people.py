"""Users (profiles) and managers. New managers are provisioned, not inserted."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from rentdesk.api.dependencies import CurrentCaller, get_provisioning_service
from rentdesk.api.routers.crud import crud_router
from rentdesk.application.entities import MANAGERS, USERS
from rentdesk.application.provisioning_service import ProvisioningService
from rentdesk.domain.schemas.user import ManagerCreate, ManagerUpdate, UserUpdate

managers_router = APIRouter()


@managers_router.post("", status_code=status.HTTP_201_CREATED)
async def create_manager(
    body: ManagerCreate,
    caller: CurrentCaller,
    provisioning: Annotated[ProvisioningService, Depends(get_provisioning_service)],
):
    """Identity, profile and manager link in one compensating sequence."""
    return {"data": await provisioning.create_manager(caller, body)}


crud_router(
    MANAGERS, None, ManagerUpdate, operations={"list", "get", "update", "delete"}, router=managers_router
)

users_router = crud_router(USERS, None, UserUpdate, id_type=str, operations={"list", "get", "update", "delete"})
