"""Admin API router: entering and leaving a company, role changes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from rentdesk.api.dependencies import CurrentCaller, get_auth_service
from rentdesk.application.auth_service import AuthService
from rentdesk.domain.schemas.user import RoleUpdate

router = APIRouter()


@router.post("/admin/enter-company")
async def enter_company(
    company_id: Annotated[int, Query(ge=1)],
    caller: CurrentCaller,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Audited marker; the narrowing itself happens per request through admin_mode=true&company_id=."""
    await auth_service.enter_company(caller, company_id)
    return {"data": {"company_id": company_id, "admin_mode": True}}


@router.delete("/admin/enter-company")
async def leave_company(
    company_id: Annotated[int, Query(ge=1)],
    caller: CurrentCaller,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    await auth_service.leave_company(caller, company_id)
    return {"data": {"company_id": company_id, "admin_mode": False}}


@router.put("/users/{user_id}/role")
async def change_role(
    user_id: str,
    body: RoleUpdate,
    caller: CurrentCaller,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    return {"data": await auth_service.change_role(caller, user_id, body)}
