"""Auth API router: login, logout, current identity, owner self-registration."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from rentdesk.api.dependencies import (
    CurrentCaller,
    get_auth_service,
    get_provisioning_service,
    get_request_meta,
)
from rentdesk.application.auth_service import AuthService
from rentdesk.application.provisioning_service import ProvisioningService
from rentdesk.core.request_meta import RequestMeta
from rentdesk.domain.schemas.user import LoginRequest, RegisterOwnerRequest
from rentdesk.security.auth import create_access_token

router = APIRouter()


@router.post("/login")
async def login(
    body: LoginRequest,
    meta: Annotated[RequestMeta, Depends(get_request_meta)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Exchange credentials for a bearer token. Throttled per client IP."""
    return {"data": await auth_service.login(body, meta.ip)}


@router.post("/logout")
async def logout(
    caller: CurrentCaller,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    await auth_service.logout(caller)
    return {"data": {"success": True}}


@router.get("/me")
async def me(
    caller: CurrentCaller,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    return {"data": await auth_service.me(caller)}


@router.post("/register-owner", status_code=status.HTTP_201_CREATED)
async def register_owner(
    body: RegisterOwnerRequest,
    provisioning: Annotated[ProvisioningService, Depends(get_provisioning_service)],
):
    """Create identity, owner profile and company; earlier steps are undone if a later one fails."""
    user, company = await provisioning.register_owner(body)
    return {
        "data": {
            "access_token": create_access_token(user.id),
            "token_type": "bearer",
            "user": user,
            "company": company,
        }
    }
