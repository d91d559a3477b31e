"""Audit log API router: scoped list, rendered changes, bulk clear."""

from typing import Annotated

from fastapi import APIRouter, Depends

from rentdesk.api.dependencies import (
    CurrentCaller,
    get_audit_filters,
    get_audit_log_service,
    get_list_params,
)
from rentdesk.application.audit_log_service import AuditLogService
from rentdesk.domain.schemas.audit import AuditLogFilters
from rentdesk.domain.schemas.common import ListParams

router = APIRouter()


@router.get("")
async def list_logs(
    caller: CurrentCaller,
    service: Annotated[AuditLogService, Depends(get_audit_log_service)],
    filters: Annotated[AuditLogFilters, Depends(get_audit_filters)],
    params: Annotated[ListParams, Depends(get_list_params)],
):
    rows, total = await service.list(caller, filters, params)
    return {"data": rows, "totalCount": total}


@router.get("/{log_id}/changes")
async def log_changes(
    log_id: int,
    caller: CurrentCaller,
    service: Annotated[AuditLogService, Depends(get_audit_log_service)],
):
    return {"data": await service.changes(caller, log_id)}


@router.delete("")
async def clear_logs(
    caller: CurrentCaller,
    service: Annotated[AuditLogService, Depends(get_audit_log_service)],
):
    return {"data": await service.clear(caller)}
