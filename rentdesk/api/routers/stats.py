"""Dashboard statistics for the caller's scope."""

from typing import Annotated

from fastapi import APIRouter, Depends

from rentdesk.api.dependencies import CurrentCaller, get_stats_service
from rentdesk.application.fleet_service import StatsService

router = APIRouter()


@router.get("/dashboard")
async def dashboard(
    caller: CurrentCaller,
    stats: Annotated[StatsService, Depends(get_stats_service)],
):
    return {"data": await stats.dashboard(caller)}
