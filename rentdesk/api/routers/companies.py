"""Companies API router: CRUD, pricing settings, quotes and per-company statistics."""

from typing import Annotated

from fastapi import APIRouter, Depends

from rentdesk.api.dependencies import (
    CurrentCaller,
    get_pricing_service,
    get_stats_service,
)
from rentdesk.api.routers.crud import crud_router
from rentdesk.application.entities import COMPANIES
from rentdesk.application.fleet_service import StatsService
from rentdesk.application.pricing_service import PricingService
from rentdesk.domain.schemas.company import CompanyCreate, CompanyUpdate
from rentdesk.domain.schemas.pricing import DurationRangesUpdate, QuoteRequest, SeasonsUpdate

router = APIRouter()


@router.put("/{company_id}/settings/durations")
async def update_durations(
    company_id: int,
    body: DurationRangesUpdate,
    caller: CurrentCaller,
    pricing: Annotated[PricingService, Depends(get_pricing_service)],
):
    """Replace the rental duration ranges. Rejected as a whole on any gap or overlap."""
    return {"data": await pricing.update_durations(caller, company_id, body)}


@router.put("/{company_id}/settings/seasons")
async def update_seasons(
    company_id: int,
    body: SeasonsUpdate,
    caller: CurrentCaller,
    pricing: Annotated[PricingService, Depends(get_pricing_service)],
):
    """Replace the pricing seasons. Every day of the year must belong to exactly one season."""
    return {"data": await pricing.update_seasons(caller, company_id, body)}


@router.post("/{company_id}/quote")
async def quote(
    company_id: int,
    body: QuoteRequest,
    caller: CurrentCaller,
    pricing: Annotated[PricingService, Depends(get_pricing_service)],
):
    return {"data": await pricing.quote(caller, company_id, body)}


@router.get("/{company_id}/stats")
async def company_stats(
    company_id: int,
    caller: CurrentCaller,
    stats: Annotated[StatsService, Depends(get_stats_service)],
):
    return {"data": await stats.company_stats(caller, company_id)}


crud_router(COMPANIES, CompanyCreate, CompanyUpdate, router=router)
