"""Locations, districts and per-location seasons."""

from typing import Annotated

from fastapi import APIRouter, Depends

from rentdesk.api.dependencies import CurrentCaller, get_pricing_service
from rentdesk.api.routers.crud import crud_router
from rentdesk.application.entities import DISTRICTS, LOCATIONS
from rentdesk.application.pricing_service import PricingService
from rentdesk.domain.schemas.company import (
    DistrictCreate,
    DistrictUpdate,
    LocationCreate,
    LocationUpdate,
)
from rentdesk.domain.schemas.pricing import SeasonsUpdate

router = APIRouter()


@router.get("/{location_id}/seasons")
async def get_seasons(
    location_id: int,
    caller: CurrentCaller,
    pricing: Annotated[PricingService, Depends(get_pricing_service)],
):
    return {"data": await pricing.get_location_seasons(caller, location_id)}


@router.put("/{location_id}/seasons")
async def replace_seasons(
    location_id: int,
    body: SeasonsUpdate,
    caller: CurrentCaller,
    pricing: Annotated[PricingService, Depends(get_pricing_service)],
):
    return {"data": await pricing.replace_location_seasons(caller, location_id, body)}


crud_router(LOCATIONS, LocationCreate, LocationUpdate, router=router)

districts_router = crud_router(DISTRICTS, DistrictCreate, DistrictUpdate)
