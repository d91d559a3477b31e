"""Car templates, company cars and the available-car catalogue."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from rentdesk.api.dependencies import CurrentCaller, get_catalog_service
from rentdesk.api.routers.crud import crud_router
from rentdesk.application.entities import CAR_TEMPLATES, COMPANY_CARS
from rentdesk.application.fleet_service import CatalogService
from rentdesk.domain.schemas.fleet import (
    CarTemplateCreate,
    CarTemplateUpdate,
    CompanyCarCreate,
    CompanyCarUpdate,
)

router = APIRouter()


@router.get("/catalog")
async def catalog(
    caller: CurrentCaller,
    catalog_service: Annotated[CatalogService, Depends(get_catalog_service)],
    company_id: Optional[int] = None,
    location_id: Optional[int] = None,
):
    """Available cars grouped by body type."""
    return {"data": await catalog_service.catalog(caller, company_id=company_id, location_id=location_id)}


crud_router(COMPANY_CARS, CompanyCarCreate, CompanyCarUpdate, router=router)

car_templates_router = crud_router(CAR_TEMPLATES, CarTemplateCreate, CarTemplateUpdate)
