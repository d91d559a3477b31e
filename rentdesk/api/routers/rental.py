"""Clients, contracts (with closing), bookings, payments and tasks."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, status

from rentdesk.api.dependencies import (
    CurrentCaller,
    get_booking_service,
    get_contract_service,
    get_list_params,
)
from rentdesk.api.routers.crud import crud_router
from rentdesk.application.booking_service import BookingService
from rentdesk.application.contract_service import ContractService
from rentdesk.application.entities import BOOKINGS, CLIENTS, CONTRACTS, PAYMENTS, TASKS
from rentdesk.domain.schemas.common import ListParams
from rentdesk.domain.schemas.rental import (
    BookingCreate,
    BookingUpdate,
    ClientCreate,
    ClientUpdate,
    ContractCloseRequest,
    ContractCreate,
    ContractUpdate,
    PaymentCreate,
    PaymentUpdate,
    TaskCreate,
    TaskUpdate,
)

contracts_router = APIRouter()


@contracts_router.post("/{contract_id}/close")
async def close_contract(
    contract_id: int,
    caller: CurrentCaller,
    contracts: Annotated[ContractService, Depends(get_contract_service)],
    body: ContractCloseRequest = ContractCloseRequest(),
):
    """Complete an active contract, free its car and raise closing fees as pending payments."""
    return {"data": await contracts.close(caller, contract_id, body)}


crud_router(CONTRACTS, ContractCreate, ContractUpdate, router=contracts_router)

bookings_router = APIRouter()
Bookings = Annotated[BookingService, Depends(get_booking_service)]


@bookings_router.get("")
async def list_bookings(
    caller: CurrentCaller,
    bookings: Bookings,
    params: Annotated[ListParams, Depends(get_list_params)],
):
    rows, total = await bookings.list(caller, params)
    return {"data": rows, "totalCount": total}


@bookings_router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: Annotated[BookingCreate, Body()],
    caller: CurrentCaller,
    bookings: Bookings,
):
    """Request a car. Starts pending; clients book under their own client record."""
    return {"data": await bookings.create(caller, body)}


crud_router(
    BOOKINGS,
    None,
    BookingUpdate,
    operations={"get", "update", "delete"},
    router=bookings_router,
)

clients_router = crud_router(CLIENTS, ClientCreate, ClientUpdate)
payments_router = crud_router(PAYMENTS, PaymentCreate, PaymentUpdate)
tasks_router = crud_router(TASKS, TaskCreate, TaskUpdate)
