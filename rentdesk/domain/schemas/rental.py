"""Pydantic schemas for clients, contracts, bookings, payments and tasks (all tenant-bound)."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from rentdesk.domain.models.rental import (
    BookingStatus,
    ContractStatus,
    PaymentMethod,
    PaymentStatus,
    TaskStatus,
)
from rentdesk.domain.schemas.common import EMAIL_PATTERN


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

class ClientCreate(BaseModel):
    company_id: Optional[int] = Field(None, ge=1)
    user_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    surname: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=3, max_length=50)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    passport_number: Optional[str] = Field(None, max_length=50)
    citizenship: Optional[str] = Field(None, max_length=100)


class ClientUpdate(BaseModel):
    user_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    surname: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    passport_number: Optional[str] = Field(None, max_length=50)
    citizenship: Optional[str] = Field(None, max_length=100)


class ClientRead(BaseModel):
    id: int
    company_id: int
    user_id: Optional[str] = None
    name: str
    surname: str
    phone: str
    email: Optional[str] = None
    passport_number: Optional[str] = None
    citizenship: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------

class ContractCreate(BaseModel):
    company_id: Optional[int] = Field(None, ge=1)
    client_id: int = Field(..., ge=1)
    company_car_id: int = Field(..., ge=1)
    manager_id: Optional[str] = None
    start_date: datetime
    end_date: datetime
    total_amount: float = Field(0, ge=0)
    deposit_amount: float = Field(0, ge=0)
    status: ContractStatus = ContractStatus.ACTIVE
    notes: Optional[str] = None

    @model_validator(mode="after")
    def end_after_start(self) -> "ContractCreate":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ContractUpdate(BaseModel):
    client_id: Optional[int] = Field(None, ge=1)
    company_car_id: Optional[int] = Field(None, ge=1)
    manager_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    total_amount: Optional[float] = Field(None, ge=0)
    deposit_amount: Optional[float] = Field(None, ge=0)
    status: Optional[ContractStatus] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def end_after_start(self) -> "ContractUpdate":
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ContractRead(BaseModel):
    id: int
    company_id: int
    client_id: int
    company_car_id: int
    manager_id: Optional[str] = None
    start_date: datetime
    end_date: datetime
    total_amount: float
    deposit_amount: float
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ClosingFee(BaseModel):
    """Extra charge raised when a contract is closed (fuel, damage, late return...)."""

    description: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0)


class ContractCloseRequest(BaseModel):
    fees: List[ClosingFee] = Field(default_factory=list)
    mileage: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class ContractCloseResponse(BaseModel):
    contract: ContractRead
    pending_payment_ids: List[int] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------

class BookingCreate(BaseModel):
    """client_id is ignored for client callers; their own client record at the car's company is used."""

    client_id: Optional[int] = Field(None, ge=1)
    company_car_id: int = Field(..., ge=1)
    start_date: date
    end_date: date
    notes: Optional[str] = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> "BookingCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BookingUpdate(BaseModel):
    status: Optional[BookingStatus] = None
    notes: Optional[str] = None


class BookingRead(BaseModel):
    id: int
    company_id: int
    client_id: int
    company_car_id: int
    start_date: date
    end_date: date
    total_amount: float
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------

class PaymentCreate(BaseModel):
    company_id: Optional[int] = Field(None, ge=1)
    contract_id: int = Field(..., ge=1)
    amount: float = Field(..., gt=0)
    payment_method: PaymentMethod = PaymentMethod.CASH
    status: PaymentStatus = PaymentStatus.PAID
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    payment_method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class PaymentRead(BaseModel):
    id: int
    company_id: int
    contract_id: int
    amount: float
    payment_method: str
    status: str
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

class TaskCreate(BaseModel):
    company_id: Optional[int] = Field(None, ge=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None


class TaskRead(BaseModel):
    id: int
    company_id: int
    title: str
    description: Optional[str] = None
    status: str
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
