"""Pydantic schemas for the car template catalogue and company cars."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from rentdesk.domain.models.rental import CarStatus, Transmission


class CarTemplateCreate(BaseModel):
    brand: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    body_type: str = Field(..., min_length=1, max_length=50)
    seats: Optional[int] = Field(None, ge=1, le=60)
    doors: Optional[int] = Field(None, ge=1, le=10)
    transmission: Optional[Transmission] = None
    engine_volume: Optional[float] = Field(None, gt=0, le=20)


class CarTemplateUpdate(BaseModel):
    brand: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    body_type: Optional[str] = Field(None, min_length=1, max_length=50)
    seats: Optional[int] = Field(None, ge=1, le=60)
    doors: Optional[int] = Field(None, ge=1, le=10)
    transmission: Optional[Transmission] = None
    engine_volume: Optional[float] = Field(None, gt=0, le=20)


class CarTemplateRead(BaseModel):
    id: int
    brand: str
    model: str
    body_type: str
    seats: Optional[int] = None
    doors: Optional[int] = None
    transmission: Optional[str] = None
    engine_volume: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


def _normalize_plate(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = " ".join(v.split()).upper()
    if not v:
        raise ValueError("license_plate must not be empty")
    return v


class CompanyCarCreate(BaseModel):
    company_id: Optional[int] = Field(None, ge=1)
    car_template_id: int = Field(..., ge=1)
    license_plate: str = Field(..., min_length=1, max_length=20)
    year: Optional[int] = Field(None, ge=1950, le=2100)
    color: Optional[str] = Field(None, max_length=50)
    price_per_day: float = Field(..., gt=0)
    mileage: Optional[int] = Field(None, ge=0)
    status: CarStatus = CarStatus.AVAILABLE
    notes: Optional[str] = None

    @field_validator("license_plate")
    @classmethod
    def normalize_plate(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_plate(v)


class CompanyCarUpdate(BaseModel):
    car_template_id: Optional[int] = Field(None, ge=1)
    license_plate: Optional[str] = Field(None, min_length=1, max_length=20)
    year: Optional[int] = Field(None, ge=1950, le=2100)
    color: Optional[str] = Field(None, max_length=50)
    price_per_day: Optional[float] = Field(None, gt=0)
    mileage: Optional[int] = Field(None, ge=0)
    status: Optional[CarStatus] = None
    notes: Optional[str] = None

    @field_validator("license_plate")
    @classmethod
    def normalize_plate(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_plate(v)


class CompanyCarRead(BaseModel):
    id: int
    company_id: int
    car_template_id: int
    license_plate: str
    year: Optional[int] = None
    color: Optional[str] = None
    price_per_day: float
    mileage: Optional[int] = None
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CatalogCar(BaseModel):
    id: int
    company_id: int
    brand: str
    model: str
    body_type: str
    year: Optional[int] = None
    color: Optional[str] = None
    transmission: Optional[str] = None
    seats: Optional[int] = None
    price_per_day: float


Catalog = Dict[str, List[CatalogCar]]
