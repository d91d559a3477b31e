"""Pydantic schemas for companies, locations, districts and location seasons."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from rentdesk.domain.schemas.common import EMAIL_PATTERN
from rentdesk.domain.schemas.pricing import DurationRange, Season


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    owner_id: Optional[str] = None
    location_id: Optional[int] = Field(None, ge=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    is_active: bool = True


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    owner_id: Optional[str] = None
    location_id: Optional[int] = Field(None, ge=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    is_active: Optional[bool] = None


class CompanyRead(BaseModel):
    id: int
    name: str
    owner_id: Optional[str] = None
    location_id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    settings: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CompanySettings(BaseModel):
    """Shape of companies.settings. Unknown keys are kept as they are."""

    duration_ranges: List[DurationRange] = Field(default_factory=list)
    seasons: List[Season] = Field(default_factory=list)

    model_config = {"extra": "allow"}


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class LocationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class LocationRead(BaseModel):
    id: int
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DistrictCreate(BaseModel):
    location_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=100)
    price_per_day: Optional[float] = Field(None, ge=0)
    is_active: bool = True


class DistrictUpdate(BaseModel):
    location_id: Optional[int] = Field(None, ge=1)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price_per_day: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class DistrictRead(BaseModel):
    id: int
    location_id: int
    name: str
    price_per_day: Optional[float] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LocationSeasonRead(BaseModel):
    id: int
    location_id: int
    name: str
    start_date: str
    end_date: str
    price_coefficient: float

    model_config = {"from_attributes": True}
