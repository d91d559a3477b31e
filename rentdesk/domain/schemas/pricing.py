"""Pydantic schemas for pricing tables: rental duration ranges and seasons."""

import re
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

_MMDD = re.compile(r"^(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")
_MONTH_LENGTH = {1: 31, 2: 29, 3: 31, 4: 30, 5: 31, 6: 30, 7: 31, 8: 31, 9: 30, 10: 31, 11: 30, 12: 31}


class DurationRange(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    min_days: int = Field(..., ge=1)
    max_days: Optional[int] = Field(None, ge=1, description="None means open-ended")
    price_coefficient: float = Field(1.0, gt=0)

    @model_validator(mode="after")
    def max_not_below_min(self) -> "DurationRange":
        if self.max_days is not None and self.max_days < self.min_days:
            raise ValueError("max_days must be greater than or equal to min_days")
        return self


class Season(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    start_date: str = Field(..., description="MM-DD")
    end_date: str = Field(..., description="MM-DD")
    price_coefficient: float = Field(1.0, gt=0)

    @field_validator("start_date", "end_date")
    @classmethod
    def must_be_month_day(cls, v: str) -> str:
        v = v.strip()
        match = _MMDD.match(v)
        if not match:
            raise ValueError("must be a MM-DD date")
        month, day = int(match.group(1)), int(match.group(2))
        if day > _MONTH_LENGTH[month]:
            raise ValueError("day is out of range for month")
        return v


class DurationRangesUpdate(BaseModel):
    ranges: List[DurationRange]


class SeasonsUpdate(BaseModel):
    seasons: List[Season]


class QuoteRequest(BaseModel):
    company_car_id: int = Field(..., ge=1)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def end_after_start(self) -> "QuoteRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class QuoteResponse(BaseModel):
    company_car_id: int
    days: int
    price_per_day: float
    duration_coefficient: float
    season_coefficient: float
    total: float
