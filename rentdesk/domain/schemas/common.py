"""Shared request/response shapes: list parameters and envelopes."""

import json
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
MAX_PAGE_SIZE = 100


class ListParams(BaseModel):
    """page is 1-based; filters arrives as a JSON object string on the query string."""

    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1)
    sort_by: str = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    filters: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("page_size")
    @classmethod
    def cap_page_size(cls, v: int) -> int:
        return min(v, MAX_PAGE_SIZE)

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @field_validator("filters", mode="before")
    @classmethod
    def parse_filters(cls, v: Any) -> Any:
        if v is None or v == "":
            return {}
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except ValueError as e:
                raise ValueError("filters must be a JSON object") from e
        if not isinstance(v, dict):
            raise ValueError("filters must be a JSON object")
        return v

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def descending(self) -> bool:
        return self.sort_order == "desc"


class Page(BaseModel, Generic[T]):
    data: List[T]
    totalCount: int


class Envelope(BaseModel, Generic[T]):
    data: T


class Deleted(BaseModel):
    success: bool = True
    id: Optional[Any] = None
