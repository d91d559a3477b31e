"""Domain schemas. Request/response and validation."""

from rentdesk.domain.schemas.common import ListParams, Page
from rentdesk.domain.schemas.pricing import DurationRange, QuoteRequest, QuoteResponse, Season

__all__ = [
    "DurationRange",
    "ListParams",
    "Page",
    "QuoteRequest",
    "QuoteResponse",
    "Season",
]
