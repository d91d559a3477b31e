"""Domain validators. Pure validation functions."""

from rentdesk.domain.validators.pricing_validator import (
    day_of_year,
    quote_price,
    season_days,
    validate_duration_ranges,
    validate_seasons,
)

__all__ = [
    "day_of_year",
    "quote_price",
    "season_days",
    "validate_duration_ranges",
    "validate_seasons",
]
