"""Validators for pricing tables. Pure functions, no infrastructure or DB access."""

from typing import Dict, List, Optional, Sequence, Set

from rentdesk.domain.exceptions import InvalidPricingTableError
from rentdesk.domain.schemas.pricing import DurationRange, Season

# Leap-year month lengths: season tables cover a 366-day year.
_DAYS_IN_MONTH = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
DAYS_IN_YEAR = 366


def day_of_year(mmdd: str) -> int:
    """'MM-DD' -> 1..366 on a leap-year calendar."""
    month, day = (int(part) for part in mmdd.split("-"))
    return sum(_DAYS_IN_MONTH[: month - 1]) + day


def season_days(start: str, end: str) -> List[int]:
    """Days covered by a season; start after end wraps over New Year."""
    first = day_of_year(start)
    last = day_of_year(end)
    if first <= last:
        return list(range(first, last + 1))
    return list(range(first, DAYS_IN_YEAR + 1)) + list(range(1, last + 1))


def _fail(message: str) -> None:
    raise InvalidPricingTableError(message, details=[{"field": "ranges", "message": message}])


def validate_duration_ranges(ranges: Sequence[DurationRange]) -> List[DurationRange]:
    """
    Ranges sorted by min_days must start at 1, leave no gap and not overlap.
    Only the last range may be open-ended. Returns the sorted ranges.
    """
    if not ranges:
        _fail("At least one duration range is required")
    ordered = sorted(ranges, key=lambda r: r.min_days)
    if ordered[0].min_days != 1:
        _fail("Duration ranges must start from 1 day")
    for current, following in zip(ordered, ordered[1:]):
        if current.max_days is None:
            _fail(f'"{current.name}" has unlimited max days but is not the last range')
        if following.min_days > current.max_days + 1:
            _fail(f'Gap detected between "{current.name}" and "{following.name}"')
        if following.min_days <= current.max_days:
            _fail(f'Overlap detected between "{current.name}" and "{following.name}"')
    return ordered


def validate_seasons(seasons: Sequence[Season]) -> None:
    """Every day of the year belongs to exactly one season."""
    if not seasons:
        _fail("At least one season is required")
    owner: Dict[int, str] = {}
    for season in seasons:
        for day in season_days(season.start_date, season.end_date):
            if day in owner:
                _fail(f'Date overlap detected between "{season.name}" and "{owner[day]}"')
            owner[day] = season.name
    covered: Set[int] = set(owner)
    missing = [day for day in range(1, DAYS_IN_YEAR + 1) if day not in covered]
    if missing:
        _fail(
            f"Gap detected in year coverage. {len(missing)} days are not assigned to any season."
        )


def duration_coefficient(ranges: Sequence[DurationRange], days: int) -> float:
    for r in ranges:
        if r.min_days <= days and (r.max_days is None or days <= r.max_days):
            return r.price_coefficient
    return 1.0


def season_coefficient(seasons: Sequence[Season], mmdd: str) -> float:
    day = day_of_year(mmdd)
    for season in seasons:
        if day in season_days(season.start_date, season.end_date):
            return season.price_coefficient
    return 1.0


def quote_price(
    base_price_per_day: float,
    days: int,
    start_mmdd: str,
    ranges: Optional[Sequence[DurationRange]] = None,
    seasons: Optional[Sequence[Season]] = None,
) -> float:
    """Base daily price x days x duration coefficient x season coefficient of the start day."""
    coefficient = duration_coefficient(ranges or [], days) * season_coefficient(seasons or [], start_mmdd)
    return round(base_price_per_day * days * coefficient, 2)
