"""Domain layer: value sets, schemas, validators, exceptions. Pure business logic only."""

from rentdesk.domain.exceptions import (
    DomainError,
    DomainValidationError,
    InvalidPricingTableError,
    InvalidStatusTransitionError,
)
from rentdesk.domain.models import CarStatus, ContractStatus, PaymentMethod, PaymentStatus, TaskStatus
from rentdesk.domain.validators import validate_duration_ranges, validate_seasons

__all__ = [
    "CarStatus",
    "ContractStatus",
    "DomainError",
    "DomainValidationError",
    "InvalidPricingTableError",
    "InvalidStatusTransitionError",
    "PaymentMethod",
    "PaymentStatus",
    "TaskStatus",
    "validate_duration_ranges",
    "validate_seasons",
]
