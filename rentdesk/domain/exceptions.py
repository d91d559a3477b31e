"""Domain exceptions. Pure domain layer, no infrastructure."""

from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated. details: [{field, message}]."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.details = details

    @classmethod
    def for_field(cls, field: str, message: str) -> "DomainValidationError":
        return cls("Validation error", details=[{"field": field, "message": message}])


class InvalidPricingTableError(DomainValidationError):
    """Raised when duration ranges or seasons have gaps, overlaps or bad bounds."""


class InvalidStatusTransitionError(DomainError):
    """Raised when an entity status change is not allowed (e.g. closing a closed contract)."""
