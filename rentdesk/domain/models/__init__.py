"""Domain models. Closed value sets and lifecycle rules."""

from rentdesk.domain.models.rental import (
    CarStatus,
    ContractStatus,
    PaymentMethod,
    PaymentStatus,
    TaskStatus,
    Transmission,
    validate_contract_transition,
)

__all__ = [
    "CarStatus",
    "ContractStatus",
    "PaymentMethod",
    "PaymentStatus",
    "TaskStatus",
    "Transmission",
    "validate_contract_transition",
]
