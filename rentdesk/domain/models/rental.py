"""Closed value sets of the rental domain and the contract lifecycle. No ORM."""

from enum import Enum
from typing import Dict, FrozenSet

from rentdesk.domain.exceptions import InvalidStatusTransitionError


class CarStatus(str, Enum):
    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"
    BOOKED = "booked"


class ContractStatus(str, Enum):
    """Contracts start active and end completed or cancelled. Both end states are final."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class BookingStatus(str, Enum):
    """Bookings wait as pending until staff confirm or cancel them."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class Transmission(str, Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"


_CONTRACT_TRANSITIONS: Dict[ContractStatus, FrozenSet[ContractStatus]] = {
    ContractStatus.ACTIVE: frozenset({ContractStatus.COMPLETED, ContractStatus.CANCELLED}),
    ContractStatus.COMPLETED: frozenset(),
    ContractStatus.CANCELLED: frozenset(),
}


def validate_contract_transition(current: ContractStatus, new: ContractStatus) -> None:
    """Raises InvalidStatusTransitionError if the contract cannot move from current to new."""
    if new not in _CONTRACT_TRANSITIONS.get(current, frozenset()):
        raise InvalidStatusTransitionError(
            f"Contract is already {current.value} and cannot be {new.value}"
        )
