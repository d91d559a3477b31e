# Application layer: services that orchestrate domain, security, governance and infrastructure.

from rentdesk.application.caller import Caller
from rentdesk.application.entity_service import EntityDefinition, EntityService
from rentdesk.application.exceptions import (
    ApplicationError,
    ConflictError,
    EntityNotFoundError,
    ProvisioningError,
    StoreError,
)
from rentdesk.application.saga import Saga, SagaStep

__all__ = [
    "ApplicationError",
    "Caller",
    "ConflictError",
    "EntityDefinition",
    "EntityNotFoundError",
    "EntityService",
    "ProvisioningError",
    "Saga",
    "SagaStep",
    "StoreError",
]
