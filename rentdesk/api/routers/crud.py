"""Router factory for the list/get/create/update/delete surface every entity shares."""

from typing import Annotated, Optional, Set, Type

from fastapi import APIRouter, Body, Depends, status
from pydantic import BaseModel

from rentdesk.api.dependencies import CurrentCaller, entity_service, get_list_params
from rentdesk.application.entity_service import EntityDefinition, EntityService
from rentdesk.domain.schemas.common import ListParams

ALL_OPERATIONS = frozenset({"list", "get", "create", "update", "delete"})


def crud_router(
    definition: EntityDefinition,
    create_schema: Optional[Type[BaseModel]],
    update_schema: Optional[Type[BaseModel]],
    id_type: type = int,
    operations: Set[str] = ALL_OPERATIONS,
    router: Optional[APIRouter] = None,
) -> APIRouter:
    """Adds the operations to router (a new one when omitted). Custom routes must be added first."""
    router = router if router is not None else APIRouter()
    Service = Annotated[EntityService, Depends(entity_service(definition))]

    if "list" in operations:

        @router.get("")
        async def list_entities(
            caller: CurrentCaller,
            service: Service,
            params: Annotated[ListParams, Depends(get_list_params)],
        ):
            rows, total = await service.list(caller, params)
            return {"data": rows, "totalCount": total}

    if "get" in operations:

        @router.get("/{entity_id}")
        async def get_entity(entity_id: id_type, caller: CurrentCaller, service: Service):
            return {"data": await service.get(caller, entity_id)}

    if "create" in operations and create_schema is not None:

        @router.post("", status_code=status.HTTP_201_CREATED)
        async def create_entity(
            body: Annotated[create_schema, Body()],
            caller: CurrentCaller,
            service: Service,
        ):
            return {"data": await service.create(caller, body)}

    if "update" in operations and update_schema is not None:

        @router.put("/{entity_id}")
        async def update_entity(
            entity_id: id_type,
            body: Annotated[update_schema, Body()],
            caller: CurrentCaller,
            service: Service,
        ):
            return {"data": await service.update(caller, entity_id, body)}

    if "delete" in operations:

        @router.delete("/{entity_id}")
        async def delete_entity(entity_id: id_type, caller: CurrentCaller, service: Service):
            return {"data": await service.delete(caller, entity_id)}

    return router
