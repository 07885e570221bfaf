from fastapi import APIRouter, Depends, Response, status
from typing import List
import logging
import redis

from aliases.db.Connection import database
from aliases.db.Models.models import Definition
from aliases.schemas.DefinitionRequest import DefinitionRequest
from aliases.services.definitions import DefinitionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/defs", tags=["definitions"])


@router.get("", response_model=List[Definition])
def list_definitions_endpoint(conn: redis.Redis = Depends(database.get_redis)):
    """All stored definitions, including soft-deleted ones."""
    return DefinitionService.list(conn)


@router.post("", response_model=Definition, status_code=status.HTTP_201_CREATED)
def create_definition_endpoint(payload: DefinitionRequest, conn: redis.Redis = Depends(database.get_redis)):
    # Unset fields fall back to the model defaults (rand charset and length).
    definition = Definition(**payload.changes())
    return DefinitionService.create(conn, definition)


@router.get("/{name}", response_model=Definition)
def get_definition_endpoint(name: str, conn: redis.Redis = Depends(database.get_redis)):
    return DefinitionService.get(conn, name)


@router.put("/{name}", response_model=Definition)
def update_definition_endpoint(name: str, payload: DefinitionRequest, conn: redis.Redis = Depends(database.get_redis)):
    """Merge the supplied fields over the stored definition."""
    current = DefinitionService.get(conn, name)
    merged = Definition.model_validate({**current.model_dump(), **payload.changes()})
    return DefinitionService.update(conn, name, merged)


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
def delete_definition_endpoint(name: str, conn: redis.Redis = Depends(database.get_redis)):
    DefinitionService.delete(conn, name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
