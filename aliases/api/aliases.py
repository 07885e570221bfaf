from fastapi import APIRouter, Depends, Header, Query, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from typing import List, Optional
import logging
import redis

from aliases.db.Connection import database
from aliases.db.Models.models import Definition
from aliases.schemas.DeleteResult import DeleteResult
from aliases.schemas.IdentAlias import IdentAlias
from aliases.services.aliases import AliasService
from aliases.services.definitions import DefinitionService
from aliases.utils import codecs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/defs/{name}/aliases", tags=["aliases"])


async def read_body(request: Request) -> bytes:
    return await request.body()


def load_definition(name: str, conn: redis.Redis = Depends(database.get_redis)) -> Definition:
    return DefinitionService.get(conn, name)


def _respond(mediatype: str, results: List[IdentAlias]) -> Response:
    if mediatype == codecs.APPLICATION_JSON:
        return JSONResponse(content=codecs.render_json(results))
    return PlainTextResponse(content=codecs.render_text(results))


@router.post("")
def generate_aliases_endpoint(
    ro: str = Query("", description="Any non-empty value only looks up existing aliases"),
    content_type: Optional[str] = Header(None),
    body: bytes = Depends(read_body),
    definition: Definition = Depends(load_definition),
    conn: redis.Redis = Depends(database.get_redis),
):
    """
    Return the alias of every identifier in the body, in order, generating
    the ones that do not have an alias yet.
    """
    mediatype = codecs.media_type(content_type)
    idents = codecs.parse_idents(mediatype, body)

    if ro:
        results = AliasService.lookup(conn, definition, idents)
    else:
        results = AliasService.assign(conn, definition, idents)

    return _respond(mediatype, results)


@router.put("", status_code=status.HTTP_204_NO_CONTENT)
def put_aliases_endpoint(
    content_type: Optional[str] = Header(None),
    body: bytes = Depends(read_body),
    definition: Definition = Depends(load_definition),
    conn: redis.Redis = Depends(database.get_redis),
):
    pairs = codecs.parse_pairs(codecs.media_type(content_type), body)
    AliasService.put(conn, definition, pairs)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", response_model=DeleteResult)
def delete_aliases_endpoint(
    content_type: Optional[str] = Header(None),
    body: bytes = Depends(read_body),
    definition: Definition = Depends(load_definition),
    conn: redis.Redis = Depends(database.get_redis),
):
    idents = codecs.parse_idents(codecs.media_type(content_type), body)
    return AliasService.delete(conn, definition, idents)
