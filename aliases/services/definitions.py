import logging
import re
from typing import List

import redis
from pydantic import ValidationError

from aliases.core.config import settings
from aliases.core.exceptions import (
    CorruptDefinition,
    DefinitionExists,
    DefinitionNotFound,
    DefinitionValidationError,
    backend_call,
)
from aliases.db import repository
from aliases.db.Models.models import Definition
from aliases.services.generators import RAND, SEQ, TYPES

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


def _decode(value: str, label) -> Definition:
    try:
        return Definition.model_validate_json(value)
    except ValidationError as e:
        logger.error(f"Stored definition {label} cannot be decoded: {e}")
        raise CorruptDefinition(f"definition {label} cannot be decoded") from e


class DefinitionService:

    @staticmethod
    def validate(definition: Definition):
        if not definition.name:
            raise DefinitionValidationError("name required")

        if not NAME_PATTERN.match(definition.name):
            raise DefinitionValidationError("name may only contain [A-Za-z0-9._-] chars")

        if not definition.type:
            raise DefinitionValidationError("type required")

        if definition.type not in TYPES:
            raise DefinitionValidationError(f"unknown type '{definition.type}'")

        if definition.type == RAND:
            if definition.minlen < settings.RAND_MIN_LENGTH:
                raise DefinitionValidationError(
                    f"rand min length too small (minimum {settings.RAND_MIN_LENGTH})"
                )
            if len(definition.chars) < settings.RAND_MIN_CHARS:
                raise DefinitionValidationError(
                    f"too few chars for rand (minimum {settings.RAND_MIN_CHARS})"
                )

    @staticmethod
    def create(conn: redis.Redis, definition: Definition) -> Definition:
        """Register a new definition under a freshly allocated id.

        The name binding, the value and, for ``seq``, the counter seeded at
        ``offset`` are written in one atomic batch.
        """
        DefinitionService.validate(definition)

        with backend_call("create definition"):
            if repository.name_exists(conn, definition.name):
                raise DefinitionExists(definition.name)

            # Ids are never handed out twice, even if the insert below fails.
            def_id = repository.next_definition_id(conn)
            created = Definition.model_validate({**definition.model_dump(), "id": def_id, "deleted": False})

            sequence_start = created.offset if created.type == SEQ else None
            if not repository.insert_definition(conn, created.name, def_id, created.model_dump_json(), sequence_start):
                raise DefinitionExists(created.name)

        logger.info(f"created def '{created.name}' (id={def_id})")
        return created

    @staticmethod
    def get(conn: redis.Redis, name: str) -> Definition:
        with backend_call("get definition"):
            def_id = repository.get_definition_id(conn, name)
            if def_id is None:
                raise DefinitionNotFound(name)
            value = repository.get_definition_value(conn, def_id)

        if value is None:
            logger.error(f"Name '{name}' is bound to id {def_id} but no value is stored")
            raise CorruptDefinition(f"missing value for definition '{name}' (id={def_id})")

        definition = _decode(value, f"'{name}' (id={def_id})")
        if definition.deleted:
            raise DefinitionNotFound(name)
        return definition

    @staticmethod
    def update(conn: redis.Redis, name: str, definition: Definition) -> Definition:
        """Replace the configuration of ``name``, keeping its id.

        Renaming unbinds the old name before binding the new one; in between
        the definition is only reachable by id.
        """
        DefinitionService.validate(definition)
        current = DefinitionService.get(conn, name)

        updated = Definition.model_validate({**definition.model_dump(), "id": current.id, "deleted": False})

        with backend_call("update definition"):
            if updated.name != name:
                if repository.name_exists(conn, updated.name):
                    raise DefinitionExists(updated.name)
                repository.unbind_name(conn, name)

            repository.save_definition(conn, updated.name, updated.id, updated.model_dump_json())

            # A definition switched to seq starts counting at its offset;
            # an existing counter is never reset.
            if updated.type == SEQ:
                repository.seed_sequence(conn, updated.id, updated.offset)

        logger.info(f"updated def '{updated.name}' (id={updated.id})")
        return updated

    @staticmethod
    def delete(conn: redis.Redis, name: str):
        current = DefinitionService.get(conn, name)
        retired = Definition.model_validate({**current.model_dump(), "deleted": True})

        with backend_call("delete definition"):
            repository.retire_definition(conn, name, current.id, retired.model_dump_json())

        logger.info(f"deleted def '{name}' (id={current.id})")

    @staticmethod
    def list(conn: redis.Redis) -> List[Definition]:
        with backend_call("list definitions"):
            values = repository.list_definition_values(conn)

        definitions = [_decode(value, "in listing") for value in values]
        return sorted(definitions, key=lambda d: d.id)
