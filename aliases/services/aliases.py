"""Identifier to alias assignment.

Every identifier is resolved in input order. Uniqueness of generated aliases
within a definition rests on ``repository.reserve_alias``: the write of the
forward and reverse keys only commits if neither key changed since it was
checked, so concurrent callers need no lock between them.
"""
import logging
from typing import Iterable, List, Optional, Tuple

import redis

from aliases.core.config import settings
from aliases.core.exceptions import EmptyAlias, MaxAttemptsReached, backend_call
from aliases.db import repository
from aliases.db.repository import Removal, Reservation
from aliases.db.Models.models import Definition
from aliases.schemas.DeleteResult import DeleteResult
from aliases.schemas.IdentAlias import IdentAlias, Status

logger = logging.getLogger(__name__)


class AliasService:

    @staticmethod
    def assign(conn: redis.Redis, definition: Definition, idents: Iterable[str], max_attempts: Optional[int] = None) -> List[IdentAlias]:
        """Return the alias of each identifier, generating missing ones.

        Empty identifiers are left untouched with no status. The batch stops
        at the first identifier that fails; aliases committed before it stay.
        """
        if max_attempts is None:
            max_attempts = settings.MAX_ATTEMPTS
        results = [IdentAlias(ident=ident) for ident in idents]

        with backend_call("assign"):
            for item in results:
                if not item.ident:
                    continue

                alias = repository.get_alias(conn, definition.id, item.ident)
                if alias is not None:
                    item.alias, item.status = alias, Status.EXISTS
                    continue

                item.alias, item.status = AliasService._generate(conn, definition, item.ident, max_attempts)

        return results

    @staticmethod
    def _generate(conn: redis.Redis, definition: Definition, ident: str, max_attempts: int) -> Tuple[str, Status]:
        generator = definition.generator

        for attempt in range(1, max_attempts + 1):
            candidate = generator.generate(conn)
            outcome, alias = repository.reserve_alias(conn, definition.id, ident, candidate)

            if outcome is Reservation.COMMITTED:
                if attempt > 1:
                    logger.debug("Alias for '%s' in '%s' took %d attempts", ident, definition.name, attempt)
                return alias, Status.CREATED

            if outcome is Reservation.EXISTS:
                return alias, Status.EXISTS

            if outcome is Reservation.TAKEN and generator.collision_free:
                logger.warning(f"Generated alias '{candidate}' in '{definition.name}' was already set explicitly")
            else:
                logger.debug("Candidate '%s' for '%s' in '%s': %s", candidate, ident, definition.name, outcome.value)

        # The configured character set or length is too small for the number
        # of aliases already issued.
        logger.warning(f"max attempts reached for '{ident}' in '{definition.name}'")
        raise MaxAttemptsReached(ident, max_attempts)

    @staticmethod
    def lookup(conn: redis.Redis, definition: Definition, idents: Iterable[str]) -> List[IdentAlias]:
        results = [IdentAlias(ident=ident) for ident in idents]

        with backend_call("lookup"):
            for item in results:
                alias = repository.get_alias(conn, definition.id, item.ident)
                if alias is None:
                    item.status = Status.MISSING
                else:
                    item.alias, item.status = alias, Status.EXISTS

        return results

    @staticmethod
    def put(conn: redis.Redis, definition: Definition, items: Iterable[IdentAlias]) -> int:
        """Explicitly set aliases, bypassing generation and uniqueness checks.

        Last writer wins. Returns the number of identifiers written.
        """
        items = list(items)
        for item in items:
            if not item.alias:
                raise EmptyAlias(item.ident)

        stored = skipped = retries = 0

        with backend_call("put"):
            for item in items:
                if not item.ident:
                    skipped += 1
                    continue

                retries += repository.store_alias(conn, definition.id, item.ident, item.alias)
                stored += 1

        logger.info(f"put {stored} keys in '{definition.name}' ({skipped} skipped, {retries} retried)")
        return stored

    @staticmethod
    def delete(conn: redis.Redis, definition: Definition, idents: Iterable[str]) -> DeleteResult:
        result = DeleteResult()

        with backend_call("delete"):
            for ident in idents:
                if not ident:
                    result.skipped += 1
                    continue

                outcome = repository.remove_alias(conn, definition.id, ident)
                if outcome is Removal.REMOVED:
                    result.removed += 1
                elif outcome is Removal.MISSING:
                    result.skipped += 1
                else:
                    result.conflicts += 1

        logger.info(
            f"deleted from '{definition.name}': {result.removed} removed, "
            f"{result.skipped} skipped, {result.conflicts} conflicts"
        )
        return result
