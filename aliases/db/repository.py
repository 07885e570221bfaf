from enum import Enum
from typing import List, Optional, Tuple
import logging

import redis

logger = logging.getLogger(__name__)

# Global counter used to allocate definition ids.
DEFINITION_ID_KEY = "_:def:id"

ALIAS_MARKER = 1


def name_key(name: str) -> str:
    return f"d:{name}"

def value_key(def_id: int) -> str:
    return f"v:{def_id}"

def sequence_key(def_id: int) -> str:
    return f"s:{def_id}"

# Identifier and alias keys are scoped by the definition id.
def forward_key(def_id: int, ident: str) -> str:
    return f"k:{def_id}:{ident}"

def reverse_key(def_id: int, alias: str) -> str:
    return f"a:{def_id}:{alias}"


class Reservation(Enum):
    COMMITTED = "committed"
    # The identifier was assigned by someone else in the meantime.
    EXISTS = "exists"
    # The candidate is already held by another identifier.
    TAKEN = "taken"
    # A watched key changed before EXEC; the candidate counts as consumed.
    CONFLICT = "conflict"


class Removal(Enum):
    REMOVED = "removed"
    MISSING = "missing"
    CONFLICT = "conflict"


# --- Definitions ---

def name_exists(conn: redis.Redis, name: str) -> bool:
    return bool(conn.exists(name_key(name)))

def get_definition_id(conn: redis.Redis, name: str) -> Optional[str]:
    return conn.get(name_key(name))

def get_definition_value(conn: redis.Redis, def_id) -> Optional[str]:
    return conn.get(value_key(def_id))

def next_definition_id(conn: redis.Redis) -> int:
    return int(conn.incr(DEFINITION_ID_KEY))

def insert_definition(conn: redis.Redis, name: str, def_id: int, value: str, sequence_start: Optional[int] = None) -> bool:
    mapping = {
        name_key(name): def_id,
        value_key(def_id): value,
    }
    if sequence_start is not None:
        mapping[sequence_key(def_id)] = sequence_start

    # MSETNX writes every key or none; it refuses when the name got bound
    # after the caller's existence check.
    return bool(conn.msetnx(mapping))

def save_definition(conn: redis.Redis, name: str, def_id: int, value: str):
    conn.mset({name_key(name): def_id, value_key(def_id): value})

def unbind_name(conn: redis.Redis, name: str):
    conn.delete(name_key(name))

def retire_definition(conn: redis.Redis, name: str, def_id: int, value: str):
    with conn.pipeline(transaction=True) as pipe:
        pipe.delete(name_key(name))
        pipe.set(value_key(def_id), value)
        pipe.execute()

def seed_sequence(conn: redis.Redis, def_id: int, start: int) -> bool:
    return bool(conn.setnx(sequence_key(def_id), start))

def incr_sequence(conn: redis.Redis, def_id: int) -> int:
    return int(conn.incr(sequence_key(def_id)))

def list_definition_values(conn: redis.Redis) -> List[str]:
    keys = list(conn.scan_iter(match="v:*"))
    if not keys:
        return []
    return [value for value in conn.mget(keys) if value is not None]


# --- Aliases ---

def get_alias(conn: redis.Redis, def_id: int, ident: str) -> Optional[str]:
    return conn.get(forward_key(def_id, ident))

def reserve_alias(conn: redis.Redis, def_id: int, ident: str, alias: str) -> Tuple[Reservation, str]:
    """Claim ``alias`` for ``ident`` unless either key changes under us.

    Returns the outcome and the alias now held by the identifier, which
    differs from ``alias`` only for ``Reservation.EXISTS``.
    """
    forward = forward_key(def_id, ident)
    reverse = reverse_key(def_id, alias)

    with conn.pipeline() as pipe:
        try:
            pipe.watch(forward, reverse)

            current = pipe.get(forward)
            if current is not None:
                return Reservation.EXISTS, current

            if pipe.exists(reverse):
                return Reservation.TAKEN, alias

            pipe.multi()
            pipe.set(forward, alias)
            pipe.set(reverse, ALIAS_MARKER)
            pipe.execute()
        except redis.WatchError:
            logger.debug("Watched keys changed while reserving %s for %s", alias, forward)
            return Reservation.CONFLICT, alias

    return Reservation.COMMITTED, alias

def store_alias(conn: redis.Redis, def_id: int, ident: str, alias: str) -> int:
    """Unconditionally map ``ident`` to ``alias``.

    A previous alias of the identifier loses its reverse marker in the same
    transaction. When another writer changes the identifier between the read
    and the commit, the previous alias is read again and the write retried,
    so the last caller to commit wins. Returns the number of retries.
    """
    forward = forward_key(def_id, ident)
    retries = 0

    with conn.pipeline() as pipe:
        while True:
            try:
                pipe.watch(forward)
                previous = pipe.get(forward)

                pipe.multi()
                pipe.set(forward, alias)
                pipe.set(reverse_key(def_id, alias), ALIAS_MARKER)
                if previous is not None and previous != alias:
                    pipe.delete(reverse_key(def_id, previous))
                pipe.execute()
                return retries
            except redis.WatchError:
                retries += 1
                logger.debug("Forward key %s changed while storing %s, retrying", forward, alias)

def remove_alias(conn: redis.Redis, def_id: int, ident: str) -> Removal:
    forward = forward_key(def_id, ident)

    with conn.pipeline() as pipe:
        try:
            pipe.watch(forward)
            alias = pipe.get(forward)
            if alias is None:
                return Removal.MISSING

            pipe.multi()
            pipe.delete(forward, reverse_key(def_id, alias))
            pipe.execute()
        except redis.WatchError:
            return Removal.CONFLICT

    return Removal.REMOVED
