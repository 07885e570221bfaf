"""Alias generation strategies.

Each definition type maps to exactly one generator class. A generator only
produces candidates; checking them against the reverse mapping is the alias
store's job.
"""
from abc import ABC, abstractmethod

import redis

from aliases.core.exceptions import DefinitionValidationError
from aliases.db import repository
from aliases.utils.encoding import encode_decimal, random_string, random_uuid

RAND = "rand"
UUID = "uuid"
SEQ = "seq"

TYPES = (RAND, UUID, SEQ)


class Generator(ABC):
    # Whether two calls can ever produce the same candidate.
    collision_free = False

    @abstractmethod
    def generate(self, conn: redis.Redis) -> str:
        """Return the next candidate alias."""


class UUIDGenerator(Generator):

    def generate(self, conn: redis.Redis) -> str:
        return random_uuid()


class RandomGenerator(Generator):

    def __init__(self, chars: str, minlen: int, prefix: str = ""):
        self.chars = chars
        self.minlen = minlen
        self.prefix = prefix

    def generate(self, conn: redis.Redis) -> str:
        return f"{self.prefix}{random_string(self.chars, self.minlen)}"


class SequentialGenerator(Generator):
    collision_free = True

    def __init__(self, def_id: int):
        self.def_id = def_id

    def generate(self, conn: redis.Redis) -> str:
        return encode_decimal(repository.incr_sequence(conn, self.def_id))


def make_generator(definition) -> Generator:
    if definition.type == UUID:
        return UUIDGenerator()
    if definition.type == RAND:
        return RandomGenerator(definition.chars, definition.minlen, definition.prefix)
    if definition.type == SEQ:
        return SequentialGenerator(definition.id)
    raise DefinitionValidationError(f"unknown type '{definition.type}'")
