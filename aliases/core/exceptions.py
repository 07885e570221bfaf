from contextlib import contextmanager

import redis.exceptions


class AliasesError(Exception):
    """Base class for errors raised by the alias engine."""


class DefinitionValidationError(AliasesError, ValueError):
    pass


class DefinitionExists(AliasesError):
    def __init__(self, name: str):
        super().__init__(f"definition '{name}' already exists")
        self.name = name


class DefinitionNotFound(AliasesError):
    def __init__(self, name: str):
        super().__init__(f"definition '{name}' not found")
        self.name = name


class CorruptDefinition(AliasesError):
    """A stored definition value is missing or cannot be decoded.

    This is never a user error: the name index points at a value that the
    registry itself wrote, so the store is internally inconsistent.
    """


class EmptyAlias(AliasesError, ValueError):
    def __init__(self, ident: str):
        super().__init__(f"empty alias for '{ident}'")
        self.ident = ident


class BodyParseError(AliasesError, ValueError):
    pass


class MaxAttemptsReached(AliasesError):
    def __init__(self, ident: str, attempts: int):
        super().__init__(f"max attempts reached for '{ident}' after {attempts} candidates")
        self.ident = ident
        self.attempts = attempts


class BackendError(AliasesError):
    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation}: {cause}")
        self.operation = operation


@contextmanager
def backend_call(operation: str):
    """Wrap redis errors raised inside the block as BackendError."""
    try:
        yield
    except redis.exceptions.RedisError as e:
        raise BackendError(operation, e) from e
