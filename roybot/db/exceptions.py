from typing import Optional

from pydantic import ValidationError


class RepositoryError(Exception):
    """Base class for persistence failures. `message` is safe to show to clients."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        if cause is not None:
            self.__cause__ = cause


class DatabaseConnectionError(RepositoryError, ConnectionError):
    """The store could not be reached, or no pooled connection became available."""


class DatabaseError(RepositoryError):
    """A statement reached the store but failed (constraint, syntax, timeout)."""


class InvalidFieldError(RepositoryError):
    """Caller supplied fields outside an entity's whitelist, or invalid values."""

    def __init__(self, message: str, fields: tuple = ()):
        super().__init__(message)
        self.fields = tuple(fields)

    @classmethod
    def from_validation(cls, entity: str, exc: ValidationError) -> "InvalidFieldError":
        fields = tuple(
            ".".join(str(part) for part in error["loc"]) or "__root__"
            for error in exc.errors()
        )
        return cls(f"Invalid {entity} fields: {', '.join(fields)}", fields=fields)
