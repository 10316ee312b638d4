from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

from roybot.db.exceptions import RepositoryError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a repository call: a value on success, a typed error otherwise."""

    success: bool
    value: Optional[T] = None
    error: Optional[RepositoryError] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: RepositoryError) -> "Result[T]":
        return cls(success=False, error=error)

    def unwrap(self) -> Optional[T]:
        """Return the value, or raise the carried error."""
        if not self.success:
            raise self.error
        return self.value

    def to_payload(self, key: str = "id") -> Dict[str, Any]:
        if self.success:
            return {key: self.value, "success": True}
        return {"success": False, "error": self.error.message}
