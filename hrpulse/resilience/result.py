"""Success-or-failure values returned at sub-query boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one sub-query: either a value or the exception that replaced it."""

    value: T | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> Result[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def reason(self) -> str | None:
        """Failure reason (exception class name), None on success."""
        return None if self.error is None else type(self.error).__name__

    def unwrap_or(self, default: T) -> T:
        """Return the value on success, otherwise default."""
        if self.error is None:
            return self.value  # type: ignore[return-value]
        return default
