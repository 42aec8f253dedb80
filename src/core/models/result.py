"""Outcome of a single storage operation.

Workflows wrap storage calls in a `Result` so each caller states
explicitly whether a failure aborts the operation (`unwrap`) or is
logged and skipped.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from core.models.errors import MediaServiceError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None = None
    error: MediaServiceError | None = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def err(cls, error: MediaServiceError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def capture(func: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T]:
    """Run `func` and fold a MediaServiceError into an error Result.

    Anything that is not a MediaServiceError is a programming error and
    propagates.
    """
    try:
        return Result.ok(func(*args, **kwargs))
    except MediaServiceError as exc:
        return Result.err(exc)
