"""
Result type for remote-backed operations.

Separates "nothing is playing" (``NOT_AVAILABLE``) from "the call failed"
(``FAILED``) inside the library. The public facade collapses both to empty
domain values.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from musicbridge.enums import ResultStatus

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Found(value) | NotAvailable | Failed(reason).

    ``status_code`` is the HTTP status of the call that produced a non-found
    result, or 0 when no response was received.
    """

    status: ResultStatus
    value: Optional[T] = None
    reason: Optional[str] = None
    status_code: int = 0

    @classmethod
    def found(cls, value: T) -> "Result[T]":
        return cls(ResultStatus.FOUND, value=value)

    @classmethod
    def not_available(
        cls, reason: Optional[str] = None, status_code: int = 0
    ) -> "Result[T]":
        return cls(ResultStatus.NOT_AVAILABLE, reason=reason, status_code=status_code)

    @classmethod
    def failed(cls, reason: str, status_code: int = 0) -> "Result[T]":
        return cls(ResultStatus.FAILED, reason=reason, status_code=status_code)

    @property
    def is_found(self) -> bool:
        return self.status == ResultStatus.FOUND

    @property
    def is_failed(self) -> bool:
        return self.status == ResultStatus.FAILED

    def value_or(self, default: T) -> T:
        """Return the value when found, ``default`` otherwise."""
        return self.value if self.is_found else default
