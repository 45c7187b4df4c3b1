"""
Uniform success/failure envelope returned by every engine operation.

Expected failures (404s, timeouts, bad input rows, storage errors) travel
as ``Result`` values tagged with an ``ErrorKind`` so callers can tell
"no data found" apart from "could not reach the data" and "invalid input".
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INFRASTRUCTURE = "infrastructure"
    NETWORK = "network"


@dataclass
class AppError:
    """Failure detail carried by a failed Result."""
    message: str
    code: str
    kind: ErrorKind = ErrorKind.INFRASTRUCTURE
    suggestions: list[str] = field(default_factory=list)
    status_code: Optional[int] = None  # HTTP status for network failures

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


@dataclass
class Result(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[AppError] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: AppError) -> "Result[T]":
        return cls(success=False, error=error)


def validation_error(
    message: str, code: str, suggestions: Optional[list[str]] = None,
) -> Result:
    return Result.fail(AppError(message, code, ErrorKind.VALIDATION, suggestions or []))


def not_found_error(
    message: str, code: str, suggestions: Optional[list[str]] = None,
) -> Result:
    return Result.fail(AppError(message, code, ErrorKind.NOT_FOUND, suggestions or []))


def infrastructure_error(
    message: str, code: str, suggestions: Optional[list[str]] = None,
) -> Result:
    return Result.fail(
        AppError(message, code, ErrorKind.INFRASTRUCTURE, suggestions or [])
    )


def network_error(
    message: str,
    code: str,
    suggestions: Optional[list[str]] = None,
    status_code: Optional[int] = None,
) -> Result:
    return Result.fail(
        AppError(message, code, ErrorKind.NETWORK, suggestions or [], status_code)
    )
