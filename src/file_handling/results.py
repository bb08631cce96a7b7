"""Result types returned by every file manager operation."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from .errors import ContainerNameError, MissingContainerError, StorageError

T = TypeVar("T")


class FailureKind(str, Enum):
    """Machine readable cause of a failed operation."""
    MISSING_CONTAINER = "missing_container"
    INVALID_CONTAINER = "invalid_container"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    IO_ERROR = "io_error"
    BACKEND_ERROR = "backend_error"


class StorageFailure(BaseModel):
    """Structured cause carried by a failed result."""
    kind: FailureKind
    message: str
    exception_type: Optional[str] = None   # e.g. "PermissionError"
    key: Optional[str] = None              # storage key, when one was derived

    @classmethod
    def from_exception(
        cls, exc: BaseException, kind: Optional[FailureKind] = None, key: Optional[str] = None
    ) -> "StorageFailure":
        """Build a failure from an exception, inferring the kind when not given."""
        if kind is None:
            kind = classify_exception(exc)
        return cls(
            kind=kind,
            message=str(exc) or type(exc).__name__,
            exception_type=type(exc).__name__,
            key=key,
        )


def classify_exception(exc: BaseException) -> FailureKind:
    """Map an exception raised below a manager to a failure kind."""
    if isinstance(exc, MissingContainerError):
        return FailureKind.MISSING_CONTAINER
    if isinstance(exc, ContainerNameError):
        return FailureKind.INVALID_CONTAINER
    if isinstance(exc, FileNotFoundError):
        return FailureKind.NOT_FOUND
    if isinstance(exc, OSError):
        return FailureKind.IO_ERROR
    if isinstance(exc, (ValueError, TypeError)):
        return FailureKind.INVALID_ARGUMENT
    return FailureKind.BACKEND_ERROR


@dataclass(frozen=True)
class RepositoryResult(Generic[T]):
    """Success with a value, or failure with a StorageFailure."""
    value: Optional[T] = None
    error: Optional[StorageFailure] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "RepositoryResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: StorageFailure) -> "RepositoryResult[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """
        Return the value or raise.

        Raises:
            StorageError: If the result is a failure
        """
        if self.error is not None:
            raise StorageError(self.error)
        return self.value
