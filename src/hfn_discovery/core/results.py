"""Typed outcomes for expected failure paths."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    """Distinguishable reasons an operation did not succeed."""

    ALREADY_SAVED = "already_saved"
    EMPTY_QUERY = "empty_query"
    PERSISTENCE_FAILURE = "persistence_failure"
    PROVIDER_FAILURE = "provider_failure"
    NOT_FOUND = "not_found"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class Failure:
    """Why an operation failed."""

    kind: FailureKind
    message: str = ""


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or a failure, never both."""

    value: Optional[T] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def kind(self) -> Optional[FailureKind]:
        return self.failure.kind if self.failure else None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: FailureKind, message: str = "") -> "Outcome[T]":
        return cls(failure=Failure(kind=kind, message=message))
