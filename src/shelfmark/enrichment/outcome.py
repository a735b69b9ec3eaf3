# ABOUTME: Tagged result type threaded through the orchestrator and batch layers.
# ABOUTME: Makes "stop the batch" a decision on data instead of implicit exception unwinding.

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from shelfmark.enrichment.errors import RateLimited, SoftFailure

T = TypeVar("T")


class OutcomeKind(Enum):
    OK = "ok"
    RATE_LIMITED = "rate_limited"
    SOFT_FAILURE = "soft_failure"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of one unit of enrichment work.

    Exactly one of value/error is set: value for OK, error for the two
    failure kinds.
    """

    kind: OutcomeKind
    value: T | None = None
    error: Exception | None = None
    from_cache: bool = False

    @classmethod
    def ok(cls, value: T, *, from_cache: bool = False) -> "Outcome[T]":
        return cls(kind=OutcomeKind.OK, value=value, from_cache=from_cache)

    @classmethod
    def rate_limited(cls, error: RateLimited) -> "Outcome[T]":
        return cls(kind=OutcomeKind.RATE_LIMITED, error=error)

    @classmethod
    def soft_failure(cls, error: Exception) -> "Outcome[T]":
        return cls(kind=OutcomeKind.SOFT_FAILURE, error=error)

    @property
    def is_ok(self) -> bool:
        return self.kind is OutcomeKind.OK

    @property
    def is_rate_limited(self) -> bool:
        return self.kind is OutcomeKind.RATE_LIMITED

    def unwrap(self) -> T:
        """Return the value, raising the carried error for failure outcomes."""
        if self.kind is OutcomeKind.OK:
            return self.value  # type: ignore[return-value]
        if self.error is not None:
            raise self.error
        raise SoftFailure(f"{self.kind.value} outcome carried no error")
