"""Typed outcomes returned at every sampler boundary.

A sampler never raises for a transient read failure. It returns a
SampleResult whose value is the documented fallback and whose status says
so, and the aggregator decides what to log.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class SampleStatus(str, Enum):
    """Outcome of a single sampler call."""

    OK = "ok"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class SampleResult(Generic[T]):
    """A sampled value plus how it was obtained.

    Attributes:
        value: The sampled value, or the fallback when degraded.
        status: OK when read from the primary source.
        reason: Why the fallback was used (None when OK).
    """

    value: T
    status: SampleStatus = SampleStatus.OK
    reason: str | None = None

    @classmethod
    def ok(cls, value: T) -> "SampleResult[T]":
        return cls(value=value)

    @classmethod
    def degraded(cls, value: T, reason: str) -> "SampleResult[T]":
        return cls(value=value, status=SampleStatus.DEGRADED, reason=reason)

    @property
    def is_degraded(self) -> bool:
        return self.status is SampleStatus.DEGRADED


class MonitorError(Exception):
    """Base class for performance monitor errors."""


class ProbeError(MonitorError):
    """A platform probe could not read an OS statistic."""
