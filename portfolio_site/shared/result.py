"""
Explicit result type for façade reads.

Every read returns a FetchResult instead of choosing per call site whether
to swallow or rethrow. Callers pick the behaviour they need:

    result.items     -> rows, or [] when the query failed (failure is logged)
    result.first     -> first row or None
    result.unwrap()  -> rows, raising DataAccessError when the query failed
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from portfolio_site.shared.errors import DataAccessError

T = TypeVar("T")


class FetchStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    status: FetchStatus
    data: tuple = field(default_factory=tuple)
    error: Optional[Exception] = None
    source: str = ""

    @classmethod
    def success(cls, rows, source: str = "") -> "FetchResult[T]":
        rows = tuple(rows or ())
        status = FetchStatus.OK if rows else FetchStatus.EMPTY
        return cls(status=status, data=rows, source=source)

    @classmethod
    def failure(cls, error: Exception, source: str = "") -> "FetchResult[T]":
        return cls(status=FetchStatus.FAILED, error=error, source=source)

    @property
    def ok(self) -> bool:
        return self.status is not FetchStatus.FAILED

    @property
    def items(self) -> list[T]:
        return list(self.data)

    @property
    def first(self) -> Optional[T]:
        return self.data[0] if self.data else None

    def unwrap(self) -> list[T]:
        if self.status is FetchStatus.FAILED:
            raise DataAccessError(f"Fetching {self.source or 'data'} failed") from self.error
        return list(self.data)

    def unwrap_first(self) -> Optional[Any]:
        rows = self.unwrap()
        return rows[0] if rows else None
