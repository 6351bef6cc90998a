"""
Query results returned by every executor and facade operation.

The ``errors`` list is always present. An operation that raised nothing can
still have failed for some chunks, so callers check ``errors`` (or ``ok``).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from anybase.shared.exceptions import CrudError

T = TypeVar("T")


@dataclass(frozen=True)
class CudResult:
    """Outcome of an INSERT, UPDATE, DELETE or DDL statement."""
    affected_row_count: int = 0
    errors: List[CrudError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    """
    Outcome of a SELECT.

    Attributes:
        rows: Retrieved rows, as dicts for the non-generic facade or
              record instances for the generic facade
        columns: Column names in the order the provider returned them
        errors: One CrudError per failed chunk
    """
    rows: List[T] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    errors: List[CrudError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ScalarResult:
    """Outcome of a single-value query."""
    value: Optional[Any] = None
    errors: List[CrudError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


Row = Dict[str, Any]
