"""
Successful outcomes of resource controller operations.

Failures are raised as exceptions (NotFoundError, ValidationFailedError,
DependencyBlockedError); everything else is one of these results, which
the presenter turns into an HTTP response.
"""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass
class RecordsResult:
    """A list of records, with pagination info when the listing was paginated."""

    view: str
    records: list[Any] = field(default_factory=list)
    pagination_info: dict[str, Any] | None = None


@dataclass
class RecordResult:
    """A single record rendered through the resource's output projection."""

    view: str
    record: Any


@dataclass
class SuccessResult:
    """The operation succeeded and nothing else needs to be returned."""

    message: str | None = None


@dataclass
class RedirectResult:
    """Full-navigation clients are sent back to the page they came from."""

    url: str


ResourceResult = Union[RecordsResult, RecordResult, SuccessResult, RedirectResult]
