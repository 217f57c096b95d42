from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from sleuth.exceptions import ConstructionError
from sleuth.model.filters import Filter
from sleuth.model.query import Query
from sleuth.types.general import FieldName


class SortOrder(StrEnum):
    ASCENDING = "asc"
    DESCENDING = "desc"


class SortMode(StrEnum):
    """How multi-valued fields are reduced to one sort value."""

    MIN = "min"
    MAX = "max"
    SUM = "sum"
    AVG = "avg"


class SortMissing(StrEnum):
    """Where documents lacking the sort field are placed."""

    FIRST = "_first"
    LAST = "_last"


@dataclass(frozen=True, slots=True)
class CustomMissing:
    """A custom value to sort documents lacking the sort field by."""

    value: str


@dataclass(frozen=True, slots=True, kw_only=True)
class DefaultSort:
    field: FieldName
    order: SortOrder
    ignore_unmapped: bool = False
    mode: SortMode | None = None
    missing: SortMissing | CustomMissing | None = None
    nested_filter: Filter | None = None


@dataclass(frozen=True, slots=True)
class DefaultSortSpec:
    sort: DefaultSort


type SortSpec = DefaultSortSpec


def mk_sort(field: FieldName, order: SortOrder) -> DefaultSort:
    """Build a plain sort on one field."""
    return DefaultSort(field=field, order=order)


@dataclass(frozen=True, slots=True, kw_only=True)
class Search:
    """A search request body.

    `from_` and `size` page through the hits and must not be negative.
    """

    query: Query | None = None
    filter: Filter | None = None
    sort: tuple[SortSpec, ...] | None = None
    track_scores: bool = False
    from_: int = 0
    size: int = 10

    def __post_init__(self) -> None:
        if self.from_ < 0:
            raise ConstructionError(f"Search offset must not be negative, got {self.from_}")
        if self.size < 0:
            raise ConstructionError(f"Search size must not be negative, got {self.size}")
        if self.sort is not None:
            object.__setattr__(self, "sort", tuple(self.sort))


def mk_search(query: Query | None = None, filter: Filter | None = None) -> Search:
    """Build a search for the first page of ten hits."""
    return Search(query=query, filter=filter)


def page_search(from_: int, size: int, search: Search) -> Search:
    """Return a copy of `search` moved to another page."""
    return replace(search, from_=from_, size=size)
