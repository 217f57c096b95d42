"""Filter values and the combinators that build compound filters.

Filters form a monoid under `combine` with `IdentityFilter` as the neutral element,
and `alternative` adds a second, "or"-like operation. Neither operation flattens
nested lists: combining three filters yields nested two-element `and`s, which is
what goes over the wire.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Flag, StrEnum, auto
from functools import reduce

from sleuth.model.geo import (
    Distance,
    DistanceRange,
    DistanceType,
    GeoBoundingBoxConstraint,
    GeoFilterType,
    GeoPoint,
    LatLon,
    OptimizeBbox,
)
from sleuth.exceptions import ConstructionError
from sleuth.model.query import BoolMatch
from sleuth.types.general import DEFAULT_CACHE, DocId, FieldName, MappingName


class RangeExecution(StrEnum):
    """Execution hint for range filters: index for small ranges, fielddata for wide ones."""

    INDEX = "index"
    FIELDDATA = "fielddata"


class RegexpFlags(Flag):
    """Regular expression syntax features, combinable with `|`."""

    ALL = auto()
    COMPLEMENT = auto()
    INTERVAL = auto()
    INTERSECTION = auto()
    ANYSTRING = auto()


MAX_REGEXP_FLAGS = 2


def check_regexp_flags(flags: RegexpFlags) -> RegexpFlags:
    """Accept a single flag or a pair of flags; the server knows no other sets."""
    if not 1 <= len(flags) <= MAX_REGEXP_FLAGS:
        raise ConstructionError(f"Regexp flags must be one flag or a pair, got {flags!r}.")
    return flags


@dataclass(frozen=True, slots=True)
class LessThan:
    value: float


@dataclass(frozen=True, slots=True)
class LessThanEq:
    value: float


@dataclass(frozen=True, slots=True)
class GreaterThan:
    value: float


@dataclass(frozen=True, slots=True)
class GreaterThanEq:
    value: float


type UpperBound = LessThan | LessThanEq
type LowerBound = GreaterThan | GreaterThanEq
type HalfRange = UpperBound | LowerBound


@dataclass(frozen=True, slots=True)
class Range:
    """A range bounded on both sides."""

    lower: LowerBound
    upper: UpperBound


@dataclass(frozen=True, slots=True)
class IdentityFilter:
    """Matches everything; the neutral element of `combine`."""


@dataclass(frozen=True, slots=True)
class AndFilter:
    filters: tuple[Filter, ...]
    cache: bool = DEFAULT_CACHE

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", tuple(self.filters))


@dataclass(frozen=True, slots=True)
class OrFilter:
    filters: tuple[Filter, ...]
    cache: bool = DEFAULT_CACHE

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", tuple(self.filters))


@dataclass(frozen=True, slots=True)
class NotFilter:
    filter: Filter
    cache: bool = DEFAULT_CACHE


@dataclass(frozen=True, slots=True)
class ExistsFilter:
    field: FieldName


@dataclass(frozen=True, slots=True)
class BoolFilter:
    match: BoolMatch


@dataclass(frozen=True, slots=True)
class GeoBoundingBoxFilter:
    constraint: GeoBoundingBoxConstraint
    filter_type: GeoFilterType = GeoFilterType.MEMORY


@dataclass(frozen=True, slots=True)
class GeoDistanceFilter:
    point: GeoPoint
    distance: Distance
    distance_type: DistanceType = DistanceType.ARC
    optimize_bbox: OptimizeBbox = OptimizeBbox.MEMORY
    cache: bool = DEFAULT_CACHE


@dataclass(frozen=True, slots=True)
class GeoDistanceRangeFilter:
    point: GeoPoint
    distance_range: DistanceRange


@dataclass(frozen=True, slots=True)
class GeoPolygonFilter:
    field: FieldName
    points: tuple[LatLon, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))


@dataclass(frozen=True, slots=True)
class IdsFilter:
    mapping: MappingName
    values: tuple[DocId, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True, slots=True)
class LimitFilter:
    value: int


@dataclass(frozen=True, slots=True)
class MissingFilter:
    field: FieldName
    existence: bool = True
    null_value: bool = False


@dataclass(frozen=True, slots=True)
class PrefixFilter:
    field: FieldName
    value: str
    cache: bool = DEFAULT_CACHE


@dataclass(frozen=True, slots=True)
class RangeFilter:
    field: FieldName
    range: HalfRange | Range
    execution: RangeExecution = RangeExecution.INDEX
    cache: bool = DEFAULT_CACHE


@dataclass(frozen=True, slots=True)
class RegexpFilter:
    field: FieldName
    regexp: str
    flags: RegexpFlags = RegexpFlags.ALL
    cache_name: str = ""
    cache: bool = DEFAULT_CACHE
    cache_key: str = ""

    def __post_init__(self) -> None:
        check_regexp_flags(self.flags)


type Filter = (
    IdentityFilter
    | AndFilter
    | OrFilter
    | NotFilter
    | ExistsFilter
    | BoolFilter
    | GeoBoundingBoxFilter
    | GeoDistanceFilter
    | GeoDistanceRangeFilter
    | GeoPolygonFilter
    | IdsFilter
    | LimitFilter
    | MissingFilter
    | PrefixFilter
    | RangeFilter
    | RegexpFilter
)


def combine(a: Filter, b: Filter) -> Filter:
    """Require both filters to match.

    `IdentityFilter` on either side returns the other filter untouched.
    """
    if isinstance(a, IdentityFilter):
        return b
    if isinstance(b, IdentityFilter):
        return a
    return AndFilter((a, b), DEFAULT_CACHE)


def alternative(a: Filter, b: Filter) -> Filter:
    """Require either filter to match."""
    return OrFilter((a, b), DEFAULT_CACHE)


def combine_all(filters: Iterable[Filter]) -> Filter:
    """Fold filters with `combine` from the right.

    `combine_all([a, b, c])` is `combine(a, combine(b, c))`; an empty input gives
    `IdentityFilter()`.
    """
    return reduce(
        lambda acc, f: combine(f, acc), reversed(list(filters)), IdentityFilter()
    )
