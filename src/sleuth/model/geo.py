"""Geo primitives used by the geo filters."""

from dataclasses import dataclass
from enum import StrEnum

from sleuth.types.general import DEFAULT_CACHE, FieldName


class DistanceUnit(StrEnum):
    """Units accepted in a distance string."""

    MILES = "mi"
    YARDS = "yd"
    FEET = "ft"
    INCHES = "in"
    KILOMETERS = "km"
    METERS = "m"
    CENTIMETERS = "cm"
    MILLIMETERS = "mm"
    NAUTICAL_MILES = "nmi"


class DistanceType(StrEnum):
    """How the engine computes distances."""

    ARC = "arc"
    SLOPPY_ARC = "sloppy_arc"
    PLANE = "plane"


class GeoFilterType(StrEnum):
    """Where the engine evaluates a bounding box."""

    MEMORY = "memory"
    INDEXED = "indexed"


class OptimizeBbox(StrEnum):
    """Whether a geo distance filter is pre-checked against a bounding box."""

    NONE = "none"
    MEMORY = "memory"
    INDEXED = "indexed"


@dataclass(frozen=True, slots=True)
class LatLon:
    """A latitude/longitude pair."""

    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A coordinate bound to the geo field it is compared against."""

    field: FieldName
    latlon: LatLon


@dataclass(frozen=True, slots=True)
class GeoBoundingBox:
    top_left: LatLon
    bottom_right: LatLon


@dataclass(frozen=True, slots=True)
class GeoBoundingBoxConstraint:
    field: FieldName
    box: GeoBoundingBox
    cache: bool = DEFAULT_CACHE


@dataclass(frozen=True, slots=True)
class Distance:
    """A distance such as 10km; rendered as a single string."""

    coefficient: float
    unit: DistanceUnit


@dataclass(frozen=True, slots=True)
class DistanceRange:
    distance_from: Distance
    distance_to: Distance
