"""Render value-model entities into the JSON shapes the search server expects.

Every function here is pure and deterministic: dict keys are emitted in a fixed
order, so the same value always encodes to the same bytes.
"""

from enum import StrEnum
from typing import Any, assert_never

import orjson
from pydantic_core import to_jsonable_python

from sleuth.model.filters import (
    AndFilter,
    BoolFilter,
    ExistsFilter,
    Filter,
    GeoBoundingBoxFilter,
    GeoDistanceFilter,
    GeoDistanceRangeFilter,
    GeoPolygonFilter,
    GreaterThan,
    GreaterThanEq,
    HalfRange,
    IdentityFilter,
    IdsFilter,
    LessThan,
    LessThanEq,
    LimitFilter,
    MissingFilter,
    NotFilter,
    OrFilter,
    PrefixFilter,
    Range,
    RangeFilter,
    RegexpFilter,
    RegexpFlags,
    check_regexp_flags,
)
from sleuth.model.geo import (
    Distance,
    DistanceRange,
    GeoBoundingBox,
    GeoBoundingBoxConstraint,
    GeoPoint,
    LatLon,
)
from sleuth.model.index import IndexSettings
from sleuth.model.query import (
    BoolMatch,
    MustMatch,
    MustNotMatch,
    Query,
    ShouldMatch,
    Term,
    TermQuery,
)
from sleuth.model.search import (
    CustomMissing,
    DefaultSortSpec,
    Search,
    SortMissing,
    SortSpec,
)
from sleuth.types.general import JsonObject, JsonSerializable

type Renderable = (
    Filter
    | Query
    | Term
    | BoolMatch
    | SortSpec
    | Search
    | IndexSettings
    | LatLon
    | GeoPoint
    | GeoBoundingBox
    | GeoBoundingBoxConstraint
    | Distance
    | RegexpFlags
    | StrEnum
)


def render_latlon(latlon: LatLon) -> JsonObject:
    return {"lat": latlon.lat, "lon": latlon.lon}


def render_geo_point(point: GeoPoint) -> JsonObject:
    return {point.field: render_latlon(point.latlon)}


def render_bounding_box(box: GeoBoundingBox) -> JsonObject:
    return {
        "top_left": render_latlon(box.top_left),
        "bottom_right": render_latlon(box.bottom_right),
    }


def render_bounding_box_constraint(constraint: GeoBoundingBoxConstraint) -> JsonObject:
    return {
        constraint.field: render_bounding_box(constraint.box),
        "_cache": constraint.cache,
    }


def render_distance(distance: Distance) -> str:
    """Render a distance as one string, e.g. `Distance(10, KILOMETERS)` -> "10km"."""
    coefficient = distance.coefficient
    if isinstance(coefficient, float) and coefficient.is_integer():
        coefficient = int(coefficient)
    return f"{coefficient}{distance.unit.value}"


def render_regexp_flags(flags: RegexpFlags) -> str:
    """Join flags with `|` in declaration order, e.g. "COMPLEMENT|INTERSECTION"."""
    return "|".join(flag.name for flag in check_regexp_flags(flags) if flag.name)


def render_term(term: Term) -> JsonObject:
    return {"term": {term.field: term.value}}


def render_query(query: Query) -> JsonObject:
    match query:
        case TermQuery(term=term, boost=boost):
            body: JsonObject = {"value": term.value}
            if boost is not None:
                body["boost"] = boost
            return {"term": {term.field: body}}
        case _:
            assert_never(query)


def render_bool_match(bool_match: BoolMatch) -> JsonObject:
    match bool_match:
        case MustMatch(term=term, cache=cache):
            return {"must": render_term(term), "_cache": cache}
        case MustNotMatch(term=term, cache=cache):
            return {"must_not": render_term(term), "_cache": cache}
        case ShouldMatch(terms=terms, cache=cache):
            return {"should": [render_term(t) for t in terms], "_cache": cache}
        case _:
            assert_never(bool_match)


def _half_range_item(bound: HalfRange) -> tuple[str, float]:
    match bound:
        case LessThan(value=value):
            return "lt", value
        case LessThanEq(value=value):
            return "lte", value
        case GreaterThan(value=value):
            return "gt", value
        case GreaterThanEq(value=value):
            return "gte", value
        case _:
            assert_never(bound)


def render_range_bounds(bounds: HalfRange | Range) -> JsonObject:
    """Render one comparison for a half range, or upper then lower for a full range."""
    if isinstance(bounds, Range):
        return dict([_half_range_item(bounds.upper), _half_range_item(bounds.lower)])
    return dict([_half_range_item(bounds)])


def _render_distance_range(point: GeoPoint, distance_range: DistanceRange) -> JsonObject:
    return {
        "from": render_distance(distance_range.distance_from),
        "to": render_distance(distance_range.distance_to),
        point.field: render_latlon(point.latlon),
    }


def render_filter(filter_: Filter) -> JsonObject:  # noqa: PLR0911
    """Render any filter variant."""
    match filter_:
        case IdentityFilter():
            return {"match_all": {}}
        case AndFilter(filters=filters, cache=cache):
            return {"and": [render_filter(f) for f in filters], "_cache": cache}
        case OrFilter(filters=filters, cache=cache):
            return {"or": [render_filter(f) for f in filters], "_cache": cache}
        case NotFilter(filter=inner, cache=cache):
            return {"not": {"filter": render_filter(inner), "_cache": cache}}
        case ExistsFilter(field=field):
            return {"exists": {"field": field}}
        case BoolFilter(match=bool_match):
            return {"bool": render_bool_match(bool_match)}
        case GeoBoundingBoxFilter(constraint=constraint, filter_type=filter_type):
            return {
                "geo_bounding_box": render_bounding_box_constraint(constraint),
                "type": filter_type.value,
            }
        case GeoDistanceFilter(
            point=point,
            distance=distance,
            distance_type=distance_type,
            optimize_bbox=optimize_bbox,
            cache=cache,
        ):
            return {
                "geo_distance": {
                    "distance": render_distance(distance),
                    "distance_type": distance_type.value,
                    "optimize_bbox": optimize_bbox.value,
                    point.field: render_latlon(point.latlon),
                    "_cache": cache,
                }
            }
        case GeoDistanceRangeFilter(point=point, distance_range=distance_range):
            # Only the bounded from/to form exists here, and it takes no cache flag
            return {"geo_distance_range": _render_distance_range(point, distance_range)}
        case GeoPolygonFilter(field=field, points=points):
            return {
                "geo_polygon": {field: {"points": [render_latlon(p) for p in points]}}
            }
        case IdsFilter(mapping=mapping, values=values):
            return {"ids": {"type": mapping, "values": [str(v) for v in values]}}
        case LimitFilter(value=value):
            return {"limit": {"value": value}}
        case MissingFilter(field=field, existence=existence, null_value=null_value):
            return {
                "missing": {
                    "field": field,
                    "existence": existence,
                    "null_value": null_value,
                }
            }
        case PrefixFilter(field=field, value=value, cache=cache):
            return {"prefix": {field: value, "_cache": cache}}
        case RangeFilter(field=field, range=bounds, execution=execution, cache=cache):
            return {
                "range": {
                    field: render_range_bounds(bounds),
                    "execution": execution.value,
                    "_cache": cache,
                }
            }
        case RegexpFilter(
            field=field,
            regexp=regexp,
            flags=flags,
            cache_name=cache_name,
            cache=cache,
            cache_key=cache_key,
        ):
            return {
                "regexp": {
                    field: {"value": regexp, "flags": render_regexp_flags(flags)},
                    "_name": cache_name,
                    "_cache": cache,
                    "_cache_key": cache_key,
                }
            }
        case _:
            assert_never(filter_)


def render_sort_spec(spec: SortSpec) -> JsonObject:
    match spec:
        case DefaultSortSpec(sort=sort):
            body: JsonObject = {
                "order": sort.order.value,
                "ignore_unmapped": sort.ignore_unmapped,
            }
            if sort.mode is not None:
                body["mode"] = sort.mode.value
            match sort.missing:
                case None:
                    pass
                case SortMissing():
                    body["missing"] = sort.missing.value
                case CustomMissing(value=value):
                    body["missing"] = value
            if sort.nested_filter is not None:
                body["nested_filter"] = render_filter(sort.nested_filter)
            return {sort.field: body}
        case _:
            assert_never(spec)


def render_search(search: Search) -> JsonObject:
    """Render a search body; unset query/filter/sort keys are left out entirely."""
    body: JsonObject = {
        "from": search.from_,
        "size": search.size,
        "track_scores": search.track_scores,
    }
    if search.query is not None:
        body["query"] = render_query(search.query)
    if search.filter is not None:
        body["filter"] = render_filter(search.filter)
    if search.sort is not None:
        body["sort"] = [render_sort_spec(s) for s in search.sort]
    return body


def render_index_settings(settings: IndexSettings) -> JsonObject:
    return {"settings": {"shards": settings.shards, "replicas": settings.replicas}}


def render(value: Renderable) -> JsonSerializable:  # noqa: PLR0911
    """Render any request-side value to JSON-compatible Python data."""
    match value:
        case Search():
            return render_search(value)
        case DefaultSortSpec():
            return render_sort_spec(value)
        case TermQuery():
            return render_query(value)
        case Term():
            return render_term(value)
        case MustMatch() | MustNotMatch() | ShouldMatch():
            return render_bool_match(value)
        case IndexSettings():
            return render_index_settings(value)
        case LatLon():
            return render_latlon(value)
        case GeoPoint():
            return render_geo_point(value)
        case GeoBoundingBox():
            return render_bounding_box(value)
        case GeoBoundingBoxConstraint():
            return render_bounding_box_constraint(value)
        case Distance():
            return render_distance(value)
        case RegexpFlags():
            return render_regexp_flags(value)
        case StrEnum():
            return value.value
        case (
            IdentityFilter()
            | AndFilter()
            | OrFilter()
            | NotFilter()
            | ExistsFilter()
            | BoolFilter()
            | GeoBoundingBoxFilter()
            | GeoDistanceFilter()
            | GeoDistanceRangeFilter()
            | GeoPolygonFilter()
            | IdsFilter()
            | LimitFilter()
            | MissingFilter()
            | PrefixFilter()
            | RangeFilter()
            | RegexpFilter()
        ):
            return render_filter(value)
        case _:
            assert_never(value)


def to_json(value: Renderable) -> bytes:
    """Render a value and encode it as compact UTF-8 JSON."""
    return orjson.dumps(render(value))


def dump_document(document: Any) -> bytes:
    """Encode a caller's document; pydantic models and dataclasses are accepted."""
    return orjson.dumps(document, default=to_jsonable_python)
