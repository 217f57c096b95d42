from typing import Any

import orjson
import pytest

from sleuth.exceptions import ConstructionError
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
    RangeExecution,
    RangeFilter,
    RegexpFilter,
    RegexpFlags,
)
from sleuth.model.geo import (
    Distance,
    DistanceRange,
    DistanceType,
    DistanceUnit,
    GeoBoundingBox,
    GeoBoundingBoxConstraint,
    GeoFilterType,
    GeoPoint,
    LatLon,
    OptimizeBbox,
)
from sleuth.model.index import IndexSettings
from sleuth.model.query import MustMatch, MustNotMatch, ShouldMatch, Term, TermQuery
from sleuth.model.search import (
    CustomMissing,
    DefaultSort,
    DefaultSortSpec,
    Search,
    SortMissing,
    SortMode,
    SortOrder,
    mk_sort,
)
from sleuth.serialize.render import (
    render,
    render_distance,
    render_filter,
    render_regexp_flags,
    render_search,
    to_json,
)
from sleuth.types.general import DocId, FieldName, MappingName

USER = FieldName("user")
LOCATION = FieldName("location")
HOME = LatLon(40.0, -70.0)
WORK = LatLon(40.73, -74.1)
USER_TERM = Term(USER, "bitemyapp")


def test_identity_renders_match_all() -> None:
    assert render_filter(IdentityFilter()) == {"match_all": {}}


def test_and_or_render_lists_with_cache() -> None:
    exists = ExistsFilter(USER)
    limit = LimitFilter(10)

    assert render_filter(AndFilter((exists, limit), cache=True)) == {
        "and": [{"exists": {"field": "user"}}, {"limit": {"value": 10}}],
        "_cache": True,
    }
    assert render_filter(OrFilter((exists,))) == {
        "or": [{"exists": {"field": "user"}}],
        "_cache": False,
    }


def test_not_wraps_inner_filter() -> None:
    assert render_filter(NotFilter(ExistsFilter(USER), cache=True)) == {
        "not": {"filter": {"exists": {"field": "user"}}, "_cache": True}
    }


def test_bool_matches() -> None:
    term_json = {"term": {"user": "bitemyapp"}}

    assert render_filter(BoolFilter(MustMatch(USER_TERM))) == {
        "bool": {"must": term_json, "_cache": False}
    }
    assert render_filter(BoolFilter(MustNotMatch(USER_TERM, cache=True))) == {
        "bool": {"must_not": term_json, "_cache": True}
    }
    # should is always an array, even for a single term
    assert render_filter(BoolFilter(ShouldMatch((USER_TERM,)))) == {
        "bool": {"should": [term_json], "_cache": False}
    }


def test_term_query_with_and_without_boost() -> None:
    assert render(TermQuery(USER_TERM)) == {
        "term": {"user": {"value": "bitemyapp"}}
    }
    assert render(TermQuery(USER_TERM, boost=2.5)) == {
        "term": {"user": {"value": "bitemyapp", "boost": 2.5}}
    }


def test_geo_bounding_box_puts_type_beside_constraint() -> None:
    f = GeoBoundingBoxFilter(
        GeoBoundingBoxConstraint(LOCATION, GeoBoundingBox(HOME, WORK), cache=True),
        GeoFilterType.INDEXED,
    )
    assert render_filter(f) == {
        "geo_bounding_box": {
            "location": {
                "top_left": {"lat": 40.0, "lon": -70.0},
                "bottom_right": {"lat": 40.73, "lon": -74.1},
            },
            "_cache": True,
        },
        "type": "indexed",
    }


def test_geo_distance() -> None:
    f = GeoDistanceFilter(
        GeoPoint(LOCATION, HOME),
        Distance(10, DistanceUnit.KILOMETERS),
        DistanceType.SLOPPY_ARC,
        OptimizeBbox.NONE,
        cache=False,
    )
    assert render_filter(f) == {
        "geo_distance": {
            "distance": "10km",
            "distance_type": "sloppy_arc",
            "optimize_bbox": "none",
            "location": {"lat": 40.0, "lon": -70.0},
            "_cache": False,
        }
    }


def test_geo_distance_range_has_no_cache_key() -> None:
    f = GeoDistanceRangeFilter(
        GeoPoint(LOCATION, HOME),
        DistanceRange(
            Distance(1, DistanceUnit.MILES), Distance(2.5, DistanceUnit.MILES)
        ),
    )
    rendered = render_filter(f)

    assert rendered == {
        "geo_distance_range": {
            "from": "1mi",
            "to": "2.5mi",
            "location": {"lat": 40.0, "lon": -70.0},
        }
    }
    assert "_cache" not in rendered["geo_distance_range"]


def test_geo_polygon() -> None:
    f = GeoPolygonFilter(LOCATION, (HOME, WORK))
    assert render_filter(f) == {
        "geo_polygon": {
            "location": {
                "points": [{"lat": 40.0, "lon": -70.0}, {"lat": 40.73, "lon": -74.1}]
            }
        }
    }


def test_ids_limit_missing_prefix() -> None:
    ids = IdsFilter(MappingName("tweet"), (DocId("1"), DocId("2")))
    assert render_filter(ids) == {"ids": {"type": "tweet", "values": ["1", "2"]}}
    assert render_filter(LimitFilter(3)) == {"limit": {"value": 3}}
    assert render_filter(MissingFilter(USER, existence=True, null_value=True)) == {
        "missing": {"field": "user", "existence": True, "null_value": True}
    }
    assert render_filter(PrefixFilter(USER, "bite", cache=True)) == {
        "prefix": {"user": "bite", "_cache": True}
    }


@pytest.mark.parametrize(
    ("bound", "key"),
    [
        (LessThan(5), "lt"),
        (LessThanEq(5), "lte"),
        (GreaterThan(5), "gt"),
        (GreaterThanEq(5), "gte"),
    ],
)
def test_half_range_renders_one_comparison(
    bound: LessThan | LessThanEq | GreaterThan | GreaterThanEq, key: str
) -> None:
    rendered = render_filter(RangeFilter(FieldName("age"), bound))

    assert rendered == {
        "range": {"age": {key: 5}, "execution": "index", "_cache": False}
    }
    assert len(rendered["range"]["age"]) == 1


def test_full_range_renders_two_comparisons() -> None:
    f = RangeFilter(
        FieldName("age"),
        Range(GreaterThanEq(18), LessThan(65)),
        RangeExecution.FIELDDATA,
        cache=True,
    )
    rendered = render_filter(f)

    assert rendered == {
        "range": {
            "age": {"lt": 65, "gte": 18},
            "execution": "fielddata",
            "_cache": True,
        }
    }
    assert len(rendered["range"]["age"]) == 2


def test_regexp() -> None:
    f = RegexpFilter(
        USER,
        "bite.*app",
        RegexpFlags.COMPLEMENT | RegexpFlags.INTERSECTION,
        cache_name="test",
        cache=False,
        cache_key="key",
    )
    assert render_filter(f) == {
        "regexp": {
            "user": {"value": "bite.*app", "flags": "COMPLEMENT|INTERSECTION"},
            "_name": "test",
            "_cache": False,
            "_cache_key": "key",
        }
    }


@pytest.mark.parametrize(
    ("flags", "expected"),
    [
        (RegexpFlags.ALL, "ALL"),
        (RegexpFlags.ANYSTRING, "ANYSTRING"),
        (RegexpFlags.INTERSECTION | RegexpFlags.COMPLEMENT, "COMPLEMENT|INTERSECTION"),
        (RegexpFlags.INTERVAL | RegexpFlags.ANYSTRING, "INTERVAL|ANYSTRING"),
    ],
)
def test_regexp_flags(flags: RegexpFlags, expected: str) -> None:
    assert render_regexp_flags(flags) == expected


@pytest.mark.parametrize(
    "flags",
    [
        RegexpFlags(0),
        RegexpFlags.ALL | RegexpFlags.COMPLEMENT | RegexpFlags.INTERVAL,
    ],
)
def test_regexp_flags_outside_single_or_pair_are_rejected(flags: RegexpFlags) -> None:
    with pytest.raises(ConstructionError, match="one flag or a pair"):
        RegexpFilter(USER, "x", flags)
    with pytest.raises(ConstructionError):
        render_regexp_flags(flags)


@pytest.mark.parametrize(
    ("distance", "expected"),
    [
        (Distance(10, DistanceUnit.KILOMETERS), "10km"),
        (Distance(10.0, DistanceUnit.METERS), "10m"),
        (Distance(1.5, DistanceUnit.NAUTICAL_MILES), "1.5nmi"),
        (Distance(3, DistanceUnit.INCHES), "3in"),
    ],
)
def test_distance_is_a_single_string(distance: Distance, expected: str) -> None:
    assert render_distance(distance) == expected
    assert render(distance) == expected


def test_sort_spec_optional_keys() -> None:
    assert render(DefaultSortSpec(mk_sort(FieldName("age"), SortOrder.DESCENDING))) == {
        "age": {"order": "desc", "ignore_unmapped": False}
    }

    full = DefaultSort(
        field=FieldName("price"),
        order=SortOrder.ASCENDING,
        ignore_unmapped=True,
        mode=SortMode.AVG,
        missing=SortMissing.LAST,
        nested_filter=ExistsFilter(FieldName("offer")),
    )
    assert render(DefaultSortSpec(full)) == {
        "price": {
            "order": "asc",
            "ignore_unmapped": True,
            "mode": "avg",
            "missing": "_last",
            "nested_filter": {"exists": {"field": "offer"}},
        }
    }

    custom = DefaultSort(
        field=FieldName("price"),
        order=SortOrder.ASCENDING,
        missing=CustomMissing("0"),
    )
    assert render(DefaultSortSpec(custom)) == {
        "price": {"order": "asc", "ignore_unmapped": False, "missing": "0"}
    }


def test_default_search_has_no_optional_keys() -> None:
    rendered = render_search(Search())

    assert rendered == {"from": 0, "size": 10, "track_scores": False}
    assert to_json(Search()) == b'{"from":0,"size":10,"track_scores":false}'


def test_search_includes_set_fields() -> None:
    search = Search(
        query=TermQuery(USER_TERM),
        filter=IdentityFilter(),
        sort=(DefaultSortSpec(mk_sort(FieldName("age"), SortOrder.ASCENDING)),),
        track_scores=True,
        from_=10,
        size=5,
    )
    assert render_search(search) == {
        "from": 10,
        "size": 5,
        "track_scores": True,
        "query": {"term": {"user": {"value": "bitemyapp"}}},
        "filter": {"match_all": {}},
        "sort": [{"age": {"order": "asc", "ignore_unmapped": False}}],
    }


def test_index_settings() -> None:
    assert render(IndexSettings(shards=3, replicas=2)) == {
        "settings": {"shards": 3, "replicas": 2}
    }


def test_enums_render_as_wire_strings() -> None:
    assert render(DistanceType.PLANE) == "plane"
    assert render(SortOrder.DESCENDING) == "desc"
    assert render(RangeExecution.FIELDDATA) == "fielddata"


COMPLEX_FILTER: Filter = AndFilter(
    (
        NotFilter(PrefixFilter(USER, "bite")),
        OrFilter(
            (
                RangeFilter(FieldName("age"), Range(GreaterThan(1), LessThanEq(2.5))),
                GeoDistanceFilter(
                    GeoPoint(LOCATION, HOME), Distance(5, DistanceUnit.FEET)
                ),
            )
        ),
        BoolFilter(ShouldMatch((USER_TERM, Term(FieldName("lang"), "hs")))),
    )
)


def test_rendering_is_deterministic() -> None:
    search = Search(query=TermQuery(USER_TERM, boost=1.0), filter=COMPLEX_FILTER)

    first = to_json(search)
    second = to_json(search)

    assert first == second
    assert to_json(COMPLEX_FILTER) == to_json(COMPLEX_FILTER)

    parsed: dict[str, Any] = orjson.loads(first)
    assert list(parsed) == ["from", "size", "track_scores", "query", "filter"]


def test_render_rejects_values_outside_the_model() -> None:
    with pytest.raises(AssertionError, match="unreachable"):
        render(object())  # pyright:ignore[reportArgumentType]
    with pytest.raises(AssertionError, match="unreachable"):
        render({"exists": {"field": "user"}})  # pyright:ignore[reportArgumentType]
