from dataclasses import dataclass

from sleuth.types.general import DEFAULT_CACHE, FieldName, JsonSerializable


@dataclass(frozen=True, slots=True)
class Term:
    """An exact field/value pair."""

    field: FieldName
    value: JsonSerializable


@dataclass(frozen=True, slots=True)
class TermQuery:
    """A scored term query, optionally boosted."""

    term: Term
    boost: float | None = None


type Query = TermQuery


@dataclass(frozen=True, slots=True)
class MustMatch:
    term: Term
    cache: bool = DEFAULT_CACHE


@dataclass(frozen=True, slots=True)
class MustNotMatch:
    term: Term
    cache: bool = DEFAULT_CACHE


@dataclass(frozen=True, slots=True)
class ShouldMatch:
    terms: tuple[Term, ...]
    cache: bool = DEFAULT_CACHE

    def __post_init__(self) -> None:
        object.__setattr__(self, "terms", tuple(self.terms))


type BoolMatch = MustMatch | MustNotMatch | ShouldMatch
