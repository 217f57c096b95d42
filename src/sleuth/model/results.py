"""Response envelopes returned by the search server.

Each envelope is generic over the `_source` document type so callers can decode
documents straight into their own models. Unparametrized envelopes keep `_source`
as plain JSON.
"""

from typing import Annotated, Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

SourceT = TypeVar("SourceT")


class Envelope(BaseModel):
    """Base for all server-produced envelopes."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class Version(Envelope):
    """Server build information."""

    number: str
    build_hash: str | None = None
    build_timestamp: str | None = None
    build_snapshot: bool | None = None
    lucene_version: str | None = None


class Status(Envelope):
    """Response of the server root endpoint."""

    ok: bool | None = None
    status: int | None = None
    name: str
    version: Version
    tagline: str


class ShardResult(Envelope):
    total: int
    successful: int
    failed: int


class EsResult(Envelope, Generic[SourceT]):
    """A single document as returned by a document GET."""

    index: Annotated[str, Field(alias="_index")]
    mapping: Annotated[str, Field(alias="_type")]
    doc_id: Annotated[str, Field(alias="_id")]
    version: Annotated[int, Field(alias="_version")]
    found: bool | None = None
    source: Annotated[SourceT, Field(alias="_source")]


class Hit(Envelope, Generic[SourceT]):
    index: Annotated[str, Field(alias="_index")]
    mapping: Annotated[str, Field(alias="_type")]
    doc_id: Annotated[str, Field(alias="_id")]
    score: Annotated[float | None, Field(alias="_score")]
    source: Annotated[SourceT, Field(alias="_source")]


def _unwrap_total(value: Any) -> Any:
    # Newer servers report {"value": n, "relation": "eq"}
    if isinstance(value, dict) and "value" in value:
        return value["value"]  # pyright:ignore[reportUnknownVariableType]
    return value


class SearchHits(Envelope, Generic[SourceT]):
    total: Annotated[int, BeforeValidator(_unwrap_total)]
    max_score: float | None
    hits: list[Hit[SourceT]]


class SearchResult(Envelope, Generic[SourceT]):
    """Response of a `_search` request."""

    took: int
    timed_out: bool
    shards: Annotated[ShardResult, Field(alias="_shards")]
    hits: SearchHits[SourceT]
