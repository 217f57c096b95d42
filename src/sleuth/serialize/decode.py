"""Decode server responses into envelopes.

Decoding never raises on bad input: a `DecodeError` naming the envelope and the
offending field is returned instead.
"""

from collections.abc import Mapping
from typing import Any

import orjson
from loguru import logger as log
from pydantic import BaseModel, ValidationError

from sleuth.exceptions import DecodeError
from sleuth.model.results import EsResult, SearchResult, Status


def _error_field(error: ValidationError) -> str | None:
    details = error.errors()
    if not details:
        return None
    loc = details[0]["loc"]
    return ".".join(str(part) for part in loc) or None


def decode[T: BaseModel](
    envelope: type[T], payload: bytes | str | Mapping[str, Any]
) -> T | DecodeError:
    """Decode a JSON payload (raw or already parsed) into the given envelope type."""
    name = envelope.__name__
    data: Any = payload
    if isinstance(payload, bytes | str):
        try:
            data = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            log.warning(f"Response for {name} is not valid JSON: {e}")
            return DecodeError(envelope=name, field=None, reason=f"invalid JSON: {e}")

    if not isinstance(data, Mapping):
        log.warning(f"Response for {name} is not a JSON object")
        return DecodeError(
            envelope=name,
            field=None,
            reason=f"expected a JSON object, got {type(data).__name__}",
        )

    try:
        return envelope.model_validate(data)
    except ValidationError as e:
        field = _error_field(e)
        reason = e.errors()[0]["msg"] if e.errors() else str(e)
        log.warning(f"Response for {name} failed validation at {field}: {reason}")
        return DecodeError(envelope=name, field=field, reason=reason)


def parse_status(payload: bytes | str | Mapping[str, Any]) -> Status | DecodeError:
    """Decode the server root status document."""
    return decode(Status, payload)


def parse_es_result(
    payload: bytes | str | Mapping[str, Any], source_type: Any = Any
) -> EsResult[Any] | DecodeError:
    """Decode a single-document response, validating `_source` as `source_type`."""
    return decode(EsResult[source_type], payload)


def parse_search_result(
    payload: bytes | str | Mapping[str, Any], source_type: Any = Any
) -> SearchResult[Any] | DecodeError:
    """Decode a `_search` response, validating each hit's `_source` as `source_type`."""
    return decode(SearchResult[source_type], payload)
