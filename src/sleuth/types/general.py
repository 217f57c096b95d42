from typing import Annotated, Any, Literal, NewType

from pydantic import BeforeValidator

FieldName = NewType("FieldName", str)
IndexName = NewType("IndexName", str)
MappingName = NewType("MappingName", str)
DocId = NewType("DocId", str)

# Base URL of a search server, e.g. http://localhost:9200
Server = NewType("Server", str)

type JsonSerializable = (
    dict[str, JsonSerializable]
    | list[JsonSerializable]
    | str
    | int
    | float
    | bool
    | None
)

JsonObject = dict[str, Any]

HttpMethod = Literal["GET", "HEAD", "PUT", "POST", "DELETE"]

LogLevel = Annotated[
    Literal[
        "TRACE",
        "DEBUG",
        "INFO",
        "SUCCESS",
        "WARNING",
        "ERROR",
        "CRITICAL",
    ],
    BeforeValidator(lambda a: str(a).upper()),
]

# Value sent for a filter's `_cache` wire flag when the caller doesn't choose one
DEFAULT_CACHE = False
