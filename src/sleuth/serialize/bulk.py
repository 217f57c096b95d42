"""Encode bulk operations as the newline-delimited JSON stream `_bulk` expects."""

from collections.abc import Iterable, Iterator
from typing import Any, assert_never

import orjson

from sleuth.model.bulk import BulkCreate, BulkDelete, BulkIndex, BulkOperation, BulkUpdate
from sleuth.serialize.render import dump_document

NEWLINE = b"\n"


def _metadata(action: str, operation: BulkOperation) -> dict[str, Any]:
    return {
        action: {
            "_index": operation.index,
            "_type": operation.mapping,
            "_id": operation.doc_id,
        }
    }


def stream_chunks(operation: BulkOperation) -> list[bytes]:
    """Encode one operation as its metadata line and, if it has one, its document line."""
    match operation:
        case BulkIndex(document=document):
            return [orjson.dumps(_metadata("index", operation)), dump_document(document)]
        case BulkCreate(document=document):
            return [orjson.dumps(_metadata("create", operation)), dump_document(document)]
        case BulkDelete():
            return [orjson.dumps(_metadata("delete", operation))]
        case BulkUpdate(document=document):
            return [
                orjson.dumps(_metadata("update", operation)),
                dump_document({"doc": document}),
            ]
        case _:
            assert_never(operation)


def iter_lines(operations: Iterable[BulkOperation]) -> Iterator[bytes]:
    for operation in operations:
        yield from stream_chunks(operation)


def encode_bulk(operations: Iterable[BulkOperation]) -> bytes:
    """Join every operation's lines with newlines, ending the stream with one more."""
    return NEWLINE.join(iter_lines(operations)) + NEWLINE
