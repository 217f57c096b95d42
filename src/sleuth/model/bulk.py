from dataclasses import dataclass
from typing import Any

from sleuth.types.general import DocId, IndexName, MappingName


@dataclass(frozen=True, slots=True)
class BulkIndex:
    """Index (create or replace) a document."""

    index: IndexName
    mapping: MappingName
    doc_id: DocId
    document: Any


@dataclass(frozen=True, slots=True)
class BulkCreate:
    """Create a document, failing server-side if it already exists."""

    index: IndexName
    mapping: MappingName
    doc_id: DocId
    document: Any


@dataclass(frozen=True, slots=True)
class BulkDelete:
    index: IndexName
    mapping: MappingName
    doc_id: DocId


@dataclass(frozen=True, slots=True)
class BulkUpdate:
    """Partially update a document with the fields of `document`."""

    index: IndexName
    mapping: MappingName
    doc_id: DocId
    document: Any


type BulkOperation = BulkIndex | BulkCreate | BulkDelete | BulkUpdate
