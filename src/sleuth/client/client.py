from collections.abc import Iterable
from types import TracebackType
from typing import Any, Self

import httpx

from sleuth.client.dispatch import Dispatcher, join_path
from sleuth.client.transport import (
    NDJSON_CONTENT_TYPE,
    HttpxTransport,
    Reply,
    Transport,
)
from sleuth.config.general import CONFIG, ClientSettings
from sleuth.exceptions import DecodeError
from sleuth.model.bulk import BulkOperation
from sleuth.model.index import IndexSettings, OpenCloseIndex
from sleuth.model.results import EsResult, SearchResult, Status
from sleuth.model.search import Search
from sleuth.serialize.bulk import encode_bulk
from sleuth.serialize.decode import parse_es_result, parse_search_result, parse_status
from sleuth.serialize.render import dump_document, to_json
from sleuth.types.general import DocId, IndexName, MappingName, Server


class SearchClient:
    """Index, document and search operations against one search server.

    Every operation returns the server's `Reply` as-is, whatever its status. Only
    the typed reads (`get_status`, `fetch_document`, `search_typed`) decode bodies.
    """

    def __init__(self, server: Server | str, transport: Transport) -> None:
        self.server = Server(server.rstrip("/"))
        self.dispatcher = Dispatcher(transport)

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings = CONFIG,
        transport: httpx.BaseTransport | None = None,
    ) -> Self:
        """Build a client with the default httpx transport."""
        return cls(settings.server, HttpxTransport.from_settings(settings, transport))

    def close(self) -> None:
        self.dispatcher.transport.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _url(self, *segments: str) -> str:
        return join_path(self.server, *segments)

    # Server

    def get_status(self) -> Status | DecodeError:
        """Fetch and decode the server's root status document."""
        reply = self.dispatcher.get(self._url())
        return parse_status(reply.body)

    # Indices

    def create_index(self, settings: IndexSettings, index: IndexName) -> Reply:
        return self.dispatcher.put(self._url(index), to_json(settings))

    def delete_index(self, index: IndexName) -> Reply:
        return self.dispatcher.delete(self._url(index))

    def index_exists(self, index: IndexName) -> bool:
        _, exists = self.dispatcher.exists(self._url(index))
        return exists

    def refresh_index(self, index: IndexName) -> Reply:
        return self.dispatcher.post(self._url(index, "_refresh"))

    def _open_or_close_index(self, action: OpenCloseIndex, index: IndexName) -> Reply:
        return self.dispatcher.post(self._url(index, action.value))

    def open_index(self, index: IndexName) -> Reply:
        return self._open_or_close_index(OpenCloseIndex.OPEN, index)

    def close_index(self, index: IndexName) -> Reply:
        return self._open_or_close_index(OpenCloseIndex.CLOSE, index)

    # Mappings

    def create_mapping(
        self, index: IndexName, mapping: MappingName, body: Any
    ) -> Reply:
        """Put a mapping definition; `body` is any JSON-serializable value."""
        return self.dispatcher.put(
            self._url(index, mapping, "_mapping"), dump_document(body)
        )

    def delete_mapping(self, index: IndexName, mapping: MappingName) -> Reply:
        return self.dispatcher.delete(self._url(index, mapping, "_mapping"))

    # Documents

    def index_document(
        self, index: IndexName, mapping: MappingName, document: Any, doc_id: DocId
    ) -> Reply:
        return self.dispatcher.put(
            self._url(index, mapping, doc_id), dump_document(document)
        )

    def get_document(
        self, index: IndexName, mapping: MappingName, doc_id: DocId
    ) -> Reply:
        return self.dispatcher.get(self._url(index, mapping, doc_id))

    def fetch_document(
        self,
        index: IndexName,
        mapping: MappingName,
        doc_id: DocId,
        source_type: Any = Any,
    ) -> EsResult[Any] | DecodeError:
        """Get a document and decode it, validating `_source` as `source_type`."""
        reply = self.get_document(index, mapping, doc_id)
        return parse_es_result(reply.body, source_type)

    def document_exists(
        self, index: IndexName, mapping: MappingName, doc_id: DocId
    ) -> bool:
        _, exists = self.dispatcher.exists(self._url(index, mapping, doc_id))
        return exists

    def delete_document(
        self, index: IndexName, mapping: MappingName, doc_id: DocId
    ) -> Reply:
        return self.dispatcher.delete(self._url(index, mapping, doc_id))

    def bulk(self, operations: Iterable[BulkOperation]) -> Reply:
        """Send operations in one `_bulk` request, in the given order."""
        return self.dispatcher.post(
            self._url("_bulk"), encode_bulk(operations), NDJSON_CONTENT_TYPE
        )

    # Search

    def _dispatch_search(self, url: str, search: Search) -> Reply:
        return self.dispatcher.post(url, to_json(search))

    def search_all(self, search: Search) -> Reply:
        return self._dispatch_search(self._url("_search"), search)

    def search_by_index(self, index: IndexName, search: Search) -> Reply:
        return self._dispatch_search(self._url(index, "_search"), search)

    def search_by_type(
        self, index: IndexName, mapping: MappingName, search: Search
    ) -> Reply:
        return self._dispatch_search(self._url(index, mapping, "_search"), search)

    def search_typed(
        self,
        search: Search,
        index: IndexName | None = None,
        mapping: MappingName | None = None,
        source_type: Any = Any,
    ) -> SearchResult[Any] | DecodeError:
        """Search and decode the result.

        The scope narrows with the arguments given: the whole server, one index, or
        one mapping within an index. A mapping without an index is rejected.
        """
        if index is None:
            if mapping is not None:
                raise ValueError("A mapping can only be searched within an index.")
            reply = self.search_all(search)
        elif mapping is None:
            reply = self.search_by_index(index, search)
        else:
            reply = self.search_by_type(index, mapping, search)
        return parse_search_result(reply.body, source_type)
