from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, Self, override

import httpx
import orjson
from loguru import logger as log

from sleuth.config.general import CONFIG, ClientSettings
from sleuth.exceptions import TransportFault
from sleuth.types.general import HttpMethod

JSON_CONTENT_TYPE = "application/json"
NDJSON_CONTENT_TYPE = "application/x-ndjson"


@dataclass(frozen=True, slots=True, kw_only=True)
class Reply:
    """Status and body of a server response, whatever the status was."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict[str, str])
    body: bytes = b""

    @property
    def is_success(self) -> bool:
        """True for any 2xx status."""
        return 200 <= self.status_code <= 299  # noqa: PLR2004

    @property
    def text(self) -> str:
        return self.body.decode()

    def json(self) -> Any:
        """Parse the body as JSON; raises orjson.JSONDecodeError on bad input."""
        return orjson.loads(self.body)


class Transport(ABC):
    """Sends one HTTP request and hands back the raw reply.

    Implementations own connection handling (pooling, TLS, timeouts). They raise
    `TransportFault` when no reply could be obtained, and must never raise for an
    error status.
    """

    @abstractmethod
    def send(
        self,
        method: HttpMethod,
        url: str,
        body: bytes | None = None,
        content_type: str | None = None,
    ) -> Reply:
        """Send a request and return the reply."""

    def close(self) -> None:
        """Release any held connections."""

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class HttpxTransport(Transport):
    """A transport backed by a single pooled `httpx.Client`."""

    def __init__(self, client: httpx.Client | None = None) -> None:
        self.client = client if client is not None else httpx.Client()

    @classmethod
    def from_settings(
        cls, settings: ClientSettings = CONFIG, transport: httpx.BaseTransport | None = None
    ) -> Self:
        """Build a transport from client settings.

        `transport` replaces httpx's network layer, which is mostly useful in tests.
        """
        auth: tuple[str, str] | None = None
        if settings.auth.username is not None:
            password = settings.auth.password
            auth = (
                settings.auth.username,
                password.get_secret_value() if password is not None else "",
            )
        client = httpx.Client(
            timeout=settings.http.timeout,
            verify=settings.http.verify_certs,
            follow_redirects=settings.http.follow_redirects,
            headers={"user-agent": settings.http.user_agent},
            auth=auth,
            # Retrying is left to the caller
            transport=transport
            if transport is not None
            else httpx.HTTPTransport(retries=0, verify=settings.http.verify_certs),
        )
        return cls(client)

    @override
    def send(
        self,
        method: HttpMethod,
        url: str,
        body: bytes | None = None,
        content_type: str | None = None,
    ) -> Reply:
        headers: dict[str, str] = {}
        if body:
            headers["content-type"] = content_type or JSON_CONTENT_TYPE
        try:
            response = self.client.request(
                method, url, content=body or b"", headers=headers
            )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            log.exception(f"{method} {url} failed in transport")
            raise TransportFault(method, url, repr(e)) from e

        return Reply(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    @override
    def close(self) -> None:
        self.client.close()
