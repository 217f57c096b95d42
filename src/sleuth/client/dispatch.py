"""Path building and verb-specific request senders.

Nothing here turns an HTTP error status into an exception: every reply, 2xx or
not, goes back to the caller. Only transport faults propagate as exceptions.
"""

from loguru import logger as log

from sleuth.client.transport import Reply, Transport
from sleuth.types.general import HttpMethod

FOUND = 200


def join_path(*segments: str) -> str:
    """Join pre-escaped path segments with `/`."""
    return "/".join(segments)


def is_success(reply: Reply) -> bool:
    return reply.is_success


class Dispatcher:
    """Issues requests through a transport handle."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def dispatch(
        self,
        method: HttpMethod,
        url: str,
        body: bytes | None = None,
        content_type: str | None = None,
    ) -> Reply:
        request_log = log.bind(request=f"{method} {url}")
        request_log.debug("Sending request")
        if body:
            request_log.trace(f"Request body: {body[:1024]!r}")
        reply = self.transport.send(method, url, body, content_type)
        request_log.debug(f"Server replied {reply.status_code}")
        return reply

    def get(self, url: str) -> Reply:
        return self.dispatch("GET", url)

    def head(self, url: str) -> Reply:
        return self.dispatch("HEAD", url)

    def delete(self, url: str) -> Reply:
        return self.dispatch("DELETE", url)

    def put(
        self, url: str, body: bytes | None = None, content_type: str | None = None
    ) -> Reply:
        return self.dispatch("PUT", url, body, content_type)

    def post(
        self, url: str, body: bytes | None = None, content_type: str | None = None
    ) -> Reply:
        return self.dispatch("POST", url, body, content_type)

    def exists(self, url: str) -> tuple[Reply, bool]:
        """Probe a resource with HEAD.

        Only a 200 means the resource exists; other 2xx statuses do not.
        """
        reply = self.head(url)
        return reply, reply.status_code == FOUND
