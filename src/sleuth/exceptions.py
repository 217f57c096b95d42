from dataclasses import dataclass


class ConstructionError(ValueError):
    """A value-model entity was built with out-of-range arguments."""


class TransportFault(Exception):
    """The transport could not complete a request (connection, TLS, timeout...)."""

    def __init__(self, method: str, url: str, reason: str) -> None:
        super().__init__(f"{method} {url} failed: {reason}")
        self.method = method
        self.url = url
        self.reason = reason


@dataclass(frozen=True, slots=True, kw_only=True)
class DecodeError:
    """A response body could not be decoded into the requested envelope.

    This is returned, not raised, so callers can branch on it like any other result.
    """

    envelope: str
    field: str | None
    reason: str

    def __str__(self) -> str:
        where = f"{self.envelope}.{self.field}" if self.field else self.envelope
        return f"Could not decode {where}: {self.reason}"
