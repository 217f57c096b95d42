from dataclasses import dataclass
from enum import StrEnum

from sleuth.exceptions import ConstructionError

MIN_COUNT = 1
MAX_COUNT = 1000


def _check_count(kind: str, n: int) -> int:
    if not MIN_COUNT <= n <= MAX_COUNT:
        raise ConstructionError(
            f"{kind} count must be between {MIN_COUNT} and {MAX_COUNT}, got {n}"
        )
    return n


def shard_count(n: int) -> int:
    """Validate a shard count."""
    return _check_count("Shard", n)


def replica_count(n: int) -> int:
    """Validate a replica count."""
    return _check_count("Replica", n)


@dataclass(frozen=True, slots=True)
class IndexSettings:
    """Shard and replica counts for a new index, each within [1, 1000]."""

    shards: int
    replicas: int

    def __post_init__(self) -> None:
        shard_count(self.shards)
        replica_count(self.replicas)


class OpenCloseIndex(StrEnum):
    """Action suffix for opening or closing an index."""

    OPEN = "_open"
    CLOSE = "_close"
