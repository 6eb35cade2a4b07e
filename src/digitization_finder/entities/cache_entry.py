"""Analytics cache domain entities."""

from dataclasses import dataclass
from enum import Enum

from digitization_finder.models import ClientAggregate


class TimeRange(str, Enum):
    """Coarse date window applied to every analytic sub-query."""

    CURRENT_YEAR = "current_year"
    TWO_YEARS = "two_years"
    ALL_TIME = "all_time"


@dataclass(frozen=True)
class CacheKey:
    """Identifies one cached aggregate."""

    client: str
    time_range: TimeRange

    def __str__(self) -> str:
        return f"client_context:{self.client}:{self.time_range.value}"


@dataclass(frozen=True)
class CacheEntry:
    """An aggregate held in the analytics cache.

    Attributes:
        key: The (client, time range) pair the payload was fetched for
        payload: The combined result of the four sub-queries
        stored_at: Unix timestamp taken from the cache's clock when stored
    """

    key: CacheKey
    payload: ClientAggregate
    stored_at: float

    def is_expired(self, now: float, ttl: float) -> bool:
        """Entries older than ``ttl`` seconds are stale."""
        return now - self.stored_at > ttl
