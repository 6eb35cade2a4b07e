"""Domain entities for internal representation.

These are frozen dataclasses used internally by services and
repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import CacheEntry, CacheKey, TimeRange
from .client_record import ClientRecord
from .search_decision import MatchCandidate, MatchType, SearchDecision

__all__ = [
    "CacheEntry",
    "CacheKey",
    "ClientRecord",
    "MatchCandidate",
    "MatchType",
    "SearchDecision",
    "TimeRange",
]
