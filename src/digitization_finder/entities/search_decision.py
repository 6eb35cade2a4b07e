"""Fuzzy search domain entities."""

from dataclasses import dataclass, field
from enum import Enum

from .client_record import ClientRecord


class MatchType(str, Enum):
    """How many catalog entries a query resolved to."""

    SINGLE = "single"
    MULTIPLE = "multiple"
    NONE = "none"


@dataclass(frozen=True)
class MatchCandidate:
    """A catalog entry that matched a query.

    Attributes:
        record: The matched catalog row
        score: Confidence in [0, 1], 1 = exact match
    """

    record: ClientRecord
    score: float


@dataclass(frozen=True)
class SearchDecision:
    """Categorized outcome of a client search.

    ``candidates`` holds exactly one entry for SINGLE, up to five for
    MULTIPLE and none for NONE.
    """

    kind: MatchType
    candidates: tuple[MatchCandidate, ...] = field(default_factory=tuple)

    @classmethod
    def single(cls, candidate: MatchCandidate) -> "SearchDecision":
        return cls(kind=MatchType.SINGLE, candidates=(candidate,))

    @classmethod
    def multiple(cls, candidates: list[MatchCandidate]) -> "SearchDecision":
        return cls(kind=MatchType.MULTIPLE, candidates=tuple(candidates))

    @classmethod
    def none(cls) -> "SearchDecision":
        return cls(kind=MatchType.NONE)

    @property
    def best_match(self) -> ClientRecord | None:
        """The top candidate's record, or None when nothing matched."""
        return self.candidates[0].record if self.candidates else None
